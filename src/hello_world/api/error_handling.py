from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from hello_world.application.use_cases.greet_caller import EmptyPayloadError, NonSuccessStatusError
from hello_world.infrastructure.http.checkip_client import TransportError

GATEWAY_ERROR_MESSAGE = "Internal server error"

HANDLER_ERRORS: tuple[type[Exception], ...] = (
    TransportError,
    NonSuccessStatusError,
    EmptyPayloadError,
)


async def _handler_error(_: Request, exc: Exception) -> JSONResponse:
    # Same opaque body API Gateway returns for a failed Lambda integration.
    return JSONResponse(status_code=502, content={"message": GATEWAY_ERROR_MESSAGE})


def register_exception_handlers(app: FastAPI) -> None:
    for exc_cls in HANDLER_ERRORS:
        app.add_exception_handler(exc_cls, _handler_error)

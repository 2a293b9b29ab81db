from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from uuid import uuid4

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

REQUEST_ID_HEADER = "X-Request-Id"
GATEWAY_REQUEST_ID_HEADER = "X-Amzn-RequestId"
request_id_context: ContextVar[str | None] = ContextVar("request_id", default=None)


def get_request_id() -> str | None:
    return request_id_context.get()


@contextmanager
def bound_request_id(request_id: str | None) -> Iterator[None]:
    token = request_id_context.set(request_id)
    try:
        yield
    finally:
        request_id_context.reset(token)


class RequestIDMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        request_id = (
            request.headers.get(REQUEST_ID_HEADER)
            or request.headers.get(GATEWAY_REQUEST_ID_HEADER)
            or str(uuid4())
        )
        request.state.request_id = request_id
        with bound_request_id(request_id):
            response = await call_next(request)

        response.headers[REQUEST_ID_HEADER] = request_id
        return response

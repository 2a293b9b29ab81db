from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI
from starlette.concurrency import run_in_threadpool
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from hello_world.api.error_handling import register_exception_handlers
from hello_world.api.handler import LambdaEntry, build_handler
from hello_world.api.local_context import LocalInvocationContext
from hello_world.api.middleware.request_id import RequestIDMiddleware, get_request_id
from hello_world.infrastructure.observability.logging_config import configure_logging
from hello_world.infrastructure.observability.otel import telemetry_session

logger = logging.getLogger("hello_world.api.access")

PROXY_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"]


class AccessLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        started = time.perf_counter()
        path = request.url.path
        method = request.method
        try:
            response = await call_next(request)
        except Exception:
            duration_ms = (time.perf_counter() - started) * 1000
            logger.exception(
                "request_error",
                extra={
                    "method": method,
                    "path": path,
                    "status_code": 500,
                    "duration_ms": round(duration_ms, 2),
                },
            )
            raise

        duration_ms = (time.perf_counter() - started) * 1000
        logger.info(
            "request_complete",
            extra={
                "method": method,
                "path": path,
                "status_code": response.status_code,
                "duration_ms": round(duration_ms, 2),
            },
        )
        return response


async def to_proxy_event(request: Request) -> dict[str, Any]:
    raw_body = await request.body()
    query = dict(request.query_params)
    multi_query: dict[str, list[str]] = {}
    for key, value in request.query_params.multi_items():
        multi_query.setdefault(key, []).append(value)
    multi_headers: dict[str, list[str]] = {}
    for key, value in request.headers.items():
        multi_headers.setdefault(key, []).append(value)

    return {
        "resource": "/{proxy+}",
        "path": request.url.path,
        "httpMethod": request.method,
        "headers": dict(request.headers),
        "multiValueHeaders": multi_headers,
        "queryStringParameters": query or None,
        "multiValueQueryStringParameters": multi_query or None,
        "pathParameters": {"proxy": request.url.path.lstrip("/")},
        "stageVariables": None,
        "requestContext": {
            "requestId": get_request_id(),
            "httpMethod": request.method,
            "path": request.url.path,
            "stage": "local",
        },
        "body": raw_body.decode("utf-8", errors="replace") if raw_body else None,
        "isBase64Encoded": False,
    }


def _proxy_response(payload: dict[str, Any]) -> Response:
    headers = dict(payload.get("headers") or {})
    for key, values in (payload.get("multiValueHeaders") or {}).items():
        if values:
            headers.setdefault(key, values[-1])
    return Response(
        content=payload.get("body", ""),
        status_code=int(payload["statusCode"]),
        headers=headers,
    )


def create_app(handler: LambdaEntry | None = None) -> FastAPI:
    configure_logging()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if handler is not None:
            app.state.handler = handler
            yield
            return

        with telemetry_session() as telemetry:
            app.state.handler = build_handler(telemetry)
            yield

    app = FastAPI(title="Hello World Local Gateway", version="0.1.0", lifespan=lifespan)
    register_exception_handlers(app)

    @app.api_route("/{path:path}", methods=PROXY_METHODS)
    async def proxy(request: Request) -> Response:
        event = await to_proxy_event(request)
        context = LocalInvocationContext(aws_request_id=request.state.request_id)
        payload = await run_in_threadpool(request.app.state.handler, event, context)
        return _proxy_response(payload)

    app.add_middleware(AccessLogMiddleware)
    app.add_middleware(RequestIDMiddleware)
    return app


app = create_app()

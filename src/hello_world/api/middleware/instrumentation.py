from __future__ import annotations

import logging
import os
import time
from collections.abc import Callable, Mapping
from functools import wraps
from typing import Any, TypeVar

from opentelemetry.propagators.textmap import TextMapPropagator
from opentelemetry.trace import SpanKind, TracerProvider
from opentelemetry.trace.propagation.tracecontext import TraceContextTextMapPropagator

from hello_world.api.middleware.request_id import bound_request_id

logger = logging.getLogger("hello_world.api.access")

R = TypeVar("R")

LambdaHandler = Callable[[Any, Any], R]
EventToCarrier = Callable[[Any], Mapping[str, str]]


def _account_id(function_arn: str | None) -> str | None:
    # arn:aws:lambda:<region>:<account-id>:function:<name>
    if not function_arn:
        return None
    parts = function_arn.split(":")
    if len(parts) > 4 and parts[4]:
        return parts[4]
    return None


def _invocation_attributes(context: Any) -> dict[str, str]:
    request_id = getattr(context, "aws_request_id", None)
    function_arn = getattr(context, "invoked_function_arn", None)
    attributes: dict[str, str] = {}
    if request_id:
        attributes["faas.invocation_id"] = request_id
    if function_arn:
        attributes["cloud.resource_id"] = function_arn
    account_id = _account_id(function_arn)
    if account_id:
        attributes["cloud.account.id"] = account_id
    return attributes


def _status_code(result: Any) -> Any:
    if isinstance(result, Mapping):
        return result.get("statusCode")
    return getattr(result, "statusCode", None)


def instrument_handler(
    handler: LambdaHandler[R],
    *,
    event_to_carrier: EventToCarrier,
    tracer_provider: TracerProvider,
    propagator: TextMapPropagator | None = None,
    flush: bool = True,
) -> LambdaHandler[R]:
    tracer = tracer_provider.get_tracer(__name__)
    propagator = propagator or TraceContextTextMapPropagator()
    span_name = os.getenv("AWS_LAMBDA_FUNCTION_NAME") or handler.__name__
    # Flushed per invocation: the runtime may freeze the sandbox afterwards.
    force_flush = getattr(tracer_provider, "force_flush", None) if flush else None

    @wraps(handler)
    def instrumented(event: Any, context: Any) -> R:
        parent = propagator.extract(carrier=event_to_carrier(event))
        attributes = _invocation_attributes(context)
        started = time.perf_counter()
        try:
            with bound_request_id(attributes.get("faas.invocation_id")):
                with tracer.start_as_current_span(
                    span_name,
                    context=parent,
                    kind=SpanKind.SERVER,
                    attributes=attributes,
                ):
                    try:
                        result = handler(event, context)
                    except Exception as exc:
                        logger.info(
                            "invocation_error",
                            extra={
                                "function_name": span_name,
                                "outcome": "error",
                                "error_type": type(exc).__name__,
                                "duration_ms": round((time.perf_counter() - started) * 1000, 2),
                            },
                        )
                        raise

                    logger.info(
                        "invocation_complete",
                        extra={
                            "function_name": span_name,
                            "outcome": "ok",
                            "status_code": _status_code(result),
                            "duration_ms": round((time.perf_counter() - started) * 1000, 2),
                        },
                    )
                    return result
        finally:
            if force_flush is not None:
                force_flush()

    return instrumented

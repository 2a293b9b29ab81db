from __future__ import annotations

import logging
import os
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor
from opentelemetry.propagate import set_global_textmap
from opentelemetry.propagators.composite import CompositePropagator
from opentelemetry.sdk.resources import SERVICE_NAME, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

DEFAULT_SERVICE_NAME = "hello-world"
FLUSH_TIMEOUT_MILLIS = 30_000

logger = logging.getLogger(__name__)


class TelemetryShutdownError(RuntimeError):
    pass


@dataclass
class Telemetry:
    tracer_provider: TracerProvider
    closed: bool = False


def _service_name() -> str:
    return (
        os.getenv("OTEL_SERVICE_NAME")
        or os.getenv("AWS_LAMBDA_FUNCTION_NAME")
        or DEFAULT_SERVICE_NAME
    )


def start_telemetry(service_name: str | None = None, endpoint: str | None = None) -> Telemetry:
    service_name = service_name or _service_name()
    endpoint = endpoint if endpoint is not None else os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT")

    provider = TracerProvider(
        resource=Resource.create({SERVICE_NAME: service_name}),
        shutdown_on_exit=False,
    )
    if endpoint:
        exporter = OTLPSpanExporter(
            endpoint=endpoint,
            insecure=endpoint.startswith("http://"),
        )
        provider.add_span_processor(BatchSpanProcessor(exporter))

    trace.set_tracer_provider(provider)
    # Empty global propagator: outbound requests must not carry trace headers.
    set_global_textmap(CompositePropagator([]))
    HTTPXClientInstrumentor().instrument(tracer_provider=provider)
    logger.info("otel_started", extra={"function_name": service_name})
    return Telemetry(tracer_provider=provider)


def shutdown_telemetry(telemetry: Telemetry) -> None:
    if telemetry.closed:
        return
    telemetry.closed = True

    HTTPXClientInstrumentor().uninstrument()
    flushed = telemetry.tracer_provider.force_flush(timeout_millis=FLUSH_TIMEOUT_MILLIS)
    telemetry.tracer_provider.shutdown()
    if not flushed:
        raise TelemetryShutdownError("span flush did not complete before shutdown")


def shutdown_telemetry_or_exit(
    telemetry: Telemetry, exit_process: Callable[[int], object] = os._exit
) -> None:
    try:
        shutdown_telemetry(telemetry)
    except TelemetryShutdownError:
        logger.exception("otel_shutdown_failed")
        exit_process(1)


@contextmanager
def telemetry_session(
    service_name: str | None = None, endpoint: str | None = None
) -> Iterator[Telemetry]:
    telemetry = start_telemetry(service_name=service_name, endpoint=endpoint)
    try:
        yield telemetry
    finally:
        shutdown_telemetry(telemetry)

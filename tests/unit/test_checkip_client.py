from __future__ import annotations

import sys
import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path
from typing import Iterator

import httpx
import pytest
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter
from opentelemetry.trace import SpanKind

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from hello_world.api.handler import build_handler
from hello_world.api.local_context import LocalInvocationContext
from hello_world.infrastructure.http import checkip_client
from hello_world.infrastructure.http.checkip_client import (
    CHECKIP_URL,
    CheckIpClient,
    TransportError,
)
from hello_world.infrastructure.observability.otel import telemetry_session

TRACEPARENT = "00-4bf92f3577b34da6a3ce929d0e0e4736-00f067aa0ba902b7-01"
HTTPX_DEFAULT_HEADERS = {"host", "accept", "accept-encoding", "connection", "user-agent"}


@pytest.fixture
def local_checkip(monkeypatch: pytest.MonkeyPatch) -> Iterator[list[dict[str, str]]]:
    received: list[dict[str, str]] = []

    class CheckIpHandler(BaseHTTPRequestHandler):
        def do_GET(self) -> None:
            received.append({key.lower(): value for key, value in self.headers.items()})
            body = b"192.0.2.50\n"
            self.send_response(200)
            self.send_header("Content-Length", str(len(body)))
            self.end_headers()
            self.wfile.write(body)

        def log_message(self, format: str, *args: object) -> None:
            return

    server = ThreadingHTTPServer(("127.0.0.1", 0), CheckIpHandler)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()

    for name in ("HTTP_PROXY", "HTTPS_PROXY", "ALL_PROXY", "http_proxy", "https_proxy", "all_proxy"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(
        checkip_client, "CHECKIP_URL", f"http://127.0.0.1:{server.server_address[1]}"
    )
    try:
        yield received
    finally:
        server.shutdown()
        server.server_close()


def test_lookup_performs_single_plain_get() -> None:
    seen: list[httpx.Request] = []

    def upstream(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, content=b"192.0.2.10\n")

    result = CheckIpClient(transport=httpx.MockTransport(upstream)).lookup()

    assert result.status_code == 200
    assert result.body == b"192.0.2.10\n"
    (request,) = seen
    assert request.method == "GET"
    assert request.url == httpx.URL(CHECKIP_URL)
    assert set(request.headers) <= HTTPX_DEFAULT_HEADERS


def test_lookup_follows_redirects() -> None:
    def upstream(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/":
            return httpx.Response(301, headers={"Location": "https://checkip.amazonaws.com/ip"})
        return httpx.Response(200, content=b"192.0.2.11\n")

    result = CheckIpClient(transport=httpx.MockTransport(upstream)).lookup()

    assert result.status_code == 200
    assert result.body == b"192.0.2.11\n"


def test_lookup_keeps_non_200_status() -> None:
    transport = httpx.MockTransport(lambda request: httpx.Response(503, content=b"slow down"))

    result = CheckIpClient(transport=transport).lookup()

    assert result.status_code == 503
    assert not result.is_success


def test_lookup_surfaces_transport_failures() -> None:
    def unreachable(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("name resolution failed", request=request)

    with pytest.raises(TransportError):
        CheckIpClient(transport=httpx.MockTransport(unreachable)).lookup()


def test_traced_invocation_sends_no_trace_headers_upstream(
    local_checkip: list[dict[str, str]],
) -> None:
    exporter = InMemorySpanExporter()

    with telemetry_session(service_name="hello-world", endpoint="") as telemetry:
        telemetry.tracer_provider.add_span_processor(SimpleSpanProcessor(exporter))
        handler = build_handler(telemetry)
        response = handler({"headers": {"traceparent": TRACEPARENT}}, LocalInvocationContext())

    assert response["body"] == "Hello, 192.0.2.50\n"
    (headers,) = local_checkip
    assert "traceparent" not in headers
    assert "tracestate" not in headers
    assert set(headers) <= HTTPX_DEFAULT_HEADERS

    spans = exporter.get_finished_spans()
    assert any(span.kind == SpanKind.CLIENT for span in spans)
    (server_span,) = [span for span in spans if span.kind == SpanKind.SERVER]
    assert format(server_span.context.trace_id, "032x") == TRACEPARENT.split("-")[1]

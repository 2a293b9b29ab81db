from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Sequence

from hello_world.api.handler import build_handler
from hello_world.api.local_context import LocalInvocationContext
from hello_world.infrastructure.observability.logging_config import configure_logging
from hello_world.infrastructure.observability.otel import telemetry_session

DEFAULT_EVENT: dict[str, Any] = {
    "resource": "/hello",
    "path": "/hello",
    "httpMethod": "GET",
    "headers": {},
    "body": None,
    "isBase64Encoded": False,
}


def _load_event(source: str | None) -> dict[str, Any]:
    if source is None:
        return dict(DEFAULT_EVENT)
    raw = sys.stdin.read() if source == "-" else Path(source).read_text(encoding="utf-8")
    return json.loads(raw)


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Invoke the hello-world handler locally with an API Gateway proxy event."
    )
    parser.add_argument(
        "--event",
        default=None,
        help="Path to an event JSON file, or '-' for stdin. Defaults to GET /hello.",
    )
    parser.add_argument(
        "--traceparent",
        default=None,
        help="W3C traceparent to inject into the event headers.",
    )
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)
    configure_logging()

    event = _load_event(args.event)
    if args.traceparent:
        event["headers"] = {**(event.get("headers") or {}), "traceparent": args.traceparent}

    with telemetry_session() as telemetry:
        handler = build_handler(telemetry)
        try:
            response = handler(event, LocalInvocationContext())
        except Exception as exc:
            print(f"invocation failed: {type(exc).__name__}: {exc}", file=sys.stderr)
            return 1

    print(json.dumps(response))
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))

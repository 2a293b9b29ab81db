from __future__ import annotations

import json
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[3] / "src"))

from hello_world.application.mappers.trace_carrier import api_gateway_event_to_carrier


def _event(headers: dict[str, str] | None) -> dict[str, object]:
    return {
        "resource": "/hello",
        "path": "/hello",
        "httpMethod": "GET",
        "headers": headers,
        "body": None,
        "isBase64Encoded": False,
    }


def test_extracts_traceparent_from_raw_json() -> None:
    raw = json.dumps(_event({"traceparent": "00-abc-def-01"})).encode("utf-8")

    assert api_gateway_event_to_carrier(raw) == {"traceparent": "00-abc-def-01"}


def test_extracts_traceparent_from_decoded_event() -> None:
    event = _event({"traceparent": "00-abc-def-01", "accept": "*/*"})

    assert api_gateway_event_to_carrier(event) == {"traceparent": "00-abc-def-01"}


@pytest.mark.parametrize("header_name", ["Traceparent", "TRACEPARENT", "TraceParent"])
def test_header_lookup_ignores_case(header_name: str) -> None:
    carrier = api_gateway_event_to_carrier(json.dumps(_event({header_name: "00-abc-def-01"})))

    assert carrier == {"traceparent": "00-abc-def-01"}


def test_missing_header_yields_empty_value() -> None:
    assert api_gateway_event_to_carrier(_event({"accept": "*/*"})) == {"traceparent": ""}


def test_null_headers_yield_empty_value() -> None:
    assert api_gateway_event_to_carrier(_event(None)) == {"traceparent": ""}


@pytest.mark.parametrize(
    "raw",
    [
        b"",
        b"{not json",
        "[1, 2, 3]",
        "null",
        b'{"headers": "not-a-map"}',
        {"headers": {"traceparent": 17}},
        None,
    ],
)
def test_unparseable_payload_yields_empty_value(raw: object) -> None:
    assert api_gateway_event_to_carrier(raw) == {"traceparent": ""}


def test_value_is_not_validated() -> None:
    carrier = api_gateway_event_to_carrier(_event({"traceparent": "garbage"}))

    assert carrier == {"traceparent": "garbage"}

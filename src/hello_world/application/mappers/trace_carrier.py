from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from hello_world.application.dto.gateway import APIGatewayProxyRequest

TRACEPARENT_HEADER = "traceparent"

RawEvent = bytes | bytearray | str | Mapping[str, Any] | None


def _parse_event(raw_event: RawEvent) -> APIGatewayProxyRequest:
    try:
        if isinstance(raw_event, (bytes, bytearray, str)):
            return APIGatewayProxyRequest.model_validate_json(raw_event)
        if isinstance(raw_event, Mapping):
            return APIGatewayProxyRequest.model_validate(dict(raw_event))
    except ValidationError:
        pass
    # Unparseable events carry no trace context.
    return APIGatewayProxyRequest()


def api_gateway_event_to_carrier(raw_event: RawEvent) -> dict[str, str]:
    request = _parse_event(raw_event)
    return {TRACEPARENT_HEADER: request.header(TRACEPARENT_HEADER)}

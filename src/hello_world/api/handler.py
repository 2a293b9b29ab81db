from __future__ import annotations

from typing import Any, Callable

from hello_world.api.middleware.instrumentation import instrument_handler
from hello_world.application.dto.gateway import APIGatewayProxyRequest
from hello_world.application.mappers.trace_carrier import api_gateway_event_to_carrier
from hello_world.application.ports.ip_lookup import IpLookup
from hello_world.application.use_cases.greet_caller import GreetCaller
from hello_world.infrastructure.http.checkip_client import CheckIpClient
from hello_world.infrastructure.observability.otel import Telemetry

LambdaEntry = Callable[[dict[str, Any], Any], dict[str, Any]]


def build_handler(telemetry: Telemetry, ip_lookup: IpLookup | None = None) -> LambdaEntry:
    use_case = GreetCaller(ip_lookup or CheckIpClient())

    def handle(event: dict[str, Any], context: Any) -> dict[str, Any]:
        request = APIGatewayProxyRequest.model_validate(event)
        return use_case.execute(request).to_lambda_payload()

    return instrument_handler(
        handle,
        event_to_carrier=api_gateway_event_to_carrier,
        tracer_provider=telemetry.tracer_provider,
    )

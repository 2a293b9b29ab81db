from __future__ import annotations

from hello_world.application.dto.gateway import APIGatewayProxyRequest, APIGatewayProxyResponse
from hello_world.application.ports.ip_lookup import IpLookup


class NonSuccessStatusError(Exception):
    def __init__(self, status_code: int) -> None:
        super().__init__(f"non 200 response from ip lookup: status_code={status_code}")
        self.status_code = status_code


class EmptyPayloadError(Exception):
    pass


class GreetCaller:
    def __init__(self, ip_lookup: IpLookup) -> None:
        self._ip_lookup = ip_lookup

    def execute(self, request: APIGatewayProxyRequest) -> APIGatewayProxyResponse:
        # Transport failures from the lookup propagate unchanged.
        result = self._ip_lookup.lookup()
        if not result.is_success:
            raise NonSuccessStatusError(result.status_code)
        if result.is_empty:
            raise EmptyPayloadError("no ip in http response")

        return APIGatewayProxyResponse(statusCode=200, body=result.greeting())

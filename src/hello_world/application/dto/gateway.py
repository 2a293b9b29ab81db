from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict


class APIGatewayProxyRequest(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    resource: str = ""
    path: str = ""
    httpMethod: str = ""
    headers: dict[str, str] | None = None
    multiValueHeaders: dict[str, list[str]] | None = None
    queryStringParameters: dict[str, str] | None = None
    multiValueQueryStringParameters: dict[str, list[str]] | None = None
    pathParameters: dict[str, str] | None = None
    stageVariables: dict[str, str] | None = None
    requestContext: dict[str, Any] | None = None
    body: str | None = None
    isBase64Encoded: bool = False

    def header(self, name: str) -> str:
        if not self.headers:
            return ""
        wanted = name.lower()
        for key, value in self.headers.items():
            if key.lower() == wanted:
                return value
        return ""


class APIGatewayProxyResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    statusCode: int
    headers: dict[str, str] | None = None
    multiValueHeaders: dict[str, list[str]] | None = None
    body: str = ""
    isBase64Encoded: bool = False

    def to_lambda_payload(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)

from __future__ import annotations

import httpx

from hello_world.application.ports.ip_lookup import IpLookup
from hello_world.domain.lookup.entities import IpLookupResult

CHECKIP_URL = "https://checkip.amazonaws.com"
MAX_REDIRECTS = 10

# Connection, DNS and read failures surface as this httpx error family.
TransportError = httpx.TransportError


class CheckIpClient(IpLookup):
    def __init__(self, transport: httpx.BaseTransport | None = None) -> None:
        self._transport = transport

    def lookup(self) -> IpLookupResult:
        with httpx.Client(
            transport=self._transport,
            follow_redirects=True,
            max_redirects=MAX_REDIRECTS,
        ) as client:
            response = client.get(CHECKIP_URL)
        return IpLookupResult(status_code=response.status_code, body=response.content)

from __future__ import annotations

from typing import Protocol

from hello_world.domain.lookup.entities import IpLookupResult


class IpLookup(Protocol):
    def lookup(self) -> IpLookupResult: ...

from __future__ import annotations

from dataclasses import dataclass

GREETING_PREFIX = "Hello, "


@dataclass(frozen=True)
class IpLookupResult:
    status_code: int
    body: bytes

    def __post_init__(self) -> None:
        if self.status_code < 100 or self.status_code > 599:
            raise ValueError("status_code must be a valid HTTP status")

    @property
    def is_success(self) -> bool:
        return self.status_code == 200

    @property
    def is_empty(self) -> bool:
        return len(self.body) == 0

    def greeting(self) -> str:
        return f"{GREETING_PREFIX}{self.body.decode('utf-8', errors='replace')}"

from __future__ import annotations

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[3] / "src"))

from hello_world.domain.lookup.entities import IpLookupResult


def test_greeting_prefixes_raw_body() -> None:
    result = IpLookupResult(status_code=200, body=b"203.0.113.7\n")

    assert result.is_success
    assert not result.is_empty
    assert result.greeting() == "Hello, 203.0.113.7\n"


def test_empty_body_is_reported() -> None:
    result = IpLookupResult(status_code=200, body=b"")

    assert result.is_empty


def test_non_200_is_not_success() -> None:
    assert not IpLookupResult(status_code=204, body=b"").is_success
    assert not IpLookupResult(status_code=503, body=b"busy").is_success


def test_rejects_impossible_status_code() -> None:
    with pytest.raises(ValueError):
        IpLookupResult(status_code=42, body=b"")

"""Shared pytest fixtures for iprisk tests."""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Any, Callable, Dict

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from iprisk.lookup.cache import LookupCache  # noqa: E402
from iprisk.lookup.models import GeoRecord  # noqa: E402
from iprisk.lookup.providers import ProviderChain  # noqa: E402
from tests.fixtures.mock_providers import StaticProvider  # noqa: E402


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove IPRISK_* variables so host configuration never leaks into tests."""
    for key in list(os.environ):
        if key.startswith("IPRISK_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def lookup_cache(tmp_path: Path) -> LookupCache:
    """Empty response cache in a temporary directory."""
    return LookupCache(tmp_path / "cache", ttl_seconds=3600)


@pytest.fixture
def google_record() -> GeoRecord:
    """Resolved record for Google Public DNS."""
    return GeoRecord(
        address="8.8.8.8",
        country="United States",
        country_code="US",
        region="California",
        region_code="CA",
        city="Mountain View",
        latitude=37.4056,
        longitude=-122.0775,
        timezone="America/Los_Angeles",
        isp="Google LLC",
        org="Google Public DNS",
        asn="AS15169",
        confidence=0.95,
        source="ip-api.com",
    )


@pytest.fixture
def static_chain() -> Callable[..., ProviderChain]:
    """Factory building a ProviderChain over a single static provider."""

    def _build(record: GeoRecord | None = None, error: str | None = None) -> ProviderChain:
        return ProviderChain([StaticProvider("static", record=record, error=error)])

    return _build


@pytest.fixture
def ip_api_payloads() -> Dict[str, Dict[str, Any]]:
    """ip-api.com payloads keyed by scenario."""
    from tests.fixtures.lookup_fixtures import IP_API_FAIL, IP_API_SUCCESS

    return {"success": dict(IP_API_SUCCESS), "fail": dict(IP_API_FAIL)}

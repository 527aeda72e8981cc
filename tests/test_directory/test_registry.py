"""
Tests for realm_directory.directory.registry — per-region directory cache.

Covers:
  - get(): builds once, then serves from cache; concurrent callers share a build
  - Regions are cached independently
  - refresh(): conditional fetch skips rebuild when the index is unchanged
  - Failed rebuild keeps the previous directory
"""

from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from realm_directory.clients.static import StaticTransport
from realm_directory.directory.builder import DirectoryBuilder
from realm_directory.directory.registry import DirectoryRegistry
from realm_directory.exceptions import InvalidRegionError, TransportError
from tests.conftest import CR_3_US, EXPECTED_MEMBERSHIP, REALM_INDEX_US

_LAST_MODIFIED = "Tue, 24 Feb 2026 15:00:00 GMT"


def _eu_payloads() -> dict:
    return {
        "data/wow/realm/index?locale=en_US&namespace=dynamic-eu": {
            "realms": [{"id": 1403, "slug": "draenor"}, {"id": 1417, "slug": "azjolnerub"}]
        },
        "data/wow/connected-realm/index?locale=en_US&namespace=dynamic-eu": {
            "connected_realms": [
                {"href": "https://eu.api.blizzard.com/data/wow/connected-realm/1403?namespace=dynamic-eu"}
            ]
        },
        "/data/wow/connected-realm/1403?namespace=dynamic-eu&locale=en_US": {
            "realms": [{"id": 1403, "slug": "draenor"}, {"id": 1417, "slug": "azjolnerub"}]
        },
    }


@pytest.fixture
def registry(us_payloads) -> DirectoryRegistry:
    payloads = {**us_payloads, **_eu_payloads()}
    transport = StaticTransport(payloads, last_modified=_LAST_MODIFIED)
    return DirectoryRegistry(DirectoryBuilder(transport))


class TestGet:
    def test_builds_on_first_use(self, registry):
        assert registry.peek("us") is None
        directory = registry.get("us")
        assert directory.membership() == EXPECTED_MEMBERSHIP
        assert registry.peek("us") is directory

    def test_cached_after_first_build(self, registry):
        first = registry.get("us")
        second = registry.get("us")
        assert first is second
        assert registry.builder.transport.endpoint_calls(REALM_INDEX_US) == 1

    def test_regions_independent(self, registry):
        us = registry.get("us")
        eu = registry.get("eu")
        assert us is not eu
        assert eu.cluster_id("azjolnerub") == 1403
        assert not us.is_valid_realm("draenor")
        assert registry.regions() == ["eu", "us"]

    def test_concurrent_get_builds_once(self, registry):
        barrier = threading.Barrier(6)

        def fetch(_):
            barrier.wait()
            return registry.get("us")

        with ThreadPoolExecutor(max_workers=6) as pool:
            results = list(pool.map(fetch, range(6)))

        assert all(r is results[0] for r in results)
        assert registry.builder.transport.endpoint_calls(REALM_INDEX_US) == 1

    def test_invalid_region(self, registry):
        with pytest.raises(InvalidRegionError):
            registry.get("kr")

    def test_clear(self, registry):
        registry.get("us")
        registry.clear()
        assert registry.regions() == []


class TestRefresh:
    def test_unchanged_index_not_rebuilt(self, registry):
        directory = registry.get("us")
        assert registry.refresh("us") is False
        assert registry.get("us") is directory

    def test_changed_index_rebuilt(self, registry):
        directory = registry.get("us")
        registry.builder.transport.last_modified = "Wed, 25 Feb 2026 15:00:00 GMT"
        assert registry.refresh("us") is True
        rebuilt = registry.get("us")
        assert rebuilt is not directory
        assert rebuilt.last_modified == "Wed, 25 Feb 2026 15:00:00 GMT"

    def test_refresh_without_cache_builds(self, registry):
        assert registry.refresh("eu") is True
        assert registry.peek("eu") is not None

    def test_failed_rebuild_keeps_previous(self, registry):
        directory = registry.get("us")
        transport = registry.builder.transport
        transport.last_modified = "Wed, 25 Feb 2026 15:00:00 GMT"
        transport.errors[CR_3_US] = TransportError("injected", status=503)

        with pytest.raises(TransportError):
            registry.refresh("us")
        assert registry.get("us") is directory

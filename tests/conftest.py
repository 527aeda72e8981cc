"""
Shared pytest fixtures for the realm directory test suite.

Provides:
  - ``us_payloads``: canned Game Data API payloads for a five-realm US region.
      realm1-main (1) and realm3-main (3) are cluster roots;
      cluster 1 = {realm1-main, realm2, realm5}, cluster 3 = {realm3-main, realm4}.
  - ``us_transport``: a ``StaticTransport`` serving ``us_payloads``.
  - Endpoint constants for building variations of the fixture.
"""

from __future__ import annotations

import copy
from typing import Any

import pytest

from realm_directory.clients.static import StaticTransport

REALM_INDEX_US = "data/wow/realm/index?locale=en_US&namespace=dynamic-us"
CR_INDEX_US = "data/wow/connected-realm/index?locale=en_US&namespace=dynamic-us"
CR_1_US = "/data/wow/connected-realm/1?namespace=dynamic-us&locale=en_US"
CR_3_US = "/data/wow/connected-realm/3?namespace=dynamic-us&locale=en_US"


def realm_us(slug: str) -> str:
    return f"data/wow/realm/{slug}?namespace=dynamic-us&locale=en_US"


def cr_href(cluster_id: int) -> dict[str, str]:
    return {"href": f"https://us.api.blizzard.com/data/wow/connected-realm/{cluster_id}?namespace=dynamic-us"}


EXPECTED_ALL_REALMS = {
    "realm1-main": 1,
    "realm2": 2,
    "realm3-main": 3,
    "realm4": 4,
    "realm5": 5,
}

EXPECTED_MEMBERSHIP = {
    "realm1-main": 1,
    "realm2": 1,
    "realm3-main": 3,
    "realm4": 3,
    "realm5": 1,
}


def make_us_payloads() -> dict[str, Any]:
    """Fresh copy of the five-realm fixture (safe to mutate per test)."""
    payloads = {
        REALM_INDEX_US: {
            "realms": [
                {"id": 1, "slug": "realm1-main", "name": "Realm One"},
                {"id": 2, "slug": "realm2", "name": "Realm Two"},
                {"id": 3, "slug": "realm3-main", "name": "Realm Three"},
                {"id": 4, "slug": "realm4", "name": "Realm Four"},
                {"id": 5, "slug": "realm5", "name": "Realm Five"},
            ]
        },
        CR_INDEX_US: {"connected_realms": [cr_href(1), cr_href(3)]},
        CR_1_US: {
            "realms": [
                {"id": 1, "slug": "realm1-main"},
                {"id": 2, "slug": "realm2"},
                {"id": 5, "slug": "realm5"},
            ]
        },
        CR_3_US: {
            "realms": [
                {"id": 3, "slug": "realm3-main"},
                {"id": 4, "slug": "realm4"},
            ]
        },
        realm_us("realm2"): {"connected_realm": cr_href(1)},
        realm_us("realm4"): {"connected_realm": cr_href(3)},
        realm_us("realm5"): {"connected_realm": cr_href(1)},
        realm_us("realm1-main"): {"connected_realm": cr_href(1)},
        realm_us("realm3-main"): {"connected_realm": cr_href(3)},
    }
    return copy.deepcopy(payloads)


@pytest.fixture
def us_payloads() -> dict[str, Any]:
    return make_us_payloads()


@pytest.fixture
def us_transport(us_payloads) -> StaticTransport:
    return StaticTransport(us_payloads, last_modified="Tue, 24 Feb 2026 15:00:00 GMT")

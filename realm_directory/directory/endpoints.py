"""Game Data API endpoint paths used by discovery (all in the dynamic namespace)."""

from __future__ import annotations


def realm_index_endpoint(region: str) -> str:
    return f"data/wow/realm/index?locale=en_US&namespace=dynamic-{region}"


def connected_realm_index_endpoint(region: str) -> str:
    return f"data/wow/connected-realm/index?locale=en_US&namespace=dynamic-{region}"


def connected_realm_endpoint(region: str, cluster_id: int) -> str:
    return f"/data/wow/connected-realm/{cluster_id}?namespace=dynamic-{region}&locale=en_US"


def realm_endpoint(region: str, slug: str) -> str:
    return f"data/wow/realm/{slug}?namespace=dynamic-{region}&locale=en_US"

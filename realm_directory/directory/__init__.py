"""
Realm directory — connected-realm discovery and lookup.

Submodules:
  slugs       — realm name → canonical slug
  regions     — supported region codes
  hrefs       — cluster ID extraction from API reference URLs
  models      — pydantic payload models
  endpoints   — Game Data API endpoint paths
  resolver    — locked slug → cluster map, single-realm lookups
  directory   — RealmDirectory query API
  builder     — two-phase discovery (DirectoryBuilder)
  registry    — per-region directory cache
"""

from realm_directory.directory.builder import DirectoryBuilder, DiscoveryStrategy
from realm_directory.directory.directory import LookupMode, RealmDirectory
from realm_directory.directory.regions import VALID_REGIONS, is_valid_region
from realm_directory.directory.registry import DirectoryRegistry
from realm_directory.directory.resolver import ClusterResolver, fetch_cluster_id
from realm_directory.directory.slugs import normalize_realm_slug

__all__ = [
    "ClusterResolver",
    "DirectoryBuilder",
    "DirectoryRegistry",
    "DiscoveryStrategy",
    "LookupMode",
    "RealmDirectory",
    "VALID_REGIONS",
    "fetch_cluster_id",
    "is_valid_region",
    "normalize_realm_slug",
]

"""
Directory builder — two-phase connected-realm discovery for one region.

Phase 1 (sequential):
  1. ``data/wow/realm/index``            → every realm slug and realm ID.
  2. ``data/wow/connected-realm/index``  → one href per cluster; the cluster ID
     is parsed out of each href and unparseable entries are skipped.

Phase 2 (scatter-gather on a bounded thread pool), by ``DiscoveryStrategy``:

  CLUSTERS  One unit per cluster ID.  Each unit fetches the cluster's member
            list and records all members in a single locked write.  Afterwards
            every realm must appear in exactly one cluster, with the realm ID
            the index gave it; otherwise ``IncompleteDirectoryError``.

  REALMS    Realms whose own ID is a cluster ID are roots and map to
            themselves.  One unit per remaining realm asks the realm endpoint
            for its cluster href.  Costs a request per non-root realm but
            tolerates an incomplete connected-realm index.

The first failing unit sets a shared cancel event and cancels queued units;
in-flight units drop their results at the next checkpoint.  Only the first
error is raised and no directory is returned.
"""

from __future__ import annotations

import logging
import threading
from collections import defaultdict
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from enum import Enum
from typing import TYPE_CHECKING, Callable, Iterable, Optional, TypeVar

from realm_directory.clients.base import Transport
from realm_directory.directory.directory import LookupMode, RealmDirectory
from realm_directory.directory.endpoints import (
    connected_realm_endpoint,
    connected_realm_index_endpoint,
    realm_endpoint,
    realm_index_endpoint,
)
from realm_directory.directory.hrefs import (
    parse_connected_realm_id,
    require_connected_realm_id,
)
from realm_directory.directory.models import (
    ConnectedRealmDetail,
    ConnectedRealmIndex,
    RealmDetail,
    RealmIndex,
    RealmRef,
    decode_payload,
)
from realm_directory.directory.regions import validate_region
from realm_directory.directory.resolver import ClusterResolver
from realm_directory.exceptions import CorruptResponseError, IncompleteDirectoryError

if TYPE_CHECKING:
    from realm_directory.config import DirectoryConfig

logger = logging.getLogger(__name__)

_ItemT = TypeVar("_ItemT")
_ResultT = TypeVar("_ResultT")


class DiscoveryStrategy(str, Enum):
    CLUSTERS = "clusters"
    REALMS = "realms"


class DirectoryBuilder:
    """Builds a complete ``RealmDirectory`` for a region, or raises.

    Usage::

        builder = DirectoryBuilder(transport, strategy=DiscoveryStrategy.CLUSTERS)
        directory = builder.build("us")
        directory.cluster_id("area-52")

    Attributes:
        transport:     Transport used for every request.
        strategy:      Phase-2 discovery strategy.
        max_workers:   Upper bound on concurrent requests during phase 2.
        lazy_fallback: For CLUSTERS builds, whether the resulting directory
                       resolves misses live (LAZY) instead of raising (STRICT).
    """

    def __init__(
        self,
        transport: Transport,
        strategy: DiscoveryStrategy = DiscoveryStrategy.CLUSTERS,
        max_workers: int = 5,
        lazy_fallback: bool = False,
    ) -> None:
        if max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {max_workers}.")
        self.transport = transport
        self.strategy = DiscoveryStrategy(strategy)
        self.max_workers = max_workers
        self.lazy_fallback = lazy_fallback

    @classmethod
    def from_config(
        cls, transport: Transport, config: "DirectoryConfig"
    ) -> "DirectoryBuilder":
        return cls(
            transport,
            strategy=DiscoveryStrategy(config.strategy),
            max_workers=config.max_workers,
            lazy_fallback=config.lazy_fallback,
        )

    def build(self, region: str) -> RealmDirectory:
        """Run both discovery phases for ``region``.

        Raises:
            InvalidRegionError:       Before any request, for an unsupported region.
            TransportError:           If any request fails.
            MalformedResponseError:   If any payload is invalid JSON or corrupt.
            IncompleteDirectoryError: If some realm is not accounted for.
        """
        validate_region(region)
        logger.info(
            "Building realm directory: region=%s strategy=%s workers=%d",
            region, self.strategy.value, self.max_workers,
        )

        all_realms, last_modified = self._fetch_realm_index(region)
        cluster_ids = self._fetch_cluster_index(region)

        resolver = ClusterResolver(self.transport, region)
        if self.strategy is DiscoveryStrategy.CLUSTERS:
            self._expand_clusters(region, all_realms, cluster_ids, resolver)
            mode = LookupMode.LAZY if self.lazy_fallback else LookupMode.STRICT
        else:
            self._resolve_realms(region, all_realms, cluster_ids, resolver)
            mode = LookupMode.LAZY

        directory = RealmDirectory(
            region, all_realms, resolver, mode=mode, last_modified=last_modified
        )
        logger.info(
            "Realm directory ready: region=%s realms=%d clusters=%d",
            region, len(all_realms), len(directory.cluster_ids()),
        )
        return directory

    # ── Phase 1 ────────────────────────────────────────────────────────────────

    def _fetch_realm_index(self, region: str) -> tuple[dict[str, int], str]:
        endpoint = realm_index_endpoint(region)
        body, headers = self.transport.get(region, endpoint)
        index = decode_payload(RealmIndex, body, endpoint)

        all_realms: dict[str, int] = {}
        for realm in index.realms:
            existing = all_realms.setdefault(realm.slug, realm.id)
            if existing != realm.id:
                raise CorruptResponseError(
                    endpoint,
                    f"slug '{realm.slug}' listed with IDs {existing} and {realm.id}",
                )
        logger.debug("Realm index: %d realms in %s", len(all_realms), region)
        return all_realms, headers.get("Last-Modified", "")

    def _fetch_cluster_index(self, region: str) -> list[int]:
        endpoint = connected_realm_index_endpoint(region)
        body, _ = self.transport.get(region, endpoint)
        index = decode_payload(ConnectedRealmIndex, body, endpoint)

        cluster_ids: list[int] = []
        seen: set[int] = set()
        for ref in index.connected_realms:
            cluster_id = parse_connected_realm_id(ref.href)
            if cluster_id is None:
                logger.debug("Skipping unparseable connected-realm href %r", ref.href)
                continue
            if cluster_id not in seen:
                seen.add(cluster_id)
                cluster_ids.append(cluster_id)
        logger.debug("Connected-realm index: %d clusters in %s", len(cluster_ids), region)
        return cluster_ids

    # ── Phase 2: CLUSTERS ──────────────────────────────────────────────────────

    def _expand_clusters(
        self,
        region: str,
        all_realms: dict[str, int],
        cluster_ids: list[int],
        resolver: ClusterResolver,
    ) -> None:
        def expand(cluster_id: int, cancel: threading.Event) -> Optional[list[RealmRef]]:
            if cancel.is_set():
                return None
            endpoint = connected_realm_endpoint(region, cluster_id)
            body, _ = self.transport.get(region, endpoint)
            detail = decode_payload(ConnectedRealmDetail, body, endpoint)
            if cancel.is_set():
                return None
            resolver.record_many((r.slug for r in detail.realms), cluster_id)
            return list(detail.realms)

        results = self._scatter(cluster_ids, expand)
        self._verify_clusters(region, all_realms, results)

    @staticmethod
    def _verify_clusters(
        region: str,
        all_realms: dict[str, int],
        results: dict[int, list[RealmRef]],
    ) -> None:
        """Every indexed realm must appear in exactly one cluster, with its own ID."""
        seen_in: dict[str, list[int]] = defaultdict(list)
        unknown: set[str] = set()
        for cluster_id, members in results.items():
            for realm in members:
                seen_in[realm.slug].append(cluster_id)
                if all_realms.get(realm.slug) != realm.id:
                    unknown.add(realm.slug)

        missing = [s for s in all_realms if s not in seen_in]
        ambiguous = [s for s, clusters in seen_in.items() if len(clusters) > 1]
        if missing or unknown or ambiguous:
            raise IncompleteDirectoryError(
                region, missing=missing, unknown=unknown, ambiguous=ambiguous
            )

    # ── Phase 2: REALMS ────────────────────────────────────────────────────────

    def _resolve_realms(
        self,
        region: str,
        all_realms: dict[str, int],
        cluster_ids: list[int],
        resolver: ClusterResolver,
    ) -> None:
        roots = set(cluster_ids)
        pending = []
        for slug, realm_id in all_realms.items():
            if realm_id in roots:
                resolver.record(slug, realm_id)
            else:
                pending.append(slug)
        logger.debug(
            "%d root realms, %d realms need a lookup in %s",
            len(all_realms) - len(pending), len(pending), region,
        )

        def lookup(slug: str, cancel: threading.Event) -> Optional[int]:
            if cancel.is_set():
                return None
            endpoint = realm_endpoint(region, slug)
            body, _ = self.transport.get(region, endpoint)
            detail = decode_payload(RealmDetail, body, endpoint)
            cluster_id = require_connected_realm_id(detail.connected_realm.href, endpoint)
            if cancel.is_set():
                return None
            return resolver.record(slug, cluster_id)

        self._scatter(pending, lookup)

        missing = [s for s in all_realms if resolver.get(s) is None]
        if missing:
            raise IncompleteDirectoryError(region, missing=missing)

    # ── Fork-join ──────────────────────────────────────────────────────────────

    def _scatter(
        self,
        items: Iterable[_ItemT],
        work: Callable[[_ItemT, threading.Event], Optional[_ResultT]],
    ) -> dict[_ItemT, _ResultT]:
        """Run ``work`` over ``items`` on the bounded pool; first error wins.

        Returns:
            item → result for every unit that completed.

        Raises:
            The first exception raised by any unit.
        """
        cancel = threading.Event()
        first_error: Optional[BaseException] = None
        results: dict[_ItemT, _ResultT] = {}

        with ThreadPoolExecutor(
            max_workers=self.max_workers, thread_name_prefix="realm-directory"
        ) as pool:
            futures: dict[Future, _ItemT] = {
                pool.submit(work, item, cancel): item for item in items
            }
            for future in as_completed(futures):
                if future.cancelled():
                    continue
                exc = future.exception()
                if exc is not None:
                    if first_error is None:
                        first_error = exc
                        cancel.set()
                        for pending in futures:
                            pending.cancel()
                        logger.error("Discovery unit %r failed: %s", futures[future], exc)
                    continue
                result = future.result()
                if result is not None:
                    results[futures[future]] = result

        if first_error is not None:
            raise first_error
        return results

"""
Cluster resolver — the single write path into a directory's membership map.

Each ``ClusterResolver`` owns its map and the lock guarding it; there is no
process-wide state, so directories for different regions never contend.

Lock discipline:
  - The lock is held for one map mutation or read, never across a request.
  - Writes are first-writer-wins: ``record`` keeps an existing mapping and
    returns it, silently discarding the caller's value.
  - ``resolve`` checks optimistically, fetches outside the lock, then records
    (which re-checks under the lock).
"""

from __future__ import annotations

import logging
import threading
from typing import Iterable, Optional

from realm_directory.clients.base import Transport
from realm_directory.directory.endpoints import realm_endpoint
from realm_directory.directory.hrefs import require_connected_realm_id
from realm_directory.directory.models import RealmDetail, decode_payload
from realm_directory.directory.regions import validate_region

logger = logging.getLogger(__name__)


def fetch_cluster_id(transport: Transport, region: str, slug: str) -> int:
    """Ask the service which cluster ``slug`` belongs to.

    Args:
        transport: Transport to query.
        region:    Region code; validated before any request.
        slug:      Realm slug.

    Returns:
        The connected-realm (cluster) ID.

    Raises:
        InvalidRegionError:   If ``region`` is not supported.
        TransportError:       If the request fails.
        MalformedResponseError: If the body is invalid or carries no usable href.
    """
    validate_region(region)
    endpoint = realm_endpoint(region, slug)
    body, _ = transport.get(region, endpoint)
    detail = decode_payload(RealmDetail, body, endpoint)
    return require_connected_realm_id(detail.connected_realm.href, endpoint)


class ClusterResolver:
    """Thread-safe slug → cluster ID map for one region.

    Attributes:
        region: Region this resolver serves.
    """

    def __init__(self, transport: Transport, region: str) -> None:
        self.region = validate_region(region)
        self._transport = transport
        self._membership: dict[str, int] = {}
        self._lock = threading.Lock()

    def get(self, slug: str) -> Optional[int]:
        with self._lock:
            return self._membership.get(slug)

    def record(self, slug: str, cluster_id: int) -> int:
        """Map ``slug`` to ``cluster_id`` unless it is already mapped.

        Returns:
            The cluster ID now stored for ``slug``.
        """
        with self._lock:
            stored = self._membership.setdefault(slug, cluster_id)
        if stored != cluster_id:
            logger.debug(
                "ClusterResolver: %s already mapped to %d, discarding %d",
                slug, stored, cluster_id,
            )
        return stored

    def record_many(self, slugs: Iterable[str], cluster_id: int) -> list[str]:
        """Map every slug in ``slugs`` to ``cluster_id`` in one critical section.

        Returns:
            Slugs that were already mapped to a different cluster (left as-is).
        """
        conflicts = []
        with self._lock:
            for slug in slugs:
                stored = self._membership.setdefault(slug, cluster_id)
                if stored != cluster_id:
                    conflicts.append(slug)
        return conflicts

    def resolve(self, slug: str) -> int:
        """Return the cluster for ``slug``, querying the service on a miss."""
        cached = self.get(slug)
        if cached is not None:
            return cached

        cluster_id = fetch_cluster_id(self._transport, self.region, slug)
        return self.record(slug, cluster_id)

    def snapshot(self) -> dict[str, int]:
        """Return a copy of the current membership map."""
        with self._lock:
            return dict(self._membership)

    def __len__(self) -> int:
        with self._lock:
            return len(self._membership)

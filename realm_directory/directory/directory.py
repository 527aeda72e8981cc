"""
Realm directory — the long-lived, queryable result of a build.

A ``RealmDirectory`` pairs the immutable realm index (slug → realm ID) with a
``ClusterResolver`` holding slug → cluster ID.  It is created by
``DirectoryBuilder.build`` and then shared read-mostly.

Lookup modes:
  STRICT  — the directory was verified complete; a miss is ``RealmNotFoundError``.
  LAZY    — a miss for a known realm is resolved live and cached.

In both modes a slug that is not in the realm index fails without a request.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from enum import Enum
from types import MappingProxyType
from typing import Mapping

from realm_directory.directory.resolver import ClusterResolver
from realm_directory.exceptions import RealmNotFoundError

logger = logging.getLogger(__name__)


class LookupMode(str, Enum):
    STRICT = "strict"
    LAZY = "lazy"


def _sanitize(slug: str) -> str:
    return slug.strip().lower()


class RealmDirectory:
    """Realm slug → realm ID and slug → connected-realm (cluster) ID for one region.

    Attributes:
        region:        Region code.
        mode:          ``LookupMode`` governing cache misses.
        last_modified: ``Last-Modified`` of the realm index used for the build,
                       or ``""`` if the service did not send one.
    """

    def __init__(
        self,
        region: str,
        all_realms: Mapping[str, int],
        resolver: ClusterResolver,
        mode: LookupMode = LookupMode.STRICT,
        last_modified: str = "",
    ) -> None:
        if resolver.region != region:
            raise ValueError(
                f"Resolver region '{resolver.region}' does not match directory region '{region}'."
            )
        self.region = region
        self.mode = mode
        self.last_modified = last_modified
        self._all_realms = MappingProxyType(dict(all_realms))
        self._resolver = resolver

    @property
    def all_realms(self) -> Mapping[str, int]:
        """Read-only view of slug → realm ID."""
        return self._all_realms

    def is_valid_realm(self, slug: str) -> bool:
        return slug in self._all_realms

    def cluster_id(self, slug: str) -> int:
        """Return the connected-realm ID for ``slug``.

        Args:
            slug: Realm slug; surrounding whitespace and case are ignored.

        Raises:
            RealmNotFoundError: If the realm is unknown, or unresolved in STRICT mode.
            TransportError / MalformedResponseError: If a LAZY fallback lookup fails.
        """
        key = _sanitize(slug)
        cached = self._resolver.get(key)
        if cached is not None:
            return cached

        if key not in self._all_realms or self.mode is LookupMode.STRICT:
            raise RealmNotFoundError(key, self.region)

        logger.info("RealmDirectory: resolving %s/%s on demand", self.region, key)
        return self._resolver.resolve(key)

    def members(self, cluster_id: int) -> tuple[str, ...]:
        """Sorted slugs currently mapped to ``cluster_id``."""
        return tuple(
            sorted(s for s, c in self._resolver.snapshot().items() if c == cluster_id)
        )

    def clusters(self) -> dict[int, tuple[str, ...]]:
        """Cluster ID → sorted member slugs."""
        grouped: dict[int, list[str]] = defaultdict(list)
        for slug, cluster in self._resolver.snapshot().items():
            grouped[cluster].append(slug)
        return {c: tuple(sorted(slugs)) for c, slugs in sorted(grouped.items())}

    def cluster_ids(self) -> list[int]:
        return sorted(set(self._resolver.snapshot().values()))

    def membership(self) -> dict[str, int]:
        """Copy of slug → cluster ID."""
        return self._resolver.snapshot()

    def unresolved(self) -> list[str]:
        """Realms in the index that have no cluster mapping yet."""
        resolved = self._resolver.snapshot()
        return sorted(s for s in self._all_realms if s not in resolved)

    def is_complete(self) -> bool:
        return not self.unresolved()

    def __contains__(self, slug: object) -> bool:
        return isinstance(slug, str) and self.is_valid_realm(slug)

    def __len__(self) -> int:
        return len(self._all_realms)

    def __repr__(self) -> str:
        return (
            f"RealmDirectory(region={self.region!r}, realms={len(self._all_realms)}, "
            f"resolved={len(self._resolver)}, mode={self.mode.value!r})"
        )

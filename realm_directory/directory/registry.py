"""
Per-region directory cache.

Holds one built ``RealmDirectory`` per region for the life of the process.
Each region has its own build lock: concurrent ``get("us")`` calls trigger a
single build, while ``get("us")`` and ``get("eu")`` build independently.

``refresh(region)`` issues a conditional GET on the realm index with the
cached ``Last-Modified`` and rebuilds only when the index changed.  A failed
rebuild leaves the previously cached directory in place.
"""

from __future__ import annotations

import logging
import threading
from typing import Optional

from realm_directory.directory.builder import DirectoryBuilder
from realm_directory.directory.directory import RealmDirectory
from realm_directory.directory.endpoints import realm_index_endpoint
from realm_directory.directory.regions import validate_region

logger = logging.getLogger(__name__)


class DirectoryRegistry:
    """Lazily built, cached directories keyed by region."""

    def __init__(self, builder: DirectoryBuilder) -> None:
        self.builder = builder
        self._directories: dict[str, RealmDirectory] = {}
        self._region_locks: dict[str, threading.Lock] = {}
        self._lock = threading.Lock()

    def _region_lock(self, region: str) -> threading.Lock:
        with self._lock:
            return self._region_locks.setdefault(region, threading.Lock())

    def peek(self, region: str) -> Optional[RealmDirectory]:
        """Return the cached directory for ``region`` without building."""
        with self._lock:
            return self._directories.get(region)

    def get(self, region: str) -> RealmDirectory:
        """Return the directory for ``region``, building it on first use."""
        validate_region(region)
        cached = self.peek(region)
        if cached is not None:
            return cached

        with self._region_lock(region):
            cached = self.peek(region)
            if cached is not None:
                return cached
            directory = self.builder.build(region)
            with self._lock:
                self._directories[region] = directory
            return directory

    def refresh(self, region: str) -> bool:
        """Rebuild ``region`` if its realm index changed since the last build.

        Returns:
            True if a new directory was built, False if the cached one is current.
        """
        validate_region(region)
        with self._region_lock(region):
            cached = self.peek(region)
            since = cached.last_modified if cached is not None else ""
            last_modified, body = self.builder.transport.get_if_not_modified(
                region, realm_index_endpoint(region), since
            )
            if cached is not None and not body:
                logger.info("Realm index for %s unchanged since %s", region, since)
                return False

            directory = self.builder.build(region)
            with self._lock:
                self._directories[region] = directory
            logger.info(
                "Realm directory for %s rebuilt (Last-Modified: %s)",
                region, last_modified or directory.last_modified,
            )
            return True

    def regions(self) -> list[str]:
        with self._lock:
            return sorted(self._directories)

    def clear(self) -> None:
        with self._lock:
            self._directories.clear()

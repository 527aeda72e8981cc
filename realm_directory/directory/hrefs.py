"""
Connected-realm ID extraction from API reference URLs.

The connected-realm index and the per-realm endpoint reference clusters by
URL rather than by ID::

    https://us.api.blizzard.com/data/wow/connected-realm/1175?namespace=dynamic-us

The ID is the run of digits between the ``connected-realm/`` marker and the
query string.  Two callers treat a miss differently:

  - index phase:      ``parse_connected_realm_id`` → ``None`` (entry skipped)
  - per-realm phase:  ``require_connected_realm_id`` → ``CorruptResponseError``
"""

from __future__ import annotations

import re
from typing import Optional

from realm_directory.exceptions import CorruptResponseError

CONNECTED_REALM_MARKER = "connected-realm/"

_CONNECTED_REALM_ID_RE = re.compile(re.escape(CONNECTED_REALM_MARKER) + r"([0-9]+)\?")


def parse_connected_realm_id(href: Optional[str]) -> Optional[int]:
    """Return the cluster ID embedded in ``href``, or ``None`` if there is none."""
    if not href:
        return None
    match = _CONNECTED_REALM_ID_RE.search(href)
    if match is None:
        return None
    cluster_id = int(match.group(1))
    return cluster_id if cluster_id > 0 else None


def require_connected_realm_id(href: Optional[str], endpoint: str) -> int:
    """Return the cluster ID embedded in ``href``.

    Raises:
        CorruptResponseError: If ``href`` carries no usable cluster ID.
    """
    cluster_id = parse_connected_realm_id(href)
    if cluster_id is None:
        raise CorruptResponseError(
            endpoint, f"could not find connected realm ID in href {href!r}"
        )
    return cluster_id

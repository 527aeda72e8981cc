"""
Transport contract consumed by the directory.

The directory never talks HTTP itself.  Anything that can answer these two
calls — the real ``BlizzardClient`` or the canned ``StaticTransport`` used in
tests — can back a build.

Endpoints are passed exactly as the directory builds them (relative path plus
query string); the transport owns base URLs, auth and retry.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Mapping


class Transport(ABC):
    """Authenticated, region-scoped GET access to the Game Data API.

    Implementations must be safe to call from several threads at once.
    """

    @abstractmethod
    def get(self, region: str, endpoint: str) -> tuple[bytes, Mapping[str, str]]:
        """GET ``endpoint`` in ``region``.

        Returns:
            ``(body, headers)`` for a 200 response.

        Raises:
            TransportError: On network failure or any non-2xx status.
        """

    @abstractmethod
    def get_if_not_modified(
        self, region: str, endpoint: str, since: str
    ) -> tuple[str, bytes]:
        """Conditional GET using ``If-Modified-Since: since``.

        Returns:
            ``(last_modified, body)``, or ``("", b"")`` if the resource is
            unchanged since ``since``.

        Raises:
            TransportError: On network failure or any status other than 200/304.
        """

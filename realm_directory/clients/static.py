"""
Canned-payload transport — fixture mode for tests and offline demos.

Payloads are keyed by the exact endpoint string the directory requests::

    transport = StaticTransport({
        "data/wow/realm/index?locale=en_US&namespace=dynamic-us": {"realms": [...]},
        ...
    })

Values may be JSON-serialisable objects or raw ``bytes`` (to simulate
malformed bodies).  ``errors`` maps endpoints to exceptions raised instead of
answering.  An endpoint with neither raises a 404 ``TransportError``.
"""

from __future__ import annotations

import json
import logging
import threading
from typing import Any, Callable, Mapping, Optional

from realm_directory.clients.base import Transport
from realm_directory.exceptions import TransportError

logger = logging.getLogger(__name__)


class StaticTransport(Transport):
    """In-memory ``Transport`` that serves fixed responses.

    Attributes:
        calls: Every ``(region, endpoint)`` requested, in arrival order.
    """

    def __init__(
        self,
        payloads: Mapping[str, Any],
        errors: Optional[Mapping[str, Exception]] = None,
        last_modified: str = "",
        delay: Optional[Callable[[str], None]] = None,
    ) -> None:
        """
        Args:
            payloads: endpoint → JSON-serialisable object or raw bytes.
            errors: endpoint → exception to raise for that endpoint.
            last_modified: ``Last-Modified`` value reported by every response.
            delay: Called with the endpoint before answering; tests use it to
                shuffle worker completion order.
        """
        self.payloads = dict(payloads)
        self.errors = dict(errors or {})
        self.last_modified = last_modified
        self.delay = delay
        self.calls: list[tuple[str, str]] = []
        self._lock = threading.Lock()

    def get(self, region: str, endpoint: str) -> tuple[bytes, Mapping[str, str]]:
        with self._lock:
            self.calls.append((region, endpoint))
        if self.delay is not None:
            self.delay(endpoint)

        if endpoint in self.errors:
            raise self.errors[endpoint]
        if endpoint not in self.payloads:
            raise TransportError(
                "response code 404", url=endpoint, status=404, body="not found"
            )

        data = self.payloads[endpoint]
        body = data if isinstance(data, bytes) else json.dumps(data).encode()
        headers = {"Last-Modified": self.last_modified} if self.last_modified else {}
        return body, headers

    def get_if_not_modified(
        self, region: str, endpoint: str, since: str
    ) -> tuple[str, bytes]:
        if since and since == self.last_modified:
            with self._lock:
                self.calls.append((region, endpoint))
            return "", b""
        body, _ = self.get(region, endpoint)
        return self.last_modified, body

    def endpoint_calls(self, endpoint: str) -> int:
        """Number of times ``endpoint`` was requested."""
        with self._lock:
            return sum(1 for _, e in self.calls if e == endpoint)

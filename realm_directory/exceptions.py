"""
Error taxonomy for realm directory resolution.

Every error raised by this package derives from ``RealmDirectoryError`` so
callers (and the CLI) can catch one type.  Nothing here is retried — retry
belongs to the transport (see ``clients/blizzard_client.py``).

  TransportError            — network failure or non-2xx status
  MalformedResponseError    — payload violates the service contract
    ├── ResponseDecodeError   — body is not valid JSON
    └── CorruptResponseError  — JSON is valid but an entry is unusable
  InvalidRegionError        — region code outside the supported set
  IncompleteDirectoryError  — realms left unresolved after discovery
  RealmNotFoundError        — lookup of a slug the directory does not know
"""

from __future__ import annotations

from typing import Iterable, Optional


class RealmDirectoryError(RuntimeError):
    """Base class for all realm directory errors."""


class TransportError(RealmDirectoryError):
    """Raised when a request fails or returns a non-2xx status.

    Attributes:
        url:    The fully-substituted request URL.
        status: HTTP status code, or ``None`` if no response was received.
        body:   Response body text (truncated), if any.
    """

    def __init__(
        self,
        message: str,
        url: str = "",
        status: Optional[int] = None,
        body: str = "",
    ) -> None:
        self.url = url
        self.status = status
        self.body = body
        super().__init__(message)


class MalformedResponseError(RealmDirectoryError):
    """Raised when a response payload cannot be used.

    Attributes:
        endpoint: The endpoint whose payload was rejected.
    """

    def __init__(self, endpoint: str, detail: str) -> None:
        self.endpoint = endpoint
        self.detail = detail
        super().__init__(f"Malformed response from '{endpoint}': {detail}")


class ResponseDecodeError(MalformedResponseError):
    """The response body is not valid JSON."""


class CorruptResponseError(MalformedResponseError):
    """The response decoded but carries an empty or invalid entry."""


class InvalidRegionError(RealmDirectoryError, ValueError):
    """Raised for a region code outside the supported set.

    Attributes:
        region: The rejected region code.
    """

    def __init__(self, region: str) -> None:
        from realm_directory.directory.regions import VALID_REGIONS

        self.region = region
        super().__init__(
            f"Invalid region '{region}'. Must be one of {sorted(VALID_REGIONS)}."
        )


class IncompleteDirectoryError(RealmDirectoryError):
    """Raised when cluster discovery does not account for every realm exactly once.

    Attributes:
        region:    Region being built.
        missing:   Slugs in the realm index never seen in any cluster.
        unknown:   Slugs returned by a cluster but absent from the realm index
                   (or listed there under a different realm ID).
        ambiguous: Slugs listed by more than one cluster.
    """

    def __init__(
        self,
        region: str,
        missing: Iterable[str] = (),
        unknown: Iterable[str] = (),
        ambiguous: Iterable[str] = (),
    ) -> None:
        self.region = region
        self.missing = sorted(missing)
        self.unknown = sorted(unknown)
        self.ambiguous = sorted(ambiguous)
        parts = []
        if self.missing:
            parts.append(f"missing={self.missing}")
        if self.unknown:
            parts.append(f"unknown={self.unknown}")
        if self.ambiguous:
            parts.append(f"ambiguous={self.ambiguous}")
        super().__init__(
            f"Realm directory for region '{region}' not fully resolved: "
            + ", ".join(parts)
        )


class RealmNotFoundError(RealmDirectoryError, KeyError):
    """Raised when a realm slug has no known cluster.

    Attributes:
        slug:   The slug that was looked up.
        region: Region of the directory consulted.
    """

    def __init__(self, slug: str, region: str) -> None:
        self.slug = slug
        self.region = region
        super().__init__(f"Realm '{slug}' not found in region '{region}'.")

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message
        return str(self.args[0])

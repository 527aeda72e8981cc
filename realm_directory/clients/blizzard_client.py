"""
Blizzard Game Data API transport.

API:   https://{region}.api.blizzard.com/data/wow/
Docs:  https://develop.battle.net/documentation/world-of-warcraft/game-data-apis

Credential setup (.env, gitignored):
  BLIZZARD_CLIENT_ID=your_client_id
  BLIZZARD_CLIENT_SECRET=your_client_secret

OAuth2 flow:
  Client credentials grant — no user interaction needed.
  POST https://us.battle.net/oauth/token
    → Body: grant_type=client_credentials
    → Auth: Basic (client_id:client_secret)
    → Returns: {"access_token": "...", "expires_in": 86399}

Behaviour on top of a plain GET:
  - Token obtained lazily and cached; a 401 refreshes it once and retries.
  - A 500 is retried once (they are frequently transient).
  - Any other non-200 raises ``TransportError``.

Base URLs carry a ``{region}`` placeholder rather than a hard-coded
subdomain so that a local mock server can be substituted in tests.
"""

from __future__ import annotations

import base64
import logging
import threading
from typing import TYPE_CHECKING, Mapping, Optional

import httpx

from realm_directory.clients.base import Transport
from realm_directory.exceptions import TransportError

if TYPE_CHECKING:
    from realm_directory.config import ApiConfig

logger = logging.getLogger(__name__)

REGION_PLACEHOLDER = "{region}"


def validate_base_url(base_url: str) -> str:
    """Return ``base_url`` if it contains the ``{region}`` placeholder.

    Raises:
        ValueError: If the placeholder is missing.
    """
    if REGION_PLACEHOLDER not in base_url:
        raise ValueError(
            f"{base_url} does not contain region placeholder \"{REGION_PLACEHOLDER}\""
        )
    return base_url


def sub_region(base_url: str, path: str, region: str) -> str:
    """Join ``base_url`` and ``path`` and substitute ``region``.

    Example::

        sub_region("https://{region}.api.blizzard.com", "data/wow/realm/index", "eu")
        # → "https://eu.api.blizzard.com/data/wow/realm/index"
    """
    endpoint = path.strip()
    sep = "" if endpoint.startswith("/") else "/"
    return f"{base_url}{sep}{endpoint}".replace(REGION_PLACEHOLDER, region)


class BlizzardClient(Transport):
    """Authenticated Game Data API client.

    Usage::

        import os
        client = BlizzardClient(
            client_id=os.environ["BLIZZARD_CLIENT_ID"],
            client_secret=os.environ["BLIZZARD_CLIENT_SECRET"],
        )
        body, headers = client.get("us", "data/wow/realm/index?namespace=dynamic-us")

    One instance is shared by every discovery worker; token state is guarded
    by a lock.
    """

    DEFAULT_OAUTH_URL = "https://{region}.battle.net"
    DEFAULT_API_URL = "https://{region}.api.blizzard.com"

    def __init__(
        self,
        client_id: Optional[str] = None,
        client_secret: Optional[str] = None,
        oauth_url: str = DEFAULT_OAUTH_URL,
        api_url: str = DEFAULT_API_URL,
        token_region: str = "us",
        timeout_seconds: float = 30.0,
        http_client: Optional[httpx.Client] = None,
    ) -> None:
        """Initialise the client.

        Args:
            client_id: OAuth2 client ID from BLIZZARD_CLIENT_ID env var.
            client_secret: OAuth2 client secret from BLIZZARD_CLIENT_SECRET env var.
            oauth_url: OAuth base URL containing ``{region}``.
            api_url: API base URL containing ``{region}``.
            token_region: Region whose OAuth host issues tokens. Default: "us".
            timeout_seconds: Per-request timeout.
            http_client: Pre-built ``httpx.Client`` (tests inject a MockTransport).

        Raises:
            ValueError: If either base URL lacks the ``{region}`` placeholder.
        """
        self.client_id = client_id
        self.client_secret = client_secret
        self.oauth_url = validate_base_url(oauth_url)
        self.api_url = validate_base_url(api_url)
        self.token_region = token_region
        self._http = http_client or httpx.Client(timeout=timeout_seconds)
        self._access_token: Optional[str] = None
        self._token_lock = threading.Lock()

    @classmethod
    def from_config(
        cls,
        config: "ApiConfig",
        client_id: Optional[str],
        client_secret: Optional[str],
    ) -> "BlizzardClient":
        """Build a client from the ``[api]`` config section."""
        return cls(
            client_id=client_id,
            client_secret=client_secret,
            oauth_url=config.oauth_url,
            api_url=config.api_url,
            token_region=config.token_region,
            timeout_seconds=config.timeout_seconds,
        )

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "BlizzardClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # ── Transport API ──────────────────────────────────────────────────────────

    def get(self, region: str, endpoint: str) -> tuple[bytes, Mapping[str, str]]:
        url = sub_region(self.api_url, endpoint, region)
        resp = self._send(url)

        # Retry once on a 500, it often resolves itself
        if resp.status_code == 500:
            logger.warning("BlizzardClient: 500 from %s, retrying once", url)
            resp = self._send(url)

        if resp.status_code != 200:
            logger.error(
                "BlizzardClient.get failed: url=%s status=%d", url, resp.status_code
            )
            raise TransportError(
                f"response code {resp.status_code}",
                url=url,
                status=resp.status_code,
                body=resp.text[:500],
            )
        return resp.content, resp.headers

    def get_if_not_modified(
        self, region: str, endpoint: str, since: str
    ) -> tuple[str, bytes]:
        url = sub_region(self.api_url, endpoint, region)
        headers = {"If-Modified-Since": since} if since else None
        resp = self._send(url, headers=headers)

        if resp.status_code == 304:
            logger.debug("BlizzardClient: %s not modified since %s", url, since)
            return "", b""
        if resp.status_code != 200:
            raise TransportError(
                f"get_if_not_modified returned {resp.status_code}: {resp.text[:500]}",
                url=url,
                status=resp.status_code,
                body=resp.text[:500],
            )
        return resp.headers.get("Last-Modified", ""), resp.content

    # ── Request plumbing ───────────────────────────────────────────────────────

    def _send(
        self, url: str, headers: Optional[dict[str, str]] = None
    ) -> httpx.Response:
        """Send one authenticated GET, refreshing the token once on 401."""
        token = self._ensure_token()
        resp = self._do_get(url, token, headers)
        if resp.status_code == 401:
            logger.info("BlizzardClient: token expired, refreshing")
            token = self._refresh_token(stale_token=token)
            resp = self._do_get(url, token, headers)
        return resp

    def _do_get(
        self, url: str, token: str, headers: Optional[dict[str, str]]
    ) -> httpx.Response:
        request_headers = {"Authorization": f"Bearer {token}"}
        if headers:
            request_headers.update(headers)
        try:
            resp = self._http.get(url, headers=request_headers)
        except httpx.HTTPError as exc:
            logger.error("BlizzardClient: request to %s failed: %s", url, exc)
            raise TransportError(f"request to {url} failed: {exc}", url=url) from exc
        logger.debug("Bnet API request url=%s status=%d", url, resp.status_code)
        return resp

    # ── Token management ───────────────────────────────────────────────────────

    def _ensure_token(self) -> str:
        """Return the cached OAuth2 token, obtaining one on first use."""
        with self._token_lock:
            if self._access_token is None:
                self._access_token = self._fetch_token()
            return self._access_token

    def _refresh_token(self, stale_token: str) -> str:
        """Replace ``stale_token`` unless another thread already did."""
        with self._token_lock:
            if self._access_token == stale_token:
                self._access_token = self._fetch_token()
            return self._access_token

    def _fetch_token(self) -> str:
        """Run the client-credentials grant.

        Raises:
            TransportError: If credentials are missing, the token endpoint
                fails, or the response carries no access token.
        """
        if not self.client_id or not self.client_secret:
            raise TransportError(
                "BLIZZARD_CLIENT_ID and BLIZZARD_CLIENT_SECRET must be set in .env."
            )

        token_url = sub_region(self.oauth_url, "/oauth/token", self.token_region)
        credentials = base64.b64encode(
            f"{self.client_id}:{self.client_secret}".encode()
        ).decode()

        try:
            resp = self._http.post(
                token_url,
                headers={
                    "Authorization": f"Basic {credentials}",
                    "Content-Type": "application/x-www-form-urlencoded",
                },
                data={"grant_type": "client_credentials"},
            )
        except httpx.HTTPError as exc:
            raise TransportError(
                f"token request failed: {exc}", url=token_url
            ) from exc

        if resp.status_code != 200:
            raise TransportError(
                f"token endpoint returned {resp.status_code}",
                url=token_url,
                status=resp.status_code,
                body=resp.text[:500],
            )

        try:
            payload = resp.json()
        except ValueError as exc:
            raise TransportError(
                f"token endpoint returned invalid JSON: {exc}", url=token_url
            ) from exc
        token = payload.get("access_token", "") if isinstance(payload, dict) else ""
        if not token:
            raise TransportError("could not retrieve access token", url=token_url)

        logger.info("Authenticated with Battle.net API (token_region=%s)", self.token_region)
        return token

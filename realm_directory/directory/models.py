"""
Pydantic models for the Game Data API payloads used during discovery.

Only the fields the directory needs are modelled; everything else in the
payload is ignored.  All models are frozen.

Endpoints and their models::

    GET data/wow/realm/index                  → RealmIndex
    GET data/wow/connected-realm/index        → ConnectedRealmIndex
    GET data/wow/connected-realm/{id}         → ConnectedRealmDetail
    GET data/wow/realm/{slug}                 → RealmDetail

A realm entry with an empty slug or a non-positive ID is a corrupt response,
not a skippable one.  ``decode_payload`` maps JSON failures to
``ResponseDecodeError`` and schema failures to ``CorruptResponseError``.
"""

from __future__ import annotations

import json
from typing import TypeVar

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from realm_directory.exceptions import CorruptResponseError, ResponseDecodeError


class RealmRef(BaseModel):
    """One realm as listed by an index or cluster response."""

    model_config = ConfigDict(frozen=True)

    id: int
    slug: str

    @field_validator("id")
    @classmethod
    def validate_id(cls, v: int) -> int:
        if v <= 0:
            raise ValueError(f"Realm ID must be positive, got {v}.")
        return v

    @field_validator("slug")
    @classmethod
    def validate_slug(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Realm slug must be non-empty.")
        return v


class HrefRef(BaseModel):
    """A ``{"href": ...}`` reference to another API resource."""

    model_config = ConfigDict(frozen=True)

    href: str = ""


class RealmIndex(BaseModel):
    """``data/wow/realm/index`` — every realm in the region."""

    model_config = ConfigDict(frozen=True)

    realms: list[RealmRef] = []


class ConnectedRealmIndex(BaseModel):
    """``data/wow/connected-realm/index`` — one href per cluster."""

    model_config = ConfigDict(frozen=True)

    connected_realms: list[HrefRef] = []


class ConnectedRealmDetail(BaseModel):
    """``data/wow/connected-realm/{id}`` — the members of one cluster."""

    model_config = ConfigDict(frozen=True)

    realms: list[RealmRef] = []


class RealmDetail(BaseModel):
    """``data/wow/realm/{slug}`` — a single realm and its cluster reference."""

    model_config = ConfigDict(frozen=True)

    connected_realm: HrefRef = HrefRef()


_ModelT = TypeVar("_ModelT", bound=BaseModel)


def decode_payload(model: type[_ModelT], body: bytes, endpoint: str) -> _ModelT:
    """Decode a raw response body into ``model``.

    Args:
        model:    Target pydantic model class.
        body:     Raw response bytes.
        endpoint: Endpoint the body came from (for error messages).

    Raises:
        ResponseDecodeError:  If ``body`` is not valid JSON.
        CorruptResponseError: If the JSON does not fit ``model``.
    """
    try:
        raw = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ResponseDecodeError(endpoint, f"invalid JSON: {exc}") from exc

    try:
        return model.model_validate(raw)
    except ValidationError as exc:
        raise CorruptResponseError(endpoint, str(exc)) from exc

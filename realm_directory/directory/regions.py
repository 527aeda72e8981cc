"""Supported Blizzard API regions."""

from __future__ import annotations

from realm_directory.exceptions import InvalidRegionError

VALID_REGIONS = frozenset({"us", "eu"})


def is_valid_region(region: str) -> bool:
    """Return True only for an exact, supported two-letter region code."""
    return region in VALID_REGIONS


def validate_region(region: str) -> str:
    """Return ``region`` unchanged, or raise ``InvalidRegionError``."""
    if not is_valid_region(region):
        raise InvalidRegionError(region)
    return region

"""Realm Directory — Blizzard connected-realm discovery and lookup."""

__version__ = "0.1.0"

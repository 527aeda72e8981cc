"""
Application configuration management.

Load order (each layer overrides the previous):
  1. ``config/default.toml``      — committed static defaults
  2. ``config/local.toml``        — optional local overrides (gitignored)
  3. ``.env``                     — local secrets and env overrides (gitignored)
  4. Environment variables        — ``REALM_DIRECTORY_*`` prefix

Entry point: ``load_config(config_path=None) -> AppConfig``

Credentials are never stored in TOML; ``api_credentials()`` reads
``BLIZZARD_CLIENT_ID`` / ``BLIZZARD_CLIENT_SECRET`` from the environment
after ``load_config`` has loaded ``.env``.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, field_validator

from realm_directory.directory.regions import VALID_REGIONS

VALID_STRATEGIES = frozenset({"clusters", "realms"})

# ── Sub-config models ─────────────────────────────────────────────────────────


class ApiConfig(BaseModel):
    """Game Data API endpoints and request settings."""

    model_config = ConfigDict(frozen=True)

    oauth_url: str = "https://{region}.battle.net"
    api_url: str = "https://{region}.api.blizzard.com"
    timeout_seconds: float = 30.0
    token_region: str = "us"

    @field_validator("oauth_url", "api_url")
    @classmethod
    def validate_placeholder(cls, v: str) -> str:
        if "{region}" not in v:
            raise ValueError(f"Base URL must contain '{{region}}', got '{v}'.")
        return v

    @field_validator("timeout_seconds")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError(f"timeout_seconds must be positive, got {v}.")
        return v


class DirectoryConfig(BaseModel):
    """Discovery settings for ``DirectoryBuilder``."""

    model_config = ConfigDict(frozen=True)

    default_region: str = "us"
    strategy: str = "clusters"
    max_workers: int = 5
    lazy_fallback: bool = False

    @field_validator("default_region")
    @classmethod
    def validate_region(cls, v: str) -> str:
        if v not in VALID_REGIONS:
            raise ValueError(f"Region must be one of {sorted(VALID_REGIONS)}, got '{v}'.")
        return v

    @field_validator("strategy")
    @classmethod
    def validate_strategy(cls, v: str) -> str:
        if v.lower() not in VALID_STRATEGIES:
            raise ValueError(
                f"Strategy must be one of {sorted(VALID_STRATEGIES)}, got '{v}'."
            )
        return v.lower()

    @field_validator("max_workers")
    @classmethod
    def validate_workers(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"max_workers must be >= 1, got {v}.")
        return v


class LoggingConfig(BaseModel):
    """Logging output settings."""

    model_config = ConfigDict(frozen=True)

    level: str = "INFO"
    log_file: str = ""
    json_format: bool = False

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid:
            raise ValueError(f"Log level must be one of {sorted(valid)}, got '{v}'.")
        return v.upper()


class AppConfig(BaseModel):
    """Complete application configuration — the single source of truth."""

    model_config = ConfigDict(frozen=True)

    api: ApiConfig = ApiConfig()
    directory: DirectoryConfig = DirectoryConfig()
    logging: LoggingConfig = LoggingConfig()
    debug: bool = False


# ── Loader ────────────────────────────────────────────────────────────────────

_PROJECT_ROOT = Path(__file__).parent.parent


def _find_project_root() -> Path:
    """Walk up from this file to find the project root (contains pyproject.toml)."""
    candidate = Path(__file__).parent
    for _ in range(5):
        if (candidate / "pyproject.toml").exists():
            return candidate
        candidate = candidate.parent
    return _PROJECT_ROOT


def load_config(config_path: Optional[Path] = None) -> AppConfig:
    """Load and merge application configuration.

    Args:
        config_path: Explicit path to a TOML config file. Defaults to
            ``<project_root>/config/default.toml``.

    Returns:
        Fully validated ``AppConfig`` instance.

    Raises:
        FileNotFoundError: If the specified ``config_path`` does not exist.
        pydantic.ValidationError: If merged config values fail validation.
    """
    root = _find_project_root()

    # 1. Load .env file (silently skip if missing)
    load_dotenv(dotenv_path=root / ".env", override=False)

    # 2. Load TOML config
    if config_path is None:
        config_path = root / "config" / "default.toml"

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "rb") as f:
        raw: dict[str, Any] = tomllib.load(f)

    local_config_path = config_path.parent / "local.toml"
    if local_config_path.exists():
        with open(local_config_path, "rb") as f:
            local_raw: dict[str, Any] = tomllib.load(f)
        raw = _deep_merge(raw, local_raw)

    # 3. Apply REALM_DIRECTORY_* environment variable overrides
    raw = _apply_env_overrides(raw)

    # 4. Build and validate AppConfig
    return _build_app_config(raw)


def api_credentials() -> tuple[Optional[str], Optional[str]]:
    """Return ``(client_id, client_secret)`` from the environment."""
    return (
        os.environ.get("BLIZZARD_CLIENT_ID") or None,
        os.environ.get("BLIZZARD_CLIENT_SECRET") or None,
    )


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge ``override`` into ``base``."""
    result = dict(base)
    for key, val in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(val, dict):
            result[key] = _deep_merge(result[key], val)
        else:
            result[key] = val
    return result


def _apply_env_overrides(raw: dict[str, Any]) -> dict[str, Any]:
    """Apply REALM_DIRECTORY_* env vars to the raw config dict.

    Supported overrides:
      REALM_DIRECTORY_REGION       → raw["directory"]["default_region"]
      REALM_DIRECTORY_STRATEGY     → raw["directory"]["strategy"]
      REALM_DIRECTORY_MAX_WORKERS  → raw["directory"]["max_workers"]
      REALM_DIRECTORY_LOG_LEVEL    → raw["logging"]["level"]
      REALM_DIRECTORY_DEBUG        → raw["debug"]
    """
    if region := os.environ.get("REALM_DIRECTORY_REGION"):
        raw.setdefault("directory", {})["default_region"] = region

    if strategy := os.environ.get("REALM_DIRECTORY_STRATEGY"):
        raw.setdefault("directory", {})["strategy"] = strategy

    if workers := os.environ.get("REALM_DIRECTORY_MAX_WORKERS"):
        raw.setdefault("directory", {})["max_workers"] = workers

    if log_level := os.environ.get("REALM_DIRECTORY_LOG_LEVEL"):
        raw.setdefault("logging", {})["level"] = log_level

    if debug := os.environ.get("REALM_DIRECTORY_DEBUG"):
        raw["debug"] = debug.lower() in ("1", "true", "yes")

    return raw


def _build_app_config(raw: dict[str, Any]) -> AppConfig:
    """Map raw TOML dict to ``AppConfig`` model structure."""
    return AppConfig(
        api=ApiConfig(**raw.get("api", {})),
        directory=DirectoryConfig(**raw.get("directory", {})),
        logging=LoggingConfig(**raw.get("logging", {})),
        debug=raw.get("debug", False),
    )

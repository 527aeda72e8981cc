"""
Tests for realm_directory.config — layered TOML + env configuration.

Covers:
  - Defaults when sections are absent
  - TOML values and local.toml overrides
  - REALM_DIRECTORY_* environment overrides
  - Validation failures
  - api_credentials() reads BLIZZARD_* env vars
"""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from realm_directory.config import (
    ApiConfig,
    AppConfig,
    DirectoryConfig,
    LoggingConfig,
    api_credentials,
    load_config,
)

_ENV_VARS = (
    "REALM_DIRECTORY_REGION",
    "REALM_DIRECTORY_STRATEGY",
    "REALM_DIRECTORY_MAX_WORKERS",
    "REALM_DIRECTORY_LOG_LEVEL",
    "REALM_DIRECTORY_DEBUG",
    "BLIZZARD_CLIENT_ID",
    "BLIZZARD_CLIENT_SECRET",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def _write(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8")
    return path


class TestDefaults:
    def test_app_config_defaults(self):
        config = AppConfig()
        assert config.directory.default_region == "us"
        assert config.directory.strategy == "clusters"
        assert config.directory.max_workers == 5
        assert config.directory.lazy_fallback is False
        assert config.api.api_url == "https://{region}.api.blizzard.com"
        assert config.logging.level == "INFO"

    def test_empty_toml_gives_defaults(self, tmp_path):
        config = load_config(_write(tmp_path / "default.toml", ""))
        assert config == AppConfig()

    def test_repo_default_toml_loads(self):
        config = load_config()
        assert config.directory.max_workers == 5

    def test_frozen(self):
        config = AppConfig()
        with pytest.raises(ValidationError):
            config.debug = True  # type: ignore[misc]


class TestLoadConfig:
    def test_toml_values(self, tmp_path):
        path = _write(
            tmp_path / "default.toml",
            '[directory]\ndefault_region = "eu"\nstrategy = "REALMS"\nmax_workers = 8\n'
            '[logging]\nlevel = "debug"\n',
        )
        config = load_config(path)
        assert config.directory.default_region == "eu"
        assert config.directory.strategy == "realms"
        assert config.directory.max_workers == 8
        assert config.logging.level == "DEBUG"

    def test_local_toml_overrides(self, tmp_path):
        path = _write(tmp_path / "default.toml", "[directory]\nmax_workers = 8\n")
        _write(tmp_path / "local.toml", "[directory]\nlazy_fallback = true\n")
        config = load_config(path)
        assert config.directory.max_workers == 8
        assert config.directory.lazy_fallback is True

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "nope.toml")

    def test_env_overrides(self, tmp_path, monkeypatch):
        path = _write(tmp_path / "default.toml", "[directory]\nmax_workers = 8\n")
        monkeypatch.setenv("REALM_DIRECTORY_REGION", "eu")
        monkeypatch.setenv("REALM_DIRECTORY_STRATEGY", "realms")
        monkeypatch.setenv("REALM_DIRECTORY_MAX_WORKERS", "2")
        monkeypatch.setenv("REALM_DIRECTORY_LOG_LEVEL", "warning")
        monkeypatch.setenv("REALM_DIRECTORY_DEBUG", "yes")
        config = load_config(path)
        assert config.directory.default_region == "eu"
        assert config.directory.strategy == "realms"
        assert config.directory.max_workers == 2
        assert config.logging.level == "WARNING"
        assert config.debug is True


class TestValidation:
    def test_bad_region(self):
        with pytest.raises(ValidationError):
            DirectoryConfig(default_region="kr")

    def test_bad_strategy(self):
        with pytest.raises(ValidationError):
            DirectoryConfig(strategy="bfs")

    def test_bad_worker_count(self):
        with pytest.raises(ValidationError):
            DirectoryConfig(max_workers=0)

    def test_bad_log_level(self):
        with pytest.raises(ValidationError):
            LoggingConfig(level="LOUD")

    def test_api_url_needs_placeholder(self):
        with pytest.raises(ValidationError):
            ApiConfig(api_url="https://us.api.blizzard.com")

    def test_timeout_positive(self):
        with pytest.raises(ValidationError):
            ApiConfig(timeout_seconds=0)

    def test_bad_env_value_rejected(self, tmp_path, monkeypatch):
        path = _write(tmp_path / "default.toml", "")
        monkeypatch.setenv("REALM_DIRECTORY_REGION", "tw")
        with pytest.raises(ValidationError):
            load_config(path)


class TestCredentials:
    def test_missing(self):
        assert api_credentials() == (None, None)

    def test_present(self, monkeypatch):
        monkeypatch.setenv("BLIZZARD_CLIENT_ID", "abc")
        monkeypatch.setenv("BLIZZARD_CLIENT_SECRET", "xyz")
        assert api_credentials() == ("abc", "xyz")

"""
Realm Directory — CLI entry point.

All commands follow this pattern:
  1. Load ``AppConfig`` via ``load_config()``.
  2. Configure logging.
  3. Validate inputs.
  4. Build the directory (live API, or a JSON fixture with ``--fixture``).
  5. Report result to stdout.

Install and run::

    pip install -e .
    realm-directory --help
    realm-directory validate-config
    realm-directory slug "Twisting Nether"
    realm-directory build --region eu --json
    realm-directory lookup "Área 52" --region us

A fixture file is a JSON object mapping endpoint strings to payloads, the
same shape ``StaticTransport`` accepts.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import typer

from realm_directory.exceptions import RealmDirectoryError

app = typer.Typer(
    name="realm-directory",
    help="Blizzard realm → connected-realm directory resolver.",
    add_completion=False,
)


# ── Helpers ───────────────────────────────────────────────────────────────────

def _load_config_or_exit(config_path: Optional[str] = None):
    """Load AppConfig, printing a friendly error and exiting on failure."""
    from realm_directory.config import load_config

    try:
        cfg_path = Path(config_path) if config_path else None
        return load_config(cfg_path)
    except FileNotFoundError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)
    except Exception as exc:
        typer.echo(f"[ERROR] Config validation failed: {exc}", err=True)
        raise typer.Exit(code=1)


def _configure_logging(config):
    """Set up logging from config."""
    from realm_directory.utils.logging import configure_logging
    configure_logging(config.logging)


def _make_transport(config, fixture: Optional[str]):
    """Return a StaticTransport for ``fixture``, else a live BlizzardClient."""
    if fixture:
        from realm_directory.clients.static import StaticTransport

        fixture_path = Path(fixture)
        if not fixture_path.exists():
            typer.echo(f"[ERROR] Fixture file not found: {fixture_path}", err=True)
            raise typer.Exit(code=1)
        payloads = json.loads(fixture_path.read_text(encoding="utf-8"))
        return StaticTransport(payloads)

    from realm_directory.clients.blizzard_client import BlizzardClient
    from realm_directory.config import api_credentials

    client_id, client_secret = api_credentials()
    return BlizzardClient.from_config(config.api, client_id, client_secret)


def _build_or_exit(config, region: Optional[str], strategy: Optional[str], fixture: Optional[str]):
    """Build a directory, converting any directory error into exit code 1."""
    from realm_directory.directory.builder import DirectoryBuilder, DiscoveryStrategy

    target_region = region or config.directory.default_region
    builder = DirectoryBuilder.from_config(_make_transport(config, fixture), config.directory)
    if strategy:
        try:
            builder.strategy = DiscoveryStrategy(strategy.lower())
        except ValueError:
            typer.echo(f"[ERROR] Unknown strategy '{strategy}'.", err=True)
            raise typer.Exit(code=1)

    try:
        return builder.build(target_region)
    except RealmDirectoryError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)


# ── Commands ──────────────────────────────────────────────────────────────────

@app.command("validate-config")
def validate_config(
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file (default: config/default.toml).",
    ),
    show_full: bool = typer.Option(
        False,
        "--full",
        help="Print full config including all fields.",
    ),
) -> None:
    """Validate the configuration file and print parsed values.

    Exits with code 1 if the config fails validation.
    """
    config = _load_config_or_exit(config_path)

    typer.echo("Configuration validated successfully.")
    typer.echo("")
    typer.echo(f"  API URL:          {config.api.api_url}")
    typer.echo(f"  Default region:   {config.directory.default_region}")
    typer.echo(f"  Strategy:         {config.directory.strategy}")
    typer.echo(f"  Max workers:      {config.directory.max_workers}")
    typer.echo(f"  Lazy fallback:    {config.directory.lazy_fallback}")
    typer.echo(f"  Log level:        {config.logging.level}")

    if show_full:
        typer.echo("")
        typer.echo("Full config (JSON):")
        typer.echo(json.dumps(config.model_dump(), indent=2, default=str))

    typer.echo("")
    typer.echo("[OK] Config valid.")


@app.command("slug")
def slug(
    name: str = typer.Argument(..., help="Realm display name, e.g. \"Twisting Nether\"."),
) -> None:
    """Print the canonical slug for a realm name."""
    from realm_directory.directory.slugs import normalize_realm_slug

    typer.echo(normalize_realm_slug(name))


@app.command("build")
def build(
    region: Optional[str] = typer.Option(None, "--region", "-r", help="Region code (us | eu)."),
    strategy: Optional[str] = typer.Option(
        None, "--strategy", help="Discovery strategy override (clusters | realms)."
    ),
    fixture: Optional[str] = typer.Option(
        None, "--fixture", help="JSON file of canned API payloads (offline mode)."
    ),
    as_json: bool = typer.Option(False, "--json", help="Print cluster membership as JSON."),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
) -> None:
    """Build the realm directory for a region and summarise its clusters."""
    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    directory = _build_or_exit(config, region, strategy, fixture)
    clusters = directory.clusters()

    if as_json:
        typer.echo(json.dumps(
            {
                "region": directory.region,
                "realms": dict(sorted(directory.all_realms.items())),
                "clusters": {str(c): list(m) for c, m in clusters.items()},
            },
            indent=2,
        ))
        return

    typer.echo(f"Region:   {directory.region}")
    typer.echo(f"Realms:   {len(directory)}")
    typer.echo(f"Clusters: {len(clusters)}")
    for cluster_id, members in clusters.items():
        typer.echo(f"  {cluster_id:>6}  {', '.join(members)}")
    typer.echo("[OK] Directory complete.")


@app.command("lookup")
def lookup(
    name: str = typer.Argument(..., help="Realm name or slug."),
    region: Optional[str] = typer.Option(None, "--region", "-r", help="Region code (us | eu)."),
    fixture: Optional[str] = typer.Option(
        None, "--fixture", help="JSON file of canned API payloads (offline mode)."
    ),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
) -> None:
    """Print the connected-realm ID and cluster members for a realm."""
    from realm_directory.directory.slugs import normalize_realm_slug

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    realm_slug = normalize_realm_slug(name)
    directory = _build_or_exit(config, region, None, fixture)

    try:
        cluster_id = directory.cluster_id(realm_slug)
    except RealmDirectoryError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)

    typer.echo(f"{realm_slug}: connected realm {cluster_id}")
    typer.echo(f"  members: {', '.join(directory.members(cluster_id))}")


if __name__ == "__main__":
    app()

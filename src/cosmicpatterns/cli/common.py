"""Shared option handling for the cosmicpatterns CLI."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Optional

import typer
from rich.console import Console

from cosmicpatterns.configuration.settings import DEFAULT_CONFIG_PATH, EngineSettings, bootstrap_settings
from cosmicpatterns.errors import CosmicPatternsError
from cosmicpatterns.errors.user_messages import format_error_for_cli
from cosmicpatterns.privacy.encryption import EncryptionManager
from cosmicpatterns.storage.snapshot_store import SecureSnapshotStore
from cosmicpatterns.storage.sqlite_repository import SQLiteSnapshotRepository

console = Console()


def load_cli_settings(
    config: Optional[Path] = None,
    database: Optional[Path] = None,
    no_encryption: bool = False,
) -> EngineSettings:
    """Settings from the config file with command-line overrides applied."""
    overrides: Dict[str, Any] = {}
    snapshots: Dict[str, Any] = {}
    if database is not None:
        snapshots["database_path"] = Path(database).expanduser()
    if no_encryption:
        snapshots["encryption_enabled"] = False
    if snapshots:
        overrides["snapshots"] = snapshots

    path = Path(config).expanduser() if config else DEFAULT_CONFIG_PATH
    return bootstrap_settings(path=path, overrides=overrides, persist=False)


def build_store(settings: EngineSettings) -> SecureSnapshotStore:
    """Store over the configured SQLite file, for commands that never detect."""
    manager = EncryptionManager(
        service_name=settings.snapshots.keyring_service,
        enabled=settings.snapshots.encryption_enabled,
    )
    manager.initialize()
    repository = SQLiteSnapshotRepository(settings.snapshots.database_path)
    return SecureSnapshotStore(repository, manager, settings=settings.snapshots)


def fail(error: CosmicPatternsError, output_json: bool) -> None:
    """Report ``error`` and exit with status 1."""
    if output_json:
        print(json.dumps({"success": False, "error": error.to_dict()}))
    else:
        console.print(f"[red]{format_error_for_cli(error)}[/red]")
    raise typer.Exit(1)


def summarize_snapshot(snapshot: Any) -> str:
    """One-line human summary of any snapshot variant."""
    kind = snapshot.type
    if kind == "tarot_season":
        return f"{snapshot.season.name} ({snapshot.dominant_theme})"
    if kind == "life_themes":
        return f"Dominant theme: {snapshot.dominant_theme}"
    if kind == "archetype":
        return f"Dominant archetype: {snapshot.dominant_archetype}"
    return f"{snapshot.title} ({snapshot.confidence:.0%})"


__all__ = ["build_store", "console", "fail", "load_cli_settings", "summarize_snapshot"]

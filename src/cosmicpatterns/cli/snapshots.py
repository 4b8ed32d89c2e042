"""CLI commands for stored pattern snapshots."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Optional

import typer
from rich.table import Table

from cosmicpatterns.cli.common import build_store, console, fail, load_cli_settings, summarize_snapshot
from cosmicpatterns.errors import CosmicPatternsError
from cosmicpatterns.models.patterns import PatternTier
from cosmicpatterns.models.snapshots import SnapshotType, snapshot_to_dict
from cosmicpatterns.service import create_service
from cosmicpatterns.snapshots.generators import SnapshotGenerator
from cosmicpatterns.sources.json_files import JsonActivitySource, JsonCosmicContextProvider

snapshots_app = typer.Typer(help="Stored pattern snapshot commands")

CONFIG_HELP = "Settings file"
DATABASE_HELP = "Snapshot database (overrides settings)"
NO_ENCRYPTION_HELP = "Store snapshots unencrypted (local debugging only)"


@snapshots_app.command("current")
def current(
    user_id: str = typer.Argument(..., help="User to read"),
    tier: PatternTier = typer.Option(PatternTier.FREE, "--tier", help="Caller access tier"),
    config: Optional[Path] = typer.Option(None, "--config", help=CONFIG_HELP),
    database: Optional[Path] = typer.Option(None, "--database", help=DATABASE_HELP),
    no_encryption: bool = typer.Option(False, "--no-encryption", help=NO_ENCRYPTION_HELP),
    output_json: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Show the newest snapshot of each type.

    Examples:
        cosmicpatterns snapshots current user-1
        cosmicpatterns snapshots current user-1 --tier premium --json
    """
    try:
        store = build_store(load_cli_settings(config, database, no_encryption))
        snapshots = asyncio.run(store.get_current(user_id, user_tier=tier))
    except CosmicPatternsError as e:
        fail(e, output_json)
        return

    if output_json:
        print(json.dumps({
            "success": True,
            "snapshots": {name: snapshot_to_dict(s) for name, s in snapshots.items()},
        }))
        return

    if not snapshots:
        console.print("[dim]No snapshots stored yet[/dim]")
        return

    table = Table(title=f"Current Snapshots for {user_id}")
    table.add_column("Type", style="cyan")
    table.add_column("Summary")
    for name, snapshot in snapshots.items():
        table.add_row(name, summarize_snapshot(snapshot))
    console.print(table)


@snapshots_app.command("history")
def history(
    user_id: str = typer.Argument(..., help="User to read"),
    snapshot_type: Optional[SnapshotType] = typer.Option(None, "--type", "-t", help="Only this snapshot type"),
    limit: int = typer.Option(20, "--limit", "-l", help="Maximum rows"),
    tier: PatternTier = typer.Option(PatternTier.FREE, "--tier", help="Caller access tier"),
    config: Optional[Path] = typer.Option(None, "--config", help=CONFIG_HELP),
    database: Optional[Path] = typer.Option(None, "--database", help=DATABASE_HELP),
    no_encryption: bool = typer.Option(False, "--no-encryption", help=NO_ENCRYPTION_HELP),
    output_json: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """List stored snapshots, newest first."""
    try:
        store = build_store(load_cli_settings(config, database, no_encryption))
        rows = asyncio.run(
            store.get_history(user_id, snapshot_type=snapshot_type, limit=limit, user_tier=tier)
        )
    except CosmicPatternsError as e:
        fail(e, output_json)
        return

    if output_json:
        print(json.dumps({
            "success": True,
            "snapshots": [
                {
                    "type": row.type,
                    "generated_at": row.generated_at.isoformat(),
                    "expires_at": row.expires_at.isoformat(),
                    "data": snapshot_to_dict(row.snapshot),
                }
                for row in rows
            ],
            "totalCount": len(rows),
        }))
        return

    if not rows:
        console.print("[dim]No snapshots stored yet[/dim]")
        return

    table = Table(title=f"Snapshot History for {user_id}")
    table.add_column("Generated", style="dim")
    table.add_column("Type", style="cyan")
    table.add_column("Summary")
    for row in rows:
        table.add_row(
            row.generated_at.strftime("%Y-%m-%d %H:%M"),
            row.type,
            summarize_snapshot(row.snapshot),
        )
    console.print(table)


@snapshots_app.command("refresh")
def refresh(
    user_id: str = typer.Argument(..., help="User to refresh"),
    activity_file: Path = typer.Option(..., "--activity-file", "-a", help="Exported activity JSON"),
    context_file: Path = typer.Option(..., "--context-file", "-c", help="Exported cosmic context JSON"),
    tier: PatternTier = typer.Option(PatternTier.FREE, "--tier", help="Caller access tier"),
    force: bool = typer.Option(False, "--force", help="Ignore the refresh cooldown"),
    config: Optional[Path] = typer.Option(None, "--config", help=CONFIG_HELP),
    database: Optional[Path] = typer.Option(None, "--database", help=DATABASE_HELP),
    no_encryption: bool = typer.Option(False, "--no-encryption", help=NO_ENCRYPTION_HELP),
    output_json: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Regenerate and store every snapshot type.

    Unchanged snapshots are skipped. Repeated refreshes inside the cooldown
    are rejected unless --force is given.
    """
    try:
        settings = load_cli_settings(config, database, no_encryption)
        service = create_service(
            JsonActivitySource(activity_file),
            JsonCosmicContextProvider(context_file),
            settings,
        )
        summary = asyncio.run(service.refresh_snapshots(user_id, user_tier=tier, force=force))
    except CosmicPatternsError as e:
        fail(e, output_json)
        return

    if output_json:
        print(json.dumps({"success": summary.refreshed, **summary.to_dict()}))
        return

    if not summary.refreshed:
        console.print("[yellow]Refreshed too recently, try again later or pass --force[/yellow]")
        raise typer.Exit(1)

    if summary.reason == "insufficient_data":
        console.print("[yellow]Not enough activity to build snapshots yet[/yellow]")
        return

    console.print(f"[green]Saved:[/green] {', '.join(summary.saved) or 'none'}")
    if summary.skipped:
        console.print(f"[dim]Unchanged: {', '.join(summary.skipped)}[/dim]")


@snapshots_app.command("backfill")
def backfill(
    user_id: str = typer.Argument(..., help="User to backfill"),
    activity_file: Path = typer.Option(..., "--activity-file", "-a", help="Exported activity JSON"),
    weeks_back: int = typer.Option(26, "--weeks", "-w", min=1, help="Weeks of history"),
    config: Optional[Path] = typer.Option(None, "--config", help=CONFIG_HELP),
    database: Optional[Path] = typer.Option(None, "--database", help=DATABASE_HELP),
    no_encryption: bool = typer.Option(False, "--no-encryption", help=NO_ENCRYPTION_HELP),
    output_json: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Write weekly historical snapshots from past activity."""
    try:
        settings = load_cli_settings(config, database, no_encryption)
        store = build_store(settings)
        generator = SnapshotGenerator(JsonActivitySource(activity_file), settings=settings)

        async def _run() -> int:
            snapshots = await generator.generate_historical_snapshots(user_id, weeks_back)
            for snapshot in snapshots:
                await store.save_historical(user_id, snapshot)
            return len(snapshots)

        written = asyncio.run(_run())
    except CosmicPatternsError as e:
        fail(e, output_json)
        return

    if output_json:
        print(json.dumps({"success": True, "userId": user_id, "snapshotsCreated": written}))
        return
    console.print(f"[green]Created {written} historical snapshots over {weeks_back} weeks[/green]")


@snapshots_app.command("purge")
def purge(
    user_id: str = typer.Argument(..., help="User whose snapshots are deleted"),
    confirm: bool = typer.Option(False, "--confirm", help="Confirm purge operation (required)"),
    config: Optional[Path] = typer.Option(None, "--config", help=CONFIG_HELP),
    database: Optional[Path] = typer.Option(None, "--database", help=DATABASE_HELP),
    no_encryption: bool = typer.Option(False, "--no-encryption", help=NO_ENCRYPTION_HELP),
    output_json: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Permanently delete every stored snapshot for a user.

    WARNING: This operation is irreversible.
    """
    if not confirm:
        console.print("[bold red]WARNING: This will permanently delete all snapshots for this user![/bold red]")
        console.print("\n[yellow]To proceed, add --confirm flag[/yellow]")
        console.print(f"\nExample: cosmicpatterns snapshots purge {user_id} --confirm")
        raise typer.Exit(1)

    try:
        store = build_store(load_cli_settings(config, database, no_encryption))
        deleted = asyncio.run(store.delete(user_id))
    except CosmicPatternsError as e:
        fail(e, output_json)
        return

    if output_json:
        print(json.dumps({"success": True, "userId": user_id, "deleted": deleted}))
        return
    console.print(f"[green]Deleted {deleted} snapshots[/green]")


__all__ = ["snapshots_app"]

"""Pattern detection command."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Optional

import typer
from rich.table import Table

from cosmicpatterns.cli.common import console, fail, load_cli_settings
from cosmicpatterns.detection.engine import CosmicPatternEngine
from cosmicpatterns.errors import CosmicPatternsError
from cosmicpatterns.models.patterns import PatternTier
from cosmicpatterns.sources.json_files import JsonActivitySource, JsonCosmicContextProvider


def detect(
    user_id: str = typer.Argument(..., help="User whose activity is analysed"),
    activity_file: Path = typer.Option(..., "--activity-file", "-a", help="Exported activity JSON"),
    context_file: Path = typer.Option(..., "--context-file", "-c", help="Exported cosmic context JSON"),
    days_back: Optional[int] = typer.Option(None, "--days-back", "-d", help="Analysis window in days"),
    tier: PatternTier = typer.Option(PatternTier.FREE, "--tier", help="Caller access tier"),
    category: Optional[str] = typer.Option(None, "--category", help="tarot or journal"),
    config: Optional[Path] = typer.Option(None, "--config", help="Settings file"),
    output_json: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Detect cosmic patterns in a user's recent activity.

    Examples:
        cosmicpatterns detect user-1 -a activity.json -c context.json
        cosmicpatterns detect user-1 -a activity.json -c context.json --tier premium --json
    """
    try:
        settings = load_cli_settings(config)
        engine = CosmicPatternEngine(
            JsonActivitySource(activity_file),
            JsonCosmicContextProvider(context_file),
            settings=settings,
        )
        result = asyncio.run(
            engine.detect_cosmic_patterns(
                user_id, days_back=days_back, user_tier=tier, category=category
            )
        )
    except CosmicPatternsError as e:
        fail(e, output_json)
        return
    except ValueError as e:
        if output_json:
            print(json.dumps({"success": False, "error": str(e)}))
        else:
            console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    if output_json:
        print(json.dumps({"success": True, **result.to_dict()}))
        return

    meta = result.meta
    window = meta.analysis_window
    console.print(
        f"[bold]Analysed {window.days_back} days[/bold] "
        f"({window.start.date()} to {window.end.date()}): "
        + ", ".join(f"{count} {name}" for name, count in meta.events_analyzed.items())
    )

    if meta.insufficient_data:
        payload = result.patterns[0].data
        console.print("[yellow]Not enough activity to detect patterns yet.[/yellow]")
        for name, required in payload.required.items():
            console.print(f"  {name}: {payload.current.get(name, 0)} of {required} needed")
        return

    if not result.patterns:
        console.print("[dim]No patterns above the confidence threshold[/dim]")
        return

    table = Table(title=f"Cosmic Patterns ({meta.total_patterns} found)")
    table.add_column("Type", style="cyan")
    table.add_column("Title")
    table.add_column("Confidence", justify="right", style="green")
    table.add_column("Tier")
    for pattern in result.patterns:
        table.add_row(
            pattern.type,
            pattern.title,
            f"{pattern.confidence:.0%}",
            pattern.tier.value,
        )
    console.print(table)


__all__ = ["detect"]

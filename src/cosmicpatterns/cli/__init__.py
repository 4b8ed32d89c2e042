"""Command line entry points for the cosmic patterns engine."""

from typer import Typer

from .detect import detect
from .snapshots import snapshots_app


cli = Typer(help="Cosmic pattern detection and snapshot tools")
cli.command("detect")(detect)
cli.add_typer(snapshots_app, name="snapshots")


__all__ = ["cli"]

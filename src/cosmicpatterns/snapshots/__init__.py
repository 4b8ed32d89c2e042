"""Snapshot generation and change detection."""

from cosmicpatterns.snapshots.archetypes import ARCHETYPES, build_archetype_snapshot, detect_archetypes
from cosmicpatterns.snapshots.change_detection import has_pattern_changed
from cosmicpatterns.snapshots.generators import SnapshotGenerator, weekly_periods
from cosmicpatterns.snapshots.season import build_tarot_season_snapshot
from cosmicpatterns.snapshots.signals import ActivitySignals, TriggerSet, score_triggers
from cosmicpatterns.snapshots.themes import LIFE_THEMES, analyze_life_themes, build_life_themes_snapshot

__all__ = [
    "ARCHETYPES",
    "ActivitySignals",
    "LIFE_THEMES",
    "SnapshotGenerator",
    "TriggerSet",
    "analyze_life_themes",
    "build_archetype_snapshot",
    "build_life_themes_snapshot",
    "build_tarot_season_snapshot",
    "detect_archetypes",
    "has_pattern_changed",
    "score_triggers",
    "weekly_periods",
]

"""Configuration loading utilities for the cosmic patterns engine."""

from .settings import (
    DEFAULT_CONFIG_PATH,
    CacheSettings,
    DetectionSettings,
    EngineSettings,
    ScoringSettings,
    SnapshotSettings,
    bootstrap_settings,
    load_settings,
    save_settings,
)

__all__ = [
    "DEFAULT_CONFIG_PATH",
    "CacheSettings",
    "DetectionSettings",
    "EngineSettings",
    "ScoringSettings",
    "SnapshotSettings",
    "bootstrap_settings",
    "load_settings",
    "save_settings",
]

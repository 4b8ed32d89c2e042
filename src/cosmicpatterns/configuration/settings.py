"""Typed settings for the cosmic patterns engine.

All weights, thresholds and durations live in one ``EngineSettings`` object
built once at startup and passed by reference into the confidence scorer,
the detection engine, the snapshot store and the client cache. Tests build
alternate settings directly instead of patching module constants.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, ValidationError, model_validator

from cosmicpatterns.errors import InvalidConfigError


DEFAULT_CONFIG_PATH = Path.home() / ".cosmicpatterns" / "config.json"
DEFAULT_DATABASE_PATH = Path.home() / ".cosmicpatterns" / "snapshots.db"
ENV_PREFIX = "COSMICPATTERNS_"


class ScoringSettings(BaseModel):
    """Confidence formula weights, caps and acceptance floors."""

    ratio_weight: float = Field(0.3, gt=0.0, description="Multiplier on the frequency ratio")
    base_frequency_cap: float = Field(0.5, gt=0.0, le=1.0)
    sample_size_divisor: float = Field(20.0, gt=0.0, description="Occurrences for a full sample bonus")
    sample_size_cap: float = Field(0.2, ge=0.0, le=1.0)
    min_analysis_days: int = Field(14, ge=0, description="Windows shorter than this are penalised")
    time_window_penalty: float = Field(0.1, ge=0.0, le=1.0)
    chi_squared_weight: float = Field(0.02, ge=0.0)
    chi_squared_cap: float = Field(0.3, ge=0.0, le=1.0)
    min_expected_count: float = Field(5.0, gt=0.0, description="Chi-squared floor on expected count")
    min_confidence: float = Field(0.6, ge=0.0, le=1.0)
    min_occurrences: int = Field(3, ge=1)


class DetectionSettings(BaseModel):
    """Orchestrator limits."""

    default_days_back: int = Field(90, ge=1, le=3650)
    min_tarot_events: int = Field(5, ge=1)
    min_journal_events: int = Field(3, ge=1)
    max_patterns: int = Field(10, ge=1)
    top_entities: int = Field(3, ge=1)
    fetch_timeout_seconds: float = Field(10.0, gt=0.0)


class SnapshotSettings(BaseModel):
    """Snapshot persistence policy."""

    database_path: Path = Field(default=DEFAULT_DATABASE_PATH)
    retention_days: int = Field(180, ge=1, le=3650)
    regeneration_days: int = Field(7, ge=1)
    refresh_cooldown_hours: float = Field(6.0, ge=0.0)
    change_threshold: float = Field(0.2, gt=0.0, le=1.0)
    history_limit: int = Field(20, ge=1, le=500)
    season_period_days: int = Field(30, ge=1)
    encryption_enabled: bool = Field(True, description="Disable only for local debugging")
    keyring_service: str = Field("cosmicpatterns")


class CacheSettings(BaseModel):
    """Ephemeral client cache."""

    namespace: str = Field("cosmic-patterns", min_length=1)
    default_max_age_ms: int = Field(3_600_000, ge=0)
    quota_bytes: Optional[int] = Field(5_000_000, ge=1)

    @model_validator(mode="after")
    def _namespace_has_no_separator(self) -> "CacheSettings":
        if ":" in self.namespace:
            raise ValueError("namespace must not contain ':'")
        return self


class EngineSettings(BaseModel):
    """Root configuration state."""

    scoring: ScoringSettings = Field(default_factory=ScoringSettings)
    detection: DetectionSettings = Field(default_factory=DetectionSettings)
    snapshots: SnapshotSettings = Field(default_factory=SnapshotSettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)


def load_settings(path: Path = DEFAULT_CONFIG_PATH) -> EngineSettings:
    """Load settings from disk or raise if invalid."""

    if not path.exists():
        raise FileNotFoundError(f"Settings file not found at {path}")
    payload = json.loads(path.read_text())
    try:
        return EngineSettings.model_validate(payload)
    except ValidationError as exc:
        raise InvalidConfigError(
            f"Invalid configuration: {exc}", details={"path": str(path)}
        ) from exc


def save_settings(settings: EngineSettings, path: Path = DEFAULT_CONFIG_PATH) -> None:
    payload = settings.model_dump(mode="json")
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, indent=2))


def bootstrap_settings(
    *,
    path: Path = DEFAULT_CONFIG_PATH,
    overrides: Optional[Dict[str, Any]] = None,
    persist: bool = True,
) -> EngineSettings:
    """Create or load settings respecting overrides and environment."""

    overrides = overrides or {}

    if path.exists():
        settings = load_settings(path)
    else:
        settings = EngineSettings()
        if persist:
            save_settings(settings, path)

    merged = settings.model_dump(mode="python")
    # explicit overrides (command-line flags) win over the environment
    merged = _apply_env_overrides(merged)
    merged = _apply_overrides(merged, overrides)

    try:
        resolved = EngineSettings.model_validate(merged)
    except ValidationError as exc:
        raise InvalidConfigError(f"Invalid configuration: {exc}") from exc

    resolved.snapshots.database_path.parent.mkdir(parents=True, exist_ok=True)
    return resolved


def _apply_overrides(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    merged = dict(base)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _apply_overrides(merged[key], value)
        else:
            merged[key] = value
    return merged


def _apply_env_overrides(data: Dict[str, Any]) -> Dict[str, Any]:
    scoring = data.setdefault("scoring", {})
    _set_env_override(scoring, "min_confidence", f"{ENV_PREFIX}MIN_CONFIDENCE", cast=float)
    _set_env_override(scoring, "min_occurrences", f"{ENV_PREFIX}MIN_OCCURRENCES", cast=int)

    detection = data.setdefault("detection", {})
    _set_env_override(detection, "default_days_back", f"{ENV_PREFIX}DAYS_BACK", cast=int)
    _set_env_override(detection, "max_patterns", f"{ENV_PREFIX}MAX_PATTERNS", cast=int)
    _set_env_override(
        detection, "fetch_timeout_seconds", f"{ENV_PREFIX}FETCH_TIMEOUT", cast=float
    )

    snapshots = data.setdefault("snapshots", {})
    _set_env_override(snapshots, "database_path", f"{ENV_PREFIX}DATABASE_PATH", cast=Path)
    _set_env_override(snapshots, "retention_days", f"{ENV_PREFIX}RETENTION_DAYS", cast=int)
    _set_env_override(
        snapshots, "refresh_cooldown_hours", f"{ENV_PREFIX}REFRESH_COOLDOWN_HOURS", cast=float
    )
    _set_env_override(
        snapshots, "encryption_enabled", f"{ENV_PREFIX}ENCRYPTION_ENABLED", cast_bool=True
    )
    return data


def _set_env_override(
    mapping: Dict[str, Any],
    key: str,
    env_name: str,
    *,
    cast: Any = None,
    cast_bool: bool = False,
) -> None:
    raw = os.getenv(env_name)
    if raw is None:
        return
    if cast_bool:
        mapping[key] = raw.lower() in {"1", "true", "yes"}
    elif cast is not None:
        try:
            mapping[key] = cast(raw)
        except ValueError as exc:
            raise InvalidConfigError(
                f"Environment variable {env_name} has an invalid value",
                details={"variable": env_name},
            ) from exc
    else:
        mapping[key] = raw

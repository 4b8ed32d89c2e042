"""Centralized error definitions for the cosmic patterns engine.

Usage:
    from cosmicpatterns.errors import CosmicPatternsError, StoreWriteError

    try:
        saved = await service.save_snapshot(user_id, snapshot)
    except CosmicPatternsError as e:
        print(e.user_message)

Insufficient data and rate limiting are not errors: they are reported as a
sentinel pattern and a ``False`` from ``can_refresh`` respectively.
"""

from __future__ import annotations

from cosmicpatterns.errors.user_messages import (
    format_error_for_cli,
    format_error_for_ui,
    format_error_for_user,
    get_recovery_suggestion,
    get_user_message,
)


# =============================================================================
# Base Error
# =============================================================================


class CosmicPatternsError(Exception):
    """Base exception for all engine errors.

    Attributes:
        code: Error code for categorization
        user_message: User-friendly message (optional override)
        recoverable: Whether the error is potentially recoverable
        details: Additional error details for debugging
    """

    code: str = "COSMIC_PATTERNS_ERROR"
    default_message: str = "An unexpected error occurred"
    recoverable: bool = True

    def __init__(
        self,
        message: str | None = None,
        *,
        user_message: str | None = None,
        details: dict | None = None,
    ) -> None:
        self.message = message or self.default_message
        self._user_message = user_message
        self.details = details or {}
        super().__init__(self.message)

    @property
    def user_message(self) -> str:
        if self._user_message:
            return self._user_message
        return get_user_message(self)

    @property
    def recovery_suggestion(self) -> str:
        return get_recovery_suggestion(self)

    def to_dict(self) -> dict:
        return {
            "code": self.code,
            "message": self.message,
            "user_message": self.user_message,
            "recoverable": self.recoverable,
            "details": self.details,
        }


# =============================================================================
# Snapshot Store Errors
# =============================================================================


class SnapshotStoreError(CosmicPatternsError):
    """Base error for snapshot persistence."""

    code = "SNAPSHOT_STORE_ERROR"
    default_message = "Snapshot store operation failed"


class StoreReadError(SnapshotStoreError):
    """Reading snapshots from the persistent store failed."""

    code = "STORE_READ_ERROR"
    default_message = "Failed to read snapshots"


class StoreWriteError(SnapshotStoreError):
    """Writing a snapshot failed; the snapshot was NOT persisted."""

    code = "STORE_WRITE_ERROR"
    default_message = "Failed to write snapshot"


class InvalidSnapshotError(SnapshotStoreError):
    """A payload does not describe any known snapshot variant."""

    code = "INVALID_SNAPSHOT"
    default_message = "Invalid snapshot payload"
    recoverable = False


# =============================================================================
# Detection Errors
# =============================================================================


class DetectionError(CosmicPatternsError):
    code = "DETECTION_ERROR"
    default_message = "Pattern detection failed"


class SourceError(DetectionError):
    """Fetching activity from the event source failed."""

    code = "SOURCE_ERROR"
    default_message = "Failed to fetch activity"


class SourceTimeoutError(SourceError):
    code = "SOURCE_TIMEOUT"
    default_message = "Fetching activity timed out"


# =============================================================================
# Cache Errors
# =============================================================================


class CacheQuotaExceededError(CosmicPatternsError):
    """The ephemeral cache backend rejected a write (size limit)."""

    code = "CACHE_QUOTA_EXCEEDED"
    default_message = "Cache quota exceeded"


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(CosmicPatternsError):
    code = "CONFIGURATION_ERROR"
    default_message = "Configuration error"
    recoverable = False


class InvalidConfigError(ConfigurationError):
    code = "INVALID_CONFIG"
    default_message = "Invalid configuration"


# =============================================================================
# Error Handling Utilities
# =============================================================================


def handle_error(error: Exception) -> str:
    """Convert any exception to a user-facing message."""
    if isinstance(error, CosmicPatternsError):
        return error.user_message
    return get_user_message(error)


def is_recoverable(error: Exception) -> bool:
    if isinstance(error, CosmicPatternsError):
        return error.recoverable
    return isinstance(error, (TimeoutError, ConnectionError))


__all__ = [
    "CacheQuotaExceededError",
    "ConfigurationError",
    "CosmicPatternsError",
    "DetectionError",
    "InvalidConfigError",
    "InvalidSnapshotError",
    "SnapshotStoreError",
    "SourceError",
    "SourceTimeoutError",
    "StoreReadError",
    "StoreWriteError",
    "format_error_for_cli",
    "format_error_for_ui",
    "format_error_for_user",
    "get_recovery_suggestion",
    "get_user_message",
    "handle_error",
    "is_recoverable",
]

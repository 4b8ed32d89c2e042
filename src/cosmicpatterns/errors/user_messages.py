"""User-friendly error messages for the cosmic patterns engine.

Maps error codes to messages and recovery suggestions so that callers (the
HTTP layer, the CLI) never surface raw technical errors.

Privacy Note:
- Messages NEVER include journal content or decrypted payloads
- Store and encryption failures surface as a generic failure state
"""

from __future__ import annotations

from typing import Any


ERROR_MESSAGES: dict[str, str] = {
    # Snapshot store errors
    "SNAPSHOT_STORE_ERROR": "Your pattern history couldn't be accessed right now.",
    "STORE_READ_ERROR": "We couldn't load your saved patterns. Please try again.",
    "STORE_WRITE_ERROR": "We couldn't save your latest patterns. Please try again.",
    "INVALID_SNAPSHOT": "A saved pattern couldn't be read.",
    # Encryption errors
    "ENCRYPTION_ERROR": "Your pattern data couldn't be secured.",
    "DECRYPTION_ERROR": "A saved pattern couldn't be unlocked.",
    "KEY_NOT_FOUND": "The encryption key for your patterns is missing.",
    # Detection errors
    "DETECTION_ERROR": "We couldn't analyse your cosmic patterns right now.",
    "SOURCE_ERROR": "Your recent readings and entries couldn't be loaded.",
    "SOURCE_TIMEOUT": "Loading your activity took too long. Please try again.",
    # Cache errors
    "CACHE_QUOTA_EXCEEDED": "Local storage is full; patterns will load from the server.",
    # Configuration errors
    "CONFIGURATION_ERROR": "There's a configuration issue.",
    "INVALID_CONFIG": "The configuration is invalid. Check settings.",
    # Generic
    "COSMIC_PATTERNS_ERROR": "An unexpected error occurred. Please try again.",
    "UNKNOWN_ERROR": "Something went wrong. Please try again.",
}


RECOVERY_SUGGESTIONS: dict[str, str] = {
    "SNAPSHOT_STORE_ERROR": "Wait a moment and try again.",
    "STORE_READ_ERROR": "Refresh the page. Your history is kept safely.",
    "STORE_WRITE_ERROR": "Try refreshing your patterns again later.",
    "INVALID_SNAPSHOT": "Regenerate your patterns to replace the unreadable entry.",
    "ENCRYPTION_ERROR": "Check that the system keychain is available.",
    "DECRYPTION_ERROR": "Regenerate your patterns; older entries may be unreadable.",
    "KEY_NOT_FOUND": "Re-initialise encryption with a new key.",
    "DETECTION_ERROR": "Try again in a few minutes.",
    "SOURCE_ERROR": "Check that the activity store is reachable.",
    "SOURCE_TIMEOUT": "Try a shorter analysis window (--days-back).",
    "CACHE_QUOTA_EXCEEDED": "Clear cached data for other users or raise the quota.",
    "CONFIGURATION_ERROR": "Review your cosmicpatterns configuration file.",
    "INVALID_CONFIG": "Fix the reported field or delete the file to regenerate defaults.",
    "COSMIC_PATTERNS_ERROR": "Try again. If the problem persists, report it.",
    "UNKNOWN_ERROR": "Try again. If the problem persists, report it.",
}


def _error_code(error: Any) -> str:
    if hasattr(error, "code"):
        return error.code
    if isinstance(error, str):
        return error
    return type(error).__name__.upper()


def get_user_message(error: Any) -> str:
    """Get the user-facing message for an error or error code."""
    return ERROR_MESSAGES.get(_error_code(error), ERROR_MESSAGES["UNKNOWN_ERROR"])


def get_recovery_suggestion(error: Any) -> str:
    """Get the recovery suggestion for an error or error code."""
    return RECOVERY_SUGGESTIONS.get(
        _error_code(error), RECOVERY_SUGGESTIONS["UNKNOWN_ERROR"]
    )


def format_error_for_user(error: Any) -> str:
    message = get_user_message(error)
    suggestion = get_recovery_suggestion(error)
    return f"{message}\n\nSuggestion: {suggestion}"


def format_error_for_cli(error: Any) -> str:
    """Format error for CLI output.

    Details are listed, but keys that could leak user content are dropped.
    """
    code = getattr(error, "code", "ERROR")
    lines = [
        f"Error [{code}]: {get_user_message(error)}",
        "",
        f"Suggestion: {get_recovery_suggestion(error)}",
    ]

    details = getattr(error, "details", None)
    if details:
        lines.append("")
        lines.append("Details:")
        for key, value in details.items():
            if key not in ("content", "payload", "key", "token"):
                lines.append(f"  {key}: {value}")

    return "\n".join(lines)


def format_error_for_ui(error: Any) -> dict:
    return {
        "message": get_user_message(error),
        "suggestion": get_recovery_suggestion(error),
        "code": getattr(error, "code", "UNKNOWN_ERROR"),
        "recoverable": getattr(error, "recoverable", False),
    }


__all__ = [
    "ERROR_MESSAGES",
    "RECOVERY_SUGGESTIONS",
    "format_error_for_cli",
    "format_error_for_ui",
    "format_error_for_user",
    "get_recovery_suggestion",
    "get_user_message",
]

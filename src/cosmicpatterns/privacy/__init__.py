"""Privacy: snapshot payload encryption."""

from cosmicpatterns.privacy.encryption import (
    DecryptionError,
    EncryptedPayload,
    EncryptionError,
    EncryptionManager,
    KeyNotFoundError,
)

__all__ = [
    "DecryptionError",
    "EncryptedPayload",
    "EncryptionError",
    "EncryptionManager",
    "KeyNotFoundError",
]

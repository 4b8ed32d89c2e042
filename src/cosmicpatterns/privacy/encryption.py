"""Snapshot payload encryption.

Snapshots are encrypted before they reach the repository and decrypted
after they are read back; plaintext pattern data never touches disk.

Features:
- AES-256-GCM authenticated encryption (confidentiality + integrity)
- Fresh 96-bit nonce per payload
- Key held in the OS keychain via keyring, never written to disk
- Optional binding of ciphertext to its owner via associated data
- ``enabled=False`` passthrough for local debugging

Usage:
    >>> manager = EncryptionManager(service_name="cosmicpatterns")
    >>> manager.initialize()
    >>> token = manager.encrypt_json({"type": "tarot_season"})
    >>> manager.decrypt_json(token)
    {'type': 'tarot_season'}
"""

from __future__ import annotations

import base64
import binascii
import json
import logging
import secrets
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Union

from cosmicpatterns.errors import CosmicPatternsError

logger = logging.getLogger(__name__)

KEY_SIZE_BYTES = 32  # AES-256
NONCE_SIZE_BYTES = 12  # GCM standard
ALGORITHM = "AES-256-GCM"
PASSTHROUGH_ALGORITHM = "NONE"


class EncryptionError(CosmicPatternsError):
    """Encrypting a snapshot payload failed."""

    code = "ENCRYPTION_ERROR"
    default_message = "Encryption failed"


class KeyNotFoundError(EncryptionError):
    """The snapshot key is missing from the keychain."""

    code = "KEY_NOT_FOUND"
    default_message = "Encryption key not found"
    recoverable = False


class DecryptionError(EncryptionError):
    """Wrong key, corrupted payload or tampered ciphertext."""

    code = "DECRYPTION_ERROR"
    default_message = "Decryption failed"


@dataclass
class EncryptedPayload:
    """Ciphertext plus what is needed to open it.

    Attributes:
        ciphertext: Encrypted bytes including the GCM tag
        nonce: Random nonce used for this payload
        algorithm: AES-256-GCM, or NONE for passthrough payloads
        created_at: When the payload was sealed
    """

    ciphertext: bytes
    nonce: bytes
    algorithm: str = ALGORITHM
    created_at: Optional[datetime] = None

    def __post_init__(self):
        if self.created_at is None:
            self.created_at = datetime.now(timezone.utc)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ciphertext": base64.b64encode(self.ciphertext).decode("ascii"),
            "nonce": base64.b64encode(self.nonce).decode("ascii"),
            "algorithm": self.algorithm,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EncryptedPayload":
        return cls(
            ciphertext=base64.b64decode(data["ciphertext"]),
            nonce=base64.b64decode(data["nonce"]),
            algorithm=data.get("algorithm", ALGORITHM),
            created_at=datetime.fromisoformat(data["created_at"])
            if data.get("created_at")
            else None,
        )


@dataclass
class EncryptionManager:
    """Seal and open snapshot payloads with a keychain-held key.

    Attributes:
        service_name: Keychain service identifier
        key_id: Keychain entry holding the base64 key
        enabled: When False, payloads are stored as plain JSON (algorithm NONE)
    """

    service_name: str = "cosmicpatterns"
    key_id: str = "snapshot_encryption_key"
    enabled: bool = True
    _key_cache: Optional[bytes] = field(default=None, init=False, repr=False)

    def initialize(self, *, force_new: bool = False) -> None:
        """Load the key from the keychain, generating one on first use.

        Raises:
            EncryptionError: The keychain could not be read or written
        """
        if not self.enabled:
            logger.info("Snapshot encryption disabled, skipping key setup")
            return

        try:
            import keyring

            existing = None if force_new else keyring.get_password(self.service_name, self.key_id)
            if existing:
                self._key_cache = base64.b64decode(existing)
                logger.info("Loaded snapshot encryption key from keychain")
                return

            key = secrets.token_bytes(KEY_SIZE_BYTES)
            keyring.set_password(
                self.service_name, self.key_id, base64.b64encode(key).decode("ascii")
            )
            self._key_cache = key
            logger.info("Generated new snapshot encryption key")
        except Exception as e:
            raise EncryptionError(f"Failed to initialize encryption: {e}") from e

    def _get_key(self) -> bytes:
        if self._key_cache:
            return self._key_cache

        try:
            import keyring

            key_b64 = keyring.get_password(self.service_name, self.key_id)
        except Exception as e:
            raise KeyNotFoundError(f"Failed to retrieve key: {e}") from e

        if not key_b64:
            raise KeyNotFoundError(
                f"Encryption key not found in keychain for service '{self.service_name}'"
            )
        self._key_cache = base64.b64decode(key_b64)
        return self._key_cache

    def encrypt(
        self, plaintext: Union[bytes, str], associated_data: Optional[bytes] = None
    ) -> EncryptedPayload:
        if isinstance(plaintext, str):
            plaintext = plaintext.encode("utf-8")

        if not self.enabled:
            return EncryptedPayload(
                ciphertext=plaintext,
                nonce=b"\x00" * NONCE_SIZE_BYTES,
                algorithm=PASSTHROUGH_ALGORITHM,
            )

        try:
            from cryptography.hazmat.primitives.ciphers.aead import AESGCM

            nonce = secrets.token_bytes(NONCE_SIZE_BYTES)
            ciphertext = AESGCM(self._get_key()).encrypt(nonce, plaintext, associated_data)
            return EncryptedPayload(ciphertext=ciphertext, nonce=nonce)
        except KeyNotFoundError:
            raise
        except Exception as e:
            raise EncryptionError(f"Encryption failed: {e}") from e

    def decrypt(
        self, payload: EncryptedPayload, associated_data: Optional[bytes] = None
    ) -> bytes:
        if not self.enabled:
            if payload.algorithm == PASSTHROUGH_ALGORITHM:
                return payload.ciphertext
            raise DecryptionError("Encrypted payload found while encryption is disabled")
        if payload.algorithm == PASSTHROUGH_ALGORITHM:
            raise DecryptionError("Unencrypted payload rejected while encryption is enabled")

        try:
            from cryptography.hazmat.primitives.ciphers.aead import AESGCM

            return AESGCM(self._get_key()).decrypt(
                payload.nonce, payload.ciphertext, associated_data
            )
        except KeyNotFoundError:
            raise
        except Exception as e:
            raise DecryptionError(f"Decryption failed: {e}") from e

    def encrypt_json(self, data: dict, associated_data: Optional[bytes] = None) -> str:
        """Encrypt a JSON-serializable dict into a JSON envelope string."""
        plaintext = json.dumps(data, separators=(",", ":"))
        return json.dumps(self.encrypt(plaintext, associated_data).to_dict())

    def decrypt_json(self, encrypted_json: str, associated_data: Optional[bytes] = None) -> dict:
        """Open an envelope produced by ``encrypt_json``.

        Raises:
            DecryptionError: Malformed envelope, wrong key or tampered data
        """
        try:
            payload = EncryptedPayload.from_dict(json.loads(encrypted_json))
        except (ValueError, KeyError, TypeError, binascii.Error) as e:
            raise DecryptionError(f"Malformed encrypted payload: {e}") from e

        plaintext = self.decrypt(payload, associated_data)
        try:
            return json.loads(plaintext.decode("utf-8"))
        except (UnicodeDecodeError, ValueError) as e:
            raise DecryptionError(f"Decrypted payload is not JSON: {e}") from e

    def is_initialized(self) -> bool:
        if not self.enabled:
            return True
        return self._key_cache is not None


__all__ = [
    "ALGORITHM",
    "DecryptionError",
    "EncryptedPayload",
    "EncryptionError",
    "EncryptionManager",
    "KeyNotFoundError",
]

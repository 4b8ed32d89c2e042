"""Tests for snapshot payload encryption."""

import base64
import json

import pytest

from cosmicpatterns.privacy.encryption import (
    DecryptionError,
    EncryptedPayload,
    EncryptionManager,
    KeyNotFoundError,
)


@pytest.fixture
def encryption_manager(mock_keyring):
    """Create encryption manager with mock keyring."""
    manager = EncryptionManager(service_name="test_cosmicpatterns")
    manager.initialize()
    return manager


@pytest.fixture
def disabled_manager():
    """Create disabled encryption manager."""
    return EncryptionManager(service_name="test_cosmicpatterns", enabled=False)


class TestEncryptedPayload:
    """Test EncryptedPayload data class."""

    def test_round_trip_dict(self):
        original = EncryptedPayload(ciphertext=b"encrypted_data", nonce=b"random_nonce")

        restored = EncryptedPayload.from_dict(original.to_dict())

        assert restored.ciphertext == original.ciphertext
        assert restored.nonce == original.nonce
        assert restored.algorithm == "AES-256-GCM"
        assert restored.created_at == original.created_at

    def test_created_at_defaults_to_now(self):
        payload = EncryptedPayload(ciphertext=b"x", nonce=b"y")
        assert payload.created_at is not None
        assert payload.created_at.tzinfo is not None


class TestInitialization:
    def test_generates_key_on_first_use(self, mock_keyring):
        manager = EncryptionManager(service_name="test_cosmicpatterns")
        assert not manager.is_initialized()

        manager.initialize()

        stored = mock_keyring.get_password("test_cosmicpatterns", "snapshot_encryption_key")
        assert stored is not None
        assert len(base64.b64decode(stored)) == 32
        assert manager.is_initialized()

    def test_reuses_existing_key(self, mock_keyring):
        first = EncryptionManager(service_name="test_cosmicpatterns")
        first.initialize()
        token = first.encrypt_json({"type": "life_themes"})

        second = EncryptionManager(service_name="test_cosmicpatterns")
        second.initialize()

        assert second.decrypt_json(token) == {"type": "life_themes"}

    def test_force_new_key_cannot_open_old_payloads(self, encryption_manager):
        token = encryption_manager.encrypt_json({"type": "archetype"})

        encryption_manager.initialize(force_new=True)

        with pytest.raises(DecryptionError):
            encryption_manager.decrypt_json(token)

    def test_missing_key_without_initialize(self, mock_keyring):
        manager = EncryptionManager(service_name="never_initialized")

        with pytest.raises(KeyNotFoundError):
            manager.encrypt_json({"a": 1})

    def test_disabled_manager_needs_no_key(self, disabled_manager):
        disabled_manager.initialize()
        assert disabled_manager.is_initialized()


class TestEncryptDecrypt:
    """Test AES-GCM round trips and failure modes."""

    def test_json_round_trip(self, encryption_manager):
        data = {"type": "tarot_season", "season": {"suit": "Cups"}, "percentages": [40.0, 35.5]}

        token = encryption_manager.encrypt_json(data)

        assert "Cups" not in token
        assert encryption_manager.decrypt_json(token) == data

    def test_nonce_is_fresh_per_payload(self, encryption_manager):
        first = json.loads(encryption_manager.encrypt_json({"a": 1}))
        second = json.loads(encryption_manager.encrypt_json({"a": 1}))

        assert first["nonce"] != second["nonce"]
        assert first["ciphertext"] != second["ciphertext"]

    def test_tampered_ciphertext(self, encryption_manager):
        envelope = json.loads(encryption_manager.encrypt_json({"a": 1}))
        raw = bytearray(base64.b64decode(envelope["ciphertext"]))
        raw[0] ^= 0xFF
        envelope["ciphertext"] = base64.b64encode(bytes(raw)).decode("ascii")

        with pytest.raises(DecryptionError):
            encryption_manager.decrypt_json(json.dumps(envelope))

    def test_associated_data_must_match(self, encryption_manager):
        token = encryption_manager.encrypt_json({"a": 1}, associated_data=b"user-1")

        assert encryption_manager.decrypt_json(token, associated_data=b"user-1") == {"a": 1}
        with pytest.raises(DecryptionError):
            encryption_manager.decrypt_json(token, associated_data=b"user-2")

    @pytest.mark.parametrize("envelope", ["not json", "{}", '{"ciphertext": "@@", "nonce": "@@"}'])
    def test_malformed_envelope(self, encryption_manager, envelope):
        with pytest.raises(DecryptionError):
            encryption_manager.decrypt_json(envelope)


class TestDisabledEncryption:
    def test_passthrough(self, disabled_manager):
        token = disabled_manager.encrypt_json({"type": "archetype"})

        envelope = json.loads(token)
        assert envelope["algorithm"] == "NONE"
        assert disabled_manager.decrypt_json(token) == {"type": "archetype"}

    def test_enabled_manager_rejects_passthrough_payloads(self, disabled_manager, encryption_manager):
        token = disabled_manager.encrypt_json({"type": "archetype"})

        with pytest.raises(DecryptionError):
            encryption_manager.decrypt_json(token)

    def test_encrypted_payload_while_disabled(self, encryption_manager, disabled_manager):
        token = encryption_manager.encrypt_json({"a": 1})

        with pytest.raises(DecryptionError):
            disabled_manager.decrypt_json(token)

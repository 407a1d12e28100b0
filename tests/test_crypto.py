"""
Tests for the secret encryption envelope.

Tests cover:
- Round-trip over empty, ASCII, multi-byte and large plaintexts
- Fresh iv per encryption
- Tamper detection on every bundle field
- Key sensitivity and deterministic derivation
- Secondary helpers (hash_value, generate_token)
"""
import base64

import pytest
from pydantic import ValidationError

from controle_tecnico.exceptions import IntegrityError
from controle_tecnico.vault import (
    CipherBundle,
    EncryptionKey,
    SecretCipher,
    derive_key,
    generate_token,
    hash_value,
)
from controle_tecnico.vault.crypto import IV_SIZE, KEY_LENGTH, TAG_SIZE


def _flip_bit(value: str, bit: int = 0) -> str:
    raw = bytearray(base64.b64decode(value))
    if bit < 0:
        bit += len(raw) * 8
    raw[bit // 8] ^= 1 << (bit % 8)
    return base64.b64encode(bytes(raw)).decode("ascii")


# --- Round trip ---

class TestRoundTrip:
    """decrypt(encrypt(P)) == P."""

    @pytest.mark.parametrize("plaintext", [
        "",
        "plain ascii value",
        "senha çãõ 密码 🔑",
    ])
    def test_round_trip(self, cipher, plaintext):
        """Test round trip for empty, ASCII and multi-byte strings."""
        assert cipher.decrypt(cipher.encrypt(plaintext)) == plaintext

    def test_round_trip_large_value(self, cipher):
        """Test a 10 MB plaintext survives the round trip."""
        plaintext = "k" * (10 * 1024 * 1024)
        assert cipher.decrypt(cipher.encrypt(plaintext)) == plaintext

    def test_known_api_key(self, cipher):
        """Test the reference value decrypts back exactly."""
        bundle = cipher.encrypt("super-secret-api-key-123")
        assert cipher.decrypt(bundle) == "super-secret-api-key-123"


# --- Bundle layout ---

class TestBundleLayout:
    """Tests for the shape of produced bundles."""

    def test_fields_are_base64(self, cipher):
        """Test every field decodes as base64 with the expected sizes."""
        bundle = cipher.encrypt("abc")
        assert len(base64.b64decode(bundle.iv)) == IV_SIZE
        assert len(base64.b64decode(bundle.auth_tag)) == TAG_SIZE
        assert len(base64.b64decode(bundle.ciphertext)) == 3

    def test_iv_is_fresh_per_call(self, cipher):
        """Test the same plaintext twice yields different iv and ciphertext."""
        first = cipher.encrypt("same value")
        second = cipher.encrypt("same value")
        assert first.iv != second.iv
        assert first.ciphertext != second.ciphertext

    def test_bundle_is_immutable(self, cipher):
        """Test bundles cannot be modified in place."""
        bundle = cipher.encrypt("value")
        with pytest.raises(ValidationError):
            bundle.iv = "AAAA"

    def test_record_mapping(self, cipher):
        """Test the persisted column layout round-trips."""
        bundle = cipher.encrypt("value")
        record = bundle.to_record()
        assert set(record) == {"encrypted_value", "iv", "auth_tag"}
        assert record["encrypted_value"] == bundle.ciphertext
        assert CipherBundle.from_record(record) == bundle


# --- Tamper detection ---

class TestTamperDetection:
    """Any alteration must fail with IntegrityError."""

    @pytest.mark.parametrize("field", ["ciphertext", "iv", "auth_tag"])
    @pytest.mark.parametrize("bit", [0, 5, 47, 90, -8, -1])
    def test_single_bit_flip(self, cipher, field, bit):
        """Test flipping any one bit of any field is detected."""
        bundle = cipher.encrypt("do not touch")
        tampered = bundle.model_copy(
            update={field: _flip_bit(getattr(bundle, field), bit=bit)}
        )
        with pytest.raises(IntegrityError):
            cipher.decrypt(tampered)

    def test_appended_character_in_tag(self, cipher):
        """Test appending one character to auth_tag is rejected."""
        bundle = cipher.encrypt("super-secret-api-key-123")
        tampered = bundle.model_copy(update={"auth_tag": bundle.auth_tag + "A"})
        with pytest.raises(IntegrityError):
            cipher.decrypt(tampered)

    def test_truncated_tag(self, cipher):
        """Test a shortened tag is rejected, not accepted as a short tag."""
        bundle = cipher.encrypt("value")
        raw = base64.b64decode(bundle.auth_tag)[:12]
        tampered = bundle.model_copy(
            update={"auth_tag": base64.b64encode(raw).decode("ascii")}
        )
        with pytest.raises(IntegrityError):
            cipher.decrypt(tampered)

    def test_garbage_base64(self, cipher):
        """Test non-base64 content is reported as an integrity failure."""
        bundle = cipher.encrypt("value")
        tampered = bundle.model_copy(update={"ciphertext": "%%%not-base64%%%"})
        with pytest.raises(IntegrityError):
            cipher.decrypt(tampered)

    def test_empty_iv(self, cipher):
        """Test an empty iv cannot be used for decryption."""
        bundle = cipher.encrypt("value")
        with pytest.raises(IntegrityError):
            cipher.decrypt(bundle.model_copy(update={"iv": ""}))


# --- Keys ---

class TestKeys:
    """Tests for key derivation and key sensitivity."""

    def test_derivation_is_deterministic(self, key, passphrase):
        """Test deriving twice gives bit-identical keys."""
        assert derive_key(passphrase).material == key.material
        assert len(key.material) == KEY_LENGTH

    def test_cross_instance_decryption(self, key, passphrase):
        """Test a bundle from one cipher decrypts with an independent one."""
        first = SecretCipher(key)
        second = SecretCipher(derive_key(passphrase))
        assert second.decrypt(first.encrypt("shared")) == "shared"

    def test_other_passphrase_cannot_decrypt(self, cipher):
        """Test a different passphrase fails with IntegrityError."""
        other = SecretCipher(derive_key("another-passphrase-of-32-characters!!"))
        bundle = cipher.encrypt("tenant secret")
        with pytest.raises(IntegrityError):
            other.decrypt(bundle)

    def test_key_repr_hides_material(self, key):
        """Test the key material does not leak through repr."""
        assert key.material.hex() not in repr(key)
        assert "material" not in repr(key)

    def test_key_length_enforced(self):
        """Test keys of the wrong size are refused."""
        with pytest.raises(ValidationError):
            EncryptionKey(material=b"x" * 16)


# --- Helpers ---

class TestHelpers:
    """Tests for hash_value and generate_token."""

    def test_hash_value(self):
        """Test SHA-256 hex digest of a known input."""
        assert hash_value("abc") == (
            "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"
        )

    def test_generate_token_default_length(self):
        """Test default token is 32 random bytes as hex."""
        token = generate_token()
        assert len(token) == 64
        int(token, 16)

    def test_generate_token_custom_length(self):
        """Test token length follows the requested byte count."""
        assert len(generate_token(8)) == 16

    def test_generate_token_is_random(self):
        """Test two tokens differ."""
        assert generate_token() != generate_token()

    def test_generate_token_rejects_zero(self):
        """Test non-positive lengths are refused."""
        with pytest.raises(ValueError):
            generate_token(0)

"""
Vault Crypto Core — Key derivation, secret encryption/decryption and helpers.

A single process-wide key is stretched from the configured passphrase with
scrypt and a fixed salt, then used for AES-256-GCM:

    passphrase --scrypt(salt="salt")--> EncryptionKey (32 bytes)
    plaintext --AES-256-GCM(key, iv 16B)--> CipherBundle(ciphertext, iv, auth_tag)

Every field of a CipherBundle is base64 encoded and stored verbatim; only
this module looks inside it.

Security Note:
    Never log plaintext, key material or bundle fields.
    The fixed salt keeps ciphertexts written by earlier deployments readable;
    do not change it without re-encrypting every stored secret.
"""
import os
import base64
import binascii
import hashlib
import logging
from typing import Any

from pydantic import BaseModel, Field, field_validator
from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.kdf.scrypt import Scrypt
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from ..exceptions import IntegrityError

logger = logging.getLogger("controle.vault")

KEY_LENGTH = 32  # AES-256
IV_SIZE = 16
TAG_SIZE = 16

SCRYPT_SALT = b"salt"
SCRYPT_N = 2 ** 14
SCRYPT_R = 8
SCRYPT_P = 1


# ---------------------------------------------------------------------------
# Value objects
# ---------------------------------------------------------------------------

class EncryptionKey(BaseModel):
    """32-byte AES key derived from the configured passphrase."""

    material: bytes = Field(repr=False)

    model_config = {"frozen": True}

    @field_validator("material")
    @classmethod
    def validate_length(cls, v: bytes) -> bytes:
        if len(v) != KEY_LENGTH:
            raise ValueError(
                f"Encryption key must be exactly {KEY_LENGTH} bytes, got {len(v)}"
            )
        return v


class CipherBundle(BaseModel):
    """One encrypted value: base64 ciphertext, iv and authentication tag."""

    ciphertext: str
    iv: str
    auth_tag: str

    model_config = {"frozen": True}

    def to_record(self) -> dict[str, str]:
        """Return the persisted column layout of this bundle."""
        return {
            "encrypted_value": self.ciphertext,
            "iv": self.iv,
            "auth_tag": self.auth_tag,
        }

    @classmethod
    def from_record(cls, record: Any) -> "CipherBundle":
        """Build a bundle from a stored secret row (mapping with the columns)."""
        return cls(
            ciphertext=record["encrypted_value"],
            iv=record["iv"],
            auth_tag=record["auth_tag"],
        )


# ---------------------------------------------------------------------------
# Key derivation
# ---------------------------------------------------------------------------

def derive_key(passphrase: str) -> EncryptionKey:
    """Stretch a passphrase into a 32-byte key using scrypt and the fixed salt.

    Deterministic: the same passphrase always yields the same key, so stored
    bundles stay decryptable across restarts.

    Args:
        passphrase: Configured secret string.

    Returns:
        The derived EncryptionKey.
    """
    kdf = Scrypt(
        salt=SCRYPT_SALT,
        length=KEY_LENGTH,
        n=SCRYPT_N,
        r=SCRYPT_R,
        p=SCRYPT_P,
    )
    return EncryptionKey(material=kdf.derive(passphrase.encode("utf-8")))


# ---------------------------------------------------------------------------
# Encryption
# ---------------------------------------------------------------------------

def _b64encode(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def _b64decode(value: str, field: str) -> bytes:
    try:
        return base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError, TypeError) as err:
        raise IntegrityError(f"Malformed {field} in cipher bundle") from err


class SecretCipher:
    """AES-256-GCM encrypter/decrypter bound to one EncryptionKey.

    The key is injected at construction; instances hold no other state and
    are safe to share between concurrent requests.
    """

    def __init__(self, key: EncryptionKey):
        self._aead = AESGCM(key.material)

    def encrypt(self, plaintext: str) -> CipherBundle:
        """Encrypt a UTF-8 string under a fresh random 16-byte iv.

        Args:
            plaintext: Value to protect, any length.

        Returns:
            A new CipherBundle; two calls never share an iv.
        """
        iv = os.urandom(IV_SIZE)
        sealed = self._aead.encrypt(iv, plaintext.encode("utf-8"), None)
        return CipherBundle(
            ciphertext=_b64encode(sealed[:-TAG_SIZE]),
            iv=_b64encode(iv),
            auth_tag=_b64encode(sealed[-TAG_SIZE:]),
        )

    def decrypt(self, bundle: CipherBundle) -> str:
        """Verify and decrypt a CipherBundle.

        Args:
            bundle: Bundle previously produced by ``encrypt``.

        Returns:
            The original plaintext.

        Raises:
            IntegrityError: The bundle is malformed, was altered, or was
                produced under a different key.
        """
        ciphertext = _b64decode(bundle.ciphertext, "ciphertext")
        iv = _b64decode(bundle.iv, "iv")
        tag = _b64decode(bundle.auth_tag, "auth_tag")
        if len(tag) != TAG_SIZE:
            raise IntegrityError(
                f"auth_tag must be {TAG_SIZE} bytes, got {len(tag)}"
            )
        try:
            data = self._aead.decrypt(iv, ciphertext + tag, None)
        except (InvalidTag, ValueError) as err:
            raise IntegrityError(
                "Secret cannot be decrypted with the configured key"
            ) from err
        return data.decode("utf-8")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def hash_value(value: str) -> str:
    """SHA-256 hex fingerprint of a string. Not a password hash."""
    return hashlib.sha256(value.encode("utf-8")).hexdigest()


def generate_token(length: int = 32) -> str:
    """Return ``length`` random bytes as a hex string."""
    if length < 1:
        raise ValueError("Token length must be positive")
    return os.urandom(length).hex()

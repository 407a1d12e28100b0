"""Vault — Encryption of secret values at rest.

Security Note (Threat Model):
    A single key, stretched from ENCRYPTION_KEY with a fixed salt, protects
    every stored secret. Anyone holding the passphrase and the database can
    recover all values; there is no rotation or per-tenant key.
    ``SecretStore`` lives in ``vault.secret_store`` and is imported from there.
"""

from .crypto import (
    CipherBundle,
    EncryptionKey,
    SecretCipher,
    derive_key,
    generate_token,
    hash_value,
)
from .config import VaultConfig, load_passphrase, generate_passphrase

__all__ = [
    "CipherBundle",
    "EncryptionKey",
    "SecretCipher",
    "derive_key",
    "generate_token",
    "hash_value",
    "VaultConfig",
    "load_passphrase",
    "generate_passphrase",
]

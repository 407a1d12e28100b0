"""
Vault Configuration — Passphrase loading and validated settings.

Reads the encryption passphrase from the environment:
    ENCRYPTION_KEY = <string, at least 32 characters>

Security Note:
    Never log the passphrase or the derived key.
"""
import os
import secrets
import logging

from pydantic import BaseModel, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from ..exceptions import ConfigurationError
from .crypto import EncryptionKey, SecretCipher, derive_key

logger = logging.getLogger("controle.vault")

MIN_PASSPHRASE_LENGTH = 32

DEFAULT_DEV_PASSPHRASE = "default-dev-key-change-in-production-32"


def load_passphrase() -> str:
    """Read the encryption passphrase from ENCRYPTION_KEY.

    Falls back to the development passphrase when the variable is unset,
    logging a warning so it does not go unnoticed in production.

    Returns:
        The configured passphrase string.
    """
    value = os.environ.get("ENCRYPTION_KEY")
    if value is None:
        logger.warning(
            "ENCRYPTION_KEY not set, using the development passphrase"
        )
        return DEFAULT_DEV_PASSPHRASE
    return value


def generate_passphrase() -> str:
    """Generate a random passphrase suitable for ENCRYPTION_KEY.

    This is a utility for operators provisioning a new deployment.

    Returns:
        A URL-safe random string of 64 characters.
    """
    return secrets.token_urlsafe(48)


class VaultConfig(BaseModel):
    """Validated vault configuration."""

    passphrase: str = Field(repr=False)

    model_config = {"frozen": True}

    @field_validator("passphrase")
    @classmethod
    def validate_passphrase(cls, v: str) -> str:
        """Enforce the minimum passphrase length."""
        if len(v) < MIN_PASSPHRASE_LENGTH:
            raise ValueError(
                f"ENCRYPTION_KEY deve ter pelo menos {MIN_PASSPHRASE_LENGTH} caracteres"
            )
        return v

    @classmethod
    def from_env(cls) -> "VaultConfig":
        """Create VaultConfig from the environment.

        Raises:
            ConfigurationError: If the passphrase is too short.
        """
        try:
            return cls(passphrase=load_passphrase())
        except PydanticValidationError as err:
            problems = [e["msg"] for e in err.errors()]
            raise ConfigurationError(
                "Invalid vault configuration", errors=problems
            ) from err

    def derive_key(self) -> EncryptionKey:
        """Derive the process-wide EncryptionKey from the passphrase."""
        key = derive_key(self.passphrase)
        logger.debug("Encryption key derived")
        return key

    def cipher(self) -> SecretCipher:
        """Build a SecretCipher bound to the derived key."""
        return SecretCipher(self.derive_key())

"""
Application Configuration — validated settings read from the environment.

Variables:
    PORT            HTTP port (default 3333)
    APP_NAME        service name (default controle-app-v2)
    JWT_SECRET      token signing secret, at least 32 characters
    JWT_EXPIRES_IN  token lifetime: seconds, or a number with an s/m/h/d
                    suffix such as 8h (default 8 hours)
    CORS_ORIGIN     allowed browser origin (default http://localhost:5173)
    DATABASE_URL    Postgres DSN; in-memory storage is used when unset
    ENCRYPTION_KEY  secret encryption passphrase (see vault.config)
    LOG_LEVEL       logging level name (default INFO)

Security Note:
    Never log JWT_SECRET, ENCRYPTION_KEY or the DATABASE_URL password.
"""
import os
import re
import logging
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from .exceptions import ConfigurationError
from .vault.config import VaultConfig, load_passphrase

logger = logging.getLogger("controle.config")

MIN_JWT_SECRET_LENGTH = 32

_DURATION = re.compile(r"^\s*(\d+)\s*([smhd]?)\s*$")
_DURATION_UNITS = {"": 1, "s": 1, "m": 60, "h": 3600, "d": 86400}


def parse_duration(value: Any) -> Any:
    """Convert "90", "15m", "8h" or "1d" into seconds.

    Anything else is returned unchanged for field validation to reject.
    """
    if not isinstance(value, str):
        return value
    match = _DURATION.match(value.lower())
    if match is None:
        return value
    amount, unit = match.groups()
    return int(amount) * _DURATION_UNITS[unit]


class AppConfig(BaseModel):
    """Validated service configuration."""

    port: int = Field(default=3333, ge=1, le=65535)
    app_name: str = "controle-app-v2"
    jwt_secret: str = Field(repr=False)
    jwt_expires_in: int = Field(default=8 * 3600, ge=60)
    cors_origin: str = "http://localhost:5173"
    database_url: Optional[str] = Field(default=None, repr=False)
    log_level: str = "INFO"
    vault: VaultConfig

    model_config = {"frozen": True}

    @field_validator("jwt_secret")
    @classmethod
    def validate_jwt_secret(cls, v: str) -> str:
        if len(v) < MIN_JWT_SECRET_LENGTH:
            raise ValueError(
                f"JWT_SECRET deve ter pelo menos {MIN_JWT_SECRET_LENGTH} caracteres"
            )
        return v

    @field_validator("jwt_expires_in", mode="before")
    @classmethod
    def validate_jwt_expires_in(cls, v: Any) -> Any:
        return parse_duration(v)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level: {v}")
        return level

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Create AppConfig from environment variables.

        Raises:
            ConfigurationError: Listing every invalid or missing variable.
        """
        env = os.environ
        values = {
            "jwt_secret": env.get("JWT_SECRET", ""),
            "vault": {"passphrase": load_passphrase()},
        }
        optional = {
            "port": "PORT",
            "app_name": "APP_NAME",
            "jwt_expires_in": "JWT_EXPIRES_IN",
            "cors_origin": "CORS_ORIGIN",
            "database_url": "DATABASE_URL",
            "log_level": "LOG_LEVEL",
        }
        for field, name in optional.items():
            if env.get(name):
                values[field] = env[name]
        try:
            return cls.model_validate(values)
        except PydanticValidationError as err:
            problems = [
                f"{'.'.join(str(p) for p in e['loc'])}: {e['msg']}"
                for e in err.errors()
            ]
            raise ConfigurationError(
                "Invalid environment configuration", errors=problems
            ) from err

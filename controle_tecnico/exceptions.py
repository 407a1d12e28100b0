"""Exceptions raised by Controle Técnico.

Two families live here:

- ``AppError`` and subclasses carry an HTTP status and an error code, and are
  rendered by the API error middleware into the JSON error envelope.
- ``VaultError`` and subclasses are raised by the secret encryption layer,
  which knows nothing about HTTP.
"""
from typing import Any, Optional


class AppError(Exception):
    """Base class for errors that map onto an HTTP response."""

    status: int = 500
    code: str = "INTERNAL_ERROR"

    def __init__(
        self,
        message: str = "Erro interno do servidor",
        details: Optional[dict[str, Any]] = None,
        status: Optional[int] = None,
        code: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.details = details
        if status is not None:
            self.status = status
        if code is not None:
            self.code = code

    def to_dict(self) -> dict[str, Any]:
        error: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details:
            error["details"] = self.details
        return error


class UnauthorizedError(AppError):
    status = 401
    code = "UNAUTHORIZED"

    def __init__(self, message: str = "Não autenticado"):
        super().__init__(message)


class ForbiddenError(AppError):
    status = 403
    code = "FORBIDDEN"

    def __init__(self, message: str = "Sem permissão"):
        super().__init__(message)


class ValidationError(AppError):
    status = 400
    code = "VALIDATION_ERROR"

    def __init__(
        self,
        message: str = "Dados inválidos",
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message, details=details)


class NotFoundError(AppError):
    status = 404
    code = "NOT_FOUND"

    def __init__(self, resource: str = "Recurso"):
        super().__init__(f"{resource} não encontrado")
        self.resource = resource


class VaultError(Exception):
    """Base class for errors raised by the secret encryption layer."""


class IntegrityError(VaultError):
    """A cipher bundle failed authentication.

    Raised when the tag does not match, a field is malformed, or the bundle
    was produced under a different key. Never retried.
    """


class ConfigurationError(VaultError):
    """Startup configuration is invalid. Fatal, the process must exit."""

    def __init__(self, message: str, errors: Optional[list[str]] = None):
        super().__init__(message)
        self.errors = errors or []

"""
Storage capability interface.

Handlers and the secret store talk to persistence only through ``Storage``.
Implementations are chosen once at startup (see ``storage.create_storage``),
never by branching inside each operation.

Conventions shared by every implementation:
- ``create_*`` receives snake_case field values and returns the new record
  with ``id`` and timestamps assigned.
- ``get_*`` and ``update_*`` return ``None`` when the id does not exist.
- ``delete_*`` returns ``True`` when a record was removed.
"""
from abc import ABC, abstractmethod
from typing import Any, Optional

from ..models import App, AuditLog, Domain, Hosting, SecretRecord, User


class Storage(ABC):
    """Typed record operations over the Controle Técnico tables."""

    async def open(self) -> None:
        """Acquire backend resources. No-op by default."""

    async def close(self) -> None:
        """Release backend resources. No-op by default."""

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    @abstractmethod
    async def find_user_by_email(self, email: str) -> Optional[User]:
        ...

    @abstractmethod
    async def list_users(self) -> list[User]:
        ...

    # ------------------------------------------------------------------
    # Apps
    # ------------------------------------------------------------------

    @abstractmethod
    async def list_apps(self, search: Optional[str] = None) -> list[App]:
        """Newest first; ``search`` matches name or commercial name."""

    @abstractmethod
    async def get_app(self, app_id: str) -> Optional[App]:
        ...

    @abstractmethod
    async def create_app(self, data: dict[str, Any]) -> App:
        ...

    @abstractmethod
    async def update_app(self, app_id: str, changes: dict[str, Any]) -> Optional[App]:
        ...

    @abstractmethod
    async def delete_app(self, app_id: str) -> bool:
        """Remove an app together with its hostings, domains and secrets."""

    # ------------------------------------------------------------------
    # Hostings
    # ------------------------------------------------------------------

    @abstractmethod
    async def list_hostings(self, app_id: str) -> list[Hosting]:
        ...

    @abstractmethod
    async def get_hosting(self, hosting_id: str) -> Optional[Hosting]:
        ...

    @abstractmethod
    async def create_hosting(self, data: dict[str, Any]) -> Hosting:
        ...

    @abstractmethod
    async def update_hosting(
        self, hosting_id: str, changes: dict[str, Any]
    ) -> Optional[Hosting]:
        ...

    @abstractmethod
    async def delete_hosting(self, hosting_id: str) -> bool:
        ...

    # ------------------------------------------------------------------
    # Domains
    # ------------------------------------------------------------------

    @abstractmethod
    async def list_domains(self, app_id: str) -> list[Domain]:
        ...

    @abstractmethod
    async def get_domain(self, domain_id: str) -> Optional[Domain]:
        ...

    @abstractmethod
    async def create_domain(self, data: dict[str, Any]) -> Domain:
        ...

    @abstractmethod
    async def update_domain(
        self, domain_id: str, changes: dict[str, Any]
    ) -> Optional[Domain]:
        ...

    @abstractmethod
    async def delete_domain(self, domain_id: str) -> bool:
        ...

    # ------------------------------------------------------------------
    # Secrets
    # ------------------------------------------------------------------

    @abstractmethod
    async def list_secrets(self, app_id: str) -> list[SecretRecord]:
        """Secret metadata only; bundle columns are left empty."""

    @abstractmethod
    async def get_secret(self, secret_id: str) -> Optional[SecretRecord]:
        """Full secret row, bundle columns included."""

    @abstractmethod
    async def create_secret(self, data: dict[str, Any]) -> SecretRecord:
        ...

    @abstractmethod
    async def update_secret(
        self, secret_id: str, changes: dict[str, Any]
    ) -> Optional[SecretRecord]:
        ...

    @abstractmethod
    async def delete_secret(self, secret_id: str) -> bool:
        ...

    # ------------------------------------------------------------------
    # Audit
    # ------------------------------------------------------------------

    @abstractmethod
    async def create_audit_log(self, entry: AuditLog) -> None:
        ...

    @abstractmethod
    async def list_audit_logs(self, limit: int = 100) -> list[AuditLog]:
        """Newest first."""

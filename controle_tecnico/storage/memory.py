"""In-memory storage, used for development and tests.

Seeded with the three default accounts (admin, editor, viewer) unless an
explicit user list is given. Nothing survives a restart.
"""
import uuid
import logging
from typing import Any, Iterable, Optional, TypeVar

from pydantic import BaseModel

from ..models import (
    App,
    AuditLog,
    Domain,
    Hosting,
    SecretRecord,
    User,
    utcnow,
)
from .base import Storage

logger = logging.getLogger("controle.storage")

R = TypeVar("R", bound=BaseModel)


def default_users() -> list[User]:
    """Development accounts available when no database is configured."""
    return [
        User(
            id="1", email="admin@controle.app", name="Administrador",
            role="admin", password="admin123",
        ),
        User(
            id="2", email="editor@controle.app", name="Editor",
            role="editor", password="editor123",
        ),
        User(
            id="3", email="viewer@controle.app", name="Visualizador",
            role="viewer", password="viewer123",
        ),
    ]


def _newest_first(records: Iterable[R]) -> list[R]:
    # tables are insertion ordered
    return list(records)[::-1]


class MemoryStorage(Storage):
    """Dict-backed Storage."""

    def __init__(self, users: Optional[Iterable[User]] = None):
        seed = default_users() if users is None else list(users)
        self._users: dict[str, User] = {u.id: u for u in seed}
        self._apps: dict[str, App] = {}
        self._hostings: dict[str, Hosting] = {}
        self._domains: dict[str, Domain] = {}
        self._secrets: dict[str, SecretRecord] = {}
        self._audit: list[AuditLog] = []
        logger.debug("Memory storage seeded with %d user(s)", len(self._users))

    # ------------------------------------------------------------------
    # Generic helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _insert(table: dict[str, R], model: type[R], data: dict[str, Any]) -> R:
        now = utcnow()
        record = model(
            **{**data, "id": str(uuid.uuid4()), "created_at": now, "updated_at": now}
        )
        table[record.id] = record
        return record

    @staticmethod
    def _update(
        table: dict[str, R], record_id: str, changes: dict[str, Any]
    ) -> Optional[R]:
        current = table.get(record_id)
        if current is None:
            return None
        updated = current.model_copy(update={**changes, "updated_at": utcnow()})
        table[record_id] = updated
        return updated

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    async def find_user_by_email(self, email: str) -> Optional[User]:
        for user in self._users.values():
            if user.email == email:
                return user
        return None

    async def list_users(self) -> list[User]:
        return list(self._users.values())

    # ------------------------------------------------------------------
    # Apps
    # ------------------------------------------------------------------

    async def list_apps(self, search: Optional[str] = None) -> list[App]:
        apps = self._apps.values()
        if search:
            needle = search.lower()
            apps = [
                a for a in apps
                if needle in a.name.lower() or needle in a.commercial_name.lower()
            ]
        return _newest_first(apps)

    async def get_app(self, app_id: str) -> Optional[App]:
        return self._apps.get(app_id)

    async def create_app(self, data: dict[str, Any]) -> App:
        return self._insert(self._apps, App, data)

    async def update_app(self, app_id: str, changes: dict[str, Any]) -> Optional[App]:
        return self._update(self._apps, app_id, changes)

    async def delete_app(self, app_id: str) -> bool:
        if self._apps.pop(app_id, None) is None:
            return False
        for table in (self._hostings, self._domains, self._secrets):
            for rid in [r.id for r in table.values() if r.app_id == app_id]:
                del table[rid]
        return True

    # ------------------------------------------------------------------
    # Hostings
    # ------------------------------------------------------------------

    async def list_hostings(self, app_id: str) -> list[Hosting]:
        return _newest_first(
            h for h in self._hostings.values() if h.app_id == app_id
        )

    async def get_hosting(self, hosting_id: str) -> Optional[Hosting]:
        return self._hostings.get(hosting_id)

    async def create_hosting(self, data: dict[str, Any]) -> Hosting:
        return self._insert(self._hostings, Hosting, data)

    async def update_hosting(
        self, hosting_id: str, changes: dict[str, Any]
    ) -> Optional[Hosting]:
        return self._update(self._hostings, hosting_id, changes)

    async def delete_hosting(self, hosting_id: str) -> bool:
        return self._hostings.pop(hosting_id, None) is not None

    # ------------------------------------------------------------------
    # Domains
    # ------------------------------------------------------------------

    async def list_domains(self, app_id: str) -> list[Domain]:
        return _newest_first(
            d for d in self._domains.values() if d.app_id == app_id
        )

    async def get_domain(self, domain_id: str) -> Optional[Domain]:
        return self._domains.get(domain_id)

    async def create_domain(self, data: dict[str, Any]) -> Domain:
        return self._insert(self._domains, Domain, data)

    async def update_domain(
        self, domain_id: str, changes: dict[str, Any]
    ) -> Optional[Domain]:
        return self._update(self._domains, domain_id, changes)

    async def delete_domain(self, domain_id: str) -> bool:
        return self._domains.pop(domain_id, None) is not None

    # ------------------------------------------------------------------
    # Secrets
    # ------------------------------------------------------------------

    async def list_secrets(self, app_id: str) -> list[SecretRecord]:
        return _newest_first(
            s.model_copy(update={"encrypted_value": "", "iv": "", "auth_tag": ""})
            for s in self._secrets.values()
            if s.app_id == app_id
        )

    async def get_secret(self, secret_id: str) -> Optional[SecretRecord]:
        return self._secrets.get(secret_id)

    async def create_secret(self, data: dict[str, Any]) -> SecretRecord:
        return self._insert(self._secrets, SecretRecord, data)

    async def update_secret(
        self, secret_id: str, changes: dict[str, Any]
    ) -> Optional[SecretRecord]:
        return self._update(self._secrets, secret_id, changes)

    async def delete_secret(self, secret_id: str) -> bool:
        return self._secrets.pop(secret_id, None) is not None

    # ------------------------------------------------------------------
    # Audit
    # ------------------------------------------------------------------

    async def create_audit_log(self, entry: AuditLog) -> None:
        self._audit.append(entry.model_copy(update={"id": str(uuid.uuid4())}))

    async def list_audit_logs(self, limit: int = 100) -> list[AuditLog]:
        return _newest_first(self._audit)[:limit]

"""
Postgres storage backed by an asyncpg connection pool.

Tables (managed outside this service):
    profiles, apps, hostings, domains, secrets, audit_logs

Primary keys are UUIDs generated by the database. ``jsonb`` columns are
exchanged as Python objects through an orjson codec registered on every
pooled connection. IP addresses come back as text whether the
column is text or inet, and expiry dates as ISO timestamps.

Security Note:
    Never log row contents; secret rows carry cipher bundle columns.
"""
import uuid
import logging
import ipaddress
from datetime import date, datetime
from typing import Any, Optional, TypeVar

import asyncpg
import orjson
from pydantic import BaseModel

from ..models import App, AuditLog, Domain, Hosting, SecretRecord, User
from .base import Storage

logger = logging.getLogger("controle.storage")

R = TypeVar("R", bound=BaseModel)

# Writable columns per table; anything else in a payload is ignored.
_COLUMNS: dict[str, tuple[str, ...]] = {
    "apps": (
        "name", "commercial_name", "description", "status", "tags",
        "repository_url", "documentation_url", "created_by", "updated_by",
    ),
    "hostings": (
        "app_id", "provider", "ip_address", "server_type", "region",
        "server_name", "ssh_port", "notes", "is_active",
    ),
    "domains": (
        "app_id", "domain_name", "registrar", "status", "expires_at",
        "auto_renew", "dns_provider", "ssl_status",
    ),
    "secrets": (
        "app_id", "secret_type", "label", "encrypted_value", "iv", "auth_tag",
        "metadata", "expires_at", "created_by",
    ),
}

_TIMESTAMP_INPUTS = frozenset({"expires_at"})
_INET_TYPES = (
    ipaddress.IPv4Address, ipaddress.IPv6Address,
    ipaddress.IPv4Interface, ipaddress.IPv6Interface,
)

# ---------------------------------------------------------------------------
# SQL statements
# ---------------------------------------------------------------------------

_SELECT_USER_BY_EMAIL = """
SELECT id, email, name, role, avatar_url, password, created_at, updated_at
FROM profiles
WHERE email = $1
"""

_SELECT_USERS = """
SELECT id, email, name, role, avatar_url, created_at, updated_at
FROM profiles
ORDER BY created_at DESC
"""

_SELECT_APPS = """
SELECT * FROM apps
ORDER BY created_at DESC
"""

_SEARCH_APPS = """
SELECT * FROM apps
WHERE name ILIKE $1 OR commercial_name ILIKE $1
ORDER BY created_at DESC
"""

_SELECT_SECRET_METADATA = """
SELECT id, app_id, secret_type, label, metadata, expires_at, created_by,
       created_at, updated_at
FROM secrets
WHERE app_id = $1
ORDER BY created_at DESC
"""

_INSERT_AUDIT = """
INSERT INTO audit_logs (user_id, user_email, action, resource_type, resource_id,
                        old_data, new_data, ip_address, user_agent)
VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9)
"""

_SELECT_AUDIT = """
SELECT * FROM audit_logs
ORDER BY created_at DESC
LIMIT $1
"""


def _as_uuid(value: str) -> Optional[uuid.UUID]:
    try:
        return uuid.UUID(str(value))
    except ValueError:
        return None


def _from_row(row: Any) -> dict[str, Any]:
    """Convert an asyncpg Record into model-ready values."""
    result: dict[str, Any] = {}
    for key, value in dict(row).items():
        if isinstance(value, (uuid.UUID, *_INET_TYPES)):
            value = str(value)
        elif key in _TIMESTAMP_INPUTS and isinstance(value, (date, datetime)):
            value = value.isoformat()
        result[key] = value
    return result


def _to_param(column: str, value: Any) -> Any:
    if column in _TIMESTAMP_INPUTS and isinstance(value, str) and value:
        return datetime.fromisoformat(value)
    if value == "" and column in _TIMESTAMP_INPUTS:
        return None
    return value


async def _init_connection(conn: Any) -> None:
    await conn.set_type_codec(
        "jsonb",
        encoder=lambda v: orjson.dumps(v).decode("utf-8"),
        decoder=orjson.loads,
        schema="pg_catalog",
    )


class PostgresStorage(Storage):
    """Storage over a Postgres database.

    Either pass ``dsn`` and let ``open()`` create the pool, or inject an
    existing asyncpg-compatible ``pool``.
    """

    def __init__(
        self,
        dsn: Optional[str] = None,
        pool: Any = None,
        min_size: int = 1,
        max_size: int = 10,
    ):
        if dsn is None and pool is None:
            raise ValueError("PostgresStorage needs a dsn or a pool")
        self._dsn = dsn
        self._pool = pool
        self._owns_pool = pool is None
        self._min_size = min_size
        self._max_size = max_size

    async def open(self) -> None:
        if self._pool is None:
            logger.info("Creating Postgres connection pool")
            self._pool = await asyncpg.create_pool(
                dsn=self._dsn,
                min_size=self._min_size,
                max_size=self._max_size,
                init=_init_connection,
            )

    async def close(self) -> None:
        if self._pool is not None and self._owns_pool:
            await self._pool.close()
            self._pool = None
            logger.info("Postgres connection pool closed")

    # ------------------------------------------------------------------
    # Generic helpers
    # ------------------------------------------------------------------

    async def _fetch(self, model: type[R], sql: str, *args: Any) -> list[R]:
        async with self._pool.acquire() as conn:
            rows = await conn.fetch(sql, *args)
        return [model.model_validate(_from_row(r)) for r in rows]

    async def _fetchrow(self, model: type[R], sql: str, *args: Any) -> Optional[R]:
        async with self._pool.acquire() as conn:
            row = await conn.fetchrow(sql, *args)
        if row is None:
            return None
        return model.model_validate(_from_row(row))

    async def _get(self, table: str, model: type[R], record_id: str) -> Optional[R]:
        key = _as_uuid(record_id)
        if key is None:
            return None
        return await self._fetchrow(
            model, f"SELECT * FROM {table} WHERE id = $1", key,
        )

    async def _list_by_app(self, table: str, model: type[R], app_id: str) -> list[R]:
        key = _as_uuid(app_id)
        if key is None:
            return []
        return await self._fetch(
            model,
            f"SELECT * FROM {table} WHERE app_id = $1 ORDER BY created_at DESC",
            key,
        )

    async def _insert(self, table: str, model: type[R], data: dict[str, Any]) -> R:
        cols = [c for c in _COLUMNS[table] if c in data]
        placeholders = ", ".join(f"${i}" for i in range(1, len(cols) + 1))
        sql = (
            f"INSERT INTO {table} ({', '.join(cols)}) "
            f"VALUES ({placeholders}) RETURNING *"
        )
        record = await self._fetchrow(
            model, sql, *[_to_param(c, data[c]) for c in cols],
        )
        logger.debug("Inserted %s id=%s", table, record.id)
        return record

    async def _update(
        self, table: str, model: type[R], record_id: str, changes: dict[str, Any]
    ) -> Optional[R]:
        key = _as_uuid(record_id)
        if key is None:
            return None
        cols = [c for c in _COLUMNS[table] if c in changes]
        assignments = [f"{c} = ${i}" for i, c in enumerate(cols, start=2)]
        assignments.append("updated_at = NOW()")
        sql = (
            f"UPDATE {table} SET {', '.join(assignments)} "
            f"WHERE id = $1 RETURNING *"
        )
        return await self._fetchrow(
            model, sql, key, *[_to_param(c, changes[c]) for c in cols],
        )

    async def _delete(self, table: str, record_id: str) -> bool:
        key = _as_uuid(record_id)
        if key is None:
            return False
        async with self._pool.acquire() as conn:
            status = await conn.execute(f"DELETE FROM {table} WHERE id = $1", key)
        return status != "DELETE 0"

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    @staticmethod
    def _user(row: Any) -> User:
        data = _from_row(row)
        data["avatar"] = data.pop("avatar_url", None)
        data["password"] = data.get("password") or ""
        return User.model_validate(data)

    async def find_user_by_email(self, email: str) -> Optional[User]:
        async with self._pool.acquire() as conn:
            row = await conn.fetchrow(_SELECT_USER_BY_EMAIL, email)
        return self._user(row) if row is not None else None

    async def list_users(self) -> list[User]:
        async with self._pool.acquire() as conn:
            rows = await conn.fetch(_SELECT_USERS)
        return [self._user(r) for r in rows]

    # ------------------------------------------------------------------
    # Apps
    # ------------------------------------------------------------------

    async def list_apps(self, search: Optional[str] = None) -> list[App]:
        if search:
            return await self._fetch(App, _SEARCH_APPS, f"%{search}%")
        return await self._fetch(App, _SELECT_APPS)

    async def get_app(self, app_id: str) -> Optional[App]:
        return await self._get("apps", App, app_id)

    async def create_app(self, data: dict[str, Any]) -> App:
        return await self._insert("apps", App, data)

    async def update_app(self, app_id: str, changes: dict[str, Any]) -> Optional[App]:
        return await self._update("apps", App, app_id, changes)

    async def delete_app(self, app_id: str) -> bool:
        # child rows go through ON DELETE CASCADE
        return await self._delete("apps", app_id)

    # ------------------------------------------------------------------
    # Hostings
    # ------------------------------------------------------------------

    async def list_hostings(self, app_id: str) -> list[Hosting]:
        return await self._list_by_app("hostings", Hosting, app_id)

    async def get_hosting(self, hosting_id: str) -> Optional[Hosting]:
        return await self._get("hostings", Hosting, hosting_id)

    async def create_hosting(self, data: dict[str, Any]) -> Hosting:
        return await self._insert("hostings", Hosting, data)

    async def update_hosting(
        self, hosting_id: str, changes: dict[str, Any]
    ) -> Optional[Hosting]:
        return await self._update("hostings", Hosting, hosting_id, changes)

    async def delete_hosting(self, hosting_id: str) -> bool:
        return await self._delete("hostings", hosting_id)

    # ------------------------------------------------------------------
    # Domains
    # ------------------------------------------------------------------

    async def list_domains(self, app_id: str) -> list[Domain]:
        return await self._list_by_app("domains", Domain, app_id)

    async def get_domain(self, domain_id: str) -> Optional[Domain]:
        return await self._get("domains", Domain, domain_id)

    async def create_domain(self, data: dict[str, Any]) -> Domain:
        return await self._insert("domains", Domain, data)

    async def update_domain(
        self, domain_id: str, changes: dict[str, Any]
    ) -> Optional[Domain]:
        return await self._update("domains", Domain, domain_id, changes)

    async def delete_domain(self, domain_id: str) -> bool:
        return await self._delete("domains", domain_id)

    # ------------------------------------------------------------------
    # Secrets
    # ------------------------------------------------------------------

    async def list_secrets(self, app_id: str) -> list[SecretRecord]:
        key = _as_uuid(app_id)
        if key is None:
            return []
        return await self._fetch(SecretRecord, _SELECT_SECRET_METADATA, key)

    async def get_secret(self, secret_id: str) -> Optional[SecretRecord]:
        return await self._get("secrets", SecretRecord, secret_id)

    async def create_secret(self, data: dict[str, Any]) -> SecretRecord:
        return await self._insert("secrets", SecretRecord, data)

    async def update_secret(
        self, secret_id: str, changes: dict[str, Any]
    ) -> Optional[SecretRecord]:
        return await self._update("secrets", SecretRecord, secret_id, changes)

    async def delete_secret(self, secret_id: str) -> bool:
        return await self._delete("secrets", secret_id)

    # ------------------------------------------------------------------
    # Audit
    # ------------------------------------------------------------------

    async def create_audit_log(self, entry: AuditLog) -> None:
        async with self._pool.acquire() as conn:
            await conn.execute(
                _INSERT_AUDIT,
                _as_uuid(entry.user_id) if entry.user_id else None,
                entry.user_email,
                entry.action,
                entry.resource_type,
                _as_uuid(entry.resource_id) if entry.resource_id else None,
                entry.old_data,
                entry.new_data,
                entry.ip_address,
                entry.user_agent,
            )

    async def list_audit_logs(self, limit: int = 100) -> list[AuditLog]:
        return await self._fetch(AuditLog, _SELECT_AUDIT, limit)

"""
Tests for PostgresStorage against an injected fake pool.

The fake records every statement so tests can check the SQL shape and the
parameter conversion without a database.
"""
import uuid
import ipaddress
from contextlib import asynccontextmanager
from datetime import datetime, timezone

import pytest

from controle_tecnico.models import AuditLog
from controle_tecnico.storage.postgres import PostgresStorage

APP_ID = uuid.UUID("7d3c1c52-8f1b-4f5e-9a4b-0c8a1c7e2f10")
NOW = datetime(2024, 1, 1, tzinfo=timezone.utc)


class FakeConnection:
    def __init__(self, rows=None, status="DELETE 1"):
        self.rows = rows or []
        self.status = status
        self.calls = []

    async def fetch(self, sql, *args):
        self.calls.append((sql, args))
        return self.rows

    async def fetchrow(self, sql, *args):
        self.calls.append((sql, args))
        return self.rows[0] if self.rows else None

    async def execute(self, sql, *args):
        self.calls.append((sql, args))
        return self.status


class FakePool:
    def __init__(self, conn):
        self.conn = conn
        self.closed = False

    @asynccontextmanager
    async def acquire(self):
        yield self.conn

    async def close(self):
        self.closed = True


def _app_row(**extra):
    return {
        "id": APP_ID, "name": "crm", "commercial_name": "CRM",
        "description": None, "status": "active", "tags": [],
        "repository_url": None, "documentation_url": None,
        "created_by": None, "updated_by": None,
        "created_at": NOW, "updated_at": NOW, **extra,
    }


@pytest.fixture
def conn():
    return FakeConnection()


@pytest.fixture
def pg(conn):
    return PostgresStorage(pool=FakePool(conn))


# --- Reads ---

class TestReads:
    """Tests for select paths."""

    async def test_get_app_converts_uuid(self, conn, pg):
        """Test UUID columns come back as strings."""
        conn.rows = [_app_row()]
        app = await pg.get_app(str(APP_ID))
        assert app.id == str(APP_ID)
        sql, args = conn.calls[0]
        assert "FROM apps WHERE id = $1" in sql
        assert args == (APP_ID,)

    async def test_invalid_id_skips_query(self, conn, pg):
        """Test a non-UUID id returns None without touching the database."""
        assert await pg.get_app("not-a-uuid") is None
        assert await pg.list_hostings("not-a-uuid") == []
        assert await pg.delete_domain("not-a-uuid") is False
        assert conn.calls == []

    async def test_search_uses_ilike(self, conn, pg):
        """Test search wraps the term for ILIKE."""
        await pg.list_apps("crm")
        sql, args = conn.calls[0]
        assert "ILIKE" in sql
        assert args == ("%crm%",)

    async def test_user_avatar_mapping(self, conn, pg):
        """Test avatar_url maps onto User.avatar."""
        conn.rows = [{
            "id": uuid.uuid4(), "email": "a@b.co", "name": "A",
            "role": "editor", "avatar_url": "https://x/a.png",
            "password": None, "created_at": NOW, "updated_at": NOW,
        }]
        user = await pg.find_user_by_email("a@b.co")
        assert user.avatar == "https://x/a.png"
        assert user.password == ""

    async def test_inet_column_as_text(self, conn, pg):
        """Test inet values are returned as plain strings."""
        conn.rows = [{
            "id": uuid.uuid4(), "app_id": APP_ID, "provider": "aws",
            "ip_address": ipaddress.ip_address("10.0.0.1"),
            "server_type": "cloud", "region": None, "server_name": None,
            "ssh_port": 22, "notes": None, "is_active": True,
            "created_at": NOW, "updated_at": NOW,
        }]
        [hosting] = await pg.list_hostings(str(APP_ID))
        assert hosting.ip_address == "10.0.0.1"
        assert hosting.app_id == str(APP_ID)

    async def test_secret_listing_selects_metadata_only(self, conn, pg):
        """Test the listing query never selects bundle columns."""
        await pg.list_secrets(str(APP_ID))
        sql, _ = conn.calls[0]
        assert "encrypted_value" not in sql
        assert "auth_tag" not in sql


# --- Writes ---

class TestWrites:
    """Tests for insert, update and delete paths."""

    async def test_insert_filters_columns(self, conn, pg):
        """Test only writable columns reach the INSERT."""
        conn.rows = [_app_row()]
        await pg.create_app({
            "name": "crm", "commercial_name": "CRM", "id": "ignored",
        })
        sql, args = conn.calls[0]
        assert sql.startswith("INSERT INTO apps (name, commercial_name)")
        assert "RETURNING *" in sql
        assert args == ("crm", "CRM")

    async def test_update_sets_timestamp(self, conn, pg):
        """Test UPDATE assigns the changes and updated_at."""
        conn.rows = [_app_row(status="archived")]
        app = await pg.update_app(str(APP_ID), {"status": "archived"})
        assert app.status == "archived"
        sql, args = conn.calls[0]
        assert "status = $2" in sql
        assert "updated_at = NOW()" in sql
        assert args == (APP_ID, "archived")

    async def test_domain_expiry_conversion(self, conn, pg):
        """Test expires_at strings are sent as datetimes and read back as ISO."""
        expires = datetime(2030, 5, 1, tzinfo=timezone.utc)
        conn.rows = [{
            "id": uuid.uuid4(), "app_id": APP_ID, "domain_name": "x.com",
            "registrar": "r", "status": "active", "expires_at": expires,
            "auto_renew": False, "dns_provider": None, "ssl_status": "none",
            "created_at": NOW, "updated_at": NOW,
        }]
        domain = await pg.create_domain({
            "app_id": str(APP_ID), "domain_name": "x.com", "registrar": "r",
            "expires_at": expires.isoformat(),
        })
        _, args = conn.calls[0]
        assert args[-1] == expires
        assert domain.expires_at == expires.isoformat()

    async def test_delete_status(self, conn, pg):
        """Test DELETE 0 means nothing was removed."""
        assert await pg.delete_app(str(APP_ID)) is True
        conn.status = "DELETE 0"
        assert await pg.delete_app(str(APP_ID)) is False

    async def test_audit_insert(self, conn, pg):
        """Test audit entries are inserted with UUID conversion."""
        await pg.create_audit_log(AuditLog(
            user_id=str(APP_ID), action="view", resource_type="secret",
            resource_id="not-a-uuid",
        ))
        sql, args = conn.calls[0]
        assert sql.strip().startswith("INSERT INTO audit_logs")
        assert args[0] == APP_ID
        assert args[2] == "view"
        assert args[4] is None


# --- Pool lifecycle ---

class TestLifecycle:
    """Injected pools belong to the caller."""

    async def test_injected_pool_not_closed(self, conn):
        pool = FakePool(conn)
        storage = PostgresStorage(pool=pool)
        await storage.open()
        await storage.close()
        assert pool.closed is False


class TestValidatedDates:
    """Dates accepted by the payload models convert cleanly for Postgres."""

    @pytest.mark.parametrize("value", ["2025-12-31", "2025-12-31T23:59:00Z"])
    async def test_accepted_formats(self, conn, pg, value):
        from controle_tecnico.models import DomainInput

        data = DomainInput.model_validate({
            "appId": str(APP_ID), "domainName": "x.com",
            "registrar": "r", "expiresAt": value,
        }).model_dump(mode="json")
        conn.rows = [{
            "id": uuid.uuid4(), "app_id": APP_ID, "domain_name": "x.com",
            "registrar": "r", "status": "active", "expires_at": NOW,
            "auto_renew": False, "dns_provider": None, "ssl_status": "active",
            "created_at": NOW, "updated_at": NOW,
        }]
        await pg.create_domain(data)
        _, args = conn.calls[0]
        assert isinstance(args[4], datetime)

"""Shared fixtures for Controle Técnico tests."""
import pytest

from controle_tecnico.app import create_app
from controle_tecnico.conf import AppConfig
from controle_tecnico.storage import MemoryStorage
from controle_tecnico.vault import SecretCipher, VaultConfig, derive_key

PASSPHRASE = "test-passphrase-with-at-least-32-characters"
JWT_SECRET = "test-jwt-secret-with-at-least-32-characters"


@pytest.fixture(scope="session")
def passphrase():
    return PASSPHRASE


@pytest.fixture(scope="session")
def key(passphrase):
    """Derived once per session; scrypt is deliberately slow."""
    return derive_key(passphrase)


@pytest.fixture
def cipher(key):
    return SecretCipher(key)


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def config():
    return AppConfig(
        jwt_secret=JWT_SECRET,
        vault=VaultConfig(passphrase=PASSPHRASE),
    )


@pytest.fixture
def app(config, storage):
    return create_app(config, storage=storage)


@pytest.fixture
async def client(aiohttp_client, app):
    return await aiohttp_client(app)


async def _login(client, email: str, password: str) -> dict:
    resp = await client.post(
        "/api/auth/login", json={"email": email, "password": password},
    )
    assert resp.status == 200
    body = await resp.json()
    return {"Authorization": f"Bearer {body['data']['token']}"}


@pytest.fixture
async def admin_headers(client):
    return await _login(client, "admin@controle.app", "admin123")


@pytest.fixture
async def editor_headers(client):
    return await _login(client, "editor@controle.app", "editor123")


@pytest.fixture
async def viewer_headers(client):
    return await _login(client, "viewer@controle.app", "viewer123")


@pytest.fixture
async def app_id(client, editor_headers):
    """Id of an application created through the API."""
    resp = await client.post(
        "/api/apps",
        json={"name": "billing", "commercialName": "Billing Suite"},
        headers=editor_headers,
    )
    assert resp.status == 201
    body = await resp.json()
    return body["data"]["app"]["id"]

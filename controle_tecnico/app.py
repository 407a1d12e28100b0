"""
Application factory.

Wires configuration, storage, the secret cipher and the route tables into an
aiohttp application. The encryption key is derived here, once, before the
application accepts requests.
"""
import logging
from typing import Optional

import aiohttp_cors
from aiohttp import web

from .auth import TOKENS, TokenAuthority
from .conf import AppConfig
from .handlers import ROUTE_TABLES
from .keys import CONFIG, SECRETS, STORAGE
from .middleware import add_security_headers, error_middleware
from .storage import Storage, create_storage
from .vault.secret_store import SecretStore

logger = logging.getLogger("controle.api")

# request bodies up to 10 MiB (large certificates and key files)
CLIENT_MAX_SIZE = 10 * 1024 * 1024


async def _open_storage(app: web.Application) -> None:
    await app[STORAGE].open()


async def _close_storage(app: web.Application) -> None:
    await app[STORAGE].close()


def _setup_cors(app: web.Application, origin: str) -> None:
    cors = aiohttp_cors.setup(app, defaults={
        origin: aiohttp_cors.ResourceOptions(
            allow_credentials=True,
            expose_headers="*",
            allow_headers="*",
            allow_methods="*",
        ),
    })
    for route in list(app.router.routes()):
        cors.add(route)


def create_app(
    config: AppConfig, storage: Optional[Storage] = None
) -> web.Application:
    """Build the Controle Técnico web application.

    Args:
        config: Validated configuration.
        storage: Storage backend; chosen from ``config.database_url``
            when omitted.

    Returns:
        The configured aiohttp application.
    """
    if storage is None:
        storage = create_storage(config.database_url)

    app = web.Application(
        middlewares=[error_middleware],
        client_max_size=CLIENT_MAX_SIZE,
    )
    app[CONFIG] = config
    app[STORAGE] = storage
    app[SECRETS] = SecretStore(storage, config.vault.cipher())
    app[TOKENS] = TokenAuthority(config.jwt_secret, config.jwt_expires_in)

    for table in ROUTE_TABLES:
        app.router.add_routes(table)
    _setup_cors(app, config.cors_origin)

    app.on_startup.append(_open_storage)
    app.on_cleanup.append(_close_storage)
    app.on_response_prepare.append(add_security_headers)

    logger.info(
        "%s configured with %s storage",
        config.app_name, type(storage).__name__,
    )
    return app

"""Typed keys for objects shared through the aiohttp application."""
from aiohttp import web

from .conf import AppConfig
from .storage import Storage
from .vault.secret_store import SecretStore

CONFIG = web.AppKey("config", AppConfig)
STORAGE = web.AppKey("storage", Storage)
SECRETS = web.AppKey("secrets", SecretStore)

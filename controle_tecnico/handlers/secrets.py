"""Secrets: metadata listing, encrypted create/update, admin-only reveal.

Plaintext values only travel inbound on create/update and outbound on
reveal; every other response carries metadata alone.
"""
from aiohttp import web

from ..auth import login_required, role_required
from ..exceptions import NotFoundError
from ..models import SecretInput, SecretUpdate
from .base import (
    audit_context,
    match_id,
    ok,
    parse_body,
    require_query,
    secret_store,
    storage_of,
)

routes = web.RouteTableDef()


@routes.get("/api/secrets")
@login_required
async def list_secrets(request: web.Request) -> web.Response:
    app_id = require_query(request, "appId")
    secrets = await secret_store(request).list_for_app(app_id)
    return ok({"secrets": [s.dump() for s in secrets]})


@routes.get("/api/secrets/{id}/reveal")
@role_required("admin")
async def reveal_secret(request: web.Request) -> web.Response:
    value = await secret_store(request).reveal(
        match_id(request), audit_context(request),
    )
    if value is None:
        raise NotFoundError("Secret")
    return ok({"value": value})


@routes.post("/api/secrets")
@role_required("admin", "editor")
async def create_secret(request: web.Request) -> web.Response:
    data = await parse_body(request, SecretInput)
    if await storage_of(request).get_app(str(data.app_id)) is None:
        raise NotFoundError("App")
    secret = await secret_store(request).create(data, audit_context(request))
    return ok({"secret": secret.dump()}, status=201)


@routes.put("/api/secrets/{id}")
@role_required("admin", "editor")
async def update_secret(request: web.Request) -> web.Response:
    data = await parse_body(request, SecretUpdate)
    secret = await secret_store(request).update_value(
        match_id(request), data.plain_value, audit_context(request),
    )
    if secret is None:
        raise NotFoundError("Secret")
    return ok({"secret": secret.dump()})


@routes.delete("/api/secrets/{id}")
@role_required("admin")
async def delete_secret(request: web.Request) -> web.Response:
    deleted = await secret_store(request).delete(
        match_id(request), audit_context(request),
    )
    if not deleted:
        raise NotFoundError("Secret")
    return ok({"message": "Segredo deletado com sucesso"})

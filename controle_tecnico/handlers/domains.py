"""Domains registered for an application."""
from aiohttp import web

from ..audit import record_audit
from ..auth import login_required, role_required
from ..exceptions import NotFoundError
from ..models import DomainInput, DomainUpdate
from .base import (
    audit_context,
    match_id,
    ok,
    parse_body,
    require_query,
    storage_of,
)

routes = web.RouteTableDef()


@routes.get("/api/domains")
@login_required
async def list_domains(request: web.Request) -> web.Response:
    app_id = require_query(request, "appId")
    domains = await storage_of(request).list_domains(app_id)
    return ok({"domains": [d.dump() for d in domains]})


@routes.post("/api/domains")
@role_required("admin", "editor")
async def create_domain(request: web.Request) -> web.Response:
    data = await parse_body(request, DomainInput)
    storage = storage_of(request)
    if await storage.get_app(str(data.app_id)) is None:
        raise NotFoundError("App")
    domain = await storage.create_domain(data.model_dump(mode="json"))
    await record_audit(
        storage,
        audit_context(request).entry(
            "create", "domain", domain.id, new_data=domain.dump(),
        ),
    )
    return ok({"domain": domain.dump()}, status=201)


@routes.put("/api/domains/{id}")
@role_required("admin", "editor")
async def update_domain(request: web.Request) -> web.Response:
    data = await parse_body(request, DomainUpdate)
    domain_id = match_id(request)
    storage = storage_of(request)
    existing = await storage.get_domain(domain_id)
    if existing is None:
        raise NotFoundError("Domain")
    domain = await storage.update_domain(
        domain_id, data.model_dump(mode="json", exclude_unset=True),
    )
    if domain is None:
        raise NotFoundError("Domain")
    await record_audit(
        storage,
        audit_context(request).entry(
            "update", "domain", domain_id,
            old_data=existing.dump(), new_data=domain.dump(),
        ),
    )
    return ok({"domain": domain.dump()})


@routes.delete("/api/domains/{id}")
@role_required("admin")
async def delete_domain(request: web.Request) -> web.Response:
    domain_id = match_id(request)
    storage = storage_of(request)
    existing = await storage.get_domain(domain_id)
    if existing is None:
        raise NotFoundError("Domain")
    await storage.delete_domain(domain_id)
    await record_audit(
        storage,
        audit_context(request).entry(
            "delete", "domain", domain_id, old_data=existing.dump(),
        ),
    )
    return ok({"message": "Dominio deletado com sucesso"})

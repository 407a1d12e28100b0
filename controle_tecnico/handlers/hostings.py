"""Hosting providers attached to an application."""
from aiohttp import web

from ..audit import record_audit
from ..auth import login_required, role_required
from ..exceptions import NotFoundError
from ..models import HostingInput, HostingUpdate
from .base import (
    audit_context,
    match_id,
    ok,
    parse_body,
    require_query,
    storage_of,
)

routes = web.RouteTableDef()


@routes.get("/api/hostings")
@login_required
async def list_hostings(request: web.Request) -> web.Response:
    app_id = require_query(request, "appId")
    hostings = await storage_of(request).list_hostings(app_id)
    return ok({"hostings": [h.dump() for h in hostings]})


@routes.post("/api/hostings")
@role_required("admin", "editor")
async def create_hosting(request: web.Request) -> web.Response:
    data = await parse_body(request, HostingInput)
    storage = storage_of(request)
    if await storage.get_app(str(data.app_id)) is None:
        raise NotFoundError("App")
    hosting = await storage.create_hosting(data.model_dump(mode="json"))
    await record_audit(
        storage,
        audit_context(request).entry(
            "create", "hosting", hosting.id, new_data=hosting.dump(),
        ),
    )
    return ok({"hosting": hosting.dump()}, status=201)


@routes.put("/api/hostings/{id}")
@role_required("admin", "editor")
async def update_hosting(request: web.Request) -> web.Response:
    data = await parse_body(request, HostingUpdate)
    hosting_id = match_id(request)
    storage = storage_of(request)
    existing = await storage.get_hosting(hosting_id)
    if existing is None:
        raise NotFoundError("Hosting")
    hosting = await storage.update_hosting(
        hosting_id, data.model_dump(mode="json", exclude_unset=True),
    )
    if hosting is None:
        raise NotFoundError("Hosting")
    await record_audit(
        storage,
        audit_context(request).entry(
            "update", "hosting", hosting_id,
            old_data=existing.dump(), new_data=hosting.dump(),
        ),
    )
    return ok({"hosting": hosting.dump()})


@routes.delete("/api/hostings/{id}")
@role_required("admin")
async def delete_hosting(request: web.Request) -> web.Response:
    hosting_id = match_id(request)
    storage = storage_of(request)
    existing = await storage.get_hosting(hosting_id)
    if existing is None:
        raise NotFoundError("Hosting")
    await storage.delete_hosting(hosting_id)
    await record_audit(
        storage,
        audit_context(request).entry(
            "delete", "hosting", hosting_id, old_data=existing.dump(),
        ),
    )
    return ok({"message": "Hosting deletado com sucesso"})

"""Applications: list, detail, create, update, delete."""
import logging

from aiohttp import web

from ..audit import record_audit
from ..auth import login_required, role_required
from ..exceptions import NotFoundError
from ..models import AppInput, AppUpdate
from .base import audit_context, match_id, ok, parse_body, storage_of

logger = logging.getLogger("controle.api")

routes = web.RouteTableDef()


@routes.get("/api/apps")
@login_required
async def list_apps(request: web.Request) -> web.Response:
    search = request.query.get("search") or None
    apps = await storage_of(request).list_apps(search)
    return ok({"apps": [a.dump() for a in apps]})


@routes.get("/api/apps/{id}")
@login_required
async def get_app(request: web.Request) -> web.Response:
    app = await storage_of(request).get_app(match_id(request))
    if app is None:
        raise NotFoundError("App")
    return ok({"app": app.dump()})


@routes.post("/api/apps")
@role_required("admin", "editor")
async def create_app(request: web.Request) -> web.Response:
    data = await parse_body(request, AppInput)
    storage = storage_of(request)
    ctx = audit_context(request)
    app = await storage.create_app(
        {**data.model_dump(mode="json"), "created_by": ctx.user_id}
    )
    await record_audit(
        storage, ctx.entry("create", "app", app.id, new_data=app.dump()),
    )
    logger.info("App created: id=%s by=%s", app.id, ctx.user_email)
    return ok({"app": app.dump()}, status=201)


@routes.put("/api/apps/{id}")
@role_required("admin", "editor")
async def update_app(request: web.Request) -> web.Response:
    data = await parse_body(request, AppUpdate)
    app_id = match_id(request)
    storage = storage_of(request)
    existing = await storage.get_app(app_id)
    if existing is None:
        raise NotFoundError("App")
    ctx = audit_context(request)
    app = await storage.update_app(
        app_id,
        {**data.model_dump(mode="json", exclude_unset=True), "updated_by": ctx.user_id},
    )
    if app is None:
        raise NotFoundError("App")
    await record_audit(
        storage,
        ctx.entry(
            "update", "app", app_id,
            old_data=existing.dump(), new_data=app.dump(),
        ),
    )
    return ok({"app": app.dump()})


@routes.delete("/api/apps/{id}")
@role_required("admin")
async def delete_app(request: web.Request) -> web.Response:
    app_id = match_id(request)
    storage = storage_of(request)
    existing = await storage.get_app(app_id)
    if existing is None:
        raise NotFoundError("App")
    await storage.delete_app(app_id)
    ctx = audit_context(request)
    await record_audit(
        storage, ctx.entry("delete", "app", app_id, old_data=existing.dump()),
    )
    logger.info("App deleted: id=%s by=%s", app_id, ctx.user_email)
    return ok({"message": "App deletado com sucesso"})

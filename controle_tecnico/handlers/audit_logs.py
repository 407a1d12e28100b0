"""Read access to the audit trail (admins only)."""
from aiohttp import web

from ..auth import role_required
from .base import ok, optional_int, storage_of

MAX_LIMIT = 1000

routes = web.RouteTableDef()


@routes.get("/api/audit-logs")
@role_required("admin")
async def list_audit_logs(request: web.Request) -> web.Response:
    limit = optional_int(request.query.get("limit"), 100)
    limit = max(1, min(limit, MAX_LIMIT))
    logs = await storage_of(request).list_audit_logs(limit)
    return ok({"logs": [entry.dump() for entry in logs]})

"""Liveness probe."""
from datetime import datetime, timezone

from aiohttp import web

from ..keys import CONFIG
from ..version import __version__
from .base import ok

routes = web.RouteTableDef()


@routes.get("/api/health")
async def health(request: web.Request) -> web.Response:
    return ok({
        "status": "healthy",
        "service": request.app[CONFIG].app_name,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": __version__,
    })

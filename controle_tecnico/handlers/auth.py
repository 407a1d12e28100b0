"""Login and current-user endpoints."""
import logging

from aiohttp import web

from ..auth import TOKENS, TokenPayload, check_password, login_required
from ..exceptions import ValidationError
from ..models import LoginInput
from .base import ok, parse_body, storage_of

logger = logging.getLogger("controle.api")

routes = web.RouteTableDef()


@routes.post("/api/auth/login")
async def login(request: web.Request) -> web.Response:
    data = await parse_body(request, LoginInput)
    user = await storage_of(request).find_user_by_email(data.email)
    if user is None or not check_password(user, data.password):
        logger.info("Failed login for %s", data.email)
        raise ValidationError("Email ou senha incorretos")
    token = request.app[TOKENS].generate(
        TokenPayload(user_id=user.id, email=user.email, role=user.role)
    )
    logger.info("User logged in: %s", user.email)
    return ok({
        "token": token,
        "user": user.dump(include={"id", "email", "name", "role"}),
    })


@routes.get("/api/auth/me")
@login_required
async def me(request: web.Request) -> web.Response:
    return ok({"user": request["user"].dump()})


@routes.get("/api/auth/users")
@login_required
async def list_users(request: web.Request) -> web.Response:
    users = await storage_of(request).list_users()
    return ok({"users": [u.dump() for u in users]})

"""
Authentication — signed bearer tokens and role gates for handlers.

Tokens are HS256 JWTs carrying ``userId``, ``email`` and ``role``. Every
protected request re-reads the user from storage by email, so a removed
account stops working even while its token is still valid.

Security Note:
    Never log tokens or passwords; the Authorization header is logged only
    as present/absent.
"""
import hmac
import time
import logging
from functools import wraps
from typing import Any, Awaitable, Callable, Optional

import jwt
from aiohttp import web
from pydantic import BaseModel, ConfigDict, Field

from .exceptions import ForbiddenError, UnauthorizedError
from .keys import STORAGE
from .models import Role, User

logger = logging.getLogger("controle.auth")

ALGORITHM = "HS256"

Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]


class TokenPayload(BaseModel):
    user_id: str = Field(alias="userId")
    email: str
    role: Role

    model_config = ConfigDict(populate_by_name=True)


class TokenAuthority:
    """Issues and verifies bearer tokens with one shared secret."""

    def __init__(self, secret: str, expires_in: int):
        self._secret = secret
        self._expires_in = expires_in

    def generate(self, payload: TokenPayload) -> str:
        now = int(time.time())
        claims = {
            **payload.model_dump(by_alias=True),
            "iat": now,
            "exp": now + self._expires_in,
        }
        return jwt.encode(claims, self._secret, algorithm=ALGORITHM)

    def verify(self, token: str) -> Optional[TokenPayload]:
        """Decode a token; None when it is invalid or expired."""
        try:
            claims = jwt.decode(token, self._secret, algorithms=[ALGORITHM])
        except jwt.PyJWTError as err:
            logger.debug("Token rejected: %s", err)
            return None
        try:
            return TokenPayload.model_validate(claims)
        except ValueError:
            return None


TOKENS = web.AppKey("tokens", TokenAuthority)


def check_password(user: User, password: str) -> bool:
    """Compare a login password with the stored one in constant time."""
    if not user.password:
        return False
    return hmac.compare_digest(
        user.password.encode("utf-8"), password.encode("utf-8"),
    )


async def authenticate(request: web.Request) -> User:
    """Resolve the bearer token of a request into its User.

    Raises:
        UnauthorizedError: Missing header, invalid token or unknown user.
    """
    header = request.headers.get("Authorization", "")
    if not header.startswith("Bearer "):
        logger.debug("Request without bearer token: %s", request.path)
        raise UnauthorizedError()
    payload = request.app[TOKENS].verify(header[7:])
    if payload is None:
        raise UnauthorizedError("Token inválido ou expirado")
    user = await request.app[STORAGE].find_user_by_email(payload.email)
    if user is None:
        raise UnauthorizedError("Usuário não encontrado")
    return user


def login_required(handler: Handler) -> Handler:
    """Handler decorator: any authenticated user may pass."""

    @wraps(handler)
    async def wrapper(request: web.Request) -> Any:
        request["user"] = await authenticate(request)
        return await handler(request)

    return wrapper


def role_required(*roles: Role) -> Callable[[Handler], Handler]:
    """Handler decorator: authenticated user whose role is in ``roles``."""

    def decorator(handler: Handler) -> Handler:
        @wraps(handler)
        async def wrapper(request: web.Request) -> Any:
            user = await authenticate(request)
            if user.role not in roles:
                logger.info(
                    "Access denied: user=%s role=%s path=%s",
                    user.email, user.role, request.path,
                )
                raise ForbiddenError()
            request["user"] = user
            return await handler(request)

        return wrapper

    return decorator

"""Shared pieces for the REST handlers: app keys, envelopes, payload parsing."""
from typing import Any, Optional, TypeVar

import orjson
from aiohttp import web
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from ..audit import AuditContext
from ..exceptions import ValidationError
from ..keys import SECRETS, STORAGE
from ..storage import Storage
from ..vault.secret_store import SecretStore

M = TypeVar("M", bound=BaseModel)


def dumps(obj: Any) -> str:
    return orjson.dumps(obj).decode("utf-8")


def ok(data: dict[str, Any], status: int = 200) -> web.Response:
    """Success envelope: ``{"success": true, "data": ...}``."""
    return web.json_response(
        {"success": True, "data": data}, status=status, dumps=dumps,
    )


def fail(error: dict[str, Any], status: int) -> web.Response:
    """Error envelope: ``{"success": false, "error": ...}``."""
    return web.json_response(
        {"success": False, "error": error}, status=status, dumps=dumps,
    )


def field_errors(err: PydanticValidationError) -> dict[str, list[str]]:
    """Group pydantic errors by top-level field (camelCase as sent)."""
    details: dict[str, list[str]] = {}
    for e in err.errors():
        field = str(e["loc"][0]) if e["loc"] else "_"
        details.setdefault(field, []).append(e["msg"])
    return details


async def parse_body(request: web.Request, model: type[M]) -> M:
    """Read the JSON body and validate it against ``model``.

    Raises:
        ValidationError: Body is not JSON or does not match the model.
    """
    try:
        payload = await request.json(loads=orjson.loads)
    except ValueError as err:
        raise ValidationError("JSON inválido") from err
    try:
        return model.model_validate(payload)
    except PydanticValidationError as err:
        raise ValidationError(details=field_errors(err)) from err


def require_query(request: web.Request, name: str) -> str:
    value = request.query.get(name)
    if not value:
        raise ValidationError(f"{name} obrigatorio")
    return value


def audit_context(request: web.Request) -> AuditContext:
    """Audit identity for the authenticated user of this request."""
    user = request.get("user")
    return AuditContext(
        user_id=user.id if user else None,
        user_email=user.email if user else None,
        ip_address=request.remote,
        user_agent=request.headers.get("User-Agent"),
    )


def match_id(request: web.Request) -> str:
    return request.match_info["id"]


def storage_of(request: web.Request) -> Storage:
    return request.app[STORAGE]


def secret_store(request: web.Request) -> SecretStore:
    return request.app[SECRETS]


def optional_int(value: Optional[str], default: int) -> int:
    if value is None or value == "":
        return default
    try:
        return int(value)
    except ValueError as err:
        raise ValidationError(f"Número inválido: {value}") from err

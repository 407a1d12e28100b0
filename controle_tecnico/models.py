"""Data models for Controle Técnico records and request payloads.

Records use snake_case attributes in Python and camelCase keys on the wire.
Secret records carry their cipher bundle columns, but those columns are
excluded from every serialization so they never reach an API response.
"""
from datetime import datetime, timezone
from typing import Annotated, Any, Literal, Optional
from uuid import UUID

from pydantic import (
    AnyUrl,
    BaseModel,
    ConfigDict,
    Field,
    IPvAnyAddress,
    AfterValidator,
    field_validator,
    TypeAdapter,
)
from pydantic.alias_generators import to_camel

from .vault.crypto import CipherBundle

Role = Literal["admin", "editor", "viewer"]
AppStatus = Literal["active", "inactive", "archived"]
ServerType = Literal["vps", "dedicated", "shared", "cloud", "serverless"]
DomainStatus = Literal["active", "expired", "pending", "suspended"]
SslStatus = Literal["active", "expiring", "expired", "none"]
SecretType = Literal[
    "api_key", "ssh_key", "password", "token", "certificate", "other"
]
AuditAction = Literal["create", "update", "delete", "view"]

_url_adapter = TypeAdapter(AnyUrl)
_ip_adapter = TypeAdapter(IPvAnyAddress)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CamelModel(BaseModel):
    """Base model: camelCase aliases, population by field name allowed."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def dump(self, **kwargs: Any) -> dict[str, Any]:
        """JSON-ready dict with camelCase keys."""
        return self.model_dump(by_alias=True, mode="json", **kwargs)


def _url_or_empty(v: Optional[str]) -> Optional[str]:
    if v is None or v == "":
        return v
    try:
        _url_adapter.validate_python(v)
    except ValueError as err:
        raise ValueError("URL inválida") from err
    return v


def _ip_or_empty(v: Optional[str]) -> Optional[str]:
    if v is None or v == "":
        return v
    try:
        _ip_adapter.validate_python(v)
    except ValueError as err:
        raise ValueError("Endereço IP inválido") from err
    return v


def _datetime_or_empty(v: Optional[str]) -> Optional[str]:
    if v is None or v == "":
        return v
    try:
        datetime.fromisoformat(v)
    except ValueError as err:
        raise ValueError("Data inválida, use o formato ISO 8601") from err
    return v


def _not_null(v: Any) -> Any:
    # partial updates may omit a field but never clear a required column
    if v is None:
        raise ValueError("Campo não pode ser nulo")
    return v


UrlOrEmpty = Annotated[Optional[str], AfterValidator(_url_or_empty)]
IpOrEmpty = Annotated[Optional[str], AfterValidator(_ip_or_empty)]
DateOrEmpty = Annotated[Optional[str], AfterValidator(_datetime_or_empty)]


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------

class User(CamelModel):
    id: str
    email: str
    name: str
    role: Role = "viewer"
    avatar: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    # compared on login only, never serialized
    password: str = Field(default="", exclude=True, repr=False)


class LoginInput(CamelModel):
    email: str = Field(pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    password: str = Field(min_length=1)


# ---------------------------------------------------------------------------
# Apps
# ---------------------------------------------------------------------------

class AppInput(CamelModel):
    name: str = Field(min_length=1)
    commercial_name: str = Field(min_length=1)
    description: Optional[str] = None
    status: AppStatus = "active"
    tags: list[str] = Field(default_factory=list)
    repository_url: UrlOrEmpty = None
    documentation_url: UrlOrEmpty = None


class AppUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1)
    commercial_name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    status: Optional[AppStatus] = None
    tags: Optional[list[str]] = None
    repository_url: UrlOrEmpty = None
    documentation_url: UrlOrEmpty = None

    @field_validator("name", "commercial_name", "status", "tags", mode="before")
    @classmethod
    def reject_null(cls, v: Any) -> Any:
        return _not_null(v)


class App(AppInput):
    id: str
    created_by: Optional[str] = None
    updated_by: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


# ---------------------------------------------------------------------------
# Hostings
# ---------------------------------------------------------------------------

class HostingInput(CamelModel):
    app_id: UUID
    provider: str = Field(min_length=1)
    ip_address: IpOrEmpty = None
    server_type: ServerType
    region: Optional[str] = None
    server_name: Optional[str] = None
    ssh_port: int = 22
    notes: Optional[str] = None
    is_active: bool = True


class HostingUpdate(CamelModel):
    provider: Optional[str] = Field(default=None, min_length=1)
    ip_address: IpOrEmpty = None
    server_type: Optional[ServerType] = None
    region: Optional[str] = None
    server_name: Optional[str] = None
    ssh_port: Optional[int] = None
    notes: Optional[str] = None
    is_active: Optional[bool] = None

    @field_validator(
        "provider", "server_type", "ssh_port", "is_active", mode="before",
    )
    @classmethod
    def reject_null(cls, v: Any) -> Any:
        return _not_null(v)


class Hosting(CamelModel):
    id: str
    app_id: str
    provider: str
    ip_address: Optional[str] = None
    server_type: ServerType
    region: Optional[str] = None
    server_name: Optional[str] = None
    ssh_port: int = 22
    notes: Optional[str] = None
    is_active: bool = True
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


# ---------------------------------------------------------------------------
# Domains
# ---------------------------------------------------------------------------

class DomainInput(CamelModel):
    app_id: UUID
    domain_name: str = Field(min_length=1)
    registrar: str = Field(min_length=1)
    status: DomainStatus = "active"
    expires_at: DateOrEmpty = None
    auto_renew: bool = False
    dns_provider: Optional[str] = None
    ssl_status: SslStatus = "active"


class DomainUpdate(CamelModel):
    domain_name: Optional[str] = Field(default=None, min_length=1)
    registrar: Optional[str] = Field(default=None, min_length=1)
    status: Optional[DomainStatus] = None
    expires_at: DateOrEmpty = None
    auto_renew: Optional[bool] = None
    dns_provider: Optional[str] = None
    ssl_status: Optional[SslStatus] = None

    @field_validator(
        "domain_name", "registrar", "status", "auto_renew", "ssl_status",
        mode="before",
    )
    @classmethod
    def reject_null(cls, v: Any) -> Any:
        return _not_null(v)


class Domain(CamelModel):
    id: str
    app_id: str
    domain_name: str
    registrar: str
    status: DomainStatus = "active"
    expires_at: Optional[str] = None
    auto_renew: bool = False
    dns_provider: Optional[str] = None
    ssl_status: SslStatus = "active"
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


# ---------------------------------------------------------------------------
# Secrets
# ---------------------------------------------------------------------------

class SecretInput(CamelModel):
    app_id: UUID
    secret_type: SecretType
    label: str = Field(min_length=1)
    plain_value: str = Field(min_length=1, repr=False)
    metadata: dict[str, Any] = Field(default_factory=dict)
    expires_at: DateOrEmpty = None


class SecretUpdate(CamelModel):
    plain_value: str = Field(min_length=1, repr=False)


class SecretRecord(CamelModel):
    """Secret metadata plus its stored cipher bundle columns."""

    id: str
    app_id: str
    secret_type: SecretType
    label: str
    metadata: dict[str, Any] = Field(default_factory=dict)
    expires_at: Optional[str] = None
    created_by: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    encrypted_value: str = Field(default="", exclude=True, repr=False)
    iv: str = Field(default="", exclude=True, repr=False)
    auth_tag: str = Field(default="", exclude=True, repr=False)

    def bundle(self) -> CipherBundle:
        return CipherBundle(
            ciphertext=self.encrypted_value,
            iv=self.iv,
            auth_tag=self.auth_tag,
        )


# ---------------------------------------------------------------------------
# Audit
# ---------------------------------------------------------------------------

class AuditLog(CamelModel):
    id: Optional[str] = None
    user_id: Optional[str] = None
    user_email: Optional[str] = None
    action: AuditAction
    resource_type: str
    resource_id: Optional[str] = None
    old_data: Optional[dict[str, Any]] = None
    new_data: Optional[dict[str, Any]] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)

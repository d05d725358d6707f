"""Response schemas for the identity, compute and VPC APIs.

Only the fields the client reads are declared; everything else the provider
sends is kept (``extra='allow'``) so records can be handed to the UI as-is.
"""

from __future__ import annotations

from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import ResponseParseError

ModelT = TypeVar('ModelT', bound=BaseModel)


class _Lenient(BaseModel):
    model_config = ConfigDict(extra='allow')


class CatalogEndpoint(_Lenient):
    """One ``(region, url)`` pair of a catalog service."""

    region: str | None = None
    url: str


class CatalogEntry(_Lenient):
    """One service of the token catalog."""

    name: str = ''
    type: str | None = None
    endpoints: list[CatalogEndpoint] = Field(default_factory=list)


class TokenUser(_Lenient):
    id: str


class TokenBody(_Lenient):
    user: TokenUser
    catalog: list[CatalogEntry] = Field(default_factory=list)


class AuthTokenResponse(_Lenient):
    """Body of ``POST /auth/tokens``."""

    token: TokenBody


class NamedRecord(_Lenient):
    """Any listable record: flavors, images, key pairs, VPCs, subnets..."""

    name: str


class NetworkRecord(_Lenient):
    """An OTC VPC (the network resource)."""

    id: str | None = None
    name: str | None = None
    cidr: str | None = None
    status: str | None = None


class SubnetRecord(_Lenient):
    id: str | None = None
    name: str | None = None
    cidr: str | None = None
    gateway_ip: str | None = None
    vpc_id: str | None = None
    status: str | None = None


class NetworkEnvelope(_Lenient):
    vpc: NetworkRecord | None = None
    error: Any | None = None


class SubnetEnvelope(_Lenient):
    subnet: SubnetRecord | None = None
    error: Any | None = None


class ProjectRecord(_Lenient):
    id: str
    name: str = ''
    domain_id: str | None = None
    enabled: bool = True


class ProjectList(_Lenient):
    projects: list[ProjectRecord] = Field(default_factory=list)


def parse_model(model: type[ModelT], payload: Any, *, what: str) -> ModelT:
    """Validate ``payload`` against ``model``; raise ``ResponseParseError`` on mismatch."""
    if not isinstance(payload, dict):
        raise ResponseParseError(what, f'expected object, got {type(payload).__name__}')
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        first = exc.errors()[0] if exc.errors() else {}
        location = '.'.join(str(p) for p in first.get('loc', ()))
        raise ResponseParseError(what, f'{location}: {first.get("msg", "invalid")}') from exc

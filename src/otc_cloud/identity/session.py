"""Authenticated session snapshot."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Mapping


class ServiceRole(str, Enum):
    """Logical service categories the client needs an endpoint for."""

    compute = 'compute'
    vpc = 'vpc'
    image = 'image'


@dataclass(frozen=True, slots=True)
class Session:
    """Token, user and resolved endpoints for one region.

    A session either carries no token and no endpoints (``anonymous``) or a
    non-empty token with whatever endpoints the catalog offered for the
    region. Re-authentication builds a new ``Session``; instances are never
    patched.
    """

    region: str
    token: str = ''
    user_id: str = ''
    endpoints: Mapping[ServiceRole, str] = field(
        default_factory=lambda: MappingProxyType({})
    )
    compute_regions: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not self.token and self.endpoints:
            raise ValueError('endpoints require an authenticated token')

    @classmethod
    def anonymous(cls, region: str) -> Session:
        return cls(region=region)

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    def endpoint_for(self, role: ServiceRole) -> str | None:
        return self.endpoints.get(role)

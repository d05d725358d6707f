"""Service catalog to endpoint resolution.

Maps the provider's raw service names onto the three roles the client uses
and keeps only the endpoint advertised for the configured region.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, Mapping

from ..schemas import CatalogEndpoint, CatalogEntry
from .session import ServiceRole

# Raw catalog service name -> role. Unknown names are ignored.
SERVICE_ROLES: Mapping[str, ServiceRole] = MappingProxyType(
    {
        'nova': ServiceRole.compute,
        'compute': ServiceRole.compute,
        'vpc': ServiceRole.vpc,
        'glance': ServiceRole.image,
        'ims': ServiceRole.image,
        'image': ServiceRole.image,
    }
)


@dataclass(frozen=True, slots=True)
class ResolvedCatalog:
    endpoints: Mapping[ServiceRole, str]
    compute_regions: tuple[str, ...]


def role_for_service(name: str) -> ServiceRole | None:
    return SERVICE_ROLES.get(name.strip().lower())


def endpoint_for_region(
    entry: CatalogEntry,
    region: str,
) -> CatalogEndpoint | None:
    """First endpoint of ``entry`` in ``region``, if any."""
    for endpoint in entry.endpoints:
        if endpoint.region == region:
            return endpoint
    return None


def resolve_endpoints(
    catalog: Iterable[CatalogEntry],
    region: str,
) -> ResolvedCatalog:
    """Build the role -> base URL map for ``region``.

    A service with no endpoint in the region contributes nothing; that is
    not an error. ``compute_regions`` lists every region any compute entry
    advertises, de-duplicated in first-seen order.
    """
    endpoints: dict[ServiceRole, str] = {}
    compute_regions: list[str] = []

    for entry in catalog:
        role = role_for_service(entry.name)

        if role is ServiceRole.compute:
            for candidate in entry.endpoints:
                if candidate.region and candidate.region not in compute_regions:
                    compute_regions.append(candidate.region)

        match = endpoint_for_region(entry, region)
        if match is None or role is None:
            continue
        endpoints[role] = match.url

    return ResolvedCatalog(
        endpoints=MappingProxyType(endpoints),
        compute_regions=tuple(compute_regions),
    )

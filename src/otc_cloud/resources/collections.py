"""Listable resource collections and how to read them.

Each collection names the endpoint role that serves it, the relative path,
the response field holding the records and an optional per-record mapper
that brings the record into the ``{name: ...}`` shape the option lists sort
on.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Mapping
from urllib.parse import quote

from ..identity.session import ServiceRole

RecordMapper = Callable[[Mapping[str, Any]], Mapping[str, Any]]


def unwrap_keypair(record: Mapping[str, Any]) -> Mapping[str, Any]:
    """Nova wraps each key pair as ``{"keypair": {...}}``."""
    return record['keypair']


def zone_with_name(record: Mapping[str, Any]) -> Mapping[str, Any]:
    """Availability zones carry ``zoneName`` instead of ``name``."""
    return {**record, 'name': record.get('zoneName')}


@dataclass(frozen=True, slots=True)
class Collection:
    name: str
    role: ServiceRole
    path: str
    field: str
    mapper: RecordMapper | None = None


FLAVORS = Collection('flavors', ServiceRole.compute, '/flavors', 'flavors')
IMAGES = Collection('images', ServiceRole.image, '/v2/cloudimages', 'images')
KEY_PAIRS = Collection(
    'key_pairs', ServiceRole.compute, '/os-keypairs', 'keypairs', mapper=unwrap_keypair
)
SECURITY_GROUPS = Collection(
    'security_groups', ServiceRole.compute, '/os-security-groups', 'security_groups'
)
FLOATING_IP_POOLS = Collection(
    'floating_ip_pools', ServiceRole.compute, '/os-floating-ip-pools', 'floating_ip_pools'
)
AVAILABILITY_ZONES = Collection(
    'availability_zones',
    ServiceRole.compute,
    '/os-availability-zone',
    'availabilityZoneInfo',
    mapper=zone_with_name,
)
NETWORKS = Collection('networks', ServiceRole.vpc, '/vpcs', 'vpcs')
SUBNETS = Collection('subnets', ServiceRole.vpc, '/subnets', 'subnets')


def subnets_path(network_id: str) -> str:
    return f'{SUBNETS.path}?vpc_id={quote(network_id, safe="")}'

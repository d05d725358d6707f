"""Resource requests and the collections listed through them."""

from .client import IMAGE_FILTER, MISSING_ENDPOINT_MESSAGES, ResourceClient, image_query
from .collections import (
    AVAILABILITY_ZONES,
    FLAVORS,
    FLOATING_IP_POOLS,
    IMAGES,
    KEY_PAIRS,
    NETWORKS,
    SECURITY_GROUPS,
    SUBNETS,
    Collection,
    subnets_path,
)

__all__ = [
    'AVAILABILITY_ZONES',
    'FLAVORS',
    'FLOATING_IP_POOLS',
    'IMAGES',
    'IMAGE_FILTER',
    'KEY_PAIRS',
    'MISSING_ENDPOINT_MESSAGES',
    'NETWORKS',
    'SECURITY_GROUPS',
    'SUBNETS',
    'Collection',
    'ResourceClient',
    'image_query',
    'subnets_path',
]

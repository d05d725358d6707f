"""Async Open Telekom Cloud client for proxied selector UIs.

Authenticates against the identity API, resolves regional compute / VPC /
image endpoints from the service catalog, fills selector option lists and
provisions networks and subnets.
"""

from .client import OpenTelekomCloudClient
from .errors import (
    DispatchError,
    EndpointUnavailableError,
    ErrorResult,
    OTCError,
    ProvisioningError,
    ProvisioningTimeoutError,
    ResponseParseError,
)
from .identity import ServiceRole, Session
from .options import Option, SelectValue
from .protocols import ProxyRequest, ProxyResponse, RequestDispatcher
from .settings import ClientSettings, PollSettings, ProxySettings

__all__ = [
    'ClientSettings',
    'DispatchError',
    'EndpointUnavailableError',
    'ErrorResult',
    'OTCError',
    'OpenTelekomCloudClient',
    'Option',
    'PollSettings',
    'ProvisioningError',
    'ProvisioningTimeoutError',
    'ProxyRequest',
    'ProxyResponse',
    'ProxySettings',
    'RequestDispatcher',
    'ResponseParseError',
    'SelectValue',
    'ServiceRole',
    'Session',
]

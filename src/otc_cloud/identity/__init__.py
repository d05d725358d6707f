"""Identity: token acquisition and catalog endpoint resolution."""

from .authenticator import SUBJECT_TOKEN_HEADER, Authenticator, build_auth_payload
from .catalog import SERVICE_ROLES, ResolvedCatalog, resolve_endpoints, role_for_service
from .session import ServiceRole, Session

__all__ = [
    'SERVICE_ROLES',
    'SUBJECT_TOKEN_HEADER',
    'Authenticator',
    'ResolvedCatalog',
    'ServiceRole',
    'Session',
    'build_auth_payload',
    'resolve_endpoints',
    'role_for_service',
]

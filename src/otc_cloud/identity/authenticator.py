"""Password authentication against the OTC identity (Keystone v3) API.

Builds the identity/scope payload, posts it through the proxy and turns the
response into a ``Session``: token from the ``X-Subject-Token`` header, user
id from the body, endpoints from the catalog.
"""

from __future__ import annotations

from typing import Any

import structlog

from ..dispatch import send
from ..errors import ErrorResult, ResponseParseError
from ..observability import get_logger, mask_secret
from ..protocols import ProxyRequest, RequestDispatcher
from ..routing import proxy_url
from ..schemas import AuthTokenResponse, parse_model
from ..settings import ClientSettings
from .catalog import resolve_endpoints
from .session import Session

SUBJECT_TOKEN_HEADER = 'x-subject-token'


def build_auth_payload(
    *,
    domain_name: str,
    username: str,
    password: str,
    project_name: str = '',
    project_domain_name: str = '',
) -> dict[str, Any]:
    """Keystone v3 password payload.

    Project scope when ``project_name`` is set (with the project domain only
    if one is given), domain scope otherwise. Never both.
    """
    payload: dict[str, Any] = {
        'auth': {
            'identity': {
                'methods': ['password'],
                'password': {
                    'user': {
                        'name': username,
                        'domain': {'name': domain_name},
                        'password': password,
                    }
                },
            }
        }
    }

    if project_name:
        project: dict[str, Any] = {'name': project_name}
        if project_domain_name:
            project['domain'] = {'name': project_domain_name}
        payload['auth']['scope'] = {'project': project}
    else:
        payload['auth']['scope'] = {'domain': {'name': domain_name}}

    return payload


class Authenticator:
    """Acquires a scoped token and resolves regional endpoints."""

    def __init__(
        self,
        dispatcher: RequestDispatcher,
        *,
        logger: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        self._dispatcher = dispatcher
        self._logger = logger or get_logger(__name__)

    async def authenticate(self, settings: ClientSettings) -> Session | ErrorResult:
        """Authenticate and return a fresh ``Session`` or an ``ErrorResult``."""
        payload = build_auth_payload(
            domain_name=settings.domain_name,
            username=settings.username,
            password=settings.password,
            project_name=settings.project_name,
            project_domain_name=settings.project_domain_name,
        )
        request = ProxyRequest(
            url=proxy_url(settings.endpoint, '/auth/tokens'),
            method='POST',
            headers={'Accept': 'application/json'},
            body=payload,
        )

        response = await send(self._dispatcher, request, logger=self._logger)
        if isinstance(response, ErrorResult):
            self._logger.error(
                'auth_failed',
                username=settings.username,
                scope='project' if settings.project_name else 'domain',
                error=response.error,
                kind=response.kind,
            )
            return response

        token = response.header(SUBJECT_TOKEN_HEADER)
        if not token:
            self._logger.error('auth_missing_subject_token', username=settings.username)
            return ErrorResult(
                error='authentication response carried no subject token',
                kind='parse',
                status_code=response.status_code,
            )

        try:
            body = parse_model(AuthTokenResponse, response.body, what='auth token')
        except ResponseParseError as exc:
            self._logger.error('auth_response_invalid', error=str(exc))
            return ErrorResult(error=str(exc), kind='parse', status_code=response.status_code)

        resolved = resolve_endpoints(body.token.catalog, settings.region)
        session = Session(
            region=settings.region,
            token=token,
            user_id=body.token.user.id,
            endpoints=resolved.endpoints,
            compute_regions=resolved.compute_regions,
        )

        self._logger.info(
            'auth_succeeded',
            user_id=session.user_id,
            region=session.region,
            token=mask_secret(token),
            roles=sorted(role.value for role in session.endpoints),
        )
        return session

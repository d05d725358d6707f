"""Authenticated requests against the resolved compute, VPC and image endpoints.

Every helper returns the decoded JSON body or an ``ErrorResult``. A role
with no endpoint in the current session yields a ``precondition`` result
without any request being dispatched.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Any, Callable, Mapping
from urllib.parse import quote

import structlog

from ..dispatch import send
from ..errors import ErrorResult
from ..identity.session import ServiceRole, Session
from ..observability import get_logger
from ..protocols import ProxyRequest, RequestDispatcher
from ..routing import join_query, proxy_url
from .collections import Collection

# Public, protected, 64-bit Linux images only.
IMAGE_FILTER: Mapping[str, str] = MappingProxyType(
    {
        'visibility': 'public',
        'protected': 'true',
        '__os_type': 'Linux',
        '__os_bit': '64',
    }
)

MISSING_ENDPOINT_MESSAGES: Mapping[ServiceRole, str] = MappingProxyType(
    {
        ServiceRole.compute: 'No compute endpoint discovered from catalog',
        ServiceRole.vpc: 'No VPC endpoint discovered from catalog',
        ServiceRole.image: 'No image (glance/IMS) endpoint discovered from catalog',
    }
)

RawResult = Any


def image_query(extra: Mapping[str, str] | None = None) -> str:
    """Fixed image filter followed by ``extra`` keys that do not collide with it."""
    pairs = list(IMAGE_FILTER.items())
    if extra:
        pairs.extend(
            (key, quote(str(value), safe=''))
            for key, value in extra.items()
            if key not in IMAGE_FILTER
        )
    return '?' + join_query(pairs)


class ResourceClient:
    """Issues GET/POST calls for named resource collections."""

    def __init__(
        self,
        dispatcher: RequestDispatcher,
        session: Callable[[], Session],
        *,
        identity_endpoint: str = '',
        logger: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        self._dispatcher = dispatcher
        self._session = session
        self._identity_endpoint = identity_endpoint
        self._logger = logger or get_logger(__name__)

    def _headers(self, session: Session) -> dict[str, str]:
        return {
            'Accept': 'application/json',
            'X-Auth-Token': session.token,
        }

    async def _request(
        self,
        role: ServiceRole,
        path: str,
        *,
        method: str = 'GET',
        body: Any | None = None,
    ) -> RawResult | ErrorResult:
        session = self._session()
        endpoint = session.endpoint_for(role)
        if not endpoint:
            self._logger.warning(
                'endpoint_missing',
                role=role.value,
                region=session.region,
                path=path,
            )
            return ErrorResult(error=MISSING_ENDPOINT_MESSAGES[role], kind='precondition')

        return await self._send(
            ProxyRequest(
                url=proxy_url(endpoint, path),
                method=method,
                headers=self._headers(session),
                body=body,
            )
        )

    async def _send(self, request: ProxyRequest) -> RawResult | ErrorResult:
        self._logger.debug('proxy_request', method=request.method, url=request.url)
        response = await send(self._dispatcher, request, logger=self._logger)
        if isinstance(response, ErrorResult):
            return response
        return response.body

    async def request_compute(self, path: str) -> RawResult | ErrorResult:
        return await self._request(ServiceRole.compute, path)

    async def request_vpc(
        self,
        path: str,
        method: str = 'GET',
        body: Any | None = None,
    ) -> RawResult | ErrorResult:
        return await self._request(ServiceRole.vpc, path, method=method, body=body)

    async def request_image(
        self,
        path: str,
        query: Mapping[str, str] | None = None,
    ) -> RawResult | ErrorResult:
        """GET on the image endpoint, always filtered by ``IMAGE_FILTER``."""
        return await self._request(ServiceRole.image, f'{path}{image_query(query)}')

    async def request_identity(self, path: str) -> RawResult | ErrorResult:
        """GET on the identity endpoint the session was obtained from."""
        session = self._session()
        if not self._identity_endpoint or not session.is_authenticated:
            return ErrorResult(error='Not authenticated against the identity endpoint', kind='precondition')
        return await self._send(
            ProxyRequest(
                url=proxy_url(self._identity_endpoint, path),
                headers=self._headers(session),
            )
        )

    async def fetch(
        self,
        collection: Collection,
        path: str | None = None,
    ) -> RawResult | ErrorResult:
        """Read ``collection`` through the helper for its role."""
        target = path or collection.path
        if collection.role is ServiceRole.compute:
            return await self.request_compute(target)
        if collection.role is ServiceRole.image:
            return await self.request_image(target)
        return await self.request_vpc(target)

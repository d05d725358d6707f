"""Async ``RequestDispatcher`` that forwards calls to the proxy ingress.

Relative proxy URLs (``/meta/proxy/<host><path>``) are resolved against the
ingress base URL. HTTP error statuses are returned, not raised, so callers
can tell an unreachable upstream (502) from a provider rejection; only
transport failures raise ``DispatchError``.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from ..errors import DispatchError
from ..protocols import ProxyRequest, ProxyResponse
from ..settings import ProxySettings

logger = logging.getLogger(__name__)


# ── Module-level shared client ───────────────────────────────────

_shared_async_client: httpx.AsyncClient | None = None


def _get_shared_async_client() -> httpx.AsyncClient:
    global _shared_async_client
    if _shared_async_client is None:
        _shared_async_client = httpx.AsyncClient()
    return _shared_async_client


def _reset_shared_async_client_for_tests() -> None:
    global _shared_async_client
    _shared_async_client = None


# ── Dispatcher ───────────────────────────────────────────────────


class HttpxProxyDispatcher:
    """Dispatches ``ProxyRequest`` objects through the ingress with httpx."""

    def __init__(
        self,
        settings: ProxySettings | None = None,
        *,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._settings = settings or ProxySettings()
        self._base_url = self._settings.rancher_url.rstrip("/")
        if http_client is None:
            http_client = (
                _get_shared_async_client()
                if self._settings.verify_tls
                else httpx.AsyncClient(verify=False)
            )
        self._client = http_client
        self._timeout = float(self._settings.timeout_seconds)

    def _headers(self, request: ProxyRequest) -> dict[str, str]:
        headers = dict(request.headers)
        if self._settings.api_token:
            headers.setdefault("Authorization", f"Bearer {self._settings.api_token}")
        return headers

    async def dispatch(self, request: ProxyRequest) -> ProxyResponse:
        url = f"{self._base_url}{request.url}"
        try:
            resp = await self._client.request(
                request.method,
                url,
                headers=self._headers(request),
                json=request.body,
                timeout=self._timeout,
            )
        except httpx.TimeoutException as e:
            raise DispatchError(f"request timed out: {e}", url=request.url) from e
        except httpx.HTTPError as e:
            raise DispatchError(f"{type(e).__name__}: {e}", url=request.url) from e
        except httpx.InvalidURL as e:
            raise DispatchError(f"invalid URL: {e}", url=request.url) from e

        if resp.status_code >= 400:
            logger.debug(
                "Proxy %s %s returned %d",
                request.method,
                request.url,
                resp.status_code,
            )

        return ProxyResponse(
            status_code=resp.status_code,
            headers=dict(resp.headers),
            body=_decode_body(resp),
        )


def _decode_body(resp: httpx.Response) -> Any | None:
    if not resp.content:
        return None
    try:
        return resp.json()
    except ValueError:
        return resp.text

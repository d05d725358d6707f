"""Dispatch a proxied request and fold every failure into ``ErrorResult``."""

from __future__ import annotations

from typing import Any

import structlog

from .errors import PROXY_UNAVAILABLE_MESSAGE, DispatchError, ErrorResult
from .protocols import ProxyRequest, ProxyResponse, RequestDispatcher

# The ingress answers 502 when the upstream host is not reachable or not in
# its allow list.
PROXY_UNAVAILABLE_STATUS = 502


async def send(
    dispatcher: RequestDispatcher,
    request: ProxyRequest,
    *,
    logger: structlog.stdlib.BoundLogger,
) -> ProxyResponse | ErrorResult:
    """Dispatch ``request``; never raises for transport or HTTP failures."""
    try:
        response = await dispatcher.dispatch(request)
    except DispatchError as exc:
        logger.error(
            'proxy_request_failed',
            method=request.method,
            url=request.url,
            error=str(exc),
        )
        return ErrorResult(error=str(exc), kind='transport')
    except Exception as exc:
        logger.exception(
            'proxy_request_crashed',
            method=request.method,
            url=request.url,
        )
        return ErrorResult(error=f'{type(exc).__name__}: {exc}', kind='transport')

    if response.status_code == PROXY_UNAVAILABLE_STATUS:
        logger.warning(
            'proxy_unavailable',
            method=request.method,
            url=request.url,
        )
        return ErrorResult(
            error=(
                f'{PROXY_UNAVAILABLE_MESSAGE}: could not proxy request, '
                'URL may not be in the ingress allow list'
            ),
            kind='proxy_unavailable',
            status_code=response.status_code,
        )

    if not response.ok:
        message = _error_message(response)
        logger.warning(
            'proxy_request_rejected',
            method=request.method,
            url=request.url,
            status=response.status_code,
            error=message,
        )
        return ErrorResult(error=message, kind='http', status_code=response.status_code)

    return response


def _error_message(response: ProxyResponse) -> str:
    """Best-effort provider error text from an OpenStack-style error body."""
    body: Any = response.body
    fallback = f'HTTP {response.status_code}'
    if isinstance(body, dict):
        for key in ('error', 'message', 'error_msg'):
            value = body.get(key)
            if isinstance(value, dict):
                value = value.get('message') or value.get('title')
            if value:
                return f'{fallback}: {value}'
        for value in body.values():
            if isinstance(value, dict) and value.get('message'):
                return f"{fallback}: {value['message']}"
    elif isinstance(body, str) and body:
        return f'{fallback}: {body[:200]}'
    return fallback

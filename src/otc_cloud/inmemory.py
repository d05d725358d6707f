"""In-memory request dispatcher for local development and tests.

Routes are keyed on ``(method, url)``. Each route replays its scripted
responses in order and keeps returning the last one once the script is
exhausted. Scripted exceptions are raised instead of returned. Every
dispatched request is recorded in ``calls``.
"""

from __future__ import annotations

from collections import deque
from typing import Any, Mapping

from .errors import DispatchError
from .protocols import ProxyRequest, ProxyResponse

Scripted = ProxyResponse | Exception


class InMemoryDispatcher:
    """Scripted ``RequestDispatcher``."""

    def __init__(self) -> None:
        self.calls: list[ProxyRequest] = []
        self._routes: dict[tuple[str, str], deque[Scripted]] = {}

    def add(self, method: str, url: str, *responses: Scripted) -> InMemoryDispatcher:
        if not responses:
            raise ValueError('at least one response is required')
        queue = self._routes.setdefault((method.upper(), url), deque())
        queue.extend(responses)
        return self

    def add_json(
        self,
        method: str,
        url: str,
        body: Any,
        *,
        status_code: int = 200,
        headers: Mapping[str, str] | None = None,
    ) -> InMemoryDispatcher:
        return self.add(
            method,
            url,
            ProxyResponse(status_code=status_code, headers=dict(headers or {}), body=body),
        )

    def add_failure(self, method: str, url: str, message: str = 'connection refused') -> InMemoryDispatcher:
        return self.add(method, url, DispatchError(message, url=url))

    def calls_to(self, url: str, method: str | None = None) -> list[ProxyRequest]:
        return [
            call
            for call in self.calls
            if call.url == url and (method is None or call.method == method.upper())
        ]

    async def dispatch(self, request: ProxyRequest) -> ProxyResponse:
        self.calls.append(request)
        queue = self._routes.get((request.method.upper(), request.url))
        if not queue:
            return ProxyResponse(
                status_code=404,
                body={'error': {'message': f'no route for {request.method} {request.url}'}},
            )

        scripted = queue.popleft() if len(queue) > 1 else queue[0]
        if isinstance(scripted, Exception):
            raise scripted
        return scripted

"""Collaborator interfaces consumed or written by the client core.

The core never performs I/O itself: every HTTP call is described as a
``ProxyRequest`` and handed to a ``RequestDispatcher``. Selection widgets are
modelled by ``OptionContainer``, whose fields the option fetchers own while a
fetch is running.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Protocol, runtime_checkable


@dataclass(frozen=True, slots=True)
class ProxyRequest:
    """One HTTP call routed through the proxy ingress."""

    url: str
    method: str = 'GET'
    headers: Mapping[str, str] = field(default_factory=dict)
    body: Any | None = None


@dataclass(frozen=True, slots=True)
class ProxyResponse:
    """Dispatcher result: status, headers and the decoded JSON body."""

    status_code: int
    headers: Mapping[str, str] = field(default_factory=dict)
    body: Any | None = None

    def header(self, name: str) -> str | None:
        """Case-insensitive header lookup."""
        wanted = name.lower()
        for key, value in self.headers.items():
            if key.lower() == wanted:
                return value
        return None

    @property
    def ok(self) -> bool:
        return self.status_code < 400


@runtime_checkable
class RequestDispatcher(Protocol):
    """Performs the network call; raises ``DispatchError`` on transport failure."""

    async def dispatch(self, request: ProxyRequest) -> ProxyResponse: ...


@runtime_checkable
class OptionContainer(Protocol):
    """UI-owned selector state written by the option fetchers."""

    busy: bool
    enabled: bool
    selected: Any
    options: list[Any]

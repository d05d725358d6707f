"""Error hierarchy and read-path result shape for the OTC client.

Read paths (authentication, resource requests, option fetches) never raise
for expected faults: they hand back an ``ErrorResult`` so callers have one
failure branch. Provisioning workflows raise ``OTCError`` subclasses
instead, because a half-finished create/poll must stop the workflow.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal

ErrorKind = Literal['precondition', 'proxy_unavailable', 'http', 'transport', 'parse']

PROXY_UNAVAILABLE_MESSAGE = 'proxy unavailable'


@dataclass(frozen=True, slots=True)
class ErrorResult:
    """Structured ``{error: message}`` result returned by read paths."""

    error: str
    kind: ErrorKind = 'transport'
    status_code: int | None = None

    @property
    def is_precondition(self) -> bool:
        """True when no request was attempted (e.g. endpoint not in catalog)."""
        return self.kind == 'precondition'

    def as_dict(self) -> dict[str, Any]:
        return {'error': self.error}


# ── Exception hierarchy ─────────────────────────────────────────


class OTCError(Exception):
    """Base exception for Open Telekom Cloud client failures."""


class DispatchError(OTCError):
    """The request dispatcher could not complete the call."""

    def __init__(self, message: str, *, url: str = '') -> None:
        self.message = message
        self.url = url
        super().__init__(message)


class ResponseParseError(OTCError):
    """A response body did not match the expected schema."""

    def __init__(self, what: str, detail: str = '') -> None:
        self.what = what
        self.detail = detail
        message = f'unexpected {what} response'
        if detail:
            message = f'{message}: {detail}'
        super().__init__(message)


class EndpointUnavailableError(OTCError):
    """No endpoint for the required service role was found in the catalog."""

    def __init__(self, role: str, message: str = '') -> None:
        self.role = role
        super().__init__(message or f'No {role} endpoint discovered from catalog')


class ProvisioningError(OTCError):
    """A create call did not yield a resource identifier."""

    def __init__(self, kind: str, message: str, *, cause: Any = None) -> None:
        self.kind = kind
        self.cause = cause
        super().__init__(message)


class ProvisioningTimeoutError(ProvisioningError):
    """The poll deadline elapsed before the terminal status was observed."""

    def __init__(self, kind: str, resource_id: str, expected_status: str) -> None:
        self.resource_id = resource_id
        self.expected_status = expected_status
        super().__init__(
            kind,
            f'Timeout reached while waiting for {kind} {resource_id} '
            f'to become {expected_status}',
        )

"""Lifecycle of a provisioned network or subnet.

  requested -> pending -> ready
  requested -> failed
  pending   -> failed

``ready`` and ``failed`` are terminal. Snapshots are immutable; every
transition returns a new ``ResourceLifecycle``.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from types import MappingProxyType

REQUESTED = 'requested'
PENDING = 'pending'
READY = 'ready'
FAILED = 'failed'

TERMINAL_STATES = frozenset({READY, FAILED})

ALLOWED_TRANSITIONS = MappingProxyType(
    {
        REQUESTED: frozenset({PENDING, FAILED}),
        PENDING: frozenset({READY, FAILED}),
        READY: frozenset(),
        FAILED: frozenset(),
    }
)

TIMEOUT_CODE = 'TIMEOUT'
CREATE_FAILED_CODE = 'CREATE_FAILED'
ENDPOINT_MISSING_CODE = 'ENDPOINT_MISSING'
INVALID_RESPONSE_CODE = 'INVALID_RESPONSE'


@dataclass(frozen=True, slots=True)
class ResourceLifecycle:
    """State snapshot for one network or subnet."""

    kind: str
    state: str = REQUESTED
    resource_id: str | None = None
    polls: int = 0
    last_status: str | None = None
    error_code: str | None = None
    error_detail: str | None = None

    @property
    def is_terminal(self) -> bool:
        return self.state in TERMINAL_STATES


class InvalidStateTransition(ValueError):
    """Raised for invalid lifecycle transitions."""

    def __init__(self, from_state: str, to_state: str) -> None:
        self.from_state = from_state
        self.to_state = to_state
        super().__init__(
            f'invalid state transition: {from_state!r} -> {to_state!r}'
        )


def request_resource(kind: str) -> ResourceLifecycle:
    """Snapshot for a create call that is about to be issued."""
    return ResourceLifecycle(kind=kind)


def awaiting(kind: str, resource_id: str) -> ResourceLifecycle:
    """Snapshot for an existing resource whose readiness is being waited on."""
    return mark_pending(request_resource(kind), resource_id)


def mark_pending(job: ResourceLifecycle, resource_id: str) -> ResourceLifecycle:
    if not resource_id:
        raise ValueError('resource_id is required to enter pending')
    return _transition(job, to_state=PENDING, resource_id=resource_id)


def record_poll(job: ResourceLifecycle, status: str | None) -> ResourceLifecycle:
    """Count one status check while pending."""
    if job.state != PENDING:
        raise InvalidStateTransition(job.state, PENDING)
    return replace(job, polls=job.polls + 1, last_status=status)


def mark_ready(job: ResourceLifecycle) -> ResourceLifecycle:
    return _transition(job, to_state=READY)


def mark_failed(
    job: ResourceLifecycle,
    *,
    error_code: str,
    error_detail: str,
) -> ResourceLifecycle:
    return _transition(
        job,
        to_state=FAILED,
        error_code=error_code,
        error_detail=error_detail,
    )


def _transition(
    job: ResourceLifecycle,
    *,
    to_state: str,
    resource_id: str | None = None,
    error_code: str | None = None,
    error_detail: str | None = None,
) -> ResourceLifecycle:
    allowed = ALLOWED_TRANSITIONS.get(job.state, frozenset())
    if to_state not in allowed:
        raise InvalidStateTransition(job.state, to_state)

    return replace(
        job,
        state=to_state,
        resource_id=resource_id or job.resource_id,
        error_code=error_code,
        error_detail=error_detail,
    )

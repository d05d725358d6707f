"""Create-then-poll workflows for OTC networks (VPCs) and subnets.

Each workflow posts the create call, requires an id back, then polls the
resource on a fixed interval until its status reaches the terminal value or
the deadline passes. Faults are raised, not returned: a half-created
resource must stop the caller's workflow.
"""

from __future__ import annotations

import asyncio
import math
import time
import uuid
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

import structlog
from pydantic import BaseModel

from ..errors import (
    EndpointUnavailableError,
    ErrorResult,
    ProvisioningError,
    ProvisioningTimeoutError,
    ResponseParseError,
)
from ..observability import get_logger, operation_id_ctx
from ..resources.client import ResourceClient
from ..schemas import NetworkEnvelope, SubnetEnvelope, parse_model
from ..settings import PollSettings
from .lifecycle import (
    CREATE_FAILED_CODE,
    ENDPOINT_MISSING_CODE,
    INVALID_RESPONSE_CODE,
    TIMEOUT_CODE,
    ResourceLifecycle,
    awaiting,
    mark_failed,
    mark_pending,
    mark_ready,
    record_poll,
    request_resource,
)

# Provider DNS first, public resolver as fallback.
DEFAULT_DNS_LIST = ('100.125.4.25', '8.8.8.8')


@dataclass(frozen=True, slots=True)
class ResourceKind:
    """How one provisionable resource is created and polled."""

    name: str
    envelope_key: str
    path: str
    ready_status: str
    envelope: type[BaseModel]


NETWORK = ResourceKind(
    name='network',
    envelope_key='vpc',
    path='/vpcs',
    ready_status='OK',
    envelope=NetworkEnvelope,
)
SUBNET = ResourceKind(
    name='subnet',
    envelope_key='subnet',
    path='/subnets',
    ready_status='ACTIVE',
    envelope=SubnetEnvelope,
)

TransitionHook = Callable[[ResourceLifecycle], None]


class Provisioner:
    """Orchestrates network and subnet creation against the VPC endpoint."""

    def __init__(
        self,
        resources: ResourceClient,
        *,
        poll: PollSettings | None = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        on_transition: TransitionHook | None = None,
        logger: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        self._resources = resources
        self._poll = poll or PollSettings()
        self._clock = clock
        self._sleep = sleep
        self._on_transition = on_transition
        self._logger = logger or get_logger(__name__)

    # ── Public API ───────────────────────────────────────────────

    async def create_network(self, name: str, cidr: str) -> str:
        """Create a network and wait until it is ``OK``. Returns its id."""
        body = {'vpc': {'name': name, 'cidr': cidr}}
        return await self._create(NETWORK, body)

    async def wait_for_network_ready(
        self,
        network_id: str,
        deadline: float | None = None,
    ) -> ResourceLifecycle:
        return await self._wait(NETWORK, network_id, deadline)

    async def create_subnet(
        self,
        network_id: str,
        name: str,
        cidr: str,
        gateway_ip: str,
    ) -> str:
        """Create a subnet in ``network_id`` and wait until it is ``ACTIVE``.

        The DNS servers are always ``DEFAULT_DNS_LIST``.
        """
        body = {
            'subnet': {
                'name': name,
                'cidr': cidr,
                'gateway_ip': gateway_ip,
                'vpc_id': network_id,
                'dnsList': list(DEFAULT_DNS_LIST),
            }
        }
        return await self._create(SUBNET, body)

    async def wait_for_subnet_ready(
        self,
        subnet_id: str,
        deadline: float | None = None,
    ) -> ResourceLifecycle:
        return await self._wait(SUBNET, subnet_id, deadline)

    # ── Workflow ─────────────────────────────────────────────────

    def _emit(self, job: ResourceLifecycle) -> ResourceLifecycle:
        if self._on_transition is not None:
            self._on_transition(job)
        return job

    def _fail(
        self,
        job: ResourceLifecycle,
        code: str,
        detail: str,
    ) -> ResourceLifecycle:
        job = self._emit(mark_failed(job, error_code=code, error_detail=detail))
        self._logger.error(
            'provisioning_failed',
            kind=job.kind,
            resource_id=job.resource_id,
            error_code=code,
            error=detail,
        )
        return job

    async def _create(self, kind: ResourceKind, body: dict[str, Any]) -> str:
        token = operation_id_ctx.set(uuid.uuid4().hex)
        try:
            job = self._emit(request_resource(kind.name))
            self._logger.info('provisioning_requested', kind=kind.name, name=body[kind.envelope_key]['name'])

            result = await self._resources.request_vpc(kind.path, 'POST', body)
            resource_id = self._created_id(kind, job, result)

            job = self._emit(mark_pending(job, resource_id))
            self._logger.info('provisioning_pending', kind=kind.name, resource_id=resource_id)

            await self._wait(kind, resource_id, job=job)
            return resource_id
        finally:
            operation_id_ctx.reset(token)

    def _created_id(
        self,
        kind: ResourceKind,
        job: ResourceLifecycle,
        result: Any,
    ) -> str:
        if isinstance(result, ErrorResult):
            if result.is_precondition:
                self._fail(job, ENDPOINT_MISSING_CODE, result.error)
                raise EndpointUnavailableError('vpc', result.error)
            self._fail(job, CREATE_FAILED_CODE, result.error)
            raise ProvisioningError(kind.name, result.error, cause=result)

        try:
            envelope = parse_model(kind.envelope, result if result is not None else {}, what=kind.name)
        except ResponseParseError as exc:
            self._fail(job, INVALID_RESPONSE_CODE, str(exc))
            raise

        record = getattr(envelope, kind.envelope_key)
        if record is not None and record.id:
            return record.id

        explicit = getattr(envelope, 'error', None)
        if explicit:
            self._fail(job, CREATE_FAILED_CODE, str(explicit))
            raise ProvisioningError(kind.name, str(explicit), cause=explicit)

        message = f'Failed to create {kind.name}'
        self._fail(job, CREATE_FAILED_CODE, message)
        raise ProvisioningError(kind.name, message)

    async def _wait(
        self,
        kind: ResourceKind,
        resource_id: str,
        deadline: float | None = None,
        *,
        job: ResourceLifecycle | None = None,
    ) -> ResourceLifecycle:
        """Poll until ``ready_status`` or the deadline.

        The deadline is fixed once; the loop is capped at the number of
        intervals that fit before it, plus the first check.
        """
        if job is None:
            job = self._emit(awaiting(kind.name, resource_id))

        started = self._clock()
        if deadline is None:
            deadline = started + self._poll.timeout_seconds
        interval = self._poll.interval_seconds
        max_polls = max(0, math.ceil((deadline - started) / interval)) + 1

        path = f'{kind.path}/{resource_id}'
        for _ in range(max_polls):
            if self._clock() > deadline:
                break

            result = await self._resources.request_vpc(path)
            status = self._status_of(kind, job, result)
            job = record_poll(job, status)

            if status == kind.ready_status:
                job = self._emit(mark_ready(job))
                self._logger.info(
                    'provisioning_ready',
                    kind=kind.name,
                    resource_id=resource_id,
                    polls=job.polls,
                )
                return job

            self._logger.debug(
                'provisioning_poll_pending',
                kind=kind.name,
                resource_id=resource_id,
                status=status,
                poll=job.polls,
            )
            if self._clock() + interval > deadline:
                break
            await self._sleep(interval)

        error = ProvisioningTimeoutError(kind.name, resource_id, kind.ready_status)
        self._fail(job, TIMEOUT_CODE, str(error))
        raise error

    def _status_of(
        self,
        kind: ResourceKind,
        job: ResourceLifecycle,
        result: Any,
    ) -> str | None:
        if isinstance(result, ErrorResult):
            if result.is_precondition:
                self._fail(job, ENDPOINT_MISSING_CODE, result.error)
                raise EndpointUnavailableError('vpc', result.error)
            # Not fatal: the next poll may succeed before the deadline.
            self._logger.warning(
                'provisioning_poll_failed',
                kind=kind.name,
                resource_id=job.resource_id,
                error=result.error,
            )
            return None
        if result is None:
            return None

        try:
            envelope = parse_model(kind.envelope, result, what=kind.name)
        except ResponseParseError as exc:
            self._fail(job, INVALID_RESPONSE_CODE, str(exc))
            raise

        record = getattr(envelope, kind.envelope_key)
        return record.status if record is not None else None

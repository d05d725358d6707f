"""Network and subnet provisioning workflows."""

from .lifecycle import (
    FAILED,
    PENDING,
    READY,
    REQUESTED,
    TIMEOUT_CODE,
    InvalidStateTransition,
    ResourceLifecycle,
    mark_failed,
    mark_pending,
    mark_ready,
    record_poll,
    request_resource,
)
from .provisioner import DEFAULT_DNS_LIST, NETWORK, SUBNET, Provisioner, ResourceKind

__all__ = [
    'DEFAULT_DNS_LIST',
    'FAILED',
    'NETWORK',
    'PENDING',
    'READY',
    'REQUESTED',
    'SUBNET',
    'TIMEOUT_CODE',
    'InvalidStateTransition',
    'Provisioner',
    'ResourceKind',
    'ResourceLifecycle',
    'mark_failed',
    'mark_pending',
    'mark_ready',
    'record_poll',
    'request_resource',
]

"""Provisioner tests: create-then-poll workflows, deadlines, fault surfacing."""

from __future__ import annotations

import pytest
from otc_fixtures import VPC_URL, make_session

from otc_cloud.errors import (
    DispatchError,
    EndpointUnavailableError,
    ProvisioningError,
    ProvisioningTimeoutError,
    ResponseParseError,
)
from otc_cloud.protocols import ProxyResponse
from otc_cloud.provisioning.lifecycle import FAILED, PENDING, READY, REQUESTED
from otc_cloud.provisioning.provisioner import DEFAULT_DNS_LIST, Provisioner
from otc_cloud.resources.client import ResourceClient
from otc_cloud.settings import PollSettings

VPC_PROXY = '/meta/proxy/vpc.eu-de.otc.t-systems.com/v1/p-123'


def _status(key: str, resource_id: str, status: str) -> ProxyResponse:
    return ProxyResponse(status_code=200, body={key: {'id': resource_id, 'status': status}})


def _make_provisioner(dispatcher, clock, *, session=None, transitions=None, **kwargs) -> Provisioner:
    session = session or make_session(vpc=VPC_URL)
    resources = ResourceClient(dispatcher, lambda: session)
    return Provisioner(
        resources,
        clock=clock,
        sleep=clock.sleep,
        on_transition=transitions.append if transitions is not None else None,
        **kwargs,
    )


# ── Network ──────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_create_network_ready_on_third_poll(dispatcher, fake_clock):
    dispatcher.add_json('POST', f'{VPC_PROXY}/vpcs', {'vpc': {'id': 'vpc-1', 'status': 'CREATING'}})
    dispatcher.add(
        'GET',
        f'{VPC_PROXY}/vpcs/vpc-1',
        _status('vpc', 'vpc-1', 'CREATING'),
        _status('vpc', 'vpc-1', 'CREATING'),
        _status('vpc', 'vpc-1', 'OK'),
    )
    provisioner = _make_provisioner(dispatcher, fake_clock)

    network_id = await provisioner.create_network('vpc-demo', '192.168.0.0/16')

    assert network_id == 'vpc-1'
    assert len(dispatcher.calls) == 4
    assert dispatcher.calls[0].body == {'vpc': {'name': 'vpc-demo', 'cidr': '192.168.0.0/16'}}
    assert fake_clock.sleeps == [1.0, 1.0]


@pytest.mark.asyncio
async def test_transitions_are_reported(dispatcher, fake_clock):
    dispatcher.add_json('POST', f'{VPC_PROXY}/vpcs', {'vpc': {'id': 'vpc-1'}})
    dispatcher.add('GET', f'{VPC_PROXY}/vpcs/vpc-1', _status('vpc', 'vpc-1', 'OK'))
    transitions = []
    provisioner = _make_provisioner(dispatcher, fake_clock, transitions=transitions)

    await provisioner.create_network('vpc-demo', '192.168.0.0/16')

    assert [t.state for t in transitions] == [REQUESTED, PENDING, READY]
    assert transitions[-1].polls == 1


@pytest.mark.asyncio
async def test_create_network_without_id_or_error_fails_generically(dispatcher, fake_clock):
    dispatcher.add_json('POST', f'{VPC_PROXY}/vpcs', {'vpc': {'name': 'vpc-demo'}})
    transitions = []
    provisioner = _make_provisioner(dispatcher, fake_clock, transitions=transitions)

    with pytest.raises(ProvisioningError, match='Failed to create network'):
        await provisioner.create_network('vpc-demo', '192.168.0.0/16')

    assert len(dispatcher.calls) == 1
    assert transitions[-1].state == FAILED


@pytest.mark.asyncio
async def test_create_network_empty_body_fails_generically(dispatcher, fake_clock):
    dispatcher.add_json('POST', f'{VPC_PROXY}/vpcs', None)
    provisioner = _make_provisioner(dispatcher, fake_clock)

    with pytest.raises(ProvisioningError, match='Failed to create network'):
        await provisioner.create_network('vpc-demo', '192.168.0.0/16')


@pytest.mark.asyncio
async def test_create_network_surfaces_explicit_error(dispatcher, fake_clock):
    dispatcher.add_json('POST', f'{VPC_PROXY}/vpcs', {'error': 'quota exceeded'})
    provisioner = _make_provisioner(dispatcher, fake_clock)

    with pytest.raises(ProvisioningError, match='quota exceeded') as exc_info:
        await provisioner.create_network('vpc-demo', '192.168.0.0/16')

    assert exc_info.value.cause == 'quota exceeded'


@pytest.mark.asyncio
async def test_create_network_surfaces_rejected_request(dispatcher, fake_clock):
    dispatcher.add_json(
        'POST',
        f'{VPC_PROXY}/vpcs',
        {'error': {'message': 'Invalid CIDR', 'code': 'VPC.0002'}},
        status_code=400,
    )
    provisioner = _make_provisioner(dispatcher, fake_clock)

    with pytest.raises(ProvisioningError, match='Invalid CIDR') as exc_info:
        await provisioner.create_network('vpc-demo', 'not-a-cidr')

    assert not isinstance(exc_info.value, ProvisioningTimeoutError)
    assert exc_info.value.kind == 'network'


@pytest.mark.asyncio
async def test_wait_times_out_with_bounded_polls(dispatcher, fake_clock):
    dispatcher.add('GET', f'{VPC_PROXY}/vpcs/vpc-1', _status('vpc', 'vpc-1', 'CREATING'))
    provisioner = _make_provisioner(dispatcher, fake_clock)
    started = fake_clock.now

    with pytest.raises(ProvisioningTimeoutError, match='network') as exc_info:
        await provisioner.wait_for_network_ready('vpc-1')

    assert exc_info.value.resource_id == 'vpc-1'
    assert exc_info.value.expected_status == 'OK'
    assert len(dispatcher.calls) <= 11
    assert fake_clock.now - started <= 11.0


@pytest.mark.asyncio
async def test_past_deadline_fails_without_polling(dispatcher, fake_clock):
    provisioner = _make_provisioner(dispatcher, fake_clock)

    with pytest.raises(ProvisioningTimeoutError):
        await provisioner.wait_for_network_ready('vpc-1', deadline=fake_clock.now - 0.5)

    assert dispatcher.calls == []


@pytest.mark.asyncio
async def test_explicit_deadline_is_not_reset(dispatcher, fake_clock):
    dispatcher.add('GET', f'{VPC_PROXY}/vpcs/vpc-1', _status('vpc', 'vpc-1', 'CREATING'))
    provisioner = _make_provisioner(dispatcher, fake_clock)

    with pytest.raises(ProvisioningTimeoutError):
        await provisioner.wait_for_network_ready('vpc-1', deadline=fake_clock.now + 2.5)

    assert len(dispatcher.calls) == 3


@pytest.mark.asyncio
async def test_timeout_raised_without_sleeping_past_deadline(dispatcher, fake_clock):
    dispatcher.add('GET', f'{VPC_PROXY}/vpcs/vpc-1', _status('vpc', 'vpc-1', 'CREATING'))
    provisioner = _make_provisioner(dispatcher, fake_clock)
    started = fake_clock.now

    with pytest.raises(ProvisioningTimeoutError):
        await provisioner.wait_for_network_ready('vpc-1', deadline=started + 2.5)

    assert fake_clock.sleeps == [1.0, 1.0]
    assert fake_clock.now - started == 2.0


@pytest.mark.asyncio
async def test_custom_poll_settings(dispatcher, fake_clock):
    dispatcher.add(
        'GET',
        f'{VPC_PROXY}/vpcs/vpc-1',
        _status('vpc', 'vpc-1', 'CREATING'),
        _status('vpc', 'vpc-1', 'OK'),
    )
    provisioner = _make_provisioner(
        dispatcher,
        fake_clock,
        poll=PollSettings(interval_seconds=0.25, timeout_seconds=1.0),
    )

    job = await provisioner.wait_for_network_ready('vpc-1')

    assert job.state == READY
    assert fake_clock.sleeps == [0.25]


@pytest.mark.asyncio
async def test_transport_error_during_poll_keeps_polling(dispatcher, fake_clock):
    dispatcher.add(
        'GET',
        f'{VPC_PROXY}/vpcs/vpc-1',
        DispatchError('connection reset'),
        ProxyResponse(status_code=502),
        _status('vpc', 'vpc-1', 'OK'),
    )
    provisioner = _make_provisioner(dispatcher, fake_clock)

    job = await provisioner.wait_for_network_ready('vpc-1')

    assert job.state == READY
    assert job.polls == 3


@pytest.mark.asyncio
async def test_malformed_poll_response_raises_parse_error(dispatcher, fake_clock):
    dispatcher.add_json('GET', f'{VPC_PROXY}/vpcs/vpc-1', {'vpc': 'garbage'})
    provisioner = _make_provisioner(dispatcher, fake_clock)

    with pytest.raises(ResponseParseError):
        await provisioner.wait_for_network_ready('vpc-1')

    assert len(dispatcher.calls) == 1


# ── Missing VPC endpoint ─────────────────────────────────────────


@pytest.mark.asyncio
async def test_missing_vpc_endpoint_fails_create_immediately(dispatcher, fake_clock):
    provisioner = _make_provisioner(dispatcher, fake_clock, session=make_session())

    with pytest.raises(EndpointUnavailableError, match='No VPC endpoint'):
        await provisioner.create_network('vpc-demo', '192.168.0.0/16')

    assert dispatcher.calls == []


@pytest.mark.asyncio
async def test_missing_vpc_endpoint_is_not_polled_as_pending(dispatcher, fake_clock):
    provisioner = _make_provisioner(dispatcher, fake_clock, session=make_session())

    with pytest.raises(EndpointUnavailableError):
        await provisioner.wait_for_subnet_ready('sn-1')

    assert fake_clock.sleeps == []


# ── Subnet ───────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_create_subnet_sends_fixed_dns_list(dispatcher, fake_clock):
    dispatcher.add_json('POST', f'{VPC_PROXY}/subnets', {'subnet': {'id': 'sn-1', 'status': 'UNKNOWN'}})
    dispatcher.add('GET', f'{VPC_PROXY}/subnets/sn-1', _status('subnet', 'sn-1', 'ACTIVE'))
    provisioner = _make_provisioner(dispatcher, fake_clock)

    subnet_id = await provisioner.create_subnet('net-1', 'sn1', '10.0.0.0/24', '10.0.0.1')

    assert subnet_id == 'sn-1'
    assert dispatcher.calls[0].body == {
        'subnet': {
            'name': 'sn1',
            'cidr': '10.0.0.0/24',
            'gateway_ip': '10.0.0.1',
            'vpc_id': 'net-1',
            'dnsList': ['100.125.4.25', '8.8.8.8'],
        }
    }
    assert DEFAULT_DNS_LIST == ('100.125.4.25', '8.8.8.8')


@pytest.mark.asyncio
async def test_subnet_ok_status_is_not_terminal(dispatcher, fake_clock):
    dispatcher.add('GET', f'{VPC_PROXY}/subnets/sn-1', _status('subnet', 'sn-1', 'OK'))
    provisioner = _make_provisioner(dispatcher, fake_clock)

    with pytest.raises(ProvisioningTimeoutError, match='subnet'):
        await provisioner.wait_for_subnet_ready('sn-1', deadline=fake_clock.now + 1)


@pytest.mark.asyncio
async def test_create_subnet_without_id_fails(dispatcher, fake_clock):
    dispatcher.add_json('POST', f'{VPC_PROXY}/subnets', {'subnet': {}})
    provisioner = _make_provisioner(dispatcher, fake_clock)

    with pytest.raises(ProvisioningError, match='Failed to create subnet'):
        await provisioner.create_subnet('net-1', 'sn1', '10.0.0.0/24', '10.0.0.1')

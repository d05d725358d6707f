"""Shared fixtures for the OTC client tests."""

from __future__ import annotations

import pytest
from otc_fixtures import IAM_ENDPOINT, FakeClock

from otc_cloud.inmemory import InMemoryDispatcher
from otc_cloud.settings import ClientSettings


@pytest.fixture
def settings() -> ClientSettings:
    return ClientSettings(
        endpoint=IAM_ENDPOINT,
        domain_name='OTC-EU-DE-0001',
        username='alice',
        password='s3cret-pass',
        project_name='eu-de_demo',
        region='eu-de',
    )


@pytest.fixture
def dispatcher() -> InMemoryDispatcher:
    return InMemoryDispatcher()


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()

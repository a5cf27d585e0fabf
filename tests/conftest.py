"""Shared fixtures for claim_forwarder tests."""

from __future__ import annotations

from decimal import Decimal

import pytest
from pytest_metadata.plugin import metadata_key
from stellar_sdk import Keypair

from claim_forwarder.flow import ClaimForwardFlow
from claim_forwarder.models.ledger import AccountSnapshot
from claim_forwarder.models.transaction import ComposePolicy, FeePolicy, TimeoutPolicy
from claim_forwarder.stellar.horizon import HorizonClient

from tests.factories import make_account_record
from tests.mocks import TESTNET_PASSPHRASE, FakeHorizon

HORIZON_URL = "https://horizon.test"
FIXED_NOW = 1_700_000_000


def pytest_configure(config):
    """Add network info to the report metadata."""
    meta = config.stash.setdefault(metadata_key, {})
    meta["Network"] = "Fake Horizon (in-process)"
    meta["Passphrase"] = TESTNET_PASSPHRASE


def make_policy(**overrides) -> ComposePolicy:
    """Build a ComposePolicy suitable for testing."""
    defaults = dict(
        base_amount=Decimal(20),
        fee=FeePolicy(250),
        timeout=TimeoutPolicy.at(FIXED_NOW + 300),
        network_passphrase=TESTNET_PASSPHRASE,
    )
    defaults.update(overrides)
    return ComposePolicy(**defaults)


def make_snapshot(account_id: str, sequence: int = 1000, **overrides) -> AccountSnapshot:
    return AccountSnapshot(account_id=account_id, sequence=sequence, **overrides)


@pytest.fixture
def source_keypair():
    return Keypair.random()


@pytest.fixture
def dest_keypair():
    return Keypair.random()


@pytest.fixture
def policy():
    return make_policy()


@pytest.fixture
def fake_horizon(source_keypair):
    """FakeHorizon with the source account registered and no balances."""
    fake = FakeHorizon(HORIZON_URL)
    fake.add_account(make_account_record(source_keypair.public_key, sequence=1000))
    return fake


@pytest.fixture
async def horizon(fake_horizon):
    """HorizonClient wired to the in-process fake."""
    client = HorizonClient(HORIZON_URL, transport=fake_horizon.transport())
    yield client
    await client.close()


@pytest.fixture
def flow(horizon):
    return ClaimForwardFlow(horizon, page_limit=2)

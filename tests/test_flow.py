"""ClaimForwardFlow: end-to-end claim-and-send against the fake Horizon."""

from __future__ import annotations

from decimal import Decimal

import pytest
from stellar_sdk import ClaimClaimableBalance, Keypair, Payment as SdkPayment, TransactionEnvelope

from claim_forwarder.errors import InvalidKeyFormat, MalformedPageError, NotFoundError, TransportError
from claim_forwarder.models.results import Accepted, Rejected

from tests.conftest import make_policy
from tests.factories import make_account_record, make_claimable_record
from tests.mocks import TESTNET_PASSPHRASE

USDC = "USDC:GA5ZSEJYB37JRC5AVCIA5MOP4RHTM335X2KGX3IHOJAPP5RE34K4KZVN"


@pytest.fixture
def seeded(fake_horizon, source_keypair):
    fake_horizon.claimable[source_keypair.public_key] = [
        make_claimable_record(1, "5.0000001"),
        make_claimable_record(2, "100", asset=USDC),
        make_claimable_record(3, "14.9999999"),
    ]
    return fake_horizon


async def test_claim_and_send_happy_path(flow, seeded, source_keypair, dest_keypair):
    report = await flow.run(source_keypair.secret, dest_keypair.public_key, make_policy())

    assert isinstance(report.result, Accepted)
    assert report.snapshot.sequence == 1000
    assert len(report.items) == 3
    assert report.draft.sequence == 1001
    assert report.draft.payment.amount == Decimal(39)

    # What reached the network is what was composed
    envelope = TransactionEnvelope.from_xdr(seeded.submitted[0], TESTNET_PASSPHRASE)
    ops = envelope.transaction.operations
    assert [type(op) for op in ops] == [ClaimClaimableBalance, ClaimClaimableBalance, SdkPayment]
    assert Decimal(ops[-1].amount) == Decimal(39)
    assert len(envelope.signatures) == 1
    assert report.envelope_xdr == seeded.submitted[0]


async def test_account_fetched_once(flow, seeded, source_keypair, dest_keypair):
    await flow.run(source_keypair.secret, dest_keypair.public_key, make_policy())
    account_fetches = [p for _, p in seeded.requests if p.startswith("/accounts/")]
    assert account_fetches == [f"/accounts/{source_keypair.public_key}"]


async def test_rejection_is_reported(flow, seeded, source_keypair, dest_keypair):
    seeded.submit_mode = "reject"

    report = await flow.run(source_keypair.secret, dest_keypair.public_key, make_policy())

    assert isinstance(report.result, Rejected)
    assert "op_underfunded" in report.result.operation_codes
    assert report.envelope_xdr


async def test_pagination_failure_submits_nothing(flow, seeded, source_keypair, dest_keypair):
    seeded.fail_on_page = 2
    with pytest.raises(TransportError):
        await flow.run(source_keypair.secret, dest_keypair.public_key, make_policy())
    assert seeded.submitted == []


async def test_malformed_page_submits_nothing(flow, seeded, source_keypair, dest_keypair):
    seeded.malformed_page = 2
    with pytest.raises(MalformedPageError):
        await flow.run(source_keypair.secret, dest_keypair.public_key, make_policy())
    assert seeded.submitted == []


async def test_missing_source_account(flow, fake_horizon, dest_keypair):
    stranger = Keypair.random()
    with pytest.raises(NotFoundError):
        await flow.run(stranger.secret, dest_keypair.public_key, make_policy())
    assert fake_horizon.submitted == []


async def test_bad_keys_rejected_before_any_request(flow, fake_horizon, source_keypair, dest_keypair):
    with pytest.raises(InvalidKeyFormat):
        await flow.run(source_keypair.public_key, dest_keypair.public_key, make_policy())
    with pytest.raises(InvalidKeyFormat):
        await flow.run(source_keypair.secret, dest_keypair.secret, make_policy())
    assert fake_horizon.requests == []


async def test_prepare_does_not_submit(flow, seeded, source_keypair, dest_keypair):
    report = await flow.prepare(source_keypair, dest_keypair.public_key, make_policy())
    assert report.draft is not None
    assert report.result is None
    assert seeded.submitted == []


async def test_independent_flows_do_not_share_state(flow, seeded, source_keypair, dest_keypair):
    other = Keypair.random()
    seeded.add_account(make_account_record(other.public_key, sequence=77))

    a = await flow.prepare(source_keypair, dest_keypair.public_key, make_policy())
    b = await flow.prepare(other, dest_keypair.public_key, make_policy())

    assert a.draft.sequence == 1001
    assert b.draft.sequence == 78
    assert b.draft.claims == ()
    assert len(a.draft.claims) == 2

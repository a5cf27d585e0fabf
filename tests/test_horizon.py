"""HorizonClient: resource parsing and error translation."""

from __future__ import annotations

from decimal import Decimal

import httpx
import pytest

from claim_forwarder.errors import MalformedPageError, NotFoundError, TransportError
from claim_forwarder.models.ledger import AssetDescriptor
from claim_forwarder.stellar.horizon import HorizonClient
from claim_forwarder.stellar.paging import Paginator

from tests.conftest import HORIZON_URL
from tests.factories import balance_id, make_claimable_record
from tests.mocks import FailingTransport

USDC = "USDC:GA5ZSEJYB37JRC5AVCIA5MOP4RHTM335X2KGX3IHOJAPP5RE34K4KZVN"


async def test_fetch_account_parses_snapshot(horizon, source_keypair):
    snapshot = await horizon.fetch_account(source_keypair.public_key)

    assert snapshot.account_id == source_keypair.public_key
    assert snapshot.sequence == 1000
    assert snapshot.home_domain == "example.com"
    assert snapshot.thresholds.low == 1
    assert snapshot.thresholds.medium == 2
    assert snapshot.thresholds.high == 3
    assert snapshot.signers[0].key == source_keypair.public_key
    assert snapshot.native_balance() == Decimal("100.0000000")
    assert snapshot.balances[0].asset == AssetDescriptor("USDC", "GISSUER")
    assert snapshot.data == (("config.memo", "aGVsbG8="),)


async def test_fetch_account_missing_raises_not_found(horizon, dest_keypair):
    with pytest.raises(NotFoundError) as exc_info:
        await horizon.fetch_account(dest_keypair.public_key)
    assert exc_info.value.account_id == dest_keypair.public_key


async def test_claimable_page_parses_records_and_link(horizon, fake_horizon, source_keypair):
    fake_horizon.claimable[source_keypair.public_key] = [
        make_claimable_record(1, "5.0000001"),
        make_claimable_record(2, "1.5", asset=USDC, sponsor=None),
        make_claimable_record(3, "2"),
    ]

    first = await horizon.claimable_balances(source_keypair.public_key, limit=2)

    assert [r.balance_id for r in first.records] == [balance_id(1), balance_id(2)]
    assert first.records[0].amount == Decimal("5.0000001")
    assert first.records[0].sponsor == "GSPONSOR"
    assert first.records[1].asset.code == "USDC"
    assert first.records[1].sponsor is None
    assert first.next is not None

    second = await first.next.fetch_next()
    assert [r.balance_id for r in second.records] == [balance_id(3)]


async def test_claimable_traversal_over_http(horizon, fake_horizon, source_keypair):
    fake_horizon.claimable[source_keypair.public_key] = [
        make_claimable_record(n) for n in range(1, 6)
    ]

    first = await horizon.claimable_balances(source_keypair.public_key, limit=2)
    items = await Paginator().collect(first)

    assert [i.balance_id for i in items] == [balance_id(n) for n in range(1, 6)]
    # 3 full/partial pages plus the empty terminal page
    assert fake_horizon.page_requests() == 4


async def test_page_limit_is_clamped():
    seen: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.url.params["limit"])
        return httpx.Response(200, json={"_embedded": {"records": []}, "_links": {}})

    async with HorizonClient(HORIZON_URL, transport=httpx.MockTransport(handler)) as client:
        await client.claimable_balances("GABC", limit=1000)
    assert seen == ["200"]


async def test_missing_embedded_records_is_malformed(horizon, fake_horizon, source_keypair):
    fake_horizon.malformed_page = 1
    with pytest.raises(MalformedPageError):
        await horizon.claimable_balances(source_keypair.public_key)


async def test_bad_record_amount_is_malformed(horizon, fake_horizon, source_keypair):
    fake_horizon.claimable[source_keypair.public_key] = [make_claimable_record(1, "lots")]
    with pytest.raises(MalformedPageError):
        await horizon.claimable_balances(source_keypair.public_key)


@pytest.mark.parametrize("amount", ["NaN", "sNaN", "Infinity", "-5"])
async def test_non_finite_or_negative_amount_is_malformed(horizon, fake_horizon, source_keypair, amount):
    fake_horizon.claimable[source_keypair.public_key] = [make_claimable_record(1, amount)]
    with pytest.raises(MalformedPageError):
        await horizon.claimable_balances(source_keypair.public_key)


async def test_non_json_body_is_malformed():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>gateway</html>")

    async with HorizonClient(HORIZON_URL, transport=httpx.MockTransport(handler)) as client:
        with pytest.raises(MalformedPageError):
            await client.claimable_balances("GABC")


async def test_server_error_is_retryable_transport_error(horizon, fake_horizon, source_keypair):
    fake_horizon.fail_on_page = 1
    with pytest.raises(TransportError) as exc_info:
        await horizon.claimable_balances(source_keypair.public_key)
    assert exc_info.value.status == 503
    assert exc_info.value.retryable


@pytest.mark.parametrize("exc_type", [httpx.ConnectError, httpx.ReadTimeout])
async def test_network_failures_become_transport_errors(exc_type):
    transport = FailingTransport(exc_type)
    async with HorizonClient(HORIZON_URL, transport=transport) as client:
        with pytest.raises(TransportError):
            await client.fetch_account("GABC")
    assert transport.calls == 1

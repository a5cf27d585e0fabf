"""Claimable balance discovery for a single account."""

from __future__ import annotations

import logging

from claim_forwarder.errors import InvalidKeyFormat
from claim_forwarder.interfaces.horizon import LedgerReader
from claim_forwarder.keys import KeyKind, classify_key
from claim_forwarder.models.ledger import ClaimableItem
from claim_forwarder.stellar.paging import Paginator

log = logging.getLogger(__name__)


class BalanceDiscoverer:
    """Lists every claimable balance an account is a claimant of."""

    def __init__(self, reader: LedgerReader, page_limit: int = 200) -> None:
        self._reader = reader
        self._page_limit = page_limit
        self._paginator: Paginator[ClaimableItem] = Paginator()

    async def discover(
        self, account_id: str, verify_account: bool = True,
    ) -> list[ClaimableItem]:
        """Return all claimable balances for ``account_id`` in discovery order.

        Horizon answers an unknown claimant with an empty collection, so the
        account is fetched first when ``verify_account`` is set; a missing
        account raises NotFoundError while an empty list means "nothing to
        claim".
        """
        if classify_key(account_id) is not KeyKind.PUBLIC:
            raise InvalidKeyFormat("claimant must be a public key (G...)")

        if verify_account:
            await self._reader.fetch_account(account_id)

        first_page = await self._reader.claimable_balances(account_id, self._page_limit)
        items = await self._paginator.collect(first_page)
        log.info("Discovered %d claimable balances for %s", len(items), account_id[:16])
        return items

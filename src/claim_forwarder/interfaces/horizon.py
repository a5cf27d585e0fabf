"""LedgerReader protocol - read-only Horizon queries used by the flow."""

from __future__ import annotations

from typing import Protocol

from claim_forwarder.models.ledger import AccountSnapshot, ClaimableItem
from claim_forwarder.stellar.paging import Page


class LedgerReader(Protocol):
    """Fetches account snapshots and claimable balance pages."""

    async def fetch_account(self, account_id: str) -> AccountSnapshot:
        """Point-in-time account view. Raises NotFoundError if absent."""
        ...

    async def claimable_balances(self, claimant: str, limit: int = 200) -> Page[ClaimableItem]:
        """First page of balances claimable by ``claimant``."""
        ...

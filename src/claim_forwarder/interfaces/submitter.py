"""TransactionSubmitter protocol - signs and submits a composed draft."""

from __future__ import annotations

from typing import Protocol, Sequence

from stellar_sdk import Keypair

from claim_forwarder.models.results import SubmissionResult
from claim_forwarder.models.transaction import SignedTransaction, TransactionDraft


class TransactionSubmitter(Protocol):
    """Signs a draft and submits it exactly once."""

    def sign(self, draft: TransactionDraft, signing_keys: Sequence[str | Keypair]) -> SignedTransaction:
        ...

    async def submit(
        self, draft: TransactionDraft, signing_keys: Sequence[str | Keypair],
    ) -> SubmissionResult:
        """Returns Accepted or Rejected; raises TransportError on I/O failure."""
        ...

    async def submit_signed(self, signed: SignedTransaction) -> SubmissionResult:
        """Submit an already signed transaction once."""
        ...

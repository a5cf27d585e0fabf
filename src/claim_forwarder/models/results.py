"""Submission outcomes and the end-to-end flow report."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union

from claim_forwarder.models.ledger import AccountSnapshot, ClaimableItem
from claim_forwarder.models.transaction import TransactionDraft


@dataclass(frozen=True)
class Accepted:
    """The network applied the transaction."""

    tx_hash: str
    ledger: int | None
    result_xdr: str | None
    envelope_xdr: str

    @property
    def success(self) -> bool:
        return True


@dataclass(frozen=True)
class Rejected:
    """The network evaluated the transaction and declined it.

    Not a transport failure. ``operation_codes`` holds one code per operation
    (e.g. ``"op_underfunded"``) when Horizon reports them.
    """

    transaction_code: str | None
    operation_codes: tuple[str, ...]
    result_xdr: str | None
    envelope_xdr: str
    tx_hash: str | None = None

    @property
    def success(self) -> bool:
        return False


SubmissionResult = Union[Accepted, Rejected]


@dataclass
class FlowReport:
    """Everything one claim-and-forward run observed and produced."""

    snapshot: AccountSnapshot
    items: list[ClaimableItem] = field(default_factory=list)
    draft: TransactionDraft | None = None
    result: SubmissionResult | None = None

    @property
    def envelope_xdr(self) -> str | None:
        return self.result.envelope_xdr if self.result else None

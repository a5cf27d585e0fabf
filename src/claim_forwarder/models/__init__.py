"""Data models for the claim forwarder."""

from claim_forwarder.models.ledger import (
    AccountSnapshot,
    AssetDescriptor,
    Balance,
    ClaimableItem,
    Signer,
    Thresholds,
)
from claim_forwarder.models.transaction import (
    AmountRounding,
    ClaimBalance,
    ComposePolicy,
    FeePolicy,
    Operation,
    Payment,
    SignedTransaction,
    TimeoutPolicy,
    TransactionDraft,
)
from claim_forwarder.models.results import Accepted, FlowReport, Rejected, SubmissionResult
from claim_forwarder.models.config import ForwarderConfig

__all__ = [
    "AccountSnapshot", "AssetDescriptor", "Balance", "ClaimableItem", "Signer", "Thresholds",
    "AmountRounding", "ClaimBalance", "ComposePolicy", "FeePolicy", "Operation", "Payment",
    "SignedTransaction", "TimeoutPolicy", "TransactionDraft",
    "Accepted", "FlowReport", "Rejected", "SubmissionResult",
    "ForwarderConfig",
]

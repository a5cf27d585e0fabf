"""Protocol interfaces for claim_forwarder components."""

from claim_forwarder.interfaces.horizon import LedgerReader
from claim_forwarder.interfaces.submitter import TransactionSubmitter

__all__ = ["LedgerReader", "TransactionSubmitter"]

"""Claim discovery and transaction composition."""

from claim_forwarder.claims.discoverer import BalanceDiscoverer
from claim_forwarder.claims.composer import TransactionComposer

__all__ = ["BalanceDiscoverer", "TransactionComposer"]

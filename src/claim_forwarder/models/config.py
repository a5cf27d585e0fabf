"""Configuration models for the claim forwarder."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from claim_forwarder.models.ledger import AssetDescriptor
from claim_forwarder.models.transaction import (
    DEFAULT_BASE_FEE,
    AmountRounding,
    ComposePolicy,
    FeePolicy,
    TimeoutPolicy,
)

NETWORK_PASSPHRASES = {
    "testnet": "Test SDF Network ; September 2015",
    "mainnet": "Public Global Stellar Network ; September 2015",
}

HORIZON_URLS = {
    "testnet": "https://horizon-testnet.stellar.org",
    "mainnet": "https://horizon.stellar.org",
}


@dataclass
class ForwarderConfig:
    """Complete forwarder configuration."""

    # Stellar
    network: str = "testnet"
    horizon_url: str = ""  # derived from network when empty
    network_passphrase: str = ""  # derived from network when empty
    keypair_secret: str = ""  # loaded from env var CLAIM_FORWARDER_SECRET
    destination: str = ""

    # Transaction
    base_amount: Decimal = Decimal(0)
    base_fee: int = DEFAULT_BASE_FEE
    timeout_seconds: int | None = 300  # None means no expiration
    rounding: AmountRounding = AmountRounding.FLOOR
    target_asset: str = "native"
    max_snapshot_age: float | None = None

    # HTTP client
    page_limit: int = 200  # Horizon maximum
    request_timeout: float = 30.0

    # Logging
    log_level: str = "info"

    def _unknown_network(self) -> ValueError:
        return ValueError(f"unknown network {self.network!r}")

    def resolved_horizon_url(self) -> str:
        if self.horizon_url:
            return self.horizon_url
        if self.network not in HORIZON_URLS:
            raise self._unknown_network()
        return HORIZON_URLS[self.network]

    def resolved_passphrase(self) -> str:
        if self.network_passphrase:
            return self.network_passphrase
        if self.network not in NETWORK_PASSPHRASES:
            raise self._unknown_network()
        return NETWORK_PASSPHRASES[self.network]

    def timeout_policy(self) -> TimeoutPolicy:
        if self.timeout_seconds is None:
            return TimeoutPolicy.never()
        return TimeoutPolicy.after(self.timeout_seconds)

    def to_policy(self) -> ComposePolicy:
        return ComposePolicy(
            base_amount=self.base_amount,
            target_asset=AssetDescriptor.parse(self.target_asset),
            fee=FeePolicy(self.base_fee),
            timeout=self.timeout_policy(),
            rounding=self.rounding,
            network_passphrase=self.resolved_passphrase(),
            max_snapshot_age=self.max_snapshot_age,
        )

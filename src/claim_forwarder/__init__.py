"""claim_forwarder - claim pending Stellar claimable balances and forward the proceeds."""

__version__ = "0.1.0"

"""Transaction composition models: operations, policies and drafts."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from decimal import ROUND_DOWN, ROUND_HALF_EVEN, Decimal
from enum import Enum
from typing import Union

from stellar_sdk import (
    Account,
    ClaimClaimableBalance,
    Payment as SdkPayment,
    TransactionBuilder,
    TransactionEnvelope,
)
from stellar_sdk.operation import Operation as SdkOperation

from claim_forwarder.models.ledger import AssetDescriptor

STROOP = Decimal("0.0000001")
DEFAULT_BASE_FEE = 250  # stroops per operation


@dataclass(frozen=True)
class ClaimBalance:
    balance_id: str


@dataclass(frozen=True)
class Payment:
    destination: str
    asset: AssetDescriptor
    amount: Decimal


Operation = Union[ClaimBalance, Payment]


def to_sdk_operation(op: Operation) -> SdkOperation:
    """Map our closed operation set onto stellar_sdk operations."""
    if isinstance(op, ClaimBalance):
        return ClaimClaimableBalance(balance_id=op.balance_id)
    if isinstance(op, Payment):
        return SdkPayment(
            destination=op.destination,
            asset=op.asset.to_sdk(),
            amount=op.amount,
        )
    raise TypeError(f"unsupported operation: {op!r}")


class AmountRounding(str, Enum):
    """How the final payment amount is reduced to a transferable value."""

    FLOOR = "floor"  # whole units, truncated toward zero
    HALF_EVEN = "half_even"  # whole units, banker's rounding
    EXACT = "exact"  # stroop precision, excess digits truncated

    def apply(self, amount: Decimal) -> Decimal:
        if self is AmountRounding.FLOOR:
            return amount.to_integral_value(rounding=ROUND_DOWN)
        if self is AmountRounding.HALF_EVEN:
            return amount.to_integral_value(rounding=ROUND_HALF_EVEN)
        return amount.quantize(STROOP, rounding=ROUND_DOWN)


@dataclass(frozen=True)
class FeePolicy:
    """Per-operation base fee in stroops.

    The network charges a flat rate per operation, so the transaction's total
    fee is ``base_fee * len(operations)``.
    """

    base_fee: int = DEFAULT_BASE_FEE

    def __post_init__(self) -> None:
        if self.base_fee < 100:
            raise ValueError(f"base_fee must be at least 100 stroops, got {self.base_fee}")


@dataclass(frozen=True)
class TimeoutPolicy:
    """Transaction expiration.

    ``never()`` produces a transaction that stays valid until its sequence
    number is consumed. That removes the replay window, so it must be asked
    for explicitly.
    """

    expires_at: int | None = None  # unix seconds, absolute
    relative_seconds: int | None = None
    infinite: bool = False

    @classmethod
    def at(cls, epoch_seconds: int) -> TimeoutPolicy:
        if epoch_seconds <= 0:
            raise ValueError("expiration must be a positive unix timestamp")
        return cls(expires_at=epoch_seconds)

    @classmethod
    def after(cls, seconds: int) -> TimeoutPolicy:
        if seconds <= 0:
            raise ValueError("timeout must be positive; use TimeoutPolicy.never() for no expiry")
        return cls(relative_seconds=seconds)

    @classmethod
    def never(cls) -> TimeoutPolicy:
        return cls(infinite=True)

    def resolve(self, now: float | None = None) -> int:
        """Absolute max_time for the transaction's time bounds (0 = none)."""
        if self.infinite:
            return 0
        if self.expires_at is not None:
            return self.expires_at
        if self.relative_seconds is not None:
            return int(now if now is not None else time.time()) + self.relative_seconds
        raise ValueError("TimeoutPolicy needs an expiration or never()")


@dataclass(frozen=True)
class ComposePolicy:
    """Everything the composer needs besides the snapshot and claim set."""

    base_amount: Decimal = Decimal(0)
    target_asset: AssetDescriptor = field(default_factory=AssetDescriptor.native)
    fee: FeePolicy = field(default_factory=FeePolicy)
    timeout: TimeoutPolicy = field(default_factory=lambda: TimeoutPolicy.after(300))
    rounding: AmountRounding = AmountRounding.FLOOR
    network_passphrase: str = "Test SDF Network ; September 2015"
    max_snapshot_age: float | None = None  # seconds; None disables the check

    def __post_init__(self) -> None:
        if not isinstance(self.base_amount, Decimal):
            raise TypeError("base_amount must be a Decimal")
        if not self.base_amount.is_finite() or self.base_amount < 0:
            raise ValueError("base_amount must be a finite, non-negative amount")


@dataclass(frozen=True)
class TransactionDraft:
    """A sealed, ordered set of operations bound to one source sequence.

    ``sequence`` is the sequence number the transaction will consume, i.e.
    the snapshot's sequence plus one.
    """

    source_account: str
    sequence: int
    operations: tuple[Operation, ...]
    base_fee: int
    max_time: int  # 0 means no expiration
    network_passphrase: str
    claimed_total: Decimal = Decimal(0)

    @property
    def payment(self) -> Payment:
        last = self.operations[-1]
        if not isinstance(last, Payment):
            raise TypeError("draft does not end with a payment")
        return last

    @property
    def claims(self) -> tuple[ClaimBalance, ...]:
        return tuple(op for op in self.operations if isinstance(op, ClaimBalance))

    @property
    def total_fee(self) -> int:
        return self.base_fee * len(self.operations)

    def build_envelope(self) -> TransactionEnvelope:
        """Build a fresh, unsigned envelope. Deterministic for a given draft."""
        # TransactionBuilder consumes sequence + 1 from the Account it is given.
        account = Account(self.source_account, self.sequence - 1)
        builder = TransactionBuilder(
            source_account=account,
            network_passphrase=self.network_passphrase,
            base_fee=self.base_fee,
        )
        for op in self.operations:
            builder.append_operation(to_sdk_operation(op))
        builder.add_time_bounds(0, self.max_time)
        return builder.build()

    def canonical_xdr(self) -> str:
        return self.build_envelope().to_xdr()


@dataclass(frozen=True)
class SignedTransaction:
    """A draft sealed with one or more signatures."""

    draft: TransactionDraft
    envelope_xdr: str
    tx_hash: str  # hex
    signatures: tuple[bytes, ...]

"""Read-only ledger views: accounts, balances and claimable balances."""

from __future__ import annotations

import base64
import binascii
import time
from dataclasses import dataclass, field
from decimal import Decimal

from stellar_sdk import Asset


@dataclass(frozen=True)
class AssetDescriptor:
    """Native lumens or an issued asset identified by code + issuer."""

    code: str = "XLM"
    issuer: str | None = None  # None for native

    @classmethod
    def native(cls) -> AssetDescriptor:
        return cls()

    @classmethod
    def parse(cls, canonical: str) -> AssetDescriptor:
        """Parse Horizon's canonical asset string ("native" or "CODE:ISSUER")."""
        if canonical == "native":
            return cls.native()
        code, sep, issuer = canonical.partition(":")
        if not sep or not code or not issuer:
            raise ValueError(f"unrecognized asset string: {canonical!r}")
        return cls(code=code, issuer=issuer)

    @property
    def is_native(self) -> bool:
        return self.issuer is None

    @property
    def asset_type(self) -> str:
        if self.is_native:
            return "native"
        return "credit_alphanum4" if len(self.code) <= 4 else "credit_alphanum12"

    def canonical(self) -> str:
        if self.is_native:
            return "native"
        return f"{self.code}:{self.issuer}"

    def to_sdk(self) -> Asset:
        if self.is_native:
            return Asset.native()
        return Asset(self.code, self.issuer)

    def __str__(self) -> str:
        return self.canonical()


@dataclass(frozen=True)
class Balance:
    """One trustline (or the native balance) held by an account."""

    asset: AssetDescriptor
    amount: Decimal


@dataclass(frozen=True)
class Signer:
    key: str
    weight: int
    type: str  # "ed25519_public_key", "sha256_hash", ...


@dataclass(frozen=True)
class Thresholds:
    low: int = 0
    medium: int = 0
    high: int = 0


@dataclass(frozen=True)
class AccountSnapshot:
    """Point-in-time view of an account as returned by Horizon.

    Never mutated. Fetch a fresh snapshot to observe newer state.
    """

    account_id: str
    sequence: int
    signers: tuple[Signer, ...] = ()
    thresholds: Thresholds = field(default_factory=Thresholds)
    balances: tuple[Balance, ...] = ()
    home_domain: str | None = None
    data: tuple[tuple[str, str], ...] = ()  # (key, base64 value)
    fetched_at: float = field(default_factory=time.time)

    def native_balance(self) -> Decimal:
        for bal in self.balances:
            if bal.asset.is_native:
                return bal.amount
        return Decimal(0)


@dataclass(frozen=True)
class ClaimableItem:
    """A claimable balance the account is listed as a claimant of."""

    balance_id: str
    asset: AssetDescriptor
    amount: Decimal
    sponsor: str | None = None


# ── Display projections (CLI only) ─────────────────────────────


def _decode_data_value(value: str) -> str:
    try:
        return base64.b64decode(value).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        return "<binary>"


def describe_account(snapshot: AccountSnapshot) -> list[str]:
    """Render an account snapshot as display lines."""
    lines = [
        f"Account:         {snapshot.account_id}",
        f"Sequence number: {snapshot.sequence}",
        f"Home domain:     {snapshot.home_domain or '(none)'}",
        "Balances:",
    ]
    for bal in snapshot.balances:
        label = "native" if bal.asset.is_native else f"{bal.asset.asset_type} {bal.asset.code}"
        lines.append(f"--> {label}: {bal.amount}")
        if not bal.asset.is_native:
            lines.append(f"----> issuer: {bal.asset.issuer}")
    lines.append("Data:")
    for key, value in snapshot.data:
        lines.append(f"--> {key}: {_decode_data_value(value)}")
        lines.append(f"----> {value}")
    lines.append("Signers:")
    for signer in snapshot.signers:
        lines.append(f"--> {signer.weight}: {signer.key}")
        lines.append(f"----> Type: {signer.type}")
    lines.extend([
        "Thresholds:",
        f"--> High: {snapshot.thresholds.high}",
        f"--> Med: {snapshot.thresholds.medium}",
        f"--> Low: {snapshot.thresholds.low}",
    ])
    return lines


def describe_claimable(items: list[ClaimableItem]) -> list[str]:
    """Render claimable balances as display lines."""
    lines = []
    for item in items:
        lines.append(f"--> {item.balance_id}: {item.amount} {item.asset}")
        lines.append(f"----> From {item.sponsor or 'n/a'}")
    return lines

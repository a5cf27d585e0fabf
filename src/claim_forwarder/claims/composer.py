"""Transaction composer - claims plus a single forwarding payment."""

from __future__ import annotations

import logging
import time
from decimal import Decimal

from stellar_sdk import StrKey

from claim_forwarder.errors import EmptySourceError, StaleSnapshotError
from claim_forwarder.models.ledger import AccountSnapshot, ClaimableItem
from claim_forwarder.models.transaction import (
    ClaimBalance,
    ComposePolicy,
    Operation,
    Payment,
    TransactionDraft,
)

log = logging.getLogger(__name__)

MAX_OPERATIONS = 100  # per-transaction network limit


class TransactionComposer:
    """Builds a sealed TransactionDraft from one account snapshot.

    Operation order is fixed: every matching claim in discovery order, then
    the payment that spends their proceeds.
    """

    def __init__(self, clock=time.time) -> None:
        self._clock = clock

    def _check_snapshot(
        self,
        snapshot: AccountSnapshot,
        policy: ComposePolicy,
        consumed_sequence: int | None,
    ) -> None:
        if not StrKey.is_valid_ed25519_public_key(snapshot.account_id):
            raise EmptySourceError(f"snapshot has no valid source account: {snapshot.account_id!r}")
        if snapshot.sequence < 0:
            raise EmptySourceError(f"snapshot has invalid sequence number {snapshot.sequence}")
        if consumed_sequence is not None and snapshot.sequence < consumed_sequence:
            raise StaleSnapshotError(
                f"sequence {snapshot.sequence + 1} was already consumed "
                f"(last used {consumed_sequence})"
            )
        if policy.max_snapshot_age is not None:
            age = self._clock() - snapshot.fetched_at
            if age > policy.max_snapshot_age:
                raise StaleSnapshotError(
                    f"snapshot is {age:.1f}s old (max {policy.max_snapshot_age}s)"
                )

    def compose(
        self,
        snapshot: AccountSnapshot,
        items: list[ClaimableItem],
        destination: str,
        policy: ComposePolicy,
        consumed_sequence: int | None = None,
    ) -> TransactionDraft:
        """Compose the claim-and-forward transaction.

        ``consumed_sequence`` is the highest sequence number the caller knows
        has been used by an earlier submission from this account.
        """
        self._check_snapshot(snapshot, policy, consumed_sequence)

        operations: list[Operation] = []
        claimed = Decimal(0)
        for item in items:
            if item.asset != policy.target_asset:
                log.debug("Skipping %s: asset %s", item.balance_id[:16], item.asset)
                continue
            operations.append(ClaimBalance(item.balance_id))
            claimed += item.amount

        amount = policy.rounding.apply(policy.base_amount + claimed)
        if amount <= 0:
            log.warning(
                "Payment amount is %s %s; the network rejects non-positive payments",
                amount,
                policy.target_asset,
            )
        operations.append(Payment(destination, policy.target_asset, amount))

        if len(operations) > MAX_OPERATIONS:
            raise ValueError(
                f"{len(operations)} operations exceed the {MAX_OPERATIONS}-operation limit"
            )

        if policy.timeout.infinite:
            log.warning(
                "Composing a transaction with no expiration; it stays valid "
                "until sequence %d is consumed",
                snapshot.sequence + 1,
            )

        draft = TransactionDraft(
            source_account=snapshot.account_id,
            sequence=snapshot.sequence + 1,
            operations=tuple(operations),
            base_fee=policy.fee.base_fee,
            max_time=policy.timeout.resolve(self._clock()),
            network_passphrase=policy.network_passphrase,
            claimed_total=claimed,
        )
        log.info(
            "Composed %d claims + payment of %s %s to %s (fee %d stroops)",
            len(operations) - 1,
            amount,
            policy.target_asset,
            destination[:16],
            draft.total_fee,
        )
        return draft

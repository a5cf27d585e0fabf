"""Claim-and-forward flow - wires discovery, composition and submission."""

from __future__ import annotations

import logging
from typing import Sequence

from stellar_sdk import Keypair

from claim_forwarder.claims.composer import TransactionComposer
from claim_forwarder.claims.discoverer import BalanceDiscoverer
from claim_forwarder.interfaces.submitter import TransactionSubmitter
from claim_forwarder.keys import keypair_from_public, keypair_from_secret
from claim_forwarder.models.config import ForwarderConfig
from claim_forwarder.models.results import FlowReport
from claim_forwarder.models.transaction import ComposePolicy
from claim_forwarder.stellar.horizon import HorizonClient
from claim_forwarder.stellar.submitter import SubmissionCoordinator

log = logging.getLogger(__name__)


class ClaimForwardFlow:
    """Claims every matching balance of an account and forwards the proceeds.

    Steps run strictly one after another: the snapshot's sequence number
    fixes the transaction, so nothing is fetched concurrently. Any error
    before submission aborts the run and nothing is submitted. Cancel the
    surrounding task to abort a run cooperatively.
    """

    def __init__(self, client: HorizonClient, page_limit: int = 200) -> None:
        self.client = client
        self.discoverer = BalanceDiscoverer(client, page_limit)
        self.composer = TransactionComposer()
        self.submitter: TransactionSubmitter = SubmissionCoordinator(client)

    @classmethod
    def from_config(cls, cfg: ForwarderConfig) -> ClaimForwardFlow:
        client = HorizonClient(cfg.resolved_horizon_url(), cfg.request_timeout)
        return cls(client, cfg.page_limit)

    async def close(self) -> None:
        await self.client.close()

    async def inspect(self, account_id: str) -> FlowReport:
        """Fetch the snapshot and claimable balances without composing."""
        snapshot = await self.client.fetch_account(account_id)
        items = await self.discoverer.discover(account_id, verify_account=False)
        return FlowReport(snapshot=snapshot, items=items)

    async def prepare(
        self,
        source: Keypair,
        destination: str,
        policy: ComposePolicy,
        consumed_sequence: int | None = None,
    ) -> FlowReport:
        """Snapshot, discover and compose. Nothing is signed or sent."""
        keypair_from_public(destination)
        report = await self.inspect(source.public_key)
        report.draft = self.composer.compose(
            report.snapshot, report.items, destination, policy, consumed_sequence,
        )
        return report

    async def run(
        self,
        secret: str,
        destination: str,
        policy: ComposePolicy,
        extra_signers: Sequence[str | Keypair] = (),
        consumed_sequence: int | None = None,
    ) -> FlowReport:
        """Full claim-and-send run. Returns the report with the submission result."""
        source = keypair_from_secret(secret)

        log.info("Claim-and-forward for %s -> %s", source.public_key[:16], destination[:16])
        report = await self.prepare(source, destination, policy, consumed_sequence)
        draft = report.draft
        report.result = await self.submitter.submit(draft, [source, *extra_signers])
        log.info("Transaction XDR: %s", report.result.envelope_xdr)
        return report

"""Submission coordinator - signs a draft, submits it once, classifies the reply."""

from __future__ import annotations

import logging
from typing import Sequence

import httpx
from stellar_sdk import Keypair

from claim_forwarder.errors import InvalidKeyFormat, TransportError
from claim_forwarder.keys import keypair_from_secret
from claim_forwarder.models.results import Accepted, Rejected, SubmissionResult
from claim_forwarder.models.transaction import SignedTransaction, TransactionDraft
from claim_forwarder.stellar.horizon import HorizonClient, is_retryable_status

log = logging.getLogger(__name__)


def _signer(key: str | Keypair) -> Keypair:
    if isinstance(key, Keypair):
        if not key.can_sign():
            raise InvalidKeyFormat("signing keypair has no secret seed")
        return key
    return keypair_from_secret(key)


def _rejection(body: dict, signed: SignedTransaction) -> Rejected | None:
    """Build a Rejected result from a Horizon transaction_failed body."""
    extras = body.get("extras") or {}
    codes = extras.get("result_codes")
    if not isinstance(codes, dict):
        return None
    return Rejected(
        transaction_code=codes.get("transaction"),
        operation_codes=tuple(codes.get("operations") or ()),
        result_xdr=extras.get("result_xdr"),
        envelope_xdr=signed.envelope_xdr,
        tx_hash=signed.tx_hash,
    )


class SubmissionCoordinator:
    """Signs and submits composed drafts.

    Submission happens exactly once per call. Resubmitting after an
    ambiguous failure is the caller's decision: the transaction is bound to
    a single sequence number.
    """

    def __init__(self, sink: HorizonClient) -> None:
        self._sink = sink

    def sign(
        self, draft: TransactionDraft, signing_keys: Sequence[str | Keypair],
    ) -> SignedTransaction:
        """Sign the draft's canonical encoding with every supplied key.

        ed25519 signatures are deterministic, so signing the same draft with
        the same key always yields the same bytes.
        """
        if not signing_keys:
            raise InvalidKeyFormat("at least one signing key is required")
        keypairs = [_signer(k) for k in signing_keys]

        envelope = draft.build_envelope()
        for kp in keypairs:
            envelope.sign(kp)

        return SignedTransaction(
            draft=draft,
            envelope_xdr=envelope.to_xdr(),
            tx_hash=envelope.hash_hex(),
            signatures=tuple(ds.signature for ds in envelope.signatures),
        )

    async def submit(
        self, draft: TransactionDraft, signing_keys: Sequence[str | Keypair],
    ) -> SubmissionResult:
        signed = self.sign(draft, signing_keys)
        return await self.submit_signed(signed)

    async def submit_signed(self, signed: SignedTransaction) -> SubmissionResult:
        log.info(
            "Submitting tx %s (%d operations, sequence %d)",
            signed.tx_hash[:16],
            len(signed.draft.operations),
            signed.draft.sequence,
        )
        resp = await self._sink.submit_envelope(signed.envelope_xdr)
        return self._classify(resp, signed)

    def _classify(self, resp: httpx.Response, signed: SignedTransaction) -> SubmissionResult:
        xdr = signed.envelope_xdr
        try:
            body = resp.json()
        except ValueError:
            body = None

        if resp.is_success and isinstance(body, dict):
            log.info("Transaction %s accepted in ledger %s", signed.tx_hash[:16], body.get("ledger"))
            return Accepted(
                tx_hash=body.get("hash") or signed.tx_hash,
                ledger=body.get("ledger"),
                result_xdr=body.get("result_xdr"),
                envelope_xdr=xdr,
            )

        if resp.status_code == 400 and isinstance(body, dict):
            rejected = _rejection(body, signed)
            if rejected is not None:
                log.warning(
                    "Transaction %s rejected: %s %s",
                    signed.tx_hash[:16],
                    rejected.transaction_code,
                    list(rejected.operation_codes),
                )
                return rejected

        log.error("Submission of %s failed with HTTP %d", signed.tx_hash[:16], resp.status_code)
        raise TransportError(
            f"Horizon HTTP {resp.status_code} on submission",
            status=resp.status_code,
            retryable=is_retryable_status(resp.status_code),
            envelope_xdr=xdr,
        )

"""Error taxonomy for the claim-and-forward flow.

Everything except ``Rejected`` submissions is raised. Rejections are an
expected protocol outcome and are returned as data by the submitter.
"""

from __future__ import annotations


class ClaimFlowError(Exception):
    """Base class for all claim_forwarder errors."""


class TransportError(ClaimFlowError):
    """Network or I/O failure talking to Horizon.

    ``envelope_xdr`` is set when the failure happened while submitting a
    signed transaction, so the caller can still audit what was sent.
    """

    def __init__(
        self,
        message: str,
        *,
        status: int | None = None,
        retryable: bool = True,
        envelope_xdr: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status = status
        self.retryable = retryable
        self.envelope_xdr = envelope_xdr


class NotFoundError(ClaimFlowError):
    """The requested account does not exist on the network."""

    def __init__(self, account_id: str) -> None:
        super().__init__(f"account not found: {account_id}")
        self.account_id = account_id


class MalformedPageError(ClaimFlowError):
    """Horizon returned a response that does not match the expected shape."""


class StaleSnapshotError(ClaimFlowError):
    """The account snapshot cannot be used to compose a transaction."""


class EmptySourceError(StaleSnapshotError):
    """The snapshot has no usable source account or sequence number."""


class InvalidKeyFormat(ClaimFlowError, ValueError):
    """A key string is neither a secret seed (S...) nor a public key (G...)."""

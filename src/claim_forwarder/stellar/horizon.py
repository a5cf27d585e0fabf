"""Horizon REST adapter - account, claimable balance and submission endpoints."""

from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation
from typing import Any

import httpx

from claim_forwarder.errors import MalformedPageError, NotFoundError, TransportError
from claim_forwarder.models.ledger import (
    AccountSnapshot,
    AssetDescriptor,
    Balance,
    ClaimableItem,
    Signer,
    Thresholds,
)
from claim_forwarder.stellar.paging import Page, PageLink

log = logging.getLogger(__name__)

MAX_PAGE_LIMIT = 200


def is_retryable_status(status: int) -> bool:
    return status >= 500 or status == 429


def _parse_decimal(value: Any, what: str) -> Decimal:
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, TypeError) as exc:
        raise MalformedPageError(f"bad {what} amount: {value!r}") from exc
    if not amount.is_finite() or amount < 0:
        raise MalformedPageError(f"bad {what} amount: {value!r}")
    return amount


def _parse_balance(raw: dict) -> Balance:
    if raw.get("asset_type") == "native":
        asset = AssetDescriptor.native()
    else:
        # Liquidity pool shares carry no code/issuer; keep them visible by id.
        code = raw.get("asset_code") or raw.get("asset_type", "unknown")
        issuer = raw.get("asset_issuer") or raw.get("liquidity_pool_id", "")
        asset = AssetDescriptor(code=code, issuer=issuer)
    return Balance(asset=asset, amount=_parse_decimal(raw.get("balance"), "balance"))


def parse_account(raw: dict) -> AccountSnapshot:
    """Convert a Horizon account resource into an AccountSnapshot."""
    try:
        thresholds = raw.get("thresholds", {})
        return AccountSnapshot(
            account_id=raw["account_id"],
            sequence=int(raw["sequence"]),
            signers=tuple(
                Signer(key=s["key"], weight=int(s["weight"]), type=s.get("type", ""))
                for s in raw.get("signers", [])
            ),
            thresholds=Thresholds(
                low=int(thresholds.get("low_threshold", 0)),
                medium=int(thresholds.get("med_threshold", 0)),
                high=int(thresholds.get("high_threshold", 0)),
            ),
            balances=tuple(_parse_balance(b) for b in raw.get("balances", [])),
            home_domain=raw.get("home_domain") or None,
            data=tuple(sorted(raw.get("data", {}).items())),
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise MalformedPageError(f"malformed account resource: {exc}") from exc


def parse_claimable(raw: dict) -> ClaimableItem:
    """Convert a Horizon claimable_balance record into a ClaimableItem."""
    try:
        return ClaimableItem(
            balance_id=raw["id"],
            asset=AssetDescriptor.parse(raw["asset"]),
            amount=_parse_decimal(raw["amount"], "claimable"),
            sponsor=raw.get("sponsor") or None,
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise MalformedPageError(f"malformed claimable balance record: {exc}") from exc


class HorizonClient:
    """Thin async client for the Horizon endpoints the flow needs.

    Every call is a single request; nothing is retried here.
    """

    def __init__(
        self,
        horizon_url: str,
        request_timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = horizon_url.rstrip("/")
        self._http = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=httpx.Timeout(request_timeout, connect=10),
            transport=transport,
            headers={"Accept": "application/json"},
        )

    async def close(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> HorizonClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def _get(self, url: str, params: dict | None = None) -> httpx.Response:
        try:
            resp = await self._http.get(url, params=params)
        except httpx.TimeoutException as exc:
            raise TransportError(f"Horizon request timed out: {url}") from exc
        except httpx.TransportError as exc:
            raise TransportError(f"Horizon request failed: {exc}") from exc
        return resp

    @staticmethod
    def _json_body(resp: httpx.Response) -> dict:
        try:
            body = resp.json()
        except ValueError as exc:
            raise MalformedPageError(
                f"non-JSON response from {resp.request.url} (HTTP {resp.status_code})"
            ) from exc
        if not isinstance(body, dict):
            raise MalformedPageError(f"unexpected JSON document from {resp.request.url}")
        return body

    @staticmethod
    def _raise_for_status(resp: httpx.Response) -> None:
        if resp.is_success:
            return
        raise TransportError(
            f"Horizon HTTP {resp.status_code} for {resp.request.url}",
            status=resp.status_code,
            retryable=is_retryable_status(resp.status_code),
        )

    # ── Accounts ──────────────────────────────────────────

    async def fetch_account(self, account_id: str) -> AccountSnapshot:
        """GET /accounts/{id}. Raises NotFoundError for unknown accounts."""
        resp = await self._get(f"/accounts/{account_id}")
        if resp.status_code == 404:
            raise NotFoundError(account_id)
        self._raise_for_status(resp)
        snapshot = parse_account(self._json_body(resp))
        log.debug("Fetched account %s at sequence %d", account_id[:16], snapshot.sequence)
        return snapshot

    # ── Claimable balances ────────────────────────────────

    async def claimable_balances(
        self, claimant: str, limit: int = MAX_PAGE_LIMIT,
    ) -> Page[ClaimableItem]:
        """First page of claimable balances listing ``claimant``."""
        params = {
            "claimant": claimant,
            "order": "asc",
            "limit": max(1, min(limit, MAX_PAGE_LIMIT)),
        }
        return await self._fetch_page("/claimable_balances", params)

    async def _follow(self, href: str) -> Page[ClaimableItem]:
        return await self._fetch_page(href, None)

    async def _fetch_page(self, url: str, params: dict | None) -> Page[ClaimableItem]:
        resp = await self._get(url, params)
        self._raise_for_status(resp)
        body = self._json_body(resp)

        try:
            raw_records = body["_embedded"]["records"]
        except (KeyError, TypeError) as exc:
            raise MalformedPageError(f"page without _embedded.records from {resp.request.url}") from exc
        if not isinstance(raw_records, list):
            raise MalformedPageError(f"_embedded.records is not a list ({resp.request.url})")

        records = tuple(parse_claimable(r) for r in raw_records)

        next_href = ((body.get("_links") or {}).get("next") or {}).get("href")
        link = PageLink(next_href, self._follow) if next_href else None
        return Page(records=records, next=link)

    # ── Submission ────────────────────────────────────────

    async def submit_envelope(self, envelope_xdr: str) -> httpx.Response:
        """POST /transactions. Returns the raw response for classification."""
        try:
            return await self._http.post("/transactions", data={"tx": envelope_xdr})
        except httpx.TimeoutException as exc:
            raise TransportError(
                "Horizon submission timed out; outcome unknown",
                envelope_xdr=envelope_xdr,
            ) from exc
        except httpx.TransportError as exc:
            raise TransportError(
                f"Horizon submission failed: {exc}", envelope_xdr=envelope_xdr,
            ) from exc

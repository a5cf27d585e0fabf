"""CLI entry point for claim_forwarder."""

from __future__ import annotations

import asyncio
import logging
import sys
from decimal import Decimal, InvalidOperation

import click

from claim_forwarder.config import load_config
from claim_forwarder.errors import ClaimFlowError, InvalidKeyFormat, TransportError
from claim_forwarder.flow import ClaimForwardFlow
from claim_forwarder.keys import classify_key, keypair_from_secret
from claim_forwarder.models.ledger import describe_account, describe_claimable
from claim_forwarder.models.results import Accepted
from claim_forwarder.models.transaction import AmountRounding


def _require_secret(cfg):
    """Exit with error if no keypair secret is configured."""
    if not cfg.keypair_secret:
        click.echo("Error: No keypair secret configured.", err=True)
        click.echo("Set CLAIM_FORWARDER_SECRET env var or keypair_secret in config.", err=True)
        sys.exit(1)


def _account_id(cfg, account_id: str | None) -> str:
    """Explicit account argument, else the configured keypair's address."""
    if account_id:
        return account_id
    _require_secret(cfg)
    try:
        return keypair_from_secret(cfg.keypair_secret).public_key
    except InvalidKeyFormat as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)


def _run(coro):
    try:
        return asyncio.run(coro)
    except (ClaimFlowError, ValueError) as exc:
        click.echo(f"Error: {exc}", err=True)
        envelope = getattr(exc, "envelope_xdr", None)
        if envelope:
            click.echo("Transaction XDR:", err=True)
            click.echo(envelope, err=True)
        sys.exit(1)


@click.group()
@click.option("-c", "--config", "config_path", default=None, help="Path to config TOML file")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, config_path: str | None, verbose: bool) -> None:
    """claim-forwarder - Claim Stellar claimable balances and forward the funds."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path

    cfg = load_config(config_path)
    level = logging.DEBUG if verbose else getattr(logging, cfg.log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    ctx.obj["config"] = cfg


# ── Info ───────────────────────────────────────────────


@cli.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show forwarder configuration."""
    cfg = ctx.obj["config"]
    try:
        horizon_url = cfg.resolved_horizon_url()
    except ValueError as exc:
        horizon_url = f"(error: {exc})"
    timeout = "none (no expiry)" if cfg.timeout_seconds is None else f"{cfg.timeout_seconds}s"
    click.echo(f"Network:     {cfg.network}")
    click.echo(f"Horizon:     {horizon_url}")
    click.echo(f"Destination: {cfg.destination or '(not set)'}")
    click.echo(f"Asset:       {cfg.target_asset}")
    click.echo(f"Base amount: {cfg.base_amount}")
    click.echo(f"Base fee:    {cfg.base_fee} stroops/op")
    click.echo(f"Timeout:     {timeout}")
    click.echo(f"Rounding:    {cfg.rounding.value}")
    click.echo(f"Secret:      {'***configured***' if cfg.keypair_secret else '(not set)'}")


@cli.command("key-type")
@click.argument("key")
def key_type(key: str) -> None:
    """Classify KEY as a private (S...) or public (G...) key."""
    try:
        click.echo(classify_key(key).value)
    except InvalidKeyFormat as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)


@cli.command()
@click.argument("account_id", required=False)
@click.pass_context
def account(ctx: click.Context, account_id: str | None) -> None:
    """Show balances, data, signers and thresholds of an account."""
    cfg = ctx.obj["config"]
    target = _account_id(cfg, account_id)

    async def _account():
        flow = ClaimForwardFlow.from_config(cfg)
        try:
            snapshot = await flow.client.fetch_account(target)
        finally:
            await flow.close()
        for line in describe_account(snapshot):
            click.echo(line)

    _run(_account())


@cli.command()
@click.argument("account_id", required=False)
@click.pass_context
def balances(ctx: click.Context, account_id: str | None) -> None:
    """List every claimable balance an account can claim."""
    cfg = ctx.obj["config"]
    target = _account_id(cfg, account_id)

    async def _balances():
        flow = ClaimForwardFlow.from_config(cfg)
        try:
            items = await flow.discoverer.discover(target)
        finally:
            await flow.close()
        click.echo(f"Claimable balances: {len(items)}")
        for line in describe_claimable(items):
            click.echo(line)

    _run(_balances())


# ── Claim and send ─────────────────────────────────────


def _parse_amount(ctx, param, value):
    if value is None:
        return None
    try:
        return Decimal(value)
    except InvalidOperation:
        raise click.BadParameter(f"not a decimal amount: {value}")


@cli.command("claim-and-send")
@click.option("--destination", default=None, help="Destination account (G...)")
@click.option("--base-amount", callback=_parse_amount, default=None,
              help="Amount sent on top of the claimed balances")
@click.option("--base-fee", type=int, default=None, help="Base fee per operation (stroops)")
@click.option("--timeout", "timeout_seconds", type=int, default=None,
              help="Seconds until the transaction expires")
@click.option("--no-expiry", is_flag=True,
              help="Never expire the transaction (removes replay protection)")
@click.option("--rounding", type=click.Choice([r.value for r in AmountRounding]), default=None,
              help="How the payment amount is rounded")
@click.option("--dry-run", is_flag=True, help="Compose and sign, but do not submit")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation prompt")
@click.pass_context
def claim_and_send(
    ctx: click.Context,
    destination: str | None,
    base_amount: Decimal | None,
    base_fee: int | None,
    timeout_seconds: int | None,
    no_expiry: bool,
    rounding: str | None,
    dry_run: bool,
    yes: bool,
) -> None:
    """Claim every matching claimable balance and forward the total.

    One transaction is built: claims first, then a single payment of
    base amount + claimed total, rounded per the rounding policy.
    """
    cfg = ctx.obj["config"]
    _require_secret(cfg)
    if destination:
        cfg.destination = destination
    if not cfg.destination:
        click.echo("Error: No destination configured (--destination).", err=True)
        sys.exit(1)
    if timeout_seconds is not None and no_expiry:
        click.echo("Error: --timeout and --no-expiry are mutually exclusive.", err=True)
        sys.exit(1)

    if base_amount is not None:
        cfg.base_amount = base_amount
    if base_fee is not None:
        cfg.base_fee = base_fee
    if timeout_seconds is not None:
        cfg.timeout_seconds = timeout_seconds
    if no_expiry:
        cfg.timeout_seconds = None
    if rounding is not None:
        cfg.rounding = AmountRounding(rounding)

    try:
        policy = cfg.to_policy()
    except ValueError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)
    if policy.timeout.infinite:
        click.echo("Warning: transaction will never expire (no replay protection).", err=True)

    async def _claim_and_send():
        source = keypair_from_secret(cfg.keypair_secret)
        flow = ClaimForwardFlow.from_config(cfg)
        try:
            report = await flow.prepare(source, cfg.destination, policy)
            draft = report.draft

            click.echo(f"Source:       {draft.source_account}")
            click.echo(f"Sequence:     {draft.sequence}")
            click.echo(f"Claims:       {len(draft.claims)} of {len(report.items)} balances")
            click.echo(f"Claimed:      {draft.claimed_total} {policy.target_asset}")
            click.echo(f"Payment:      {draft.payment.amount} {policy.target_asset} -> {draft.payment.destination}")
            click.echo(f"Total fee:    {draft.total_fee} stroops")

            signed = flow.submitter.sign(draft, [source])
            if dry_run:
                click.echo("\nTransaction XDR:")
                click.echo(signed.envelope_xdr)
                return 0

            if draft.payment.amount <= 0 and not yes:
                click.echo(
                    "Error: payment amount is not positive; the network will reject it. "
                    "Pass --yes to submit anyway.",
                    err=True,
                )
                return 1

            if not yes:
                click.confirm("\nSubmit transaction?", abort=True)

            try:
                result = await flow.submitter.submit_signed(signed)
            except TransportError:
                click.echo("\nSubmission outcome unknown; check the hash before resubmitting.", err=True)
                click.echo(f"  Tx hash: {signed.tx_hash}", err=True)
                raise
        finally:
            await flow.close()

        if isinstance(result, Accepted):
            click.echo("\nSuccess!")
            click.echo(f"  Tx hash: {result.tx_hash}")
            click.echo(f"  Ledger:  {result.ledger}")
        else:
            click.echo("\nThe transaction was submitted, but the network rejected it.", err=True)
            click.echo(f"  Transaction: {result.transaction_code}", err=True)
            click.echo(f"  Operations:  {', '.join(result.operation_codes) or '(none)'}", err=True)
            click.echo(f"  Result XDR:  {result.result_xdr}", err=True)

        click.echo("\nTransaction XDR:")
        click.echo(result.envelope_xdr)
        return 0 if result.success else 2

    if code := _run(_claim_and_send()):
        sys.exit(code)

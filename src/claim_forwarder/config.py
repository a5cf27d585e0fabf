"""Configuration loading: TOML file + environment variables."""

from __future__ import annotations

import os
from decimal import Decimal, InvalidOperation
from pathlib import Path

try:
    import tomllib  # Python 3.11+
except ModuleNotFoundError:
    import tomli as tomllib  # type: ignore[no-redef]

from claim_forwarder.models.config import ForwarderConfig
from claim_forwarder.models.transaction import AmountRounding


def _decimal(value: object, name: str) -> Decimal:
    # TOML floats are binary; go through str() and reject anything inexact.
    try:
        return Decimal(str(value))
    except InvalidOperation as exc:
        raise ValueError(f"{name} is not a decimal amount: {value!r}") from exc


def _timeout(value: object) -> int | None:
    if isinstance(value, str) and value.lower() in ("infinite", "never", "none"):
        return None
    return int(value)  # type: ignore[arg-type]


def load_config(
    config_path: str | Path | None = None,
    env_prefix: str = "CLAIM_FORWARDER_",
) -> ForwarderConfig:
    """Load forwarder configuration from a TOML file and env vars.

    Priority (highest wins):
        1. Environment variables (CLAIM_FORWARDER_SECRET, etc.)
        2. TOML config file
        3. Defaults from ForwarderConfig
    """
    raw: dict = {}
    if config_path is not None:
        p = Path(config_path).expanduser()
        if p.exists():
            with open(p, "rb") as f:
                raw = tomllib.load(f)

    cfg = ForwarderConfig()

    # ── Stellar section ────────────────────────────────────
    stellar = raw.get("stellar", {})
    if v := stellar.get("network"):
        cfg.network = str(v)
    if v := stellar.get("horizon_url"):
        cfg.horizon_url = str(v)
    if v := stellar.get("network_passphrase"):
        cfg.network_passphrase = str(v)
    if v := stellar.get("keypair_secret"):
        cfg.keypair_secret = str(v)
    if v := stellar.get("destination"):
        cfg.destination = str(v)

    # ── Transaction section ────────────────────────────────
    tx = raw.get("transaction", {})
    if (v := tx.get("base_amount")) is not None:
        cfg.base_amount = _decimal(v, "base_amount")
    if v := tx.get("base_fee"):
        cfg.base_fee = int(v)
    if "timeout" in tx:
        cfg.timeout_seconds = _timeout(tx["timeout"])
    if v := tx.get("rounding"):
        cfg.rounding = AmountRounding(v)
    if v := tx.get("asset"):
        cfg.target_asset = str(v)
    if v := tx.get("max_snapshot_age"):
        cfg.max_snapshot_age = float(v)

    # ── Client section ─────────────────────────────────────
    client = raw.get("client", {})
    if v := client.get("page_limit"):
        cfg.page_limit = int(v)
    if v := client.get("request_timeout"):
        cfg.request_timeout = float(v)

    # ── Logging section ────────────────────────────────────
    logging_raw = raw.get("logging", {})
    if v := logging_raw.get("level"):
        cfg.log_level = str(v)

    # ── Environment variable overrides (highest priority) ──
    if secret := os.environ.get(f"{env_prefix}SECRET"):
        cfg.keypair_secret = secret
    if dest := os.environ.get(f"{env_prefix}DESTINATION"):
        cfg.destination = dest
    if net := os.environ.get(f"{env_prefix}NETWORK"):
        cfg.network = net
    if url := os.environ.get(f"{env_prefix}HORIZON_URL"):
        cfg.horizon_url = url
    if fee := os.environ.get(f"{env_prefix}BASE_FEE"):
        cfg.base_fee = int(fee)

    return cfg

"""Stellar key string helpers.

Keys are classified by their StrKey prefix: ``S`` is a secret seed and ``G``
is an account public key. Anything else is rejected outright.
"""

from __future__ import annotations

from enum import Enum

from stellar_sdk import Keypair
from stellar_sdk.exceptions import (
    Ed25519PublicKeyInvalidError,
    Ed25519SecretSeedInvalidError,
)

from claim_forwarder.errors import InvalidKeyFormat


class KeyKind(str, Enum):
    PRIVATE = "private"
    PUBLIC = "public"


def classify_key(key: str) -> KeyKind:
    """Classify a key string by its first character."""
    if key.startswith("S"):
        return KeyKind.PRIVATE
    if key.startswith("G"):
        return KeyKind.PUBLIC
    raise InvalidKeyFormat("Invalid key supplied: expected an S... or G... key")


def is_private_key(key: str) -> bool:
    return classify_key(key) is KeyKind.PRIVATE


def is_public_key(key: str) -> bool:
    return classify_key(key) is KeyKind.PUBLIC


def keypair_from_secret(secret: str) -> Keypair:
    """Build a signing Keypair from a secret seed.

    Avoid holding seeds in long-lived strings outside of short CLI runs.
    """
    if not is_private_key(secret):
        raise InvalidKeyFormat("Invalid secret key supplied")
    try:
        return Keypair.from_secret(secret)
    except Ed25519SecretSeedInvalidError as exc:
        raise InvalidKeyFormat(f"Invalid secret key supplied: {exc}") from exc


def keypair_from_public(public_key: str) -> Keypair:
    """Build a verify-only Keypair from an account public key."""
    if not is_public_key(public_key):
        raise InvalidKeyFormat("Invalid public key supplied")
    try:
        return Keypair.from_public_key(public_key)
    except Ed25519PublicKeyInvalidError as exc:
        raise InvalidKeyFormat(f"Invalid public key supplied: {exc}") from exc

"""Key string classification."""

from __future__ import annotations

import pytest
from stellar_sdk import Keypair

from claim_forwarder.errors import InvalidKeyFormat
from claim_forwarder.keys import (
    KeyKind,
    classify_key,
    is_private_key,
    is_public_key,
    keypair_from_public,
    keypair_from_secret,
)


def test_classify_by_prefix():
    kp = Keypair.random()
    assert classify_key(kp.secret) is KeyKind.PRIVATE
    assert classify_key(kp.public_key) is KeyKind.PUBLIC
    assert is_private_key(kp.secret)
    assert is_public_key(kp.public_key)
    assert not is_public_key(kp.secret)


@pytest.mark.parametrize("key", ["", "MA7QYNF7SOWQ3GLR2BGMZEHXAVIRZA4KVWLTJJFC7MGXUA74P7UJVAAAAAAAAAAAAGZFQ", "gabc", "XYZ"])
def test_other_prefixes_are_rejected(key):
    with pytest.raises(InvalidKeyFormat):
        classify_key(key)


def test_invalid_key_format_is_a_value_error():
    with pytest.raises(ValueError):
        classify_key("C123")


def test_keypair_from_secret_round_trip():
    kp = Keypair.random()
    assert keypair_from_secret(kp.secret).public_key == kp.public_key


def test_keypair_from_public_cannot_sign():
    kp = Keypair.random()
    restored = keypair_from_public(kp.public_key)
    assert restored.public_key == kp.public_key
    assert not restored.can_sign()


def test_keypair_from_public_rejects_secret():
    with pytest.raises(InvalidKeyFormat):
        keypair_from_public(Keypair.random().secret)


def test_corrupt_keys_are_invalid_format():
    with pytest.raises(InvalidKeyFormat):
        keypair_from_public("GBADCHECKSUM")
    with pytest.raises(InvalidKeyFormat):
        keypair_from_secret("SBADCHECKSUM")

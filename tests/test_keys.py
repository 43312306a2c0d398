"""
Tests for executor key loading.
"""
import json

import base58
import pytest
from solders.keypair import Keypair

from executor.errors import SigningUnavailable
from executor.utils.keys import decode_secret, load_executor_keypair


class TestDecodeSecret:
    def test_base58(self):
        keypair = Keypair()
        assert decode_secret(str(keypair)) == bytes(keypair)

    def test_json_array(self):
        keypair = Keypair()
        assert decode_secret(json.dumps(list(bytes(keypair)))) == bytes(keypair)

    def test_strips_whitespace(self):
        keypair = Keypair()
        assert decode_secret(f"  {keypair}\n") == bytes(keypair)


class TestLoadExecutorKeypair:
    def test_base58_secret(self):
        keypair = Keypair()
        loaded = load_executor_keypair(str(keypair))
        assert loaded.pubkey() == keypair.pubkey()

    def test_json_secret(self):
        keypair = Keypair()
        loaded = load_executor_keypair(json.dumps(list(bytes(keypair))))
        assert loaded.pubkey() == keypair.pubkey()

    @pytest.mark.parametrize("secret", [None, "", "   "])
    def test_missing(self, secret):
        with pytest.raises(SigningUnavailable, match="Missing"):
            load_executor_keypair(secret)

    def test_not_base58(self):
        with pytest.raises(SigningUnavailable):
            load_executor_keypair("0OIl-not-base58")

    def test_wrong_length(self):
        with pytest.raises(SigningUnavailable, match="64 bytes"):
            load_executor_keypair(base58.b58encode(b"\x01" * 32).decode())

    def test_bad_json(self):
        with pytest.raises(SigningUnavailable):
            load_executor_keypair("[1, 2,")

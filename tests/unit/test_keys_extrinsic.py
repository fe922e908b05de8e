"""Tests for key pairs and the signed extrinsic envelope."""

import json

import pytest

from appchain_client.codec.hashes import blake2_256_hex, hash_canonical
from appchain_client.crypto.keys import KeyPair
from appchain_client.runtime.errors import AppchainError, ErrorCode, SigningError
from appchain_client.runtime.ids import hex_to_bytes
from appchain_client.tx.calls import BatchAll, Direct
from appchain_client.tx.extrinsic import (
    decode_extrinsic,
    sign_extrinsic,
    unsigned_extrinsic,
    verify_extrinsic,
)
from appchain_client.tx.operations import UpdateDao

from helpers.factories import mk_keypair


class TestKeyPair:

    def test_address_is_public_key(self):
        key = mk_keypair(1)
        assert key.address == "0x" + key.public_key.hex()
        assert len(key.public_key) == 32

    def test_sign_and_verify(self):
        key = mk_keypair(2)
        signature = key.sign(b"payload")
        assert key.verify(b"payload", signature)
        assert not key.verify(b"other", signature)
        assert not KeyPair.verify_with(mk_keypair(3).address, b"payload", signature)

    def test_from_seed_round_trip(self):
        key = mk_keypair(4)
        assert KeyPair.from_seed(key.seed_hex) == key

    def test_from_seed_rejects_bad_input(self):
        with pytest.raises(SigningError):
            KeyPair.from_seed("0x1234")
        with pytest.raises(SigningError):
            KeyPair.from_seed("not hex")

    def test_from_password_is_deterministic(self):
        a = KeyPair.from_password("alice", "secret")
        assert a == KeyPair.from_password("alice", "secret")
        assert a != KeyPair.from_password("alice", "other")
        assert a.username == "alice"

    def test_verify_with_invalid_public_key(self):
        with pytest.raises(SigningError) as exc_info:
            KeyPair.verify_with("0x1234", b"m", b"\x00" * 64)
        assert exc_info.value.code == ErrorCode.INVALID_SIGNATURE


class TestExtrinsic:

    def _call(self):
        return BatchAll((Direct(UpdateDao(metadata="0x01")),))

    def test_sign_extrinsic_payload(self):
        key = mk_keypair(5)
        extrinsic = sign_extrinsic(self._call(), key, nonce=3, chain_id="appchain-test")

        assert extrinsic.signer == key.address
        assert extrinsic.nonce == 3
        assert extrinsic.payload["chainId"] == "appchain-test"
        assert extrinsic.payload["call"] == self._call().encode()
        assert key.verify(hash_canonical(extrinsic.payload), hex_to_bytes(extrinsic.signature))

    def test_encoded_round_trip_and_hash(self):
        extrinsic = sign_extrinsic(self._call(), mk_keypair(6), nonce=0)
        envelope = decode_extrinsic(extrinsic.encoded)

        assert envelope == {"payload": extrinsic.payload, "signature": extrinsic.signature}
        assert verify_extrinsic(envelope)
        assert extrinsic.hash == blake2_256_hex(hex_to_bytes(extrinsic.encoded))

    def test_tampered_payload_fails_verification(self):
        extrinsic = sign_extrinsic(self._call(), mk_keypair(7), nonce=0)
        envelope = decode_extrinsic(extrinsic.encoded)
        envelope["payload"]["nonce"] = 1
        assert not verify_extrinsic(envelope)

    def test_unsigned_envelope(self):
        key = mk_keypair(8)
        envelope = decode_extrinsic(unsigned_extrinsic(self._call(), key.address, "appchain-test"))

        assert envelope["signature"] is None
        assert envelope["payload"]["nonce"] is None
        assert envelope["payload"]["signer"] == key.address
        assert not verify_extrinsic(envelope)

    @pytest.mark.parametrize("blob", [
        "0xzz",
        "0x" + b"not json".hex(),
        "0x" + json.dumps([1, 2]).encode().hex(),
    ])
    def test_decode_rejects_malformed(self, blob):
        with pytest.raises(AppchainError) as exc_info:
            decode_extrinsic(blob)
        assert exc_info.value.code == ErrorCode.ENCODING_ERROR

"""
Extrinsic envelope.

An extrinsic is the canonical JSON envelope

    {"payload": {"call", "signer", "nonce", "chainId"}, "signature"}

hex-encoded with a ``0x`` prefix. The signature is Ed25519 over the
BLAKE2b-256 hash of the canonical payload. Unsigned envelopes carry a null
signature and are only accepted by dry-run queries such as fee estimation.
"""

from __future__ import annotations
import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from ..canonjson import dumps_canonical
from ..codec.hashes import blake2_256_hex, hash_canonical
from ..crypto.keys import KeyPair
from ..runtime.errors import AppchainError, ErrorCode
from ..runtime.ids import hex_to_bytes, to_hex_id
from .calls import Call

logger = logging.getLogger(__name__)


def _payload(call: Call, signer: str, nonce: Optional[int], chain_id: Optional[str]) -> Dict[str, Any]:
    return {
        "call": call.encode(),
        "signer": to_hex_id(signer),
        "nonce": nonce,
        "chainId": chain_id,
    }


def _encode(envelope: Dict[str, Any]) -> str:
    return "0x" + dumps_canonical(envelope).encode('utf-8').hex()


@dataclass(frozen=True)
class SignedExtrinsic:
    """A signed, encoded extrinsic ready for ``author_submitExtrinsic``."""
    payload: Dict[str, Any]
    signature: str

    @property
    def encoded(self) -> str:
        return _encode({"payload": self.payload, "signature": self.signature})

    @property
    def hash(self) -> str:
        """Transaction hash as reported by the node on submission."""
        return blake2_256_hex(hex_to_bytes(self.encoded))

    @property
    def signer(self) -> str:
        return self.payload["signer"]

    @property
    def nonce(self) -> int:
        return self.payload["nonce"]


def sign_extrinsic(call: Call, key: KeyPair, nonce: int, chain_id: Optional[str] = None) -> SignedExtrinsic:
    """
    Sign a call.

    Args:
        call: Outermost call, usually a ``BatchAll``
        key: Key that signs and pays
        nonce: Next account index of the key
        chain_id: Chain identifier bound into the payload

    Returns:
        SignedExtrinsic
    """
    payload = _payload(call, key.address, nonce, chain_id)
    signature = key.sign(hash_canonical(payload))
    logger.debug("Signed extrinsic for %s at nonce %d", key.address, nonce)
    return SignedExtrinsic(payload=payload, signature="0x" + signature.hex())


def unsigned_extrinsic(call: Call, signer: str, chain_id: Optional[str] = None) -> str:
    """Encode an unsigned envelope for dry-run queries on behalf of ``signer``."""
    return _encode({"payload": _payload(call, signer, None, chain_id), "signature": None})


def decode_extrinsic(encoded: str) -> Dict[str, Any]:
    """
    Decode a hex extrinsic back into its envelope.

    Raises:
        AppchainError: If the blob is not a valid envelope
    """
    try:
        envelope = json.loads(hex_to_bytes(encoded).decode('utf-8'))
    except (AppchainError, ValueError) as e:
        raise AppchainError(f"Malformed extrinsic: {e}", ErrorCode.ENCODING_ERROR, cause=e)

    if not isinstance(envelope, dict) or "payload" not in envelope:
        raise AppchainError("Malformed extrinsic: missing payload", ErrorCode.ENCODING_ERROR)
    return envelope


def verify_extrinsic(envelope: Dict[str, Any]) -> bool:
    """Check the signature of a decoded envelope against its signer."""
    signature = envelope.get("signature")
    if not signature:
        return False
    payload = envelope["payload"]
    try:
        return KeyPair.verify_with(payload["signer"], hash_canonical(payload), hex_to_bytes(signature))
    except AppchainError:
        return False

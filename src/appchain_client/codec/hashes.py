"""
Hash functions

BLAKE2b-256 for call hashes, signing payloads and account derivation, and
SHA-256 over canonical JSON for the metadata/description hashes stored on
chain.
"""

import hashlib
from typing import Any

from ..canonjson import dumps_canonical


def blake2_256(data: bytes) -> bytes:
    """
    Compute the 32-byte BLAKE2b digest used throughout the runtime.

    Args:
        data: Input bytes

    Returns:
        32-byte digest
    """
    return hashlib.blake2b(data, digest_size=32).digest()


def blake2_256_hex(data: bytes) -> str:
    return "0x" + blake2_256(data).hex()


def hash_canonical(obj: Any) -> bytes:
    """BLAKE2b-256 of the canonical JSON encoding of ``obj``."""
    return blake2_256(dumps_canonical(obj).encode('utf-8'))


def metadata_hash(obj: Any) -> str:
    """
    SHA-256 of the canonical JSON encoding of a metadata document.

    Used for DAO metadata, project descriptions and content hashes, e.g.
    ``metadata_hash({"description": "Alice DAO"})``.

    Returns:
        0x-prefixed hex digest
    """
    return "0x" + hashlib.sha256(dumps_canonical(obj).encode('utf-8')).hexdigest()

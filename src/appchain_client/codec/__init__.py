"""
Encoding primitives: SCALE writer and hash functions.
"""

from .scale import ScaleWriter, encode_compact
from .hashes import blake2_256, blake2_256_hex, hash_canonical, metadata_hash

__all__ = [
    "ScaleWriter",
    "encode_compact",
    "blake2_256",
    "blake2_256_hex",
    "hash_canonical",
    "metadata_hash",
]

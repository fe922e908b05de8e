"""
SCALE writer

Minimal SCALE (Simple Concatenated Aggregate Little-Endian) encoder covering
the primitives needed to derive DAO and multisig account ids the same way
the runtime does: fixed-width little-endian integers, compact integers and
length-prefixed byte vectors.
"""

import struct
from typing import List


class ScaleWriter:
    """
    Append-only SCALE byte writer.
    """

    def __init__(self):
        self._bb: List[int] = []

    def u8(self, v: int) -> None:
        self._bb.append(v & 0xFF)

    def u16le(self, v: int) -> None:
        self._bb.extend(struct.pack('<H', v & 0xFFFF))

    def u32le(self, v: int) -> None:
        self._bb.extend(struct.pack('<I', v & 0xFFFFFFFF))

    def bytes(self, v: bytes) -> None:
        """Write raw bytes without length prefix."""
        self._bb.extend(v)

    def compact(self, v: int) -> None:
        """
        Write an unsigned integer in SCALE compact form.

        Single-byte, two-byte and four-byte modes carry the value shifted
        left by two with the mode in the low bits; larger values use the
        big-integer mode with an explicit byte length.
        """
        if v < 0:
            raise ValueError("compact integers are unsigned")
        if v < 1 << 6:
            self.u8(v << 2)
        elif v < 1 << 14:
            self.u16le((v << 2) | 0b01)
        elif v < 1 << 30:
            self.u32le((v << 2) | 0b10)
        else:
            length = max(4, (v.bit_length() + 7) // 8)
            self.u8(((length - 4) << 2) | 0b11)
            self.bytes(v.to_bytes(length, 'little'))

    def vec_u8(self, v: bytes) -> None:
        """Write ``Vec<u8>``: compact length followed by the bytes."""
        self.compact(len(v))
        self.bytes(v)

    def to_bytes(self) -> bytes:
        return bytes(self._bb)


def encode_compact(v: int) -> bytes:
    """Encode a single compact integer."""
    writer = ScaleWriter()
    writer.compact(v)
    return writer.to_bytes()

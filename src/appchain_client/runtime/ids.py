"""
Entity id helpers.

Every id and address crossing the RPC boundary is a 0x-prefixed hex string.
"""

from __future__ import annotations
import secrets
from typing import Union

from .errors import InvalidIdError

DAO_ID_LENGTH = 20
ACCOUNT_ID_LENGTH = 32


def to_hex_id(value: Union[str, bytes]) -> str:
    """
    Normalize an entity id to a lowercase 0x-prefixed hex string.

    Args:
        value: Hex string with or without the 0x prefix, or raw bytes

    Raises:
        InvalidIdError: If the value is not hex
    """
    if isinstance(value, (bytes, bytearray)):
        return "0x" + bytes(value).hex()

    if not isinstance(value, str) or not value:
        raise InvalidIdError(f"Entity id must be a non-empty hex string, got {value!r}")

    body = value[2:] if value.startswith(("0x", "0X")) else value
    try:
        bytes.fromhex(body)
    except ValueError as e:
        raise InvalidIdError(f"Entity id is not hex: {value!r}", cause=e)
    return "0x" + body.lower()


def hex_to_bytes(value: Union[str, bytes]) -> bytes:
    """Decode a hex id (with or without 0x) into bytes."""
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    return bytes.fromhex(to_hex_id(value)[2:])


def random_hex_id(length: int = DAO_ID_LENGTH) -> str:
    """Generate a random 0x-prefixed id of ``length`` bytes."""
    return "0x" + secrets.token_hex(length)


def is_dao_id(value: str) -> bool:
    """True when ``value`` has the length of a DAO id rather than an account address."""
    try:
        return len(hex_to_bytes(value)) == DAO_ID_LENGTH
    except InvalidIdError:
        return False

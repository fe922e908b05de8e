"""
Account derivation

DAO addresses and multisig group accounts are pure functions of public data:
the DAO id, or the sorted signatory set and threshold. Nothing here touches
a secret.
"""

from typing import Iterable

from ..codec.hashes import blake2_256
from ..codec.scale import ScaleWriter
from ..runtime.errors import InvalidIdError
from ..runtime.ids import ACCOUNT_ID_LENGTH, DAO_ID_LENGTH, hex_to_bytes, is_dao_id, to_hex_id

DAO_ADDRESS_PREFIX = b"deip/DAOs/"
MULTI_ACCOUNT_PREFIX = b"modlpy/utilisuba"


def dao_id_to_address(dao_id: str) -> str:
    """
    Derive the account address of a DAO from its 20-byte id.

    ``blake2_256(b"deip/DAOs/" ++ scale(Vec<u8>(id)))``

    Args:
        dao_id: 0x-hex DAO id

    Returns:
        0x-hex 32-byte account id
    """
    raw = hex_to_bytes(dao_id)
    if len(raw) != DAO_ID_LENGTH:
        raise InvalidIdError(f"DAO id must be {DAO_ID_LENGTH} bytes, got {len(raw)}: {dao_id}")

    writer = ScaleWriter()
    writer.bytes(DAO_ADDRESS_PREFIX)
    writer.vec_u8(raw)
    return "0x" + blake2_256(writer.to_bytes()).hex()


def sort_addresses(addresses: Iterable[str]) -> list:
    """Normalize and sort account addresses by their raw bytes."""
    return sorted({to_hex_id(a) for a in addresses}, key=hex_to_bytes)


def multi_account_id(signatories: Iterable[str], threshold: int) -> str:
    """
    Derive the deterministic account of a multisig group.

    Signatories are sorted before hashing so that the account does not depend
    on the order they were listed in.

    Args:
        signatories: Member account addresses
        threshold: Approvals required

    Returns:
        0x-hex 32-byte account id
    """
    members = sort_addresses(signatories)
    writer = ScaleWriter()
    writer.bytes(MULTI_ACCOUNT_PREFIX)
    writer.compact(len(members))
    for member in members:
        raw = hex_to_bytes(member)
        if len(raw) != ACCOUNT_ID_LENGTH:
            raise InvalidIdError(f"Signatory must be a {ACCOUNT_ID_LENGTH}-byte account: {member}")
        writer.bytes(raw)
    writer.u16le(threshold)
    return "0x" + blake2_256(writer.to_bytes()).hex()


def authority_account(signatories: Iterable[str], threshold: int) -> str:
    """
    Account that must originate calls for an authority.

    A lone signatory acts directly; any larger set acts through its multisig
    account, with threshold 0 treated as 1.
    """
    members = sort_addresses(signatories)
    if len(members) == 1:
        return members[0]
    return multi_account_id(members, max(threshold, 1))


def to_account(value: str) -> str:
    """
    Resolve a recipient to an account address.

    DAO ids (20 bytes) are converted to their derived address; anything else
    is treated as an account address already.
    """
    if is_dao_id(value):
        return dao_id_to_address(value)
    return to_hex_id(value)

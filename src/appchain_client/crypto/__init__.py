"""
Keys and account derivation.
"""

from .keys import KeyPair
from .address import (
    dao_id_to_address,
    multi_account_id,
    authority_account,
    sort_addresses,
    to_account,
)

__all__ = [
    "KeyPair",
    "dao_id_to_address",
    "multi_account_id",
    "authority_account",
    "sort_addresses",
    "to_account",
]

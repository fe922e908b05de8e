"""
Runtime support: error model and id helpers.
"""

from . import errors
from .errors import *
from .ids import to_hex_id, hex_to_bytes, random_hex_id, is_dao_id

__all__ = errors.__all__ + ["to_hex_id", "hex_to_bytes", "random_hex_id", "is_dao_id"]

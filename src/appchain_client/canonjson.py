"""
Canonical JSON

Sorts object keys lexicographically and encodes with no extra whitespace so
that call hashes and signing payloads are stable across processes.
"""

import json
from typing import Any


def dumps_canonical(obj: Any) -> str:
    """
    Encode object as canonical JSON string.

    Args:
        obj: Object to encode (dict, list, str, int, bool, None)

    Returns:
        Canonical JSON string with sorted keys and no extra whitespace
    """
    return json.dumps(_canonicalize(obj), separators=(',', ':'), ensure_ascii=False, sort_keys=True)


def _canonicalize(v: Any) -> Any:
    """
    Recursively canonicalize a value.

    - Maps: string keys, recursively canonicalized values
    - Lists and tuples: recursively canonicalized elements, order preserved
    - Bytes: 0x-prefixed hex
    - Primitives: passed through unchanged
    """
    if isinstance(v, dict):
        return {str(k): _canonicalize(item) for k, item in v.items()}
    elif isinstance(v, (list, tuple)):
        return [_canonicalize(item) for item in v]
    elif isinstance(v, (bytes, bytearray)):
        return "0x" + bytes(v).hex()
    else:
        return v

"""
Canonical JSON.

Sorts object keys lexicographically and encodes with no extra whitespace so
hashes over wallet configuration and transfer messages are stable.
"""

import hashlib
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
    return json.dumps(obj, separators=(',', ':'), ensure_ascii=False, sort_keys=True)


def sha256_canonical(obj: Any) -> bytes:
    """SHA-256 of the canonical JSON encoding of obj."""
    return hashlib.sha256(dumps_canonical(obj).encode('utf-8')).digest()


__all__ = ["dumps_canonical", "sha256_canonical"]

"""
Helpers shared across the keystore package.
"""

from .canonjson import dumps_canonical, sha256_canonical
from .units import to_nano, from_nano

__all__ = ["dumps_canonical", "sha256_canonical", "to_nano", "from_nano"]

"""
Export of a wallet for use by a validator node.

Writes two files: ``<base>.addr`` with the raw address and ``<base>.pk``
with the raw private key in the node's key file layout.
"""

import logging
from pathlib import Path
from typing import Tuple, Union

from ..crypto.ed25519 import KeyPair
from ..runtime.address import WalletAddress
from .storage import atomic_write

logger = logging.getLogger(__name__)

ADDRESS_SUFFIX = ".addr"
PRIVATE_KEY_SUFFIX = ".pk"

# TL constructor id of pk.ed25519, little-endian
PRIVATE_KEY_PREFIX = bytes([0x17, 0x23, 0x68, 0x49])


def export_key(secret_key: bytes) -> bytes:
    """Private key file contents: constructor id then the 32-byte seed."""
    return PRIVATE_KEY_PREFIX + secret_key[:32]


def write_node_export(base: Union[str, Path], address: WalletAddress, key: KeyPair) -> Tuple[Path, Path]:
    """
    Write the address and private key files.

    Returns:
        Paths of the address file and the private key file
    """
    base = str(base)
    address_path = Path(base + ADDRESS_SUFFIX)
    key_path = Path(base + PRIVATE_KEY_SUFFIX)
    atomic_write(address_path, address.to_bytes())
    atomic_write(key_path, export_key(key.secret_key))
    logger.info(f"Exported wallet to {address_path} and {key_path}")
    return address_path, key_path


__all__ = ["export_key", "write_node_export", "ADDRESS_SUFFIX", "PRIVATE_KEY_SUFFIX"]

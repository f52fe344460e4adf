"""
Cryptographic primitives: ed25519 keys, wallet mnemonics, secret encryption.
"""

from .ed25519 import Ed25519PublicKey, Ed25519PrivateKey, KeyPair
from .mnemonic import (
    mnemonic_new, mnemonic_validate, mnemonic_to_wallet_key, normalize_mnemonic
)
from .cipher import SecretCipher

__all__ = [
    "Ed25519PublicKey",
    "Ed25519PrivateKey",
    "KeyPair",
    "mnemonic_new",
    "mnemonic_validate",
    "mnemonic_to_wallet_key",
    "normalize_mnemonic",
    "SecretCipher",
]

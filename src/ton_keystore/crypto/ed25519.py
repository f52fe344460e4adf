"""
Ed25519 cryptographic operations for wallet keys.

Provides key pairs derived from a 32-byte seed, signing, and verification.
A wallet secret key is the 64-byte concatenation of seed and public key.
"""

from __future__ import annotations
from dataclasses import dataclass

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.asymmetric.ed25519 import (
    Ed25519PrivateKey as CryptoEd25519PrivateKey,
    Ed25519PublicKey as CryptoEd25519PublicKey
)
from cryptography.hazmat.primitives import serialization

from ..runtime.errors import InvalidKeyError


class Ed25519PublicKey:
    """
    Ed25519 public key.

    Provides verification operations and serialization.
    """

    def __init__(self, public_key_bytes: bytes):
        """
        Initialize from 32-byte public key.

        Args:
            public_key_bytes: 32-byte Ed25519 public key

        Raises:
            InvalidKeyError: If key is invalid
        """
        if len(public_key_bytes) != 32:
            raise InvalidKeyError(f"Ed25519 public key must be 32 bytes, got {len(public_key_bytes)}")

        self._key_bytes = bytes(public_key_bytes)
        try:
            self._crypto_key = CryptoEd25519PublicKey.from_public_bytes(self._key_bytes)
        except ValueError as e:
            raise InvalidKeyError(f"Invalid Ed25519 public key: {e}", cause=e)

    def to_bytes(self) -> bytes:
        """Get the 32-byte public key."""
        return self._key_bytes

    def to_hex(self) -> str:
        """Get the public key as hex string."""
        return self._key_bytes.hex()

    def verify(self, signature: bytes, message: bytes) -> bool:
        """
        Verify a signature against a message.

        Args:
            signature: 64-byte Ed25519 signature
            message: Message that was signed

        Returns:
            True if signature is valid
        """
        if len(signature) != 64:
            return False
        try:
            self._crypto_key.verify(signature, message)
        except InvalidSignature:
            return False
        return True

    def __eq__(self, other) -> bool:
        if not isinstance(other, Ed25519PublicKey):
            return False
        return self._key_bytes == other._key_bytes

    def __repr__(self) -> str:
        return f"Ed25519PublicKey('{self.to_hex()}')"


class Ed25519PrivateKey:
    """
    Ed25519 private key.

    Provides signing operations.
    """

    def __init__(self, seed: bytes):
        """
        Initialize from 32-byte private key seed.

        Args:
            seed: 32-byte Ed25519 private key seed

        Raises:
            InvalidKeyError: If key is invalid
        """
        if len(seed) != 32:
            raise InvalidKeyError(f"Ed25519 private key must be 32 bytes, got {len(seed)}")

        self._crypto_key = CryptoEd25519PrivateKey.from_private_bytes(bytes(seed))
        self._public_key = Ed25519PublicKey(
            self._crypto_key.public_key().public_bytes(
                encoding=serialization.Encoding.Raw,
                format=serialization.PublicFormat.Raw
            )
        )

    @classmethod
    def from_secret_key(cls, secret_key: bytes) -> Ed25519PrivateKey:
        """Create private key from a 64-byte wallet secret key (seed || public key)."""
        if len(secret_key) != 64:
            raise InvalidKeyError(f"Wallet secret key must be 64 bytes, got {len(secret_key)}")
        key = cls(secret_key[:32])
        if key.public_key().to_bytes() != secret_key[32:]:
            raise InvalidKeyError("Secret key does not match its public key")
        return key

    def public_key(self) -> Ed25519PublicKey:
        """Get the corresponding public key."""
        return self._public_key

    def sign(self, message: bytes) -> bytes:
        """
        Sign a message.

        Args:
            message: Message to sign

        Returns:
            64-byte Ed25519 signature
        """
        return self._crypto_key.sign(message)

    def __repr__(self) -> str:
        return "Ed25519PrivateKey(<hidden>)"


@dataclass(frozen=True)
class KeyPair:
    """Wallet key pair: 32-byte public key and 64-byte secret key."""

    public_key: bytes
    secret_key: bytes

    @classmethod
    def from_seed(cls, seed: bytes) -> KeyPair:
        """Derive a key pair from a 32-byte seed."""
        private_key = Ed25519PrivateKey(seed)
        public_key = private_key.public_key().to_bytes()
        return cls(public_key=public_key, secret_key=bytes(seed) + public_key)

    @property
    def seed(self) -> bytes:
        """The 32-byte private seed."""
        return self.secret_key[:32]

    def sign(self, message: bytes) -> bytes:
        """Sign a message with this key pair."""
        return Ed25519PrivateKey(self.seed).sign(message)

    def __repr__(self) -> str:
        return f"KeyPair(public_key='{self.public_key.hex()}')"


__all__ = ["Ed25519PublicKey", "Ed25519PrivateKey", "KeyPair"]

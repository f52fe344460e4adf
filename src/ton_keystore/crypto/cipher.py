"""
Password-based secret encryption.

Uses Fernet (AES-128-CBC with HMAC-SHA256) for authenticated encryption.
Key derivation uses PBKDF2 with 480,000 iterations as recommended by OWASP.
Each ciphertext carries its own random salt: ``salt || fernet token``.
"""

from __future__ import annotations
import base64
import os
from typing import Dict, Any

from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC
from cryptography.hazmat.primitives import hashes

from ..runtime.errors import AuthenticationFailedError, InvalidOperatorInputError, CorruptStoreError

KDF_ALGORITHM = "pbkdf2-sha256"


class SecretCipher:
    """
    Encrypts and decrypts single secrets under a password.

    Decryption with a wrong password, or of a tampered or truncated
    ciphertext, raises AuthenticationFailedError.
    """

    # PBKDF2 iteration count - OWASP 2023 recommendation for SHA256
    PBKDF2_ITERATIONS = 480000
    SALT_BYTES = 16

    def __init__(self, iterations: int = PBKDF2_ITERATIONS):
        """
        Initialize the cipher.

        Args:
            iterations: PBKDF2 iteration count
        """
        if iterations < 1:
            raise ValueError("iterations must be positive")
        self.iterations = iterations

    def _fernet(self, password: str, salt: bytes) -> Fernet:
        """
        Derive the Fernet key for a password and salt.

        Args:
            password: User password
            salt: Per-ciphertext salt
        """
        if not password:
            raise InvalidOperatorInputError("Password is required")
        kdf = PBKDF2HMAC(
            algorithm=hashes.SHA256(),
            length=32,
            salt=salt,
            iterations=self.iterations,
        )
        key = base64.urlsafe_b64encode(kdf.derive(password.encode('utf-8')))
        return Fernet(key)

    def encrypt(self, secret: bytes, password: str) -> bytes:
        """
        Encrypt a secret.

        Args:
            secret: Cleartext bytes
            password: Encryption password

        Returns:
            Salt followed by the Fernet token
        """
        salt = os.urandom(self.SALT_BYTES)
        return salt + self._fernet(password, salt).encrypt(bytes(secret))

    def decrypt(self, ciphertext: bytes, password: str) -> bytes:
        """
        Decrypt a secret.

        Args:
            ciphertext: Value produced by encrypt
            password: Encryption password

        Returns:
            Cleartext bytes

        Raises:
            AuthenticationFailedError: Wrong password or corrupted data
        """
        if len(ciphertext) <= self.SALT_BYTES:
            raise AuthenticationFailedError("Ciphertext is truncated")
        salt, token = ciphertext[:self.SALT_BYTES], ciphertext[self.SALT_BYTES:]
        try:
            return self._fernet(password, salt).decrypt(token)
        except InvalidToken as e:
            raise AuthenticationFailedError(cause=e)

    def params(self) -> Dict[str, Any]:
        """Key derivation parameters for persistence."""
        return {"algorithm": KDF_ALGORITHM, "iterations": self.iterations}

    @classmethod
    def from_params(cls, params: Dict[str, Any]) -> SecretCipher:
        """Restore a cipher from persisted parameters."""
        if params.get("algorithm") != KDF_ALGORITHM:
            raise CorruptStoreError(f"Unsupported key derivation: {params.get('algorithm')}")
        return cls(iterations=int(params["iterations"]))

    def __repr__(self) -> str:
        return f"SecretCipher(iterations={self.iterations})"


__all__ = ["SecretCipher", "KDF_ALGORITHM"]

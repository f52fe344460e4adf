"""
Keystore Error Model

This module provides the error handling framework for the keystore and the
command workflows built on top of it. Every error carries a stable code so
the command loop can decide whether to re-prompt, abort, or give up.
"""

from __future__ import annotations
from typing import Optional, Dict, Any
from enum import IntEnum


class ErrorCode(IntEnum):
    """Keystore error codes."""

    # General errors (1-99)
    UNKNOWN = 1
    INTERNAL = 2
    CANCELLED = 3

    # Store errors (100-199)
    DUPLICATE_NAME = 100
    UNKNOWN_KEY = 101
    CORRUPT_STORE = 102

    # Secret errors (200-299)
    AUTHENTICATION_FAILED = 200
    CORRUPT_SECRET = 201
    INVALID_KEY = 202

    # Wallet source errors (300-399)
    UNSUPPORTED_KIND = 300
    SOURCE_MISMATCH = 301
    INVALID_ADDRESS = 302

    # Network errors (400-499)
    NETWORK_ERROR = 400
    NETWORK_UNAVAILABLE = 401

    # Operator errors (500-599)
    INVALID_INPUT = 500


class KeystoreError(Exception):
    """
    Base class for all keystore errors.

    Provides structured error information for the command loop.
    """

    def __init__(self, message: str, code: ErrorCode = ErrorCode.UNKNOWN,
                 details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        """
        Initialize a keystore error.

        Args:
            message: Error message
            code: Error code
            details: Additional error details
            cause: Underlying exception that caused this error
        """
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}
        self.cause = cause

    def __str__(self) -> str:
        """String representation of the error."""
        parts = [f"[{self.code.name}] {self.message}"]
        if self.details:
            parts.append(f"Details: {self.details}")
        if self.cause:
            parts.append(f"Caused by: {self.cause}")
        return " | ".join(parts)

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary representation."""
        result = {
            "code": self.code.value,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        if self.cause:
            result["cause"] = str(self.cause)
        return result


class DuplicateNameError(KeystoreError):
    """A key with the same name already exists in the store."""

    def __init__(self, name: str, cause: Optional[Exception] = None):
        super().__init__(f"Key already exists: {name}", ErrorCode.DUPLICATE_NAME, {"name": name}, cause)
        self.name = name


class UnknownKeyError(KeystoreError):
    """No key with the requested name."""

    def __init__(self, name: str, cause: Optional[Exception] = None):
        super().__init__(f"Key not found: {name}", ErrorCode.UNKNOWN_KEY, {"name": name}, cause)
        self.name = name


class CorruptStoreError(KeystoreError):
    """Persisted keystore or backup cannot be read or violates its invariants."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        super().__init__(message, ErrorCode.CORRUPT_STORE, details, cause)


class AuthenticationFailedError(KeystoreError):
    """Wrong password, or ciphertext that does not authenticate."""

    def __init__(self, message: str = "Invalid password",
                 details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        super().__init__(message, ErrorCode.AUTHENTICATION_FAILED, details, cause)


class CorruptSecretError(KeystoreError):
    """A secret decrypted but is not a valid mnemonic."""

    def __init__(self, message: str = "Mnemonics are invalid",
                 details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        super().__init__(message, ErrorCode.CORRUPT_SECRET, details, cause)


class InvalidKeyError(KeystoreError):
    """Malformed key material."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        super().__init__(message, ErrorCode.INVALID_KEY, details, cause)


class UnsupportedWalletKindError(KeystoreError):
    """Unknown wallet kind tag."""

    def __init__(self, kind: Any, cause: Optional[Exception] = None):
        super().__init__(f"Unsupported wallet kind: {kind}", ErrorCode.UNSUPPORTED_KIND, {"kind": str(kind)}, cause)


class SourceMismatchError(KeystoreError):
    """A restored wallet source does not reproduce the stored address or key."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        super().__init__(message, ErrorCode.SOURCE_MISMATCH, details, cause)


class InvalidAddressError(KeystoreError):
    """Address string or bytes cannot be parsed."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        super().__init__(message, ErrorCode.INVALID_ADDRESS, details, cause)


class NetworkError(KeystoreError):
    """A single network call failed. Retryable."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        super().__init__(message, ErrorCode.NETWORK_ERROR, details, cause)


class NetworkUnavailableError(KeystoreError):
    """Network calls kept failing after all retries."""

    def __init__(self, message: str = "Network unavailable",
                 details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        super().__init__(message, ErrorCode.NETWORK_UNAVAILABLE, details, cause)


class InvalidOperatorInputError(KeystoreError):
    """Operator supplied a value that cannot be used."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        super().__init__(message, ErrorCode.INVALID_INPUT, details, cause)


class OperationCancelled(KeystoreError):
    """Operator backed out of the current operation."""

    def __init__(self, message: str = "Cancelled"):
        super().__init__(message, ErrorCode.CANCELLED)


__all__ = [
    "ErrorCode",
    "KeystoreError",
    "DuplicateNameError",
    "UnknownKeyError",
    "CorruptStoreError",
    "AuthenticationFailedError",
    "CorruptSecretError",
    "InvalidKeyError",
    "UnsupportedWalletKindError",
    "SourceMismatchError",
    "InvalidAddressError",
    "NetworkError",
    "NetworkUnavailableError",
    "InvalidOperatorInputError",
    "OperationCancelled",
]

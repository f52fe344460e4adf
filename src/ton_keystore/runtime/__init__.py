"""
Runtime support for the keystore: error model and address type.
"""

from .errors import *
from .address import WalletAddress, parse_address

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
    "WalletAddress",
    "parse_address",
]

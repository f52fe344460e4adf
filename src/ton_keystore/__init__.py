"""
ton-keystore - encrypted keystore for custodial wallets

Stores mnemonic-derived wallet keys encrypted behind a single password and
provides the workflows around them: create, import, transfer, backup,
restore and export for validator nodes.
"""

__version__ = "1.0.0"

# Error model and addresses
from .runtime.errors import *
from .runtime.address import WalletAddress, parse_address

# Cryptography
from .crypto import (
    KeyPair, SecretCipher,
    mnemonic_new, mnemonic_validate, mnemonic_to_wallet_key
)

# Wallet sources
from .contracts import (
    WalletKind, WalletSource, GenericWalletSource, WhitelistedWalletSource,
    contract_address, create_generic_wallet_source, restore_wallet_source
)

# Key storage
from .keys import (
    KeyEntry, KeyStore, KeystoreFile, BackupArchive, BackupRecord,
    build_backup, restore_archive, export_key, write_node_export
)

# Network and recovery
from .network import NetworkClient, JsonRpcNetworkClient, ClientConfig
from .recovery import ExponentialBackoff, backoff

from .config import Config

__all__ = [
    "__version__",
    # Errors
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
    # Addresses
    "WalletAddress",
    "parse_address",
    # Cryptography
    "KeyPair",
    "SecretCipher",
    "mnemonic_new",
    "mnemonic_validate",
    "mnemonic_to_wallet_key",
    # Wallet sources
    "WalletKind",
    "WalletSource",
    "GenericWalletSource",
    "WhitelistedWalletSource",
    "contract_address",
    "create_generic_wallet_source",
    "restore_wallet_source",
    # Keys
    "KeyEntry",
    "KeyStore",
    "KeystoreFile",
    "BackupArchive",
    "BackupRecord",
    "build_backup",
    "restore_archive",
    "export_key",
    "write_node_export",
    # Network
    "NetworkClient",
    "JsonRpcNetworkClient",
    "ClientConfig",
    "ExponentialBackoff",
    "backoff",
    "Config",
]

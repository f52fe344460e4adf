"""
Wallet contract sources and address derivation.
"""

from .sources import (
    WalletKind, validate_wallet_kind,
    WalletSource, GenericWalletSource, WhitelistedWalletSource,
    contract_address, create_generic_wallet_source, restore_wallet_source
)

__all__ = [
    "WalletKind",
    "validate_wallet_kind",
    "WalletSource",
    "GenericWalletSource",
    "WhitelistedWalletSource",
    "contract_address",
    "create_generic_wallet_source",
    "restore_wallet_source",
]

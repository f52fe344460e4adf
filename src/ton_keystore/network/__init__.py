"""
Network access: the client contract used by the workflows and signed transfers.
"""

from .client import (
    ClientConfig, NewWallet, WalletContract, NetworkClient, JsonRpcNetworkClient,
    MAINNET_ENDPOINT, TESTNET_ENDPOINT
)
from .messages import TransferMessage, SignedTransfer

__all__ = [
    "ClientConfig",
    "NewWallet",
    "WalletContract",
    "NetworkClient",
    "JsonRpcNetworkClient",
    "MAINNET_ENDPOINT",
    "TESTNET_ENDPOINT",
    "TransferMessage",
    "SignedTransfer",
]

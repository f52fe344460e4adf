"""
Wallet contract sources.

A wallet source describes the contract that controls a wallet: its kind, its
workchain, and the data baked into its initial state (public keys, wallet id,
whitelisted address). The wallet address is derived from the source alone, so
re-deriving from the same inputs always yields the same address.

``backup()`` renders the source as a configuration string that is persisted
with each key entry; ``restore_wallet_source`` rebuilds the source from it.
"""

from __future__ import annotations
import json
import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Dict, Optional, Union

from ..runtime.address import WalletAddress, parse_address
from ..runtime.errors import (
    UnsupportedWalletKindError, SourceMismatchError, CorruptStoreError, InvalidKeyError
)
from ..utils.canonjson import dumps_canonical, sha256_canonical

logger = logging.getLogger(__name__)

# Base wallet id for v3 wallets; the workchain is added to it
DEFAULT_WALLET_ID = 698983191


class WalletKind(str, Enum):
    """Wallet contract variants."""
    SIMPLE = "org.ton.wallets.simple"
    SIMPLE_R2 = "org.ton.wallets.simple.r2"
    SIMPLE_R3 = "org.ton.wallets.simple.r3"
    V2 = "org.ton.wallets.v2"
    V2_R2 = "org.ton.wallets.v2.r2"
    V3 = "org.ton.wallets.v3"
    V3_R2 = "org.ton.wallets.v3.r2"
    WHITELISTED = "org.ton.wallets.whitelisted"

    @property
    def is_generic(self) -> bool:
        """True for single-key wallets."""
        return self is not WalletKind.WHITELISTED

    @property
    def uses_wallet_id(self) -> bool:
        return self in (WalletKind.V3, WalletKind.V3_R2)


def validate_wallet_kind(value: Union[str, WalletKind]) -> WalletKind:
    """
    Resolve a kind tag.

    Raises:
        UnsupportedWalletKindError: If the tag is unknown
    """
    try:
        return WalletKind(value)
    except ValueError as e:
        raise UnsupportedWalletKindError(value, cause=e)


def _check_public_key(value: bytes, label: str) -> bytes:
    if not isinstance(value, (bytes, bytearray)) or len(value) != 32:
        raise InvalidKeyError(f"{label} must be 32 bytes")
    return bytes(value)


class WalletSource(ABC):
    """Abstract wallet contract source."""

    kind: WalletKind
    workchain: int

    @abstractmethod
    def state_data(self) -> Dict[str, Any]:
        """Data stored in the contract's initial state."""
        pass

    @abstractmethod
    def backup(self) -> str:
        """Configuration string that restores this source."""
        pass

    def state_init(self) -> Dict[str, Any]:
        """Descriptor of the contract's initial state."""
        return {
            "code": self.kind.value,
            "workchain": self.workchain,
            "data": self.state_data(),
        }

    @property
    def address(self) -> WalletAddress:
        """Address of the contract."""
        return contract_address(self)


class GenericWalletSource(WalletSource):
    """Single-key wallet (simple, v2 and v3 families)."""

    def __init__(self, kind: WalletKind, workchain: int, public_key: bytes, wallet_id: Optional[int] = None):
        kind = validate_wallet_kind(kind)
        if not kind.is_generic:
            raise UnsupportedWalletKindError(kind.value)
        self.kind = kind
        self.workchain = workchain
        self.public_key = _check_public_key(public_key, "Public key")
        if kind.uses_wallet_id and wallet_id is None:
            wallet_id = DEFAULT_WALLET_ID + workchain
        self.wallet_id = wallet_id if kind.uses_wallet_id else None

    def state_data(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"publicKey": self.public_key.hex(), "seqno": 0}
        if self.wallet_id is not None:
            data["walletId"] = self.wallet_id
        return data

    def backup(self) -> str:
        config: Dict[str, Any] = {
            "kind": self.kind.value,
            "workchain": self.workchain,
            "publicKey": self.public_key.hex(),
        }
        if self.wallet_id is not None:
            config["walletId"] = self.wallet_id
        return dumps_canonical(config)

    @classmethod
    def restore(cls, config: Dict[str, Any]) -> GenericWalletSource:
        return cls(
            kind=validate_wallet_kind(config["kind"]),
            workchain=int(config["workchain"]),
            public_key=bytes.fromhex(config["publicKey"]),
            wallet_id=config.get("walletId"),
        )

    def __repr__(self) -> str:
        return f"GenericWalletSource(kind='{self.kind.value}', workchain={self.workchain})"


class WhitelistedWalletSource(WalletSource):
    """
    Restricted wallet controlled by two keys.

    The master key may send anywhere; the restricted key may only send to the
    whitelisted address. Both keys share the contract's single address.
    """

    kind = WalletKind.WHITELISTED

    def __init__(self, master_key: bytes, restricted_key: bytes, workchain: int,
                 whitelisted_address: WalletAddress):
        self.master_key = _check_public_key(master_key, "Master key")
        self.restricted_key = _check_public_key(restricted_key, "Restricted key")
        self.workchain = workchain
        self.whitelisted_address = parse_address(whitelisted_address)

    @classmethod
    def create(cls, master_key: bytes, restricted_key: bytes, workchain: int,
               whitelisted_address: Union[str, WalletAddress]) -> WhitelistedWalletSource:
        """Create a source for a new restricted wallet."""
        return cls(master_key, restricted_key, workchain, parse_address(whitelisted_address))

    def state_data(self) -> Dict[str, Any]:
        return {
            "masterKey": self.master_key.hex(),
            "restrictedKey": self.restricted_key.hex(),
            "whitelistedAddress": self.whitelisted_address.to_raw(),
            "seqno": 0,
        }

    def backup(self) -> str:
        return dumps_canonical({
            "kind": self.kind.value,
            "workchain": self.workchain,
            "masterKey": self.master_key.hex(),
            "restrictedKey": self.restricted_key.hex(),
            "whitelistedAddress": self.whitelisted_address.to_raw(),
        })

    @classmethod
    def restore(cls, config: Dict[str, Any]) -> WhitelistedWalletSource:
        return cls(
            master_key=bytes.fromhex(config["masterKey"]),
            restricted_key=bytes.fromhex(config["restrictedKey"]),
            workchain=int(config["workchain"]),
            whitelisted_address=WalletAddress.parse(config["whitelistedAddress"]),
        )

    def __repr__(self) -> str:
        return f"WhitelistedWalletSource(workchain={self.workchain})"


def contract_address(source: WalletSource) -> WalletAddress:
    """Derive the address of a wallet source."""
    return WalletAddress(source.workchain, sha256_canonical(source.state_init()))


def create_generic_wallet_source(kind: Union[str, WalletKind], workchain: int, public_key: bytes) -> GenericWalletSource:
    """Create a single-key wallet source."""
    return GenericWalletSource(validate_wallet_kind(kind), workchain, public_key)


def _parse_config(config: str) -> Dict[str, Any]:
    try:
        data = json.loads(config)
    except json.JSONDecodeError as e:
        raise CorruptStoreError("Wallet configuration is not valid JSON", cause=e)
    if not isinstance(data, dict):
        raise CorruptStoreError("Wallet configuration must be an object")
    return data


def restore_wallet_source(kind: Union[str, WalletKind], address: WalletAddress,
                          public_key: bytes, config: str) -> WalletSource:
    """
    Rebuild the wallet source of a stored key.

    Generic kinds may have an empty configuration; they are rebuilt from the
    kind, the address workchain and the public key.

    Raises:
        SourceMismatchError: If the rebuilt source does not reproduce address,
            or the configuration does not include public_key
    """
    kind = validate_wallet_kind(kind)

    if kind.is_generic:
        if config:
            data = _parse_config(config)
            try:
                source: WalletSource = GenericWalletSource.restore(data)
            except (KeyError, ValueError) as e:
                raise CorruptStoreError("Wallet configuration is incomplete", cause=e)
            if source.kind is not kind or source.public_key != public_key:
                raise SourceMismatchError("Wallet configuration does not match the key")
        else:
            source = GenericWalletSource(kind, address.workchain, public_key)
    else:
        if not config:
            raise CorruptStoreError("Restricted wallet requires a configuration")
        data = _parse_config(config)
        try:
            source = WhitelistedWalletSource.restore(data)
        except (KeyError, ValueError) as e:
            raise CorruptStoreError("Wallet configuration is incomplete", cause=e)
        if public_key not in (source.master_key, source.restricted_key):
            raise SourceMismatchError("Key is neither the master nor the restricted key of this wallet")

    restored = contract_address(source)
    if restored != address:
        logger.error(f"Restored address {restored.to_raw()} differs from stored {address.to_raw()}")
        raise SourceMismatchError(
            "Wallet source does not reproduce the stored address",
            details={"stored": address.to_raw(), "restored": restored.to_raw()},
        )
    return source


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

"""
Key entry: public metadata of one managed wallet key.

Entries never hold the secret; the keystore keeps the encrypted mnemonic
alongside, keyed by the entry name.
"""

from __future__ import annotations
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from ..contracts.sources import WalletKind
from ..runtime.address import WalletAddress


class KeyEntry(BaseModel):
    """
    Public metadata of a wallet key.

    Several entries may share one address (the master and restricted keys of
    a restricted wallet); names are what make entries unique.
    """
    name: str = Field(description="Operator-chosen unique name")
    address: WalletAddress = Field(description="Wallet address")
    kind: WalletKind = Field(description="Wallet contract variant")
    config: str = Field(default="", description="Wallet source configuration")
    comment: str = Field(default="", description="Free-text comment")
    public_key: bytes = Field(alias="publicKey", description="Raw ed25519 public key")

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Names must be non-empty."""
        if not v or not v.strip():
            raise ValueError("Key name cannot be empty")
        return v

    @field_validator('public_key', mode='before')
    @classmethod
    def parse_public_key(cls, v: Any) -> Any:
        """Accept hex strings as well as raw bytes."""
        if isinstance(v, str):
            return bytes.fromhex(v)
        return v

    @field_validator('public_key')
    @classmethod
    def validate_public_key(cls, v: bytes) -> bytes:
        if len(v) != 32:
            raise ValueError(f"Public key must be 32 bytes, got {len(v)}")
        return v

    @field_serializer('public_key')
    def serialize_public_key(self, v: bytes) -> str:
        return v.hex()

    @field_serializer('kind')
    def serialize_kind(self, v: WalletKind) -> str:
        return v.value

    def __str__(self) -> str:
        return f"KeyEntry({self.name}, {self.kind.value})"


__all__ = ["KeyEntry"]

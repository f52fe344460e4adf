"""
Signed transfer messages.

A transfer is signed with the wallet's ed25519 key over the SHA-256 of the
message's canonical JSON. The sequence number binds the signature to one
wallet state, so resubmitting the same envelope cannot send twice.
"""

from __future__ import annotations
import time
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field

from ..crypto.ed25519 import Ed25519PublicKey, KeyPair
from ..runtime.address import WalletAddress
from ..utils.canonjson import sha256_canonical

DEFAULT_TIMEOUT = 60


class TransferMessage(BaseModel):
    """Unsigned transfer."""
    source: WalletAddress
    destination: WalletAddress
    value: int = Field(ge=0, description="Amount in nano units")
    seqno: int = Field(ge=0)
    bounce: bool = True
    valid_until: int = Field(alias="validUntil", description="Unix time after which the message is void")

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    @classmethod
    def create(cls, source: WalletAddress, destination: WalletAddress, value: int, seqno: int,
               bounce: bool, timeout: int = DEFAULT_TIMEOUT) -> TransferMessage:
        return cls(
            source=source,
            destination=destination,
            value=value,
            seqno=seqno,
            bounce=bounce,
            valid_until=int(time.time()) + timeout,
        )

    def to_signing_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)

    def signing_hash(self) -> bytes:
        """Hash that is signed."""
        return sha256_canonical(self.to_signing_dict())

    def sign(self, key: KeyPair) -> SignedTransfer:
        return SignedTransfer(
            message=self,
            public_key=key.public_key.hex(),
            signature=key.sign(self.signing_hash()).hex(),
        )


class SignedTransfer(BaseModel):
    """Transfer plus the signature of the sending key."""
    message: TransferMessage
    public_key: str = Field(alias="publicKey")
    signature: str

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    def verify(self) -> bool:
        """Check the signature against the embedded public key."""
        public_key = Ed25519PublicKey(bytes.fromhex(self.public_key))
        return public_key.verify(bytes.fromhex(self.signature), self.message.signing_hash())

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


__all__ = ["TransferMessage", "SignedTransfer"]

"""
WalletAddress Pydantic custom type for on-chain wallet addresses.

An address is a workchain id plus a 32-byte account hash. It parses and
renders both the raw form (``0:ab12...``) and the 48-character user-friendly
form (base64 of tag, workchain, hash and a CRC16 checksum).
"""

import base64
import binascii
from typing import Any, Union
from pydantic import GetCoreSchemaHandler
from pydantic_core import CoreSchema, core_schema

from .errors import InvalidAddressError

BOUNCEABLE_TAG = 0x11
NON_BOUNCEABLE_TAG = 0x51
TEST_FLAG = 0x80


def _crc16(data: bytes) -> bytes:
    # CRC16-XMODEM, big-endian
    return binascii.crc_hqx(data, 0).to_bytes(2, "big")


class WalletAddress:
    """Custom Pydantic type for wallet addresses."""

    def __init__(self, workchain: int, hash_part: bytes):
        if not isinstance(hash_part, (bytes, bytearray)) or len(hash_part) != 32:
            raise InvalidAddressError("Address hash must be 32 bytes")
        if not -128 <= workchain <= 127:
            raise InvalidAddressError(f"Workchain out of range: {workchain}")

        self.workchain = workchain
        self.hash_part = bytes(hash_part)
        self.is_bounceable = True
        self.is_test_only = False

    @classmethod
    def parse(cls, value: str) -> "WalletAddress":
        """Parse a raw or user-friendly address string."""
        if not isinstance(value, str) or not value.strip():
            raise InvalidAddressError("Address cannot be empty")
        value = value.strip()
        if ":" in value:
            return cls.parse_raw(value)
        return cls.parse_friendly(value)

    @classmethod
    def parse_raw(cls, value: str) -> "WalletAddress":
        """Parse ``<workchain>:<64 hex chars>``."""
        wc_part, _, hash_hex = value.partition(":")
        try:
            workchain = int(wc_part, 10)
            hash_part = bytes.fromhex(hash_hex)
        except ValueError as e:
            raise InvalidAddressError(f"Invalid raw address: {value}", cause=e)
        return cls(workchain, hash_part)

    @classmethod
    def parse_friendly(cls, value: str) -> "WalletAddress":
        """Parse the 48-character base64 or base64url form."""
        if len(value) != 48:
            raise InvalidAddressError(f"Invalid address length: {value}")
        try:
            data = base64.b64decode(value.replace("-", "+").replace("_", "/"), validate=True)
        except (binascii.Error, ValueError) as e:
            raise InvalidAddressError(f"Invalid address encoding: {value}", cause=e)

        if len(data) != 36:
            raise InvalidAddressError(f"Invalid address length: {value}")
        if _crc16(data[:34]) != data[34:]:
            raise InvalidAddressError(f"Invalid address checksum: {value}")

        tag = data[0]
        test_only = bool(tag & TEST_FLAG)
        tag &= ~TEST_FLAG
        if tag not in (BOUNCEABLE_TAG, NON_BOUNCEABLE_TAG):
            raise InvalidAddressError(f"Unknown address tag: {tag:#x}")

        workchain = int.from_bytes(data[1:2], "big", signed=True)
        address = cls(workchain, data[2:34])
        address.is_bounceable = tag == BOUNCEABLE_TAG
        address.is_test_only = test_only
        return address

    def to_raw(self) -> str:
        """Get the raw ``wc:hex`` form."""
        return f"{self.workchain}:{self.hash_part.hex()}"

    def to_friendly(self, bounceable: bool = True, test_only: bool = False, url_safe: bool = True) -> str:
        """Get the user-friendly base64 form."""
        tag = BOUNCEABLE_TAG if bounceable else NON_BOUNCEABLE_TAG
        if test_only:
            tag |= TEST_FLAG
        data = bytes([tag]) + self.workchain.to_bytes(1, "big", signed=True) + self.hash_part
        data += _crc16(data)
        if url_safe:
            return base64.urlsafe_b64encode(data).decode("ascii")
        return base64.b64encode(data).decode("ascii")

    def to_bytes(self) -> bytes:
        """Get the 36-byte export layout: hash then big-endian int32 workchain."""
        return self.hash_part + self.workchain.to_bytes(4, "big", signed=True)

    def __str__(self) -> str:
        return self.to_friendly()

    def __repr__(self) -> str:
        return f"WalletAddress('{self.to_raw()}')"

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, WalletAddress):
            return self.workchain == other.workchain and self.hash_part == other.hash_part
        return False

    def __hash__(self) -> int:
        return hash((self.workchain, self.hash_part))

    @classmethod
    def __get_pydantic_core_schema__(
        cls,
        source_type: Any,
        handler: GetCoreSchemaHandler,
    ) -> CoreSchema:
        """Return a Pydantic CoreSchema that validates and serializes the address."""
        return core_schema.no_info_before_validator_function(
            cls._validate,
            core_schema.is_instance_schema(cls),
            serialization=core_schema.plain_serializer_function_ser_schema(
                lambda address: address.to_raw()
            ),
        )

    @classmethod
    def _validate(cls, value: Any) -> "WalletAddress":
        """Validate and convert the input to a WalletAddress."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls.parse(value)
            except InvalidAddressError as e:
                raise ValueError(e.message)
        raise ValueError(f"Invalid WalletAddress: {value!r}")


def parse_address(value: Union[str, WalletAddress]) -> WalletAddress:
    """Coerce a string or address to a WalletAddress."""
    if isinstance(value, WalletAddress):
        return value
    return WalletAddress.parse(value)


__all__ = ["WalletAddress", "parse_address"]

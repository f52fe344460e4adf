"""
Tests for the wallet address type.
"""

import base64

import pytest
from pydantic import BaseModel, ValidationError

from ton_keystore.runtime.address import WalletAddress, parse_address
from ton_keystore.runtime.errors import InvalidAddressError

HASH = bytes.fromhex("83dfd552e63729b472fcbcc8c45ebcc6691702558b68ec7527e1ba403a0f31a8")


class AddressModel(BaseModel):
    address: WalletAddress


class TestWalletAddress:
    """Test parsing and rendering of addresses."""

    def test_raw_form(self):
        address = WalletAddress(0, HASH)
        assert address.to_raw() == "0:" + HASH.hex()
        assert WalletAddress.parse(address.to_raw()) == address

    def test_masterchain_raw_form(self):
        address = WalletAddress.parse("-1:" + HASH.hex())
        assert address.workchain == -1
        assert address.hash_part == HASH

    def test_friendly_form_is_48_chars(self):
        friendly = WalletAddress(0, HASH).to_friendly()
        assert len(friendly) == 48
        assert "+" not in friendly and "/" not in friendly

    def test_friendly_flags(self):
        """Test bounceable and test-only flags survive parsing."""
        address = WalletAddress(-1, HASH)

        bounceable = WalletAddress.parse(address.to_friendly())
        assert bounceable.is_bounceable and not bounceable.is_test_only

        plain = WalletAddress.parse(address.to_friendly(bounceable=False, test_only=True, url_safe=False))
        assert not plain.is_bounceable and plain.is_test_only
        assert plain == address

    def test_friendly_tag_byte(self):
        data = base64.urlsafe_b64decode(WalletAddress(0, HASH).to_friendly(bounceable=False))
        assert data[0] == 0x51
        assert data[1] == 0
        assert data[2:34] == HASH

    def test_checksum_detected(self):
        """Test a corrupted checksum is rejected."""
        data = bytearray(base64.urlsafe_b64decode(WalletAddress(0, HASH).to_friendly()))
        data[-1] ^= 0xFF
        with pytest.raises(InvalidAddressError):
            WalletAddress.parse(base64.urlsafe_b64encode(bytes(data)).decode())

    @pytest.mark.parametrize("value", ["", "0:zz", "0:abcd", "short", "x" * 48])
    def test_invalid_addresses(self, value):
        with pytest.raises(InvalidAddressError):
            WalletAddress.parse(value)

    def test_workchain_range(self):
        with pytest.raises(InvalidAddressError):
            WalletAddress(300, HASH)

    def test_to_bytes_layout(self):
        """Test export layout: hash then big-endian int32 workchain."""
        assert WalletAddress(-1, HASH).to_bytes() == HASH + b"\xff\xff\xff\xff"
        assert WalletAddress(0, HASH).to_bytes() == HASH + b"\x00\x00\x00\x00"

    def test_hashable(self):
        assert len({WalletAddress(0, HASH), WalletAddress.parse("0:" + HASH.hex())}) == 1

    def test_parse_address_passthrough(self):
        address = WalletAddress(0, HASH)
        assert parse_address(address) is address


class TestWalletAddressPydantic:
    """Test the address as a pydantic field."""

    def test_validates_strings(self):
        model = AddressModel(address=WalletAddress(0, HASH).to_friendly())
        assert model.address == WalletAddress(0, HASH)

    def test_serializes_raw(self):
        model = AddressModel(address=WalletAddress(0, HASH))
        assert model.model_dump() == {"address": "0:" + HASH.hex()}
        assert AddressModel.model_validate_json(model.model_dump_json()) == model

    def test_rejects_garbage(self):
        with pytest.raises(ValidationError):
            AddressModel(address="not an address")
        with pytest.raises(ValidationError):
            AddressModel(address=42)

"""
Tests for validator node export files.
"""

from ton_keystore.crypto.ed25519 import KeyPair
from ton_keystore.keys.export import PRIVATE_KEY_PREFIX, export_key, write_node_export
from helpers import mk_address

SEED = bytes(range(32))


class TestNodeExport:
    """Test export file layouts."""

    def test_export_key_layout(self):
        pair = KeyPair.from_seed(SEED)
        data = export_key(pair.secret_key)

        assert data[:4] == bytes([0x17, 0x23, 0x68, 0x49]) == PRIVATE_KEY_PREFIX
        assert data[4:] == SEED
        assert len(data) == 36

    def test_write_node_export(self, tmp_path):
        """Test both files are written next to each other."""
        address = mk_address("validator", workchain=-1)
        pair = KeyPair.from_seed(SEED)

        address_path, key_path = write_node_export(tmp_path / "validator", address, pair)

        assert address_path.name == "validator.addr"
        assert key_path.name == "validator.pk"
        assert address_path.read_bytes() == address.hash_part + b"\xff\xff\xff\xff"
        assert key_path.read_bytes() == PRIVATE_KEY_PREFIX + SEED

"""
Tests for keystore files and atomic writes.
"""

import os
import stat
from unittest.mock import patch

import pytest

from ton_keystore.keys.storage import KeystoreFile, atomic_write
from ton_keystore.runtime.errors import CorruptStoreError, InvalidOperatorInputError
from helpers import mk_cipher, mk_entry


class TestAtomicWrite:
    """Test atomic file replacement."""

    def test_writes_with_private_mode(self, tmp_path):
        path = tmp_path / "file.bin"
        atomic_write(path, b"data")

        assert path.read_bytes() == b"data"
        assert stat.S_IMODE(os.stat(path).st_mode) == 0o600

    def test_replaces_existing(self, tmp_path):
        path = tmp_path / "file.bin"
        path.write_bytes(b"old")
        atomic_write(path, b"new")
        assert path.read_bytes() == b"new"

    def test_failed_replace_keeps_old_file(self, tmp_path):
        """Test a crash before the rename leaves the previous file and no temp file."""
        path = tmp_path / "file.bin"
        path.write_bytes(b"old")

        with patch("ton_keystore.keys.storage.os.replace", side_effect=OSError("disk gone")):
            with pytest.raises(OSError):
                atomic_write(path, b"new")

        assert path.read_bytes() == b"old"
        assert os.listdir(tmp_path) == ["file.bin"]


class TestKeystoreFile:
    """Test keystore files."""

    def test_create_and_open(self, tmp_path, password, mnemonics):
        path = tmp_path / "main.keystore"
        created = KeystoreFile.create(path, password, cipher=mk_cipher())
        created.store.add_key(mk_entry("main", mnemonics[0]), " ".join(mnemonics[0]).encode(), password)
        created.save()

        opened = KeystoreFile.open(path)
        assert opened.name == "main"
        assert opened.store.all_keys == created.store.all_keys
        assert opened.store.get_mnemonic("main", password) == list(mnemonics[0])

    def test_create_refuses_overwrite(self, tmp_path, password):
        path = tmp_path / "main.keystore"
        path.write_bytes(b"precious")

        with pytest.raises(InvalidOperatorInputError):
            KeystoreFile.create(path, password, cipher=mk_cipher())
        assert path.read_bytes() == b"precious"

    def test_open_missing(self, tmp_path):
        with pytest.raises(CorruptStoreError):
            KeystoreFile.open(tmp_path / "missing.keystore")

    def test_open_corrupt(self, tmp_path):
        path = tmp_path / "bad.keystore"
        path.write_bytes(b"{}")
        with pytest.raises(CorruptStoreError):
            KeystoreFile.open(path)

    def test_unsaved_changes_not_durable(self, keystore_file, password, mnemonics):
        """Test the file only changes on save."""
        keystore_file.store.add_key(mk_entry("main", mnemonics[0]), " ".join(mnemonics[0]).encode(), password)
        assert len(KeystoreFile.open(keystore_file.path).store) == 0

        keystore_file.save()
        assert len(KeystoreFile.open(keystore_file.path).store) == 1

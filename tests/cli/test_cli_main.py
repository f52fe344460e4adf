"""
Tests for the ton-keystore command line.
"""

from click.testing import CliRunner

from ton_keystore import __version__
from ton_keystore.cli.main import cli
from ton_keystore.keys.storage import KeystoreFile


class TestCli:
    """Test commands through click's runner."""

    def test_version(self):
        result = CliRunner().invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_new(self, tmp_path):
        """Test a keystore is created with the confirmed password."""
        path = tmp_path / "wallets"
        result = CliRunner().invoke(cli, ["new", str(path)], input="secret\nsecret\n")

        assert result.exit_code == 0, result.output
        keystore = KeystoreFile.open(tmp_path / "wallets.keystore")
        assert keystore.store.check_password("secret")

    def test_new_refuses_existing(self, keystore_file):
        before = keystore_file.path.read_bytes()
        result = CliRunner().invoke(cli, ["new", str(keystore_file.path)])

        assert result.exit_code == 1
        assert "already exists" in result.output
        assert keystore_file.path.read_bytes() == before

    def test_open_and_exit(self, keystore_file):
        """Test the command loop exits on the exit command."""
        result = CliRunner().invoke(cli, ["--offline", "open", str(keystore_file.path)], input="8\n")

        assert result.exit_code == 0, result.output
        assert "Pick command" in result.output

    def test_open_back_at_menu(self, keystore_file):
        result = CliRunner().invoke(cli, ["open", str(keystore_file.path)], input="0\n")
        assert result.exit_code == 0, result.output

    def test_open_missing_file(self, tmp_path):
        result = CliRunner().invoke(cli, ["open", str(tmp_path / "none.keystore")])
        assert result.exit_code != 0

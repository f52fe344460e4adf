"""
Shared fixtures:
- Make tests/helpers importable
- Cheap cipher and pre-generated mnemonics so key derivation stays fast
- Sessions wired to a scripted operator and an in-memory network client
"""
import json
import pathlib
import sys

import pytest

TESTS_DIR = pathlib.Path(__file__).parent
if str(TESTS_DIR) not in sys.path:
    sys.path.insert(0, str(TESTS_DIR))

from ton_keystore.cli.session import Session
from ton_keystore.crypto.mnemonic import mnemonic_new
from ton_keystore.keys.keystore import KeyStore
from ton_keystore.keys.storage import KeystoreFile

from helpers import FakeNetworkClient, ScriptedOperator, mk_cipher, mk_config, mk_console, mk_policy

PASSWORD = "correct horse battery staple"


@pytest.fixture(scope="session")
def mnemonics():
    """Four valid mnemonics, generated once per test run."""
    return [mnemonic_new() for _ in range(4)]


@pytest.fixture
def password():
    return PASSWORD


@pytest.fixture
def cipher():
    return mk_cipher()


@pytest.fixture
def store(cipher):
    """Empty key store protected by PASSWORD."""
    return KeyStore.create(PASSWORD, cipher=cipher)


@pytest.fixture
def keystore_file(tmp_path, cipher):
    """Empty keystore persisted under tmp_path."""
    return KeystoreFile.create(tmp_path / "main.keystore", PASSWORD, cipher=cipher)


@pytest.fixture
def contacts_path(tmp_path):
    """Contacts file with two destinations."""
    from helpers import mk_address

    path = tmp_path / "contacts.json"
    path.write_text(json.dumps([
        {"name": "exchange", "address": mk_address("exchange").to_friendly()},
        {"name": "cold", "address": mk_address("cold").to_raw()},
    ]))
    return path


@pytest.fixture
def network():
    return FakeNetworkClient()


@pytest.fixture
def make_session(keystore_file, network, contacts_path):
    """Build a session whose operator answers from a script."""
    def _make(answers=(), offline=False, client=None):
        return Session(
            keystore=keystore_file,
            client=client or network,
            operator=ScriptedOperator(answers),
            config=mk_config(contacts_path=str(contacts_path), offline=offline),
            console=mk_console(),
            policy_factory=mk_policy,
        )
    return _make

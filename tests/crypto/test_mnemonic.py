"""
Tests for wallet mnemonics and key derivation.
"""

import hashlib

from ton_keystore.crypto.mnemonic import (
    MNEMONIC_WORDS, wordlist, normalize_mnemonic, mnemonic_new,
    mnemonic_validate, mnemonic_to_seed, mnemonic_to_wallet_key
)


class TestMnemonicGeneration:
    """Test generation and validation."""

    def test_new_mnemonic_is_valid(self, mnemonics):
        """Test generated phrases pass validation."""
        for words in mnemonics:
            assert len(words) == MNEMONIC_WORDS
            assert all(word in wordlist() for word in words)
            assert mnemonic_validate(words)

    def test_custom_length(self):
        words = mnemonic_new(12)
        assert len(words) == 12
        assert mnemonic_validate(words)

    def test_unknown_word_rejected(self, mnemonics):
        """Test a word outside the wordlist fails validation."""
        words = list(mnemonics[0])
        words[5] = "notaword"
        assert not mnemonic_validate(words)

    def test_empty_rejected(self):
        assert not mnemonic_validate([])

    def test_normalize(self):
        """Test operator input is split on whitespace and lowercased."""
        assert normalize_mnemonic("  Abandon\tABILITY\n able ") == ["abandon", "ability", "able"]


class TestKeyDerivation:
    """Test mnemonic to key pair derivation."""

    def test_deterministic(self, mnemonics):
        """Test the same phrase always derives the same key."""
        first = mnemonic_to_wallet_key(mnemonics[0])
        second = mnemonic_to_wallet_key(list(mnemonics[0]))
        assert first == second

    def test_distinct_phrases_distinct_keys(self, mnemonics):
        keys = {mnemonic_to_wallet_key(words).public_key for words in mnemonics}
        assert len(keys) == len(mnemonics)

    def test_secret_key_layout(self, mnemonics):
        """Test the secret key is seed followed by public key."""
        key = mnemonic_to_wallet_key(mnemonics[0])
        seed = mnemonic_to_seed(mnemonics[0])

        assert len(key.public_key) == 32
        assert len(key.secret_key) == 64
        assert key.secret_key[:32] == seed[:32]
        assert key.secret_key[32:] == key.public_key

    def test_seed_length(self, mnemonics):
        assert len(mnemonic_to_seed(mnemonics[0])) == 64

    def test_signature_verifies(self, mnemonics):
        """Test signatures by the derived key verify under its public key."""
        from ton_keystore.crypto.ed25519 import Ed25519PublicKey

        key = mnemonic_to_wallet_key(mnemonics[0])
        message = hashlib.sha256(b"transfer").digest()
        signature = key.sign(message)

        assert Ed25519PublicKey(key.public_key).verify(signature, message)
        assert not Ed25519PublicKey(key.public_key).verify(signature, b"other")

"""
Wallet mnemonics.

24 words from the BIP-39 English wordlist. The phrase maps to an ed25519
key pair through HMAC-SHA512 entropy and a PBKDF2-SHA512 seed. A phrase is
only valid when its entropy passes the basic-seed check, so a random word
list or a BIP-39 phrase is rejected.
"""

import hashlib
import hmac
import logging
import secrets
from functools import lru_cache
from typing import List, Sequence

from mnemonic import Mnemonic

from .ed25519 import KeyPair

logger = logging.getLogger(__name__)

MNEMONIC_WORDS = 24
PBKDF_ITERATIONS = 100000
DEFAULT_SEED_SALT = b"TON default seed"
SEED_VERSION_SALT = b"TON seed version"


@lru_cache(maxsize=1)
def wordlist() -> List[str]:
    """The English wordlist."""
    return Mnemonic("english").wordlist


@lru_cache(maxsize=1)
def _wordset() -> frozenset:
    return frozenset(wordlist())


def normalize_mnemonic(value: str) -> List[str]:
    """Split operator input into lowercase words."""
    return [word.lower() for word in value.split()]


def mnemonic_to_entropy(words: Sequence[str], password: str = "") -> bytes:
    """HMAC-SHA512 of the phrase keyed by the joined words."""
    phrase = " ".join(words).encode("utf-8")
    return hmac.new(phrase, password.encode("utf-8"), hashlib.sha512).digest()


def mnemonic_to_seed(words: Sequence[str], salt: bytes = DEFAULT_SEED_SALT, password: str = "") -> bytes:
    """Derive the 64-byte seed for a phrase."""
    entropy = mnemonic_to_entropy(words, password)
    return hashlib.pbkdf2_hmac("sha512", entropy, salt, PBKDF_ITERATIONS, 64)


def _is_basic_seed(entropy: bytes) -> bool:
    iterations = max(1, PBKDF_ITERATIONS // 256)
    seed = hashlib.pbkdf2_hmac("sha512", entropy, SEED_VERSION_SALT, iterations, 64)
    return seed[0] == 0


def mnemonic_validate(words: Sequence[str]) -> bool:
    """
    Check a phrase.

    Args:
        words: Mnemonic words

    Returns:
        True if every word is known and the phrase is a basic seed
    """
    if not words:
        return False
    known = _wordset()
    if any(word not in known for word in words):
        return False
    return _is_basic_seed(mnemonic_to_entropy(words))


def mnemonic_new(words_count: int = MNEMONIC_WORDS) -> List[str]:
    """
    Generate a fresh phrase.

    Draws random words until the phrase passes the basic-seed check
    (about one in 256 candidates).
    """
    words_list = wordlist()
    attempts = 0
    while True:
        attempts += 1
        words = [words_list[secrets.randbelow(len(words_list))] for _ in range(words_count)]
        if _is_basic_seed(mnemonic_to_entropy(words)):
            logger.debug(f"Generated mnemonic after {attempts} candidates")
            return words


def mnemonic_to_wallet_key(words: Sequence[str]) -> KeyPair:
    """Derive the wallet key pair for a phrase."""
    seed = mnemonic_to_seed(words)
    return KeyPair.from_seed(seed[:32])


__all__ = [
    "MNEMONIC_WORDS",
    "wordlist",
    "normalize_mnemonic",
    "mnemonic_to_entropy",
    "mnemonic_to_seed",
    "mnemonic_validate",
    "mnemonic_new",
    "mnemonic_to_wallet_key",
]

r"""
Encrypted key store.

Holds the ordered key entries of one keystore together with the encrypted
mnemonic of each entry. Entries and secrets are only ever added together,
names are unique, and the whole store serializes to a single document that
round-trips byte for byte.
"""

from __future__ import annotations
import base64
import binascii
import hashlib
import hmac
import os
import logging
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from pydantic import BaseModel, Field, ValidationError

from ..crypto.cipher import SecretCipher
from ..crypto.mnemonic import mnemonic_validate
from ..runtime.errors import (
    AuthenticationFailedError, CorruptSecretError, CorruptStoreError,
    DuplicateNameError, UnknownKeyError, InvalidOperatorInputError
)
from .entry import KeyEntry

logger = logging.getLogger(__name__)

KEYSTORE_VERSION = 1
NAME_INDEX_WIDTH = 4
_VERIFIER_PLAINTEXT = b"ton-keystore password check"

MnemonicValidator = Callable[[Sequence[str]], bool]


class KdfParams(BaseModel):
    """Persisted key derivation parameters."""
    algorithm: str
    iterations: int = Field(gt=0)


class KeystoreDocument(BaseModel):
    """
    Serialized keystore.

    ``keys[i]`` and ``secrets[i]`` describe the same key.
    """
    version: int = KEYSTORE_VERSION
    kdf: KdfParams
    verifier: str
    keys: List[KeyEntry] = Field(default_factory=list)
    secrets: List[str] = Field(default_factory=list)


def _b64e(data: bytes) -> str:
    return base64.b64encode(data).decode('ascii')


def _b64d(data: str) -> bytes:
    return base64.b64decode(data.encode('ascii'), validate=True)


class KeyStore:
    """
    Key entries plus their encrypted mnemonics.

    Every secret is encrypted under the store's single password; the password
    verifier created with the store lets the password be checked before any
    secret is touched.
    """

    def __init__(
        self,
        cipher: SecretCipher,
        verifier: bytes,
        entries: Optional[Sequence[KeyEntry]] = None,
        secrets: Optional[Sequence[bytes]] = None,
        validator: MnemonicValidator = mnemonic_validate
    ):
        """
        Initialize a key store from existing state.

        Args:
            cipher: Cipher used for every secret
            verifier: Ciphertext of the password check marker
            entries: Key entries in insertion order
            secrets: Encrypted secrets, parallel to entries
            validator: Mnemonic format checker
        """
        entries = list(entries or [])
        secrets = list(secrets or [])
        if len(entries) != len(secrets):
            raise CorruptStoreError(
                "Every key must have exactly one secret",
                details={"keys": len(entries), "secrets": len(secrets)}
            )

        self._cipher = cipher
        self._verifier = verifier
        self._validator = validator
        # Keyed digest of the last verified password; the key never leaves this instance
        self._digest_key = os.urandom(32)
        self._verified: Optional[bytes] = None
        self._entries: Dict[str, KeyEntry] = {}
        self._secrets: Dict[str, bytes] = {}
        for entry, secret in zip(entries, secrets):
            if entry.name in self._entries:
                raise CorruptStoreError(f"Duplicate key name in store: {entry.name}")
            self._entries[entry.name] = entry
            self._secrets[entry.name] = secret

    @classmethod
    def create(cls, password: str, cipher: Optional[SecretCipher] = None,
               validator: MnemonicValidator = mnemonic_validate) -> KeyStore:
        """
        Create an empty store protected by password.

        Args:
            password: Store password
            cipher: Cipher to use (default parameters if omitted)
            validator: Mnemonic format checker
        """
        cipher = cipher or SecretCipher()
        verifier = cipher.encrypt(_VERIFIER_PLAINTEXT, password)
        logger.debug(f"Created empty key store with {cipher!r}")
        store = cls(cipher, verifier, validator=validator)
        store._verified = store._password_digest(password)
        return store

    @property
    def cipher(self) -> SecretCipher:
        return self._cipher

    @property
    def all_keys(self) -> Tuple[KeyEntry, ...]:
        """Snapshot of all entries in insertion order."""
        return tuple(self._entries.values())

    def has_key(self, name: str) -> bool:
        """Check if a key name is taken."""
        return name in self._entries

    def get_key(self, name: str) -> KeyEntry:
        """
        Get an entry by name.

        Raises:
            UnknownKeyError: If no entry has this name
        """
        try:
            return self._entries[name]
        except KeyError:
            raise UnknownKeyError(name)

    def check_password(self, password: str) -> bool:
        """Check password against the store's verifier."""
        try:
            self.verify_password(password)
        except (AuthenticationFailedError, InvalidOperatorInputError):
            return False
        return True

    def verify_password(self, password: str) -> None:
        """
        Verify password.

        Only the first successful verification of a password runs the key
        derivation; repeats of the same password are checked against a keyed
        in-memory digest.

        Raises:
            AuthenticationFailedError: If the password is wrong
        """
        digest = self._password_digest(password)
        if self._verified is not None and hmac.compare_digest(digest, self._verified):
            return
        if self._cipher.decrypt(self._verifier, password) != _VERIFIER_PLAINTEXT:
            raise AuthenticationFailedError()
        self._verified = digest

    def _password_digest(self, password: str) -> bytes:
        return hmac.new(self._digest_key, password.encode("utf-8"), hashlib.sha256).digest()

    def add_key(self, entry: KeyEntry, secret: bytes, password: str) -> None:
        """
        Add an entry and its secret.

        The store is unchanged if this raises. The new state is not durable
        until the store is saved.

        Args:
            entry: Key metadata
            secret: Cleartext mnemonic bytes
            password: Store password

        Raises:
            DuplicateNameError: If entry.name is already taken
            AuthenticationFailedError: If the password is wrong
        """
        if entry.name in self._entries:
            raise DuplicateNameError(entry.name)

        self.verify_password(password)
        ciphertext = self._cipher.encrypt(secret, password)

        self._entries[entry.name] = entry
        self._secrets[entry.name] = ciphertext
        logger.debug(f"Added key {entry.name} ({entry.kind.value})")

    def get_secret(self, name: str, password: str) -> bytes:
        """
        Decrypt the mnemonic of a key.

        The caller owns the returned cleartext and should drop it as soon as
        the operation that needs it is done.

        Raises:
            UnknownKeyError: If name is absent
            AuthenticationFailedError: If decryption fails
            CorruptSecretError: If the secret is not a valid mnemonic
        """
        try:
            ciphertext = self._secrets[name]
        except KeyError:
            raise UnknownKeyError(name)

        secret = self._cipher.decrypt(ciphertext, password)
        try:
            words = secret.decode('utf-8').split(' ')
        except UnicodeDecodeError as e:
            raise CorruptSecretError(f"Secret of {name} is not text", details={"name": name}, cause=e)
        if not self._validator(words):
            logger.error(f"Secret of key {name} failed mnemonic validation")
            raise CorruptSecretError(f"Mnemonics of {name} are invalid", details={"name": name})
        return secret

    def get_mnemonic(self, name: str, password: str) -> List[str]:
        """Decrypt and validate the mnemonic of a key as a word list."""
        return self.get_secret(name, password).decode('utf-8').split(' ')

    def next_key_names(self, prefix: str, count: int) -> List[str]:
        """
        Generate count unused names ``<prefix>_0001``, ``<prefix>_0002``, ...

        Scans upward from 1, skipping names already in the store. Existing
        names are never reused or renumbered.
        """
        if not prefix:
            raise InvalidOperatorInputError("Prefix couldn't be empty")
        if count < 0:
            raise InvalidOperatorInputError(f"Invalid key count: {count}")

        names: List[str] = []
        index = 1
        while len(names) < count:
            name = f"{prefix}_{str(index).zfill(NAME_INDEX_WIDTH)}"
            if name not in self._entries:
                names.append(name)
            index += 1
        return names

    def to_document(self) -> KeystoreDocument:
        """Build the serializable document."""
        return KeystoreDocument(
            version=KEYSTORE_VERSION,
            kdf=KdfParams(**self._cipher.params()),
            verifier=_b64e(self._verifier),
            keys=list(self._entries.values()),
            secrets=[_b64e(self._secrets[name]) for name in self._entries],
        )

    def save(self) -> bytes:
        """Serialize the whole store."""
        return self.to_document().model_dump_json(by_alias=True, indent=2).encode('utf-8')

    @classmethod
    def load(cls, data: bytes, validator: MnemonicValidator = mnemonic_validate) -> KeyStore:
        """
        Deserialize a store produced by save.

        Raises:
            CorruptStoreError: If data is not a valid keystore document
        """
        try:
            document = KeystoreDocument.model_validate_json(data)
        except ValidationError as e:
            raise CorruptStoreError("Keystore document is invalid", cause=e)

        if document.version != KEYSTORE_VERSION:
            raise CorruptStoreError(f"Unsupported keystore version: {document.version}")

        try:
            verifier = _b64d(document.verifier)
            secrets = [_b64d(secret) for secret in document.secrets]
        except (binascii.Error, ValueError) as e:
            raise CorruptStoreError("Keystore secrets are not valid base64", cause=e)

        cipher = SecretCipher.from_params(document.kdf.model_dump())
        store = cls(cipher, verifier, document.keys, secrets, validator=validator)
        logger.debug(f"Loaded key store with {len(document.keys)} keys")
        return store

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __repr__(self) -> str:
        return f"KeyStore(count={len(self._entries)})"


__all__ = ["KeyStore", "KeystoreDocument", "KdfParams", "KEYSTORE_VERSION"]

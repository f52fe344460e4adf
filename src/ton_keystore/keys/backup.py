"""
Unencrypted backup archives.

A backup is a flat JSON array with one record per key, mnemonic in clear.
It exists only in memory while being built and in the one file it is written
to; nothing in the keystore keeps a reference to it.
"""

from __future__ import annotations
import json
import logging
from typing import Callable, List, Sequence, Union
from pathlib import Path

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, RootModel, ValidationError

from ..contracts.sources import validate_wallet_kind, restore_wallet_source
from ..crypto.ed25519 import KeyPair
from ..crypto.mnemonic import mnemonic_to_wallet_key, mnemonic_validate
from ..runtime.address import WalletAddress
from ..runtime.errors import CorruptSecretError, CorruptStoreError, DuplicateNameError, InvalidAddressError
from .entry import KeyEntry
from .keystore import KeyStore
from .storage import atomic_write

logger = logging.getLogger(__name__)

BACKUP_SUFFIX = ".keystore.backup"


class BackupRecord(BaseModel):
    """One decrypted key."""
    name: str
    address: str
    comment: str = ""
    config: str = ""
    kind: str
    mnemonic_words: List[str] = Field(
        validation_alias=AliasChoices("mnemonics", "mnemonicWords"),
        serialization_alias="mnemonics",
    )

    model_config = ConfigDict(populate_by_name=True)

    def __repr__(self) -> str:
        return f"BackupRecord(name='{self.name}', kind='{self.kind}')"


class BackupArchive(RootModel[List[BackupRecord]]):
    """Ordered backup records."""

    @property
    def records(self) -> List[BackupRecord]:
        return self.root

    def to_json(self) -> bytes:
        return json.dumps(self.model_dump(by_alias=True)).encode("utf-8")

    @classmethod
    def from_json(cls, data: Union[str, bytes]) -> BackupArchive:
        """
        Parse a backup file.

        Raises:
            CorruptStoreError: If data is not a backup archive
        """
        try:
            return cls.model_validate_json(data)
        except ValidationError as e:
            raise CorruptStoreError("Backup file is invalid", cause=e)

    @classmethod
    def read(cls, path: Union[str, Path]) -> BackupArchive:
        try:
            data = Path(path).read_bytes()
        except OSError as e:
            raise CorruptStoreError(f"Cannot read backup {path}", cause=e)
        return cls.from_json(data)

    def write(self, path: Union[str, Path]) -> None:
        atomic_write(path, self.to_json())
        logger.info(f"Wrote backup of {len(self.root)} keys to {path}")

    def __len__(self) -> int:
        return len(self.root)


def build_backup(store: KeyStore, password: str,
                 progress: Callable[[KeyEntry], None] = lambda entry: None) -> BackupArchive:
    """
    Decrypt every key of store into an archive.

    Raises:
        AuthenticationFailedError: If the password is wrong
        CorruptSecretError: If any secret is not a valid mnemonic
    """
    records = []
    for entry in store.all_keys:
        progress(entry)
        records.append(BackupRecord(
            name=entry.name,
            address=entry.address.to_friendly(),
            comment=entry.comment,
            config=entry.config,
            kind=entry.kind.value,
            mnemonic_words=store.get_mnemonic(entry.name, password),
        ))
    return BackupArchive(records)


def restore_archive(
    archive: BackupArchive,
    store: KeyStore,
    password: str,
    key_deriver: Callable[[Sequence[str]], KeyPair] = mnemonic_to_wallet_key,
    validator: Callable[[Sequence[str]], bool] = mnemonic_validate
) -> List[KeyEntry]:
    """
    Add every record of archive to store.

    All records are checked before the store is touched: names must be new,
    mnemonics valid, and each record's wallet source must reproduce its
    recorded address. Either every record is added or none is.

    Returns:
        The added entries, in archive order
    """
    seen = set()
    for record in archive.records:
        if record.name in seen or store.has_key(record.name):
            raise DuplicateNameError(record.name)
        seen.add(record.name)

    store.verify_password(password)

    prepared = []
    for record in archive.records:
        if not validator(record.mnemonic_words):
            raise CorruptSecretError(f"Mnemonics of {record.name} are invalid", details={"name": record.name})
        key = key_deriver(record.mnemonic_words)
        kind = validate_wallet_kind(record.kind)
        try:
            address = WalletAddress.parse(record.address)
        except InvalidAddressError as e:
            raise CorruptStoreError(f"Backup record {record.name} has an invalid address", cause=e)
        restore_wallet_source(kind, address, key.public_key, record.config)
        entry = KeyEntry(
            name=record.name,
            address=address,
            kind=kind,
            config=record.config,
            comment=record.comment,
            public_key=key.public_key,
        )
        prepared.append((entry, " ".join(record.mnemonic_words).encode("utf-8")))

    for entry, secret in prepared:
        store.add_key(entry, secret, password)
    logger.info(f"Restored {len(prepared)} keys from backup")
    return [entry for entry, _ in prepared]


__all__ = ["BackupRecord", "BackupArchive", "build_backup", "restore_archive", "BACKUP_SUFFIX"]

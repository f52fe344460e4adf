"""
Keystore files on disk.

Every write goes to a temporary file in the target directory which is
fsynced and then renamed over the destination, so a crash never leaves a
half-written file behind.
"""

from __future__ import annotations
import logging
import os
import tempfile
from pathlib import Path
from typing import Optional, Union

from ..crypto.cipher import SecretCipher
from ..runtime.errors import CorruptStoreError, InvalidOperatorInputError
from .keystore import KeyStore

logger = logging.getLogger(__name__)

KEYSTORE_SUFFIX = ".keystore"


def atomic_write(path: Union[str, Path], data: bytes, mode: int = 0o600) -> None:
    """
    Atomically replace path with data.

    Args:
        path: Destination file
        data: File contents
        mode: Permission bits of the new file
    """
    path = Path(path)
    directory = path.parent
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=directory)
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        os.chmod(tmp_name, mode)
        os.replace(tmp_name, path)
    except BaseException:
        if os.path.exists(tmp_name):
            os.remove(tmp_name)
        raise

    # Persist the rename itself
    if hasattr(os, "O_DIRECTORY"):
        dir_fd = os.open(directory, os.O_RDONLY | os.O_DIRECTORY)
        try:
            os.fsync(dir_fd)
        finally:
            os.close(dir_fd)

    logger.debug(f"Wrote {len(data)} bytes to {path}")


class KeystoreFile:
    """
    A key store bound to its file.

    The store is only durable after ``save``.
    """

    def __init__(self, path: Union[str, Path], store: KeyStore):
        self.path = Path(path)
        self.store = store

    @classmethod
    def open(cls, path: Union[str, Path]) -> KeystoreFile:
        """
        Load a keystore file.

        Raises:
            CorruptStoreError: If the file is missing or unreadable
        """
        path = Path(path)
        try:
            data = path.read_bytes()
        except OSError as e:
            raise CorruptStoreError(f"Cannot read keystore {path}", cause=e)
        logger.info(f"Opened keystore {path}")
        return cls(path, KeyStore.load(data))

    @classmethod
    def create(cls, path: Union[str, Path], password: str,
               cipher: Optional[SecretCipher] = None) -> KeystoreFile:
        """
        Create and persist an empty keystore.

        Raises:
            InvalidOperatorInputError: If the file already exists
        """
        path = Path(path)
        if path.exists():
            raise InvalidOperatorInputError(f"File already exists: {path}")
        keystore = cls(path, KeyStore.create(password, cipher=cipher))
        keystore.save()
        logger.info(f"Created keystore {path}")
        return keystore

    @property
    def name(self) -> str:
        """File name without the keystore suffix."""
        name = self.path.name
        if name.endswith(KEYSTORE_SUFFIX):
            return name[:-len(KEYSTORE_SUFFIX)]
        return name

    def save(self) -> None:
        """Durably persist the store."""
        atomic_write(self.path, self.store.save())
        logger.info(f"Saved {len(self.store)} keys to {self.path}")

    def __repr__(self) -> str:
        return f"KeystoreFile(path='{self.path}', count={len(self.store)})"


__all__ = ["KeystoreFile", "atomic_write", "KEYSTORE_SUFFIX"]

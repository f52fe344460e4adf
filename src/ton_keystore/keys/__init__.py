"""
Key management: entries, the encrypted store, files, backups and exports.
"""

from .entry import KeyEntry
from .keystore import KeyStore, KeystoreDocument
from .storage import KeystoreFile, atomic_write, KEYSTORE_SUFFIX
from .backup import BackupArchive, BackupRecord, build_backup, restore_archive, BACKUP_SUFFIX
from .export import export_key, write_node_export

__all__ = [
    "KeyEntry",
    "KeyStore",
    "KeystoreDocument",
    "KeystoreFile",
    "atomic_write",
    "KEYSTORE_SUFFIX",
    "BackupArchive",
    "BackupRecord",
    "build_backup",
    "restore_archive",
    "BACKUP_SUFFIX",
    "export_key",
    "write_node_export",
]

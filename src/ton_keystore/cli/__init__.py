"""
Interactive keystore commands.
"""

from .operator import Choice, Operator, ClickOperator
from .contacts import Contact, open_contacts
from .session import Session
from .workflows import (
    WorkflowOutcome, TransferOutcome, TransferState,
    list_keys, list_balances, new_keys, import_keys, transfer,
    backup_keys, export_wallet, restore_backup,
    create_keystore, open_keystore, view_keystore
)

__all__ = [
    "Choice",
    "Operator",
    "ClickOperator",
    "Contact",
    "open_contacts",
    "Session",
    "WorkflowOutcome",
    "TransferOutcome",
    "TransferState",
    "list_keys",
    "list_balances",
    "new_keys",
    "import_keys",
    "transfer",
    "backup_keys",
    "export_wallet",
    "restore_backup",
    "create_keystore",
    "open_keystore",
    "view_keystore",
]

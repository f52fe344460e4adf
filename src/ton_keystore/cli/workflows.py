"""
Keystore command workflows.

Each workflow runs one operation to completion against the session: it
collects operator input, asks for the password before any secret leaves the
store, and saves the keystore file once the operation is complete. Errors
propagate to ``view_keystore``, which reports them and returns to the menu.
"""

from __future__ import annotations
import logging
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence, Union

from rich.table import Table

from ..config import Config
from ..contracts.sources import (
    WalletKind, WhitelistedWalletSource, create_generic_wallet_source,
    restore_wallet_source, validate_wallet_kind
)
from ..crypto.cipher import SecretCipher
from ..crypto.mnemonic import mnemonic_to_wallet_key
from ..keys.backup import BACKUP_SUFFIX, BackupArchive, build_backup, restore_archive
from ..keys.entry import KeyEntry
from ..keys.export import write_node_export
from ..keys.storage import KEYSTORE_SUFFIX, KeystoreFile
from ..runtime.errors import (
    InvalidOperatorInputError, KeystoreError, NetworkUnavailableError,
    OperationCancelled, SourceMismatchError
)
from ..utils.units import from_nano
from .contacts import open_contacts
from .operator import Choice, Operator, not_empty
from .session import Session

logger = logging.getLogger(__name__)


class WorkflowOutcome(Enum):
    COMPLETED = "completed"
    ABORTED = "aborted"


class TransferOutcome(Enum):
    SENT = "sent"
    ABORTED = "aborted"


class TransferState(Enum):
    """Steps of a transfer."""
    SELECTING = "selecting"
    AUTHENTICATING = "authenticating"
    PREPARING = "preparing"
    NEEDS_CONFIRMATION = "needs_confirmation"
    SENDING = "sending"
    SENT = "sent"
    ABORTED = "aborted"


WORKCHAIN_CHOICES = [
    Choice(0, "Basic Workchain", "0"),
    Choice(-1, "Masterchain", "-1"),
]

GENERIC_KIND_CHOICES = [
    Choice(WalletKind.V3, "Wallet v3", "default"),
    Choice(WalletKind.V3_R2, "Wallet v3r2"),
    Choice(WalletKind.V2, "Wallet v2"),
    Choice(WalletKind.V2_R2, "Wallet v2r2"),
    Choice(WalletKind.SIMPLE, "Wallet v1", "unsupported"),
    Choice(WalletKind.SIMPLE_R2, "Wallet v1r2"),
    Choice(WalletKind.SIMPLE_R3, "Wallet v1r3", "for validator"),
]

IMPORT_KIND_CHOICES = GENERIC_KIND_CHOICES + [
    Choice(WalletKind.WHITELISTED, "Restricted (Whitelisted)", "restricted wallet"),
]

COUNT_CHOICES = [Choice(count, str(count)) for count in (1, 10, 100, 300)]


def _key_choices(session: Session) -> List[Choice]:
    return [Choice(entry, entry.name, entry.address.to_friendly()) for entry in session.store.all_keys]


def _secret(words: Sequence[str]) -> bytes:
    return " ".join(words).encode("utf-8")


async def ask_key_name(session: Session, message: str, taken: Sequence[str] = ()) -> str:
    """Ask for a key name that is not empty and not in use."""
    def validate(value: str) -> Optional[str]:
        if not value.strip():
            return "Name couldn't be empty"
        if session.store.has_key(value) or value in taken:
            return "Key with this name already exists"
        return None

    return await session.operator.text(message, validate=validate)


async def list_keys(session: Session) -> WorkflowOutcome:
    """Show stored metadata of every key."""
    table = Table("Name", "WC", "Address", "Kind")
    for entry in session.store.all_keys:
        table.add_row(entry.name, str(entry.address.workchain), entry.address.to_friendly(), entry.kind.value)
    session.console.print(table)
    return WorkflowOutcome.COMPLETED


async def list_balances(session: Session) -> WorkflowOutcome:
    """Show every key with its live balance. Unreachable balances show as '?'."""
    table = Table("Name", "WC", "Address", "Balance", "Kind")
    with session.console.status("Fetching balances...") as status:
        for entry in session.store.all_keys:
            status.update(f"Fetching balance {entry.name}")
            try:
                balance = from_nano(await session.backoff(session.client.get_balance, entry.address))
            except NetworkUnavailableError as e:
                logger.warning(f"Balance of {entry.name} unavailable: {e}")
                balance = "?"
            table.add_row(entry.name, str(entry.address.workchain), entry.address.to_friendly(),
                          balance, entry.kind.value)
    session.console.print(table)
    return WorkflowOutcome.COMPLETED


async def new_keys(session: Session) -> WorkflowOutcome:
    """
    Create a batch of fresh wallets.

    Names are ``<prefix>_NNNN`` continuing after any existing ones. The file
    is saved once after the batch; if the batch fails midway, every key
    created before the failure is still saved.
    """
    operator = session.operator
    workchain = await operator.select("Target workchain", WORKCHAIN_CHOICES)
    kind = await operator.select("Wallet Type", GENERIC_KIND_CHOICES)
    count = await operator.select("How many keys you want to create?", COUNT_CHOICES)
    prefix = await operator.text("Key name prefix", default="wallet",
                                 validate=not_empty("Prefix couldn't be empty"))
    kind = validate_wallet_kind(kind)
    password = await session.ask_password()

    names = session.store.next_key_names(prefix, count)
    created = 0
    try:
        with session.console.status("Creating keys") as status:
            for name in names:
                status.update(f"Creating key {name}")
                wallet = session.client.create_new_wallet(workchain, kind)
                entry = KeyEntry(
                    name=name,
                    address=wallet.address,
                    kind=kind,
                    config=wallet.source.backup(),
                    comment="",
                    public_key=wallet.key.public_key,
                )
                session.store.add_key(entry, _secret(wallet.mnemonic), password)
                created += 1
    except Exception as e:
        logger.error(f"Key creation stopped after {created} of {len(names)} keys: {e}")
        if created:
            try:
                session.keystore.save()
            except Exception as save_error:
                logger.error(f"Saving keys created before the failure failed: {save_error}")
        raise
    session.keystore.save()

    session.console.print(f"[green]Keys created:[/green] {created}")
    return WorkflowOutcome.COMPLETED


async def import_keys(session: Session) -> WorkflowOutcome:
    """Import a wallet from its mnemonic, or a restricted wallet from both of its mnemonics."""
    operator = session.operator
    workchain = await operator.select("Target workchain", WORKCHAIN_CHOICES)
    kind = validate_wallet_kind(await operator.select("Wallet Type", IMPORT_KIND_CHOICES))

    if kind is WalletKind.WHITELISTED:
        return await _import_restricted(session, workchain)

    name = await ask_key_name(session, "Key name")
    mnemonic = await operator.mnemonic("Key mnemonics")
    password = await session.ask_password()

    key = mnemonic_to_wallet_key(mnemonic)
    source = create_generic_wallet_source(kind, workchain, key.public_key)
    entry = KeyEntry(
        name=name,
        address=source.address,
        kind=source.kind,
        config=source.backup(),
        comment="",
        public_key=key.public_key,
    )
    session.store.add_key(entry, _secret(mnemonic), password)
    session.keystore.save()
    session.console.print(f"[green]Imported[/green] {name} {entry.address.to_friendly()}")
    return WorkflowOutcome.COMPLETED


async def _import_restricted(session: Session, workchain: int) -> WorkflowOutcome:
    """Both entries share the wallet address and config; the restricted key is stored first."""
    operator = session.operator
    restricted_name = await ask_key_name(session, "Restricted key name")
    master_name = await ask_key_name(session, "Master key name", taken=[restricted_name])
    restricted_mnemonic = await operator.mnemonic("Restricted Key mnemonics")
    master_mnemonic = await operator.mnemonic("Main Key mnemonics")
    whitelisted = await operator.address("Whitelisted address")
    password = await session.ask_password()

    restricted_key = mnemonic_to_wallet_key(restricted_mnemonic)
    master_key = mnemonic_to_wallet_key(master_mnemonic)
    if restricted_key.public_key == master_key.public_key:
        raise InvalidOperatorInputError("Restricted and master keys must differ")

    source = WhitelistedWalletSource.create(master_key.public_key, restricted_key.public_key,
                                            workchain, whitelisted)
    address = source.address
    config = source.backup()

    for name, key, mnemonic in ((restricted_name, restricted_key, restricted_mnemonic),
                                (master_name, master_key, master_mnemonic)):
        entry = KeyEntry(
            name=name,
            address=address,
            kind=source.kind,
            config=config,
            comment="",
            public_key=key.public_key,
        )
        session.store.add_key(entry, _secret(mnemonic), password)
    session.keystore.save()
    session.console.print(f"[green]Imported[/green] {restricted_name} and {master_name} {address.to_friendly()}")
    return WorkflowOutcome.COMPLETED


async def transfer(session: Session,
                   on_state: Callable[[TransferState], None] = lambda state: None) -> TransferOutcome:
    """
    Send coins from a stored wallet to a contact.

    Transfers to an undeployed destination are sent non-bounceable and only
    after an extra confirmation; declining sends nothing.

    Args:
        session: Session context
        on_state: Called on every state transition
    """
    operator = session.operator
    client = session.client

    on_state(TransferState.SELECTING)
    contacts = open_contacts(session.config.contacts_path)
    if not contacts:
        session.console.print(f"[yellow]{session.config.contacts_path} is empty or does not exist[/yellow]")
        on_state(TransferState.ABORTED)
        return TransferOutcome.ABORTED
    if not session.store.all_keys:
        session.console.print("[yellow]No wallets in keystore[/yellow]")
        on_state(TransferState.ABORTED)
        return TransferOutcome.ABORTED

    entry = await operator.select("Send from", _key_choices(session))
    contact = await operator.select("Send to", [Choice(c, c.name, c.address.to_friendly()) for c in contacts])
    value = await operator.amount("Amount")

    on_state(TransferState.AUTHENTICATING)
    password = await session.ask_password()

    on_state(TransferState.PREPARING)
    with session.console.status("Loading key") as status:
        key = mnemonic_to_wallet_key(session.store.get_mnemonic(entry.name, password))
        if key.public_key != entry.public_key:
            raise SourceMismatchError(f"Mnemonics of {entry.name} do not match its public key")
        source = restore_wallet_source(entry.kind, entry.address, entry.public_key, entry.config)
        wallet = client.open_wallet_from_custom_contract(source)

        status.update("Preparing transfer")
        seqno = await session.backoff(wallet.get_seqno)
        deployed = await session.backoff(client.is_contract_deployed, contact.address)

    if not deployed:
        on_state(TransferState.NEEDS_CONFIRMATION)
        if not await operator.confirm("Recipient account is not activated. Do you want to continue?", default=False):
            on_state(TransferState.ABORTED)
            session.console.print("[yellow]Transfer aborted[/yellow]")
            return TransferOutcome.ABORTED

    on_state(TransferState.SENDING)
    with session.console.status("Sending transfer"):
        await session.backoff(wallet.transfer, contact.address, value, seqno, key.secret_key, deployed)

    on_state(TransferState.SENT)
    session.console.print(f"[green]Transfer sent[/green] {from_nano(value)} to {contact.name}")
    return TransferOutcome.SENT


async def backup_keys(session: Session) -> WorkflowOutcome:
    """Write every key, mnemonic in clear, to ``<name>.keystore.backup``."""
    operator = session.operator
    if not await operator.confirm(
        "Backup stores keys in UNENCRYPTED FORM. Are you sure want to export unencrypted keys to disk?"
    ):
        return WorkflowOutcome.ABORTED

    password = await session.ask_password()
    default_name = str(session.keystore.path.with_name(session.keystore.name))
    dest_name = await operator.text("Backup name", default=default_name,
                                    validate=not_empty("Name couldn't be empty"))

    with session.console.status("Exporting keys...") as status:
        archive = build_backup(session.store, password,
                               progress=lambda entry: status.update(f"Exporting key {entry.name}"))
        path = Path(dest_name + BACKUP_SUFFIX)
        archive.write(path)
    session.console.print(f"[green]Backup written to[/green] {path}")
    return WorkflowOutcome.COMPLETED


async def export_wallet(session: Session) -> WorkflowOutcome:
    """Write the address and private key of one wallet for a validator node."""
    operator = session.operator
    if not session.store.all_keys:
        session.console.print("[yellow]No wallets in keystore[/yellow]")
        return WorkflowOutcome.ABORTED

    entry = await operator.select("Export Wallet", _key_choices(session))
    base = await operator.text("File name (without extension)", default=entry.name,
                               validate=not_empty("Name couldn't be empty"))
    password = await session.ask_password()

    with session.console.status("Loading key"):
        key = mnemonic_to_wallet_key(session.store.get_mnemonic(entry.name, password))
        if key.public_key != entry.public_key:
            raise SourceMismatchError(f"Mnemonics of {entry.name} do not match its public key")
        address_path, key_path = write_node_export(base.strip(), entry.address, key)
    session.console.print(f"[green]Written files[/green] {address_path} and {key_path}")
    return WorkflowOutcome.COMPLETED


async def restore_backup(session: Session) -> WorkflowOutcome:
    """Add every key of a backup file to the keystore, all or nothing."""
    operator = session.operator
    path = await operator.text("Backup file", validate=not_empty("File name couldn't be empty"))
    path = path.strip()
    if not path.endswith(BACKUP_SUFFIX) and not Path(path).exists():
        path += BACKUP_SUFFIX

    archive = BackupArchive.read(path)
    if not len(archive):
        session.console.print(f"[yellow]{path} contains no keys[/yellow]")
        return WorkflowOutcome.ABORTED

    password = await session.ask_password()
    with session.console.status("Restoring keys"):
        entries = restore_archive(archive, session.store, password)
        session.keystore.save()
    session.console.print(f"[green]Restored keys:[/green] {len(entries)}")
    return WorkflowOutcome.COMPLETED


async def create_keystore(path: Union[str, Path], operator: Operator, config: Config) -> KeystoreFile:
    """
    Create an empty keystore file.

    Raises:
        InvalidOperatorInputError: If the file exists or the passwords differ
    """
    path = Path(path)
    if not path.name.endswith(KEYSTORE_SUFFIX):
        path = path.with_name(path.name + KEYSTORE_SUFFIX)
    if path.exists():
        raise InvalidOperatorInputError(f"File already exists: {path}")

    password = await operator.password("New password", confirm=True)
    return KeystoreFile.create(path, password, cipher=SecretCipher(config.kdf_iterations))


async def open_keystore(path: Optional[Union[str, Path]], operator: Operator) -> KeystoreFile:
    """Open a keystore file; without a path, pick one from the current directory."""
    if path is None:
        candidates = sorted(Path(".").glob(f"*{KEYSTORE_SUFFIX}"))
        if not candidates:
            raise InvalidOperatorInputError("No keystores found in current directory")
        path = await operator.select("Keystore", [Choice(p, p.name) for p in candidates])
    return KeystoreFile.open(path)


COMMANDS = [
    Choice("list-keys", "List wallets"),
    Choice("transfer", "Transfer"),
    Choice("create-keys", "Create wallets"),
    Choice("export-wallet", "Export wallet for TON Node"),
    Choice("import-keys", "Import wallets"),
    Choice("restore-backup", "Restore wallets from backup"),
    Choice("backup-keys", "Backup wallets"),
    Choice("exit", "Exit"),
]


async def _list(session: Session) -> WorkflowOutcome:
    if session.config.offline:
        return await list_keys(session)
    return await list_balances(session)


HANDLERS: Dict[str, Callable] = {
    "list-keys": _list,
    "transfer": transfer,
    "create-keys": new_keys,
    "export-wallet": export_wallet,
    "import-keys": import_keys,
    "restore-backup": restore_backup,
    "backup-keys": backup_keys,
}


async def run_command(session: Session, command: str):
    """
    Run one workflow, reporting instead of raising its errors.

    Returns:
        The workflow outcome, or None if it failed
    """
    try:
        return await HANDLERS[command](session)
    except OperationCancelled:
        session.console.print("[yellow]Cancelled[/yellow]")
    except KeystoreError as e:
        logger.error(f"{command} failed: {e}")
        session.console.print(f"[red]Error:[/red] {e.message}")
    except Exception as e:
        logger.exception(f"{command} failed unexpectedly")
        session.console.print(f"[red]Unexpected error:[/red] {e}")
    return None


async def view_keystore(session: Session) -> None:
    """Command loop: one workflow at a time until the operator exits."""
    while True:
        try:
            command = await session.operator.select("Pick command", COMMANDS)
        except OperationCancelled:
            return
        if command == "exit":
            return
        await run_command(session, command)


__all__ = [
    "WorkflowOutcome",
    "TransferOutcome",
    "TransferState",
    "ask_key_name",
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
    "run_command",
    "view_keystore",
]

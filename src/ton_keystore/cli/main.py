"""
ton-keystore command line entry point.

Usage:
    ton-keystore [--test] [--offline] [--contacts FILE] [--endpoint URL] new PATH
    ton-keystore [--test] [--offline] [--contacts FILE] [--endpoint URL] open [PATH]

Without a command, ``open`` runs and offers the keystores of the current
directory.
"""

import asyncio
import logging
from typing import Optional

import click
from rich.console import Console

from .. import __version__
from ..config import Config
from ..network.client import JsonRpcNetworkClient
from ..runtime.errors import KeystoreError, OperationCancelled
from .operator import ClickOperator
from .session import Session
from .workflows import create_keystore, open_keystore, view_keystore

logger = logging.getLogger(__name__)

console = Console()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="ton-keystore")
@click.option("--test", is_flag=True, help="Use testnet")
@click.option("--offline", is_flag=True, help="Do not query balances")
@click.option("--contacts", type=click.Path(dir_okay=False), help="Contacts file (default: contacts.json)")
@click.option("--endpoint", help="JSON-RPC endpoint override")
@click.option("--verbose", "-v", is_flag=True, help="Debug logging")
@click.pass_context
def cli(ctx: click.Context, test: bool, offline: bool, contacts: Optional[str],
        endpoint: Optional[str], verbose: bool):
    """Encrypted keystore for custodial wallets."""
    _configure_logging(verbose)
    config = Config.from_env().override(contacts_path=contacts, endpoint=endpoint)
    config.test = config.test or test
    config.offline = config.offline or offline
    ctx.obj = config
    if ctx.invoked_subcommand is None:
        ctx.invoke(open_cmd, path=None)


@cli.command("new")
@click.argument("path", type=click.Path(dir_okay=False))
@click.pass_obj
def new_cmd(config: Config, path: str):
    """Create an empty keystore at PATH."""
    try:
        keystore = asyncio.run(create_keystore(path, ClickOperator(), config))
    except OperationCancelled:
        raise click.Abort()
    except KeystoreError as e:
        raise click.ClickException(e.message)
    console.print(f"[green]Created keystore[/green] {keystore.path}")


@cli.command("open")
@click.argument("path", required=False, type=click.Path(exists=True, dir_okay=False))
@click.pass_obj
def open_cmd(config: Config, path: Optional[str]):
    """Open the keystore at PATH and enter the command loop."""
    asyncio.run(_run(config, path))


async def _run(config: Config, path: Optional[str]) -> None:
    operator = ClickOperator()
    try:
        keystore = await open_keystore(path, operator)
    except OperationCancelled:
        return
    except KeystoreError as e:
        raise click.ClickException(e.message)

    client = JsonRpcNetworkClient(config.client_config())
    logger.debug(f"Using {client!r}")
    session = Session(keystore=keystore, client=client, operator=operator, config=config, console=console)
    await view_keystore(session)


def main():
    cli()


if __name__ == "__main__":
    main()

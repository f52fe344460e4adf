"""
Operator interaction.

Workflows never prompt directly; they await an ``Operator``. Every prompt is
a suspension point the operator can back out of by raising
``OperationCancelled``.
"""

from __future__ import annotations
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Sequence

import click

from ..crypto.mnemonic import mnemonic_validate, normalize_mnemonic
from ..runtime.address import WalletAddress
from ..runtime.errors import InvalidAddressError, InvalidOperatorInputError, OperationCancelled
from ..utils.units import to_nano

logger = logging.getLogger(__name__)

# Returns an error message, or None if the value is acceptable
Validator = Callable[[str], Optional[str]]


@dataclass(frozen=True)
class Choice:
    """One option of a selection prompt."""
    value: Any
    label: str
    hint: str = ""


def not_empty(message: str) -> Validator:
    def validate(value: str) -> Optional[str]:
        return message if not value.strip() else None
    return validate


def _validate_amount(value: str) -> Optional[str]:
    try:
        to_nano(value)
    except InvalidOperatorInputError as e:
        return e.message
    return None


def _validate_mnemonic(value: str) -> Optional[str]:
    if not mnemonic_validate(normalize_mnemonic(value)):
        return "Invalid mnemonics"
    return None


def _validate_address(value: str) -> Optional[str]:
    try:
        WalletAddress.parse(value.strip())
    except InvalidAddressError as e:
        return e.message
    return None


class Operator(ABC):
    """
    Source of operator input.

    Implementations provide the four primitive prompts; typed prompts for
    amounts, mnemonics and addresses are built on top of ``text``.
    """

    @abstractmethod
    async def select(self, message: str, choices: Sequence[Choice], default: int = 0) -> Any:
        """Pick one of choices and return its value."""
        pass

    @abstractmethod
    async def confirm(self, message: str, default: bool = False) -> bool:
        pass

    @abstractmethod
    async def text(self, message: str, default: Optional[str] = None,
                   validate: Optional[Validator] = None) -> str:
        """Ask for a line of text that passes validate."""
        pass

    @abstractmethod
    async def password(self, message: str = "Password", confirm: bool = False) -> str:
        """
        Ask for a password without echo.

        Args:
            message: Prompt text
            confirm: Ask twice and require both entries to match
        """
        pass

    async def amount(self, message: str = "Amount") -> int:
        """Ask for a coin amount; returns nano units."""
        return to_nano(await self.text(message, default="0", validate=_validate_amount))

    async def mnemonic(self, message: str) -> List[str]:
        """Ask for a valid mnemonic phrase."""
        return normalize_mnemonic(await self.text(message, validate=_validate_mnemonic))

    async def address(self, message: str) -> WalletAddress:
        return WalletAddress.parse((await self.text(message, validate=_validate_address)).strip())


class ClickOperator(Operator):
    """Terminal operator backed by click prompts."""

    BACK = 0

    def _prompt(self, *args, **kwargs) -> Any:
        try:
            return click.prompt(*args, **kwargs)
        except click.Abort:
            click.echo()
            raise OperationCancelled()

    async def select(self, message: str, choices: Sequence[Choice], default: int = 0) -> Any:
        if not choices:
            raise InvalidOperatorInputError(f"Nothing to choose for: {message}")
        click.echo(click.style(message, bold=True))
        for index, choice in enumerate(choices, start=1):
            hint = click.style(f"  {choice.hint}", dim=True) if choice.hint else ""
            click.echo(f"  {index}) {choice.label}{hint}")
        click.echo(f"  {self.BACK}) Back")
        picked = self._prompt("Select", type=click.IntRange(self.BACK, len(choices)), default=default + 1)
        if picked == self.BACK:
            raise OperationCancelled()
        return choices[picked - 1].value

    async def confirm(self, message: str, default: bool = False) -> bool:
        try:
            return click.confirm(message, default=default)
        except click.Abort:
            click.echo()
            raise OperationCancelled()

    async def text(self, message: str, default: Optional[str] = None,
                   validate: Optional[Validator] = None) -> str:
        while True:
            value = self._prompt(message, default=default, type=str)
            error = validate(value) if validate else None
            if error is None:
                return value
            click.echo(click.style(error, fg="red"))

    async def password(self, message: str = "Password", confirm: bool = False) -> str:
        return self._prompt(message, hide_input=True, confirmation_prompt=confirm, type=str)


__all__ = ["Choice", "Operator", "ClickOperator", "Validator", "not_empty"]

"""
Session context threaded through every workflow.

Holds the open keystore file, the network client, the operator and the
console. Nothing in the session ever holds a password or a decrypted secret.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from rich.console import Console

from ..config import Config
from ..keys.keystore import KeyStore
from ..keys.storage import KeystoreFile
from ..network.client import NetworkClient
from ..recovery.retry import RetryPolicy, backoff, create_network_retry_policy
from ..runtime.errors import AuthenticationFailedError
from .operator import Operator

logger = logging.getLogger(__name__)

PASSWORD_ATTEMPTS = 3


@dataclass
class Session:
    """State of one interactive session."""

    keystore: KeystoreFile
    client: NetworkClient
    operator: Operator
    config: Config = field(default_factory=Config)
    console: Console = field(default_factory=Console)
    policy_factory: Optional[Callable[[], RetryPolicy]] = None

    def __post_init__(self):
        if self.policy_factory is None:
            config = self.config
            self.policy_factory = lambda: create_network_retry_policy(
                max_attempts=config.retry_attempts,
                base_delay=config.retry_base_delay,
                max_delay=config.retry_max_delay,
            )

    @property
    def store(self) -> KeyStore:
        return self.keystore.store

    async def backoff(self, func: Callable, *args, **kwargs) -> Any:
        """Run a network call with a fresh retry policy."""
        return await backoff(func, *args, policy=self.policy_factory(), **kwargs)

    async def ask_password(self) -> str:
        """
        Ask for the store password.

        Raises:
            AuthenticationFailedError: After three wrong entries
        """
        for attempt in range(1, PASSWORD_ATTEMPTS + 1):
            password = await self.operator.password("Password")
            if self.store.check_password(password):
                return password
            logger.warning(f"Wrong password (attempt {attempt} of {PASSWORD_ATTEMPTS})")
            self.console.print("[red]Invalid password[/red]")
        raise AuthenticationFailedError(details={"attempts": PASSWORD_ATTEMPTS})


__all__ = ["Session", "PASSWORD_ATTEMPTS"]

"""
Runtime configuration.

Defaults are overlaid by ``TON_KEYSTORE_*`` environment variables, which are
in turn overridden by command line flags.
"""

from __future__ import annotations
import os
from dataclasses import dataclass, replace
from typing import Mapping, Optional

from .network.client import ClientConfig, MAINNET_ENDPOINT, TESTNET_ENDPOINT

_TRUE_VALUES = ("1", "true", "yes", "on")


def _env_flag(value: Optional[str]) -> bool:
    return value is not None and value.strip().lower() in _TRUE_VALUES


@dataclass
class Config:
    """Keystore session configuration."""

    test: bool = False
    offline: bool = False
    endpoint: Optional[str] = None
    api_key: Optional[str] = None
    contacts_path: str = "contacts.json"
    timeout: float = 30.0
    retry_attempts: int = 5
    retry_base_delay: float = 0.5
    retry_max_delay: float = 8.0
    kdf_iterations: int = 480000

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> Config:
        """Build a configuration from environment variables."""
        environ = os.environ if environ is None else environ
        config = cls()
        if environ.get("TON_KEYSTORE_ENDPOINT"):
            config.endpoint = environ["TON_KEYSTORE_ENDPOINT"]
        if environ.get("TON_KEYSTORE_API_KEY"):
            config.api_key = environ["TON_KEYSTORE_API_KEY"]
        if environ.get("TON_KEYSTORE_CONTACTS"):
            config.contacts_path = environ["TON_KEYSTORE_CONTACTS"]
        config.test = _env_flag(environ.get("TON_KEYSTORE_TESTNET"))
        config.offline = _env_flag(environ.get("TON_KEYSTORE_OFFLINE"))
        return config

    def override(self, **changes) -> Config:
        """Copy with every non-None value in changes applied."""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})

    def resolve_endpoint(self) -> str:
        """Endpoint override, or the well-known endpoint of the selected network."""
        if self.endpoint:
            return self.endpoint
        return TESTNET_ENDPOINT if self.test else MAINNET_ENDPOINT

    def client_config(self) -> ClientConfig:
        return ClientConfig(endpoint=self.resolve_endpoint(), timeout=self.timeout, api_key=self.api_key)


__all__ = ["Config"]

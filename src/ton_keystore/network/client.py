"""
Network client.

The keystore only needs a handful of calls from the network: balances,
deployment state, wallet sequence numbers, and transfer submission.
``NetworkClient`` defines them; ``JsonRpcNetworkClient`` implements them over
JSON-RPC 2.0 with ``requests``. Calls are synchronous and raise
``NetworkError`` on any transport or RPC failure; callers wrap them in
``recovery.backoff``.
"""

from __future__ import annotations
import json
import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union

import requests

from ..contracts.sources import WalletKind, WalletSource, create_generic_wallet_source, validate_wallet_kind
from ..crypto.ed25519 import KeyPair
from ..crypto.mnemonic import mnemonic_new, mnemonic_to_wallet_key
from ..runtime.address import WalletAddress
from ..runtime.errors import NetworkError, InvalidKeyError
from .messages import TransferMessage, SignedTransfer

logger = logging.getLogger(__name__)

MAINNET_ENDPOINT = "https://toncenter.com/api/v2/jsonRPC"
TESTNET_ENDPOINT = "https://testnet.toncenter.com/api/v2/jsonRPC"


@dataclass
class ClientConfig:
    """Configuration for the JSON-RPC network client."""

    endpoint: str
    timeout: float = 30.0
    api_key: Optional[str] = None
    debug: bool = False
    user_agent: str = "ton-keystore/1.0.0"


@dataclass
class NewWallet:
    """Freshly generated wallet. Holds a cleartext mnemonic: do not keep it around."""

    mnemonic: List[str]
    key: KeyPair
    source: WalletSource

    @property
    def address(self) -> WalletAddress:
        return self.source.address


class WalletContract:
    """A wallet contract opened for sending."""

    def __init__(self, client: NetworkClient, source: WalletSource):
        self.client = client
        self.source = source
        self.address = source.address

    def get_seqno(self) -> int:
        """Current sequence number of the wallet."""
        return self.client.get_seqno(self.address)

    def transfer(self, to: WalletAddress, value: int, seqno: int, secret_key: bytes, bounce: bool) -> SignedTransfer:
        """
        Sign and submit a transfer.

        Args:
            to: Destination address
            value: Amount in nano units
            seqno: Current wallet sequence number
            secret_key: 64-byte wallet secret key
            bounce: Return the funds if the destination cannot accept them
        """
        key = KeyPair(public_key=secret_key[32:], secret_key=secret_key)
        if not self._is_signer(key.public_key):
            raise InvalidKeyError("Secret key does not control this wallet")
        message = TransferMessage.create(self.address, to, value, seqno, bounce)
        envelope = message.sign(key)
        self.client.send_transfer(envelope)
        logger.info(f"Submitted transfer from {self.address.to_raw()} seqno={seqno}")
        return envelope

    def _is_signer(self, public_key: bytes) -> bool:
        data = self.source.state_data()
        keys = [data.get("publicKey"), data.get("masterKey"), data.get("restrictedKey")]
        return public_key.hex() in keys


class NetworkClient(ABC):
    """Calls the keystore workflows make against the network."""

    @abstractmethod
    def get_balance(self, address: WalletAddress) -> int:
        """Balance in nano units."""
        pass

    @abstractmethod
    def is_contract_deployed(self, address: WalletAddress) -> bool:
        """Whether the account at address holds an active contract."""
        pass

    @abstractmethod
    def get_seqno(self, address: WalletAddress) -> int:
        """Wallet sequence number; 0 for an undeployed wallet."""
        pass

    @abstractmethod
    def send_transfer(self, envelope: SignedTransfer) -> None:
        """Submit a signed transfer."""
        pass

    def create_new_wallet(self, workchain: int, kind: Union[str, WalletKind]) -> NewWallet:
        """Generate a mnemonic, its key pair and a wallet source."""
        kind = validate_wallet_kind(kind)
        mnemonic = mnemonic_new()
        key = mnemonic_to_wallet_key(mnemonic)
        source = create_generic_wallet_source(kind, workchain, key.public_key)
        return NewWallet(mnemonic=mnemonic, key=key, source=source)

    def open_wallet_from_custom_contract(self, source: WalletSource) -> WalletContract:
        return WalletContract(self, source)


class JsonRpcNetworkClient(NetworkClient):
    """
    JSON-RPC 2.0 network client.

    Provides:
    - Balance and account state queries
    - Wallet sequence numbers via the ``seqno`` get-method
    - Submission of signed transfers
    """

    def __init__(self, config: Union[str, ClientConfig]):
        """
        Initialize the client.

        Args:
            config: Either an endpoint URL string or a ClientConfig object
        """
        if isinstance(config, str):
            self.config = ClientConfig(endpoint=config)
        else:
            self.config = config

        self.logger = logging.getLogger(__name__)
        if self.config.debug:
            self.logger.setLevel(logging.DEBUG)

        self._session = requests.Session()
        self._session.headers.update({
            "Content-Type": "application/json",
            "User-Agent": self.config.user_agent,
        })
        if self.config.api_key:
            self._session.headers["X-API-Key"] = self.config.api_key

    def _make_request(self, method: str, params: Dict[str, Any]) -> Any:
        """
        Make a JSON-RPC request.

        Args:
            method: RPC method name
            params: Method parameters

        Returns:
            The response result

        Raises:
            NetworkError: On transport, HTTP or RPC errors
        """
        payload = {
            "jsonrpc": "2.0",
            "id": int(time.time() * 1000000),
            "method": method,
            "params": params
        }

        self.logger.debug(f"Request: {method}")

        try:
            response = self._session.post(self.config.endpoint, data=json.dumps(payload), timeout=self.config.timeout)
        except requests.RequestException as e:
            raise NetworkError(f"{method} request failed", details={"method": method}, cause=e)

        if response.status_code >= 400:
            raise NetworkError(
                f"{method} returned HTTP {response.status_code}",
                details={"method": method, "status": response.status_code}
            )

        try:
            body = response.json()
        except ValueError as e:
            raise NetworkError(f"{method} returned invalid JSON", details={"method": method}, cause=e)
        if not isinstance(body, dict):
            raise NetworkError(f"{method} returned a malformed response", details={"method": method})

        if body.get("error"):
            error = body["error"]
            message = error.get("message", str(error)) if isinstance(error, dict) else str(error)
            raise NetworkError(f"{method} failed: {message}", details={"method": method})
        if body.get("ok") is False:
            raise NetworkError(f"{method} failed: {body.get('result')}", details={"method": method})

        return body.get("result")

    def get_balance(self, address: WalletAddress) -> int:
        result = self._make_request("getAddressBalance", {"address": address.to_friendly()})
        try:
            return int(result)
        except (TypeError, ValueError) as e:
            raise NetworkError(f"Unexpected balance: {result!r}", details={"method": "getAddressBalance"}, cause=e)

    def is_contract_deployed(self, address: WalletAddress) -> bool:
        result = self._make_request("getAddressState", {"address": address.to_friendly()})
        return result == "active"

    def get_seqno(self, address: WalletAddress) -> int:
        result = self._make_request("runGetMethod", {
            "address": address.to_friendly(),
            "method": "seqno",
            "stack": [],
        })
        if not isinstance(result, dict):
            raise NetworkError(f"Unexpected seqno result: {result!r}", details={"method": "runGetMethod"})
        if result.get("exit_code", 0) != 0 or not result.get("stack"):
            # Undeployed wallets have no get-methods yet
            return 0
        kind, value = result["stack"][0][:2]
        if kind != "num":
            raise NetworkError(f"Unexpected seqno stack entry: {kind}")
        return int(value, 16)

    def send_transfer(self, envelope: SignedTransfer) -> None:
        self._make_request("sendTransfer", envelope.to_dict())

    def __repr__(self) -> str:
        return f"JsonRpcNetworkClient(endpoint='{self.config.endpoint}')"


__all__ = [
    "ClientConfig",
    "NewWallet",
    "WalletContract",
    "NetworkClient",
    "JsonRpcNetworkClient",
    "MAINNET_ENDPOINT",
    "TESTNET_ENDPOINT",
]

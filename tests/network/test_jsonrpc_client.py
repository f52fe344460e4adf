"""
Tests for the JSON-RPC network client.

Transport is mocked at the requests session.
"""

import json
from unittest.mock import Mock, patch

import pytest
import requests

from ton_keystore.contracts.sources import WalletKind, create_generic_wallet_source, restore_wallet_source
from ton_keystore.network.client import (
    ClientConfig, JsonRpcNetworkClient, MAINNET_ENDPOINT, TESTNET_ENDPOINT
)
from ton_keystore.crypto.mnemonic import mnemonic_validate
from ton_keystore.runtime.errors import InvalidKeyError, NetworkError, UnsupportedWalletKindError
from helpers import mk_address


def _response(body, status=200):
    response = Mock()
    response.status_code = status
    response.json.return_value = body
    return response


@pytest.fixture
def client():
    return JsonRpcNetworkClient(ClientConfig(endpoint="http://node.test/jsonRPC", api_key="secret"))


class TestJsonRpcClient:
    """Test RPC calls and error mapping."""

    def test_headers(self, client):
        assert client._session.headers["X-API-Key"] == "secret"
        assert client._session.headers["Content-Type"] == "application/json"

    def test_string_config(self):
        assert JsonRpcNetworkClient(TESTNET_ENDPOINT).config.endpoint == TESTNET_ENDPOINT

    def test_get_balance(self, client):
        """Test the request payload and result parsing."""
        address = mk_address("wallet")
        with patch.object(client._session, "post", return_value=_response({"ok": True, "result": "1500000000"})) as post:
            assert client.get_balance(address) == 1500000000

        payload = json.loads(post.call_args.kwargs["data"])
        assert payload["jsonrpc"] == "2.0"
        assert payload["method"] == "getAddressBalance"
        assert payload["params"] == {"address": address.to_friendly()}
        assert post.call_args.args[0] == "http://node.test/jsonRPC"

    @pytest.mark.parametrize("state,deployed", [("active", True), ("uninitialized", False), ("frozen", False)])
    def test_is_contract_deployed(self, client, state, deployed):
        with patch.object(client._session, "post", return_value=_response({"ok": True, "result": state})):
            assert client.is_contract_deployed(mk_address()) is deployed

    def test_get_seqno(self, client):
        body = {"ok": True, "result": {"exit_code": 0, "stack": [["num", "0x1f"]]}}
        with patch.object(client._session, "post", return_value=_response(body)) as post:
            assert client.get_seqno(mk_address()) == 31
        assert json.loads(post.call_args.kwargs["data"])["params"]["method"] == "seqno"

    def test_get_seqno_undeployed(self, client):
        """Test a failing get-method means a fresh wallet."""
        body = {"ok": True, "result": {"exit_code": -13, "stack": []}}
        with patch.object(client._session, "post", return_value=_response(body)):
            assert client.get_seqno(mk_address()) == 0

    def test_get_seqno_null_result(self, client):
        """Test a null get-method result is a network error."""
        with patch.object(client._session, "post", return_value=_response({"ok": True, "result": None})):
            with pytest.raises(NetworkError):
                client.get_seqno(mk_address())

    def test_get_balance_null_result(self, client):
        with patch.object(client._session, "post", return_value=_response({"ok": True, "result": None})):
            with pytest.raises(NetworkError):
                client.get_balance(mk_address())

    def test_non_object_body(self, client):
        with patch.object(client._session, "post", return_value=_response(["unexpected"])):
            with pytest.raises(NetworkError):
                client.is_contract_deployed(mk_address())

    def test_transport_error(self, client):
        with patch.object(client._session, "post", side_effect=requests.ConnectionError("refused")):
            with pytest.raises(NetworkError) as exc:
                client.get_balance(mk_address())
        assert isinstance(exc.value.cause, requests.ConnectionError)

    def test_http_error(self, client):
        with patch.object(client._session, "post", return_value=_response({}, status=503)):
            with pytest.raises(NetworkError) as exc:
                client.get_balance(mk_address())
        assert exc.value.details["status"] == 503

    def test_rpc_error(self, client):
        body = {"jsonrpc": "2.0", "error": {"code": -32000, "message": "rate limited"}}
        with patch.object(client._session, "post", return_value=_response(body)):
            with pytest.raises(NetworkError, match="rate limited"):
                client.get_balance(mk_address())

    def test_not_ok(self, client):
        with patch.object(client._session, "post", return_value=_response({"ok": False, "result": "bad"})):
            with pytest.raises(NetworkError):
                client.is_contract_deployed(mk_address())

    def test_invalid_json(self, client):
        response = _response(None)
        response.json.side_effect = ValueError("no json")
        with patch.object(client._session, "post", return_value=response):
            with pytest.raises(NetworkError):
                client.get_balance(mk_address())


class TestWallets:
    """Test wallet creation and transfers through the client."""

    def test_create_new_wallet(self, client):
        """Test a new wallet has a valid mnemonic and a restorable source."""
        wallet = client.create_new_wallet(0, "org.ton.wallets.v3")

        assert mnemonic_validate(wallet.mnemonic)
        assert wallet.source.kind is WalletKind.V3
        restored = restore_wallet_source(WalletKind.V3, wallet.address, wallet.key.public_key,
                                         wallet.source.backup())
        assert restored.address == wallet.address

    def test_create_new_wallet_unknown_kind(self, client):
        with pytest.raises(UnsupportedWalletKindError):
            client.create_new_wallet(0, "org.ton.wallets.v9")

    def test_transfer_sends_signed_message(self, client, mnemonics):
        """Test transfers are signed by the wallet key and sent once."""
        from ton_keystore.crypto.mnemonic import mnemonic_to_wallet_key

        key = mnemonic_to_wallet_key(mnemonics[0])
        source = create_generic_wallet_source(WalletKind.V3, 0, key.public_key)
        wallet = client.open_wallet_from_custom_contract(source)
        destination = mk_address("dest")

        with patch.object(client._session, "post", return_value=_response({"ok": True, "result": {}})) as post:
            envelope = wallet.transfer(destination, 10, 3, key.secret_key, bounce=False)

        assert post.call_count == 1
        assert envelope.verify()
        assert envelope.message.seqno == 3
        assert envelope.message.bounce is False
        params = json.loads(post.call_args.kwargs["data"])["params"]
        assert params["message"]["destination"] == destination.to_raw()
        assert params["publicKey"] == key.public_key.hex()

    def test_transfer_with_foreign_key(self, client, mnemonics):
        from ton_keystore.crypto.mnemonic import mnemonic_to_wallet_key

        owner = mnemonic_to_wallet_key(mnemonics[0])
        other = mnemonic_to_wallet_key(mnemonics[1])
        wallet = client.open_wallet_from_custom_contract(
            create_generic_wallet_source(WalletKind.V3, 0, owner.public_key))

        with patch.object(client._session, "post") as post:
            with pytest.raises(InvalidKeyError):
                wallet.transfer(mk_address(), 10, 0, other.secret_key, bounce=True)
        post.assert_not_called()


def test_well_known_endpoints():
    assert MAINNET_ENDPOINT.startswith("https://toncenter.com")
    assert TESTNET_ENDPOINT.startswith("https://testnet.toncenter.com")

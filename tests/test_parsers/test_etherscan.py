"""Tests for the Etherscan V2 client."""

from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from contract_scanner.parsers.etherscan.client import EtherscanClient
from contract_scanner.parsers.exceptions import (
    ProviderAuthError,
    ProviderNetworkError,
    ProviderRateLimitError,
    ProviderResponseError,
)

TOKEN = "0x1111111111111111111111111111111111111111"


def _resp(payload: dict | None = None, status_code: int = 200) -> MagicMock:
    resp = MagicMock()
    resp.status_code = status_code
    resp.json.return_value = payload
    return resp


def _client(*responses) -> EtherscanClient:
    client = EtherscanClient("test-key", max_rps=0)
    client._client = AsyncMock()
    client._client.get = AsyncMock(side_effect=list(responses))
    return client


class TestEtherscanRequests:
    @pytest.mark.asyncio
    async def test_source_code_verified(self) -> None:
        client = _client(
            _resp(
                {
                    "status": "1",
                    "message": "OK",
                    "result": [{"SourceCode": "contract A {}"}],
                }
            )
        )

        info = await client.get_source_code(TOKEN)

        assert info.is_verified is True
        _, kwargs = client._client.get.call_args
        assert kwargs["params"]["chainid"] == 1
        assert kwargs["params"]["action"] == "getsourcecode"
        assert kwargs["params"]["apikey"] == "test-key"

    @pytest.mark.asyncio
    async def test_source_code_unverified(self) -> None:
        client = _client(_resp({"status": "1", "message": "OK", "result": [{"SourceCode": ""}]}))
        info = await client.get_source_code(TOKEN)
        assert info.is_verified is False

    @pytest.mark.asyncio
    async def test_token_supply_raw_text(self) -> None:
        client = _client(_resp({"status": "1", "message": "OK", "result": "1000000000000000000000000"}))
        assert await client.get_token_supply(TOKEN) == "1000000000000000000000000"

    @pytest.mark.asyncio
    async def test_holder_count(self) -> None:
        client = _client(_resp({"status": "1", "message": "OK", "result": "4521"}))
        assert await client.get_holder_count(TOKEN) == 4521

    @pytest.mark.asyncio
    async def test_non_integer_result(self) -> None:
        client = _client(_resp({"status": "1", "message": "OK", "result": "12.5"}))
        with pytest.raises(ProviderResponseError):
            await client.get_token_supply(TOKEN)

    @pytest.mark.asyncio
    async def test_contract_creator(self) -> None:
        client = _client(
            _resp(
                {
                    "status": "1",
                    "message": "OK",
                    "result": [{"contractAddress": TOKEN, "contractCreator": "0xcreator", "txHash": "0x1"}],
                }
            )
        )
        assert await client.get_contract_creator(TOKEN) == "0xcreator"

    @pytest.mark.asyncio
    async def test_first_transaction_empty(self) -> None:
        client = _client(_resp({"status": "0", "message": "No transactions found", "result": []}))
        assert await client.get_first_transaction(TOKEN) is None

    @pytest.mark.asyncio
    async def test_first_transaction(self) -> None:
        client = _client(
            _resp(
                {
                    "status": "1",
                    "message": "OK",
                    "result": [{"hash": "0xabc", "timeStamp": "1700000000", "from": "0xdeployer"}],
                }
            )
        )
        tx = await client.get_first_transaction(TOKEN)
        assert tx is not None
        assert tx.timeStamp == 1700000000
        assert tx.from_address == "0xdeployer"


class TestEtherscanErrors:
    @pytest.mark.asyncio
    async def test_invalid_key(self) -> None:
        client = _client(_resp({"status": "0", "message": "NOTOK", "result": "Invalid API Key"}))
        with pytest.raises(ProviderAuthError):
            await client.get_token_supply(TOKEN)

    @pytest.mark.asyncio
    async def test_envelope_rate_limit_retried(self, no_retry_delay) -> None:
        limited = _resp({"status": "0", "message": "NOTOK", "result": "Max rate limit reached"})
        ok = _resp({"status": "1", "message": "OK", "result": "42"})
        client = _client(limited, ok)

        assert await client.get_holder_count(TOKEN) == 42
        assert client._client.get.await_count == 2

    @pytest.mark.asyncio
    async def test_http_429_exhausts_retries(self, no_retry_delay) -> None:
        client = _client(_resp(status_code=429), _resp(status_code=429), _resp(status_code=429))
        with pytest.raises(ProviderRateLimitError):
            await client.get_token_supply(TOKEN)
        assert client._client.get.await_count == 3

    @pytest.mark.asyncio
    async def test_http_403(self) -> None:
        client = _client(_resp(status_code=403))
        with pytest.raises(ProviderAuthError):
            await client.get_token_supply(TOKEN)

    @pytest.mark.asyncio
    async def test_connect_error(self, no_retry_delay) -> None:
        err = httpx.ConnectError("refused")
        client = _client(err, err, err)
        with pytest.raises(ProviderNetworkError):
            await client.get_token_supply(TOKEN)

    @pytest.mark.asyncio
    async def test_malformed_json(self) -> None:
        resp = MagicMock()
        resp.status_code = 200
        resp.json.side_effect = ValueError("not json")
        client = _client(resp)
        with pytest.raises(ProviderResponseError):
            await client.get_token_supply(TOKEN)

    @pytest.mark.asyncio
    async def test_generic_notok(self) -> None:
        client = _client(_resp({"status": "0", "message": "NOTOK", "result": "Error! Invalid address format"}))
        with pytest.raises(ProviderResponseError):
            await client.get_source_code(TOKEN)

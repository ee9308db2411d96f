"""Tests for DexScreener liquidity lookup."""

from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from contract_scanner.parsers.dexscreener.client import DexScreenerClient
from contract_scanner.parsers.exceptions import ProviderRateLimitError, ProviderTimeoutError

TOKEN = "0x1111111111111111111111111111111111111111"


def _resp(payload, status_code: int = 200) -> MagicMock:
    resp = MagicMock()
    resp.status_code = status_code
    resp.headers = {}
    resp.json.return_value = payload
    return resp


def _pair(pair_address: str, liquidity_usd: float | None) -> dict:
    pair = {
        "chainId": "ethereum",
        "dexId": "uniswap",
        "pairAddress": pair_address,
        "baseToken": {"address": TOKEN, "name": "Test", "symbol": "TST"},
        "quoteToken": {"address": "0xweth", "name": "Wrapped Ether", "symbol": "WETH"},
    }
    if liquidity_usd is not None:
        pair["liquidity"] = {"usd": liquidity_usd}
    return pair


def _client() -> DexScreenerClient:
    client = DexScreenerClient(max_rps=100.0)
    client._client = AsyncMock()
    return client


class TestDexScreenerClient:
    @pytest.mark.asyncio
    async def test_deepest_pool_wins(self) -> None:
        client = _client()
        client._client.get = AsyncMock(
            return_value=_resp([_pair("0xa", 1200.5), _pair("0xb", 85000.0), _pair("0xc", None)])
        )

        liquidity = await client.get_liquidity_usd(TOKEN)

        assert liquidity == Decimal("85000.0")
        args, _ = client._client.get.call_args
        assert args[0] == f"/token-pairs/v1/ethereum/{TOKEN}"

    @pytest.mark.asyncio
    async def test_no_pairs_is_zero(self) -> None:
        client = _client()
        client._client.get = AsyncMock(return_value=_resp([]))
        assert await client.get_liquidity_usd(TOKEN) == Decimal("0")

    @pytest.mark.asyncio
    async def test_legacy_pairs_envelope(self) -> None:
        client = _client()
        client._client.get = AsyncMock(return_value=_resp({"pairs": [_pair("0xa", 500.0)]}))
        pairs = await client.get_token_pairs(TOKEN)
        assert len(pairs) == 1
        assert pairs[0].liquidity_usd == Decimal("500.0")

    @pytest.mark.asyncio
    async def test_rate_limit_exhausted(self, no_retry_delay) -> None:
        client = _client()
        client._client.get = AsyncMock(return_value=_resp(None, status_code=429))
        with pytest.raises(ProviderRateLimitError):
            await client.get_liquidity_usd(TOKEN)
        assert client._client.get.await_count == 3

    @pytest.mark.asyncio
    async def test_timeout(self, no_retry_delay) -> None:
        client = _client()
        client._client.get = AsyncMock(side_effect=httpx.ReadTimeout("slow"))
        with pytest.raises(ProviderTimeoutError):
            await client.get_liquidity_usd(TOKEN)

"""CoinGecko client — token name, symbol and logo by contract address."""

import asyncio

import httpx
from loguru import logger
from pydantic import ValidationError

from contract_scanner.parsers.coingecko.models import CoinGeckoContractInfo
from contract_scanner.parsers.exceptions import (
    ProviderAuthError,
    ProviderNetworkError,
    ProviderRateLimitError,
    ProviderResponseError,
    ProviderTimeoutError,
)

BASE_URL = "https://api.coingecko.com/api/v3"
PROVIDER = "coingecko"
MAX_RETRIES = 1
RETRY_DELAYS = [2.0]


class CoinGeckoClient:
    """Async client for the public CoinGecko API (demo key optional)."""

    def __init__(self, api_key: str = "", platform: str = "ethereum", timeout: float = 10.0) -> None:
        self._platform = platform
        headers = {"Accept": "application/json"}
        if api_key:
            headers["x-cg-demo-api-key"] = api_key
        self._client = httpx.AsyncClient(base_url=BASE_URL, timeout=timeout, headers=headers)

    async def close(self) -> None:
        await self._client.aclose()

    async def get_contract_info(self, address: str) -> CoinGeckoContractInfo:
        path = f"/coins/{self._platform}/contract/{address.lower()}"

        for attempt in range(MAX_RETRIES + 1):
            delay = RETRY_DELAYS[min(attempt, len(RETRY_DELAYS) - 1)]
            try:
                resp = await self._client.get(path)
            except httpx.TimeoutException as e:
                raise ProviderTimeoutError(PROVIDER, f"{path} timed out") from e
            except httpx.RequestError as e:
                raise ProviderNetworkError(PROVIDER, f"{path}: {e}") from e

            if resp.status_code == 429:
                if attempt < MAX_RETRIES:
                    logger.debug(f"[COINGECKO] Rate limited, retrying in {delay}s")
                    await asyncio.sleep(delay)
                    continue
                raise ProviderRateLimitError(PROVIDER, "HTTP 429")
            if resp.status_code in (401, 403):
                raise ProviderAuthError(PROVIDER, f"HTTP {resp.status_code}")
            if resp.status_code == 404:
                raise ProviderResponseError(PROVIDER, f"token not listed: {address[:12]}")
            if resp.status_code != 200:
                raise ProviderResponseError(PROVIDER, f"HTTP {resp.status_code}")

            try:
                return CoinGeckoContractInfo.model_validate(resp.json())
            except (ValueError, ValidationError) as e:
                raise ProviderResponseError(PROVIDER, "malformed contract info") from e

        raise ProviderRateLimitError(PROVIDER, "retries exhausted")

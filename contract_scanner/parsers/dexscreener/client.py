import asyncio
from decimal import Decimal

import httpx
from loguru import logger
from pydantic import ValidationError

from contract_scanner.parsers.dexscreener.models import DexScreenerPair
from contract_scanner.parsers.exceptions import (
    ProviderNetworkError,
    ProviderRateLimitError,
    ProviderResponseError,
    ProviderTimeoutError,
)
from contract_scanner.parsers.rate_limiter import RateLimiter

BASE_URL = "https://api.dexscreener.com"
PROVIDER = "dexscreener"
MAX_RETRIES = 3
RETRY_DELAYS = [1.0, 2.0, 4.0]


class DexScreenerClient:
    """Async REST client for DexScreener public API (no auth required)."""

    def __init__(
        self,
        chain: str = "ethereum",
        rate_limiter: RateLimiter | None = None,
        max_rps: float = 1.0,
        timeout: float = 10.0,
    ) -> None:
        self._chain = chain
        self._client = httpx.AsyncClient(
            base_url=BASE_URL,
            timeout=timeout,
            headers={"Accept": "application/json"},
        )
        self._rate_limiter = rate_limiter or RateLimiter(max_rps)

    async def _request_with_retry(self, path: str) -> httpx.Response:
        """Execute GET with retry on 429/timeout."""
        for attempt in range(MAX_RETRIES):
            delay = RETRY_DELAYS[min(attempt, len(RETRY_DELAYS) - 1)]
            await self._rate_limiter.acquire()
            try:
                response = await self._client.get(path)
            except (httpx.TimeoutException, httpx.ConnectError) as e:
                if attempt < MAX_RETRIES - 1:
                    logger.debug(f"[DEXSCREENER] {type(e).__name__}, retrying in {delay}s")
                    await asyncio.sleep(delay)
                    continue
                if isinstance(e, httpx.TimeoutException):
                    raise ProviderTimeoutError(PROVIDER, f"{path} timed out") from e
                raise ProviderNetworkError(PROVIDER, f"{path}: {e}") from e

            if response.status_code == 429:
                retry_after = response.headers.get("Retry-After")
                if retry_after:
                    try:
                        delay = max(float(retry_after), delay)
                    except ValueError:
                        pass
                if attempt < MAX_RETRIES - 1:
                    logger.debug(f"[DEXSCREENER] 429 rate limited, retrying in {delay}s")
                    await asyncio.sleep(delay)
                    continue
                raise ProviderRateLimitError(PROVIDER, "HTTP 429")
            if response.status_code != 200:
                raise ProviderResponseError(PROVIDER, f"{path}: HTTP {response.status_code}")
            return response

        raise ProviderRateLimitError(PROVIDER, "retries exhausted")

    async def get_token_pairs(self, token_address: str) -> list[DexScreenerPair]:
        """Get all pairs for a token on the configured chain."""
        response = await self._request_with_retry(f"/token-pairs/v1/{self._chain}/{token_address}")
        try:
            data = response.json()
            if isinstance(data, list):
                return [DexScreenerPair.model_validate(p) for p in data]
            pairs = data.get("pairs") or []
            if not isinstance(pairs, list):
                pairs = [pairs]
            return [DexScreenerPair.model_validate(p) for p in pairs]
        except (ValueError, AttributeError, ValidationError) as e:
            raise ProviderResponseError(PROVIDER, "malformed pairs payload") from e

    async def get_liquidity_usd(self, token_address: str) -> Decimal:
        """Liquidity of the deepest pool; zero when the token has no pairs."""
        pairs = await self.get_token_pairs(token_address)
        if not pairs:
            return Decimal("0")
        return max(p.liquidity_usd for p in pairs)

    async def close(self) -> None:
        await self._client.aclose()

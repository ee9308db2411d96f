"""Etherscan V2 API client — source code, supply, holders, balances, first tx.

Every failure surfaces as a typed ProviderError; the adapters decide fallbacks.
Retry with backoff for 429, server errors and transport errors.
"""

import asyncio
from typing import Any

import httpx
from loguru import logger
from pydantic import ValidationError

from contract_scanner.parsers.etherscan.models import (
    EtherscanContractCreation,
    EtherscanEnvelope,
    EtherscanSourceCode,
    EtherscanTransaction,
)
from contract_scanner.parsers.exceptions import (
    ProviderAuthError,
    ProviderNetworkError,
    ProviderRateLimitError,
    ProviderResponseError,
    ProviderTimeoutError,
)
from contract_scanner.parsers.rate_limiter import RateLimiter

BASE_URL = "https://api.etherscan.io/v2/api"
PROVIDER = "etherscan"
MAX_RETRIES = 2
RETRY_DELAYS = [1.0, 3.0]

_EMPTY_MESSAGES = ("no transactions found", "no records found")
_RATE_LIMIT_MARKERS = ("rate limit",)
_AUTH_MARKERS = ("invalid api key", "missing/invalid api key", "missing api key")


class EtherscanClient:
    """Async client for Etherscan's multichain (V2) REST API."""

    def __init__(
        self,
        api_key: str,
        *,
        chain_id: int = 1,
        base_url: str = BASE_URL,
        rate_limiter: RateLimiter | None = None,
        max_rps: float = 5.0,
        timeout: float = 10.0,
    ) -> None:
        self._api_key = api_key
        self._chain_id = chain_id
        self._base_url = base_url
        self._rate_limiter = rate_limiter or RateLimiter(max_rps)
        self._client = httpx.AsyncClient(
            timeout=timeout,
            headers={"Accept": "application/json"},
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def _request(self, params: dict[str, Any], *, allow_empty: bool = False) -> Any:
        """Rate-limited GET returning the envelope's ``result``."""
        query = {"chainid": self._chain_id, **params, "apikey": self._api_key}
        action = f"{params.get('module')}/{params.get('action')}"

        for attempt in range(MAX_RETRIES + 1):
            delay = RETRY_DELAYS[min(attempt, len(RETRY_DELAYS) - 1)]
            await self._rate_limiter.acquire()
            try:
                resp = await self._client.get(self._base_url, params=query)
            except httpx.TimeoutException as e:
                if attempt < MAX_RETRIES:
                    logger.debug(f"[ETHERSCAN] Timeout, retry {attempt + 1} in {delay}s: {action}")
                    await asyncio.sleep(delay)
                    continue
                raise ProviderTimeoutError(PROVIDER, f"{action} timed out") from e
            except httpx.RequestError as e:
                if attempt < MAX_RETRIES:
                    logger.debug(f"[ETHERSCAN] {type(e).__name__}, retry {attempt + 1} in {delay}s: {action}")
                    await asyncio.sleep(delay)
                    continue
                raise ProviderNetworkError(PROVIDER, f"{action}: {e}") from e

            if resp.status_code == 429 or resp.status_code >= 500:
                if attempt < MAX_RETRIES:
                    logger.debug(f"[ETHERSCAN] HTTP {resp.status_code}, retry {attempt + 1} in {delay}s: {action}")
                    await asyncio.sleep(delay)
                    continue
                if resp.status_code == 429:
                    raise ProviderRateLimitError(PROVIDER, f"{action}: HTTP 429")
                raise ProviderResponseError(PROVIDER, f"{action}: HTTP {resp.status_code}")
            if resp.status_code in (401, 403):
                raise ProviderAuthError(PROVIDER, f"{action}: HTTP {resp.status_code}")
            if resp.status_code != 200:
                raise ProviderResponseError(PROVIDER, f"{action}: HTTP {resp.status_code}")

            try:
                envelope = EtherscanEnvelope.model_validate(resp.json())
            except (ValueError, ValidationError) as e:
                raise ProviderResponseError(PROVIDER, f"{action}: malformed response") from e

            if envelope.status == "1":
                return envelope.result

            detail = f"{envelope.message} {envelope.result if isinstance(envelope.result, str) else ''}"
            lowered = detail.lower()
            if allow_empty and any(m in lowered for m in _EMPTY_MESSAGES):
                return []
            if any(m in lowered for m in _RATE_LIMIT_MARKERS):
                if attempt < MAX_RETRIES:
                    logger.debug(f"[ETHERSCAN] Rate limited, retry {attempt + 1} in {delay}s: {action}")
                    await asyncio.sleep(delay)
                    continue
                raise ProviderRateLimitError(PROVIDER, f"{action}: {detail.strip()}")
            if any(m in lowered for m in _AUTH_MARKERS):
                raise ProviderAuthError(PROVIDER, f"{action}: {detail.strip()}")
            raise ProviderResponseError(PROVIDER, f"{action}: {detail.strip()}")

        raise ProviderResponseError(PROVIDER, f"{action}: request failed after retries")

    async def get_source_code(self, address: str) -> EtherscanSourceCode:
        """Verified source for a contract; empty SourceCode when unverified."""
        result = await self._request(
            {"module": "contract", "action": "getsourcecode", "address": address}
        )
        if not isinstance(result, list) or not result:
            raise ProviderResponseError(PROVIDER, "getsourcecode: empty result")
        return EtherscanSourceCode.model_validate(result[0])

    async def get_contract_creator(self, address: str) -> str | None:
        result = await self._request(
            {"module": "contract", "action": "getcontractcreation", "contractaddresses": address},
            allow_empty=True,
        )
        if not isinstance(result, list) or not result:
            return None
        creation = EtherscanContractCreation.model_validate(result[0])
        return creation.contractCreator or None

    async def get_token_supply(self, address: str) -> str:
        """Total supply as raw integer text (no decimal adjustment)."""
        result = await self._request(
            {"module": "stats", "action": "tokensupply", "contractaddress": address}
        )
        return _raw_integer(result, "tokensupply")

    async def get_holder_count(self, address: str) -> int:
        result = await self._request(
            {"module": "token", "action": "tokenholdercount", "contractaddress": address}
        )
        return int(_raw_integer(result, "tokenholdercount"))

    async def get_token_balance(self, contract: str, holder: str) -> str:
        result = await self._request(
            {
                "module": "account",
                "action": "tokenbalance",
                "contractaddress": contract,
                "address": holder,
                "tag": "latest",
            }
        )
        return _raw_integer(result, "tokenbalance")

    async def get_first_transaction(self, address: str) -> EtherscanTransaction | None:
        """Oldest normal transaction of an address (ascending, one item)."""
        result = await self._request(
            {
                "module": "account",
                "action": "txlist",
                "address": address,
                "startblock": 0,
                "endblock": 99999999,
                "page": 1,
                "offset": 1,
                "sort": "asc",
            },
            allow_empty=True,
        )
        if not isinstance(result, list) or not result:
            return None
        return EtherscanTransaction.model_validate(result[0])


def _raw_integer(value: Any, action: str) -> str:
    text = str(value).strip() if value is not None else ""
    if not text.isdigit():
        raise ProviderResponseError(PROVIDER, f"{action}: non-integer result {text[:40]!r}")
    return text

"""GoPlus Security API client — free EVM token security analysis."""

import asyncio

import httpx
from loguru import logger

from contract_scanner.parsers.exceptions import (
    ProviderNetworkError,
    ProviderRateLimitError,
    ProviderResponseError,
    ProviderTimeoutError,
)
from contract_scanner.parsers.goplus.models import GoPlusLpHolder, GoPlusReport
from contract_scanner.parsers.rate_limiter import RateLimiter

BASE_URL = "https://api.gopluslabs.io/api/v1/token_security"
PROVIDER = "goplus"
MAX_RETRIES = 2
RETRY_DELAYS = [1.0, 3.0]


class GoPlusClient:
    """Async HTTP client for GoPlus Security API (free, no key)."""

    def __init__(self, chain_id: int = 1, max_rps: float = 0.5, timeout: float = 10.0) -> None:
        self._chain_id = chain_id
        self._rate_limiter = RateLimiter(max_rps)
        self._client = httpx.AsyncClient(timeout=timeout)

    async def close(self) -> None:
        await self._client.aclose()

    async def get_token_security(self, address: str) -> GoPlusReport:
        """Fetch security report for an EVM token."""
        url = f"{BASE_URL}/{self._chain_id}"
        params = {"contract_addresses": address}

        for attempt in range(MAX_RETRIES + 1):
            delay = RETRY_DELAYS[min(attempt, len(RETRY_DELAYS) - 1)]
            try:
                await self._rate_limiter.acquire()
                resp = await self._client.get(url, params=params)
            except (httpx.TimeoutException, httpx.ConnectError) as e:
                if attempt < MAX_RETRIES:
                    logger.debug(f"[GOPLUS] {type(e).__name__}, retry in {delay}s")
                    await asyncio.sleep(delay)
                    continue
                logger.warning(f"[GOPLUS] Failed after retries for {address[:12]}: {e}")
                if isinstance(e, httpx.TimeoutException):
                    raise ProviderTimeoutError(PROVIDER, "request timed out") from e
                raise ProviderNetworkError(PROVIDER, str(e)) from e

            if resp.status_code == 429:
                if attempt < MAX_RETRIES:
                    logger.debug(f"[GOPLUS] Rate limited, waiting {delay}s")
                    await asyncio.sleep(delay)
                    continue
                raise ProviderRateLimitError(PROVIDER, "HTTP 429")

            if resp.status_code != 200:
                logger.debug(f"[GOPLUS] HTTP {resp.status_code} for {address[:12]}")
                raise ProviderResponseError(PROVIDER, f"HTTP {resp.status_code}")

            try:
                data = resp.json()
            except ValueError as e:
                raise ProviderResponseError(PROVIDER, "malformed JSON") from e

            report = _parse_report(data, address)
            if report is None:
                raise ProviderResponseError(PROVIDER, f"no security data for {address[:12]}")
            return report

        raise ProviderRateLimitError(PROVIDER, "retries exhausted")


def _parse_bool(val: str | int | None) -> bool | None:
    """Parse GoPlus '0'/'1' to bool."""
    if val is None or val == "":
        return None
    return str(val) == "1"


def _parse_tax(val: str | None) -> float | None:
    """Parse GoPlus tax string to float percentage."""
    if val is None or val == "":
        return None
    try:
        return float(val) * 100  # GoPlus returns 0.0-1.0, convert to 0-100
    except (ValueError, TypeError):
        return None


def _parse_lp_holders(items: list | None) -> list[GoPlusLpHolder]:
    holders = []
    for item in items or []:
        if not isinstance(item, dict):
            continue
        try:
            percent = float(item.get("percent") or 0)
        except (ValueError, TypeError):
            percent = 0.0
        holders.append(
            GoPlusLpHolder(
                address=item.get("address") or "",
                percent=percent,
                is_locked=_parse_bool(item.get("is_locked")) is True,
                tag=item.get("tag") or "",
            )
        )
    return holders


def _parse_report(data: dict, address: str) -> GoPlusReport | None:
    """Parse GoPlus API response."""
    if not isinstance(data, dict) or data.get("code") not in (1, "1", None):
        return None
    result = data.get("result") or {}
    if not isinstance(result, dict):
        return None

    # GoPlus keys the result by lowercased contract address
    token_data = result.get(address.lower()) or result.get(address)
    if not token_data:
        return None

    return GoPlusReport(
        is_honeypot=_parse_bool(token_data.get("is_honeypot")),
        cannot_sell_all=_parse_bool(token_data.get("cannot_sell_all")),
        buy_tax=_parse_tax(token_data.get("buy_tax")),
        sell_tax=_parse_tax(token_data.get("sell_tax")),
        owner_address=token_data.get("owner_address"),
        lp_holders=_parse_lp_holders(token_data.get("lp_holders")),
    )

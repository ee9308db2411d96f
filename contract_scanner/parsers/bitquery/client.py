"""Bitquery GraphQL client — top token holders for holder distribution."""

from datetime import UTC, date, datetime

import httpx
from loguru import logger
from pydantic import ValidationError

from contract_scanner.parsers.bitquery.models import BitqueryTokenHolder
from contract_scanner.parsers.exceptions import (
    ProviderAuthError,
    ProviderNetworkError,
    ProviderRateLimitError,
    ProviderResponseError,
    ProviderTimeoutError,
)

ENDPOINT = "https://streaming.bitquery.io/graphql"
PROVIDER = "bitquery"
HOLDER_LIMIT = 100

TOKEN_HOLDERS_QUERY = """
query ($network: evm_network!, $token: String!, $date: String!, $limit: Int!) {
  EVM(dataset: archive, network: $network) {
    TokenHolders(
      date: $date
      tokenSmartContract: $token
      limit: {count: $limit}
      orderBy: {descending: Balance_Amount}
    ) {
      Holder { Address }
      Balance { Amount }
      Currency { Decimals }
    }
  }
}
"""


class BitqueryClient:
    """Async client for Bitquery's streaming GraphQL API (bearer token)."""

    def __init__(self, api_key: str, network: str = "eth", timeout: float = 15.0) -> None:
        self._network = network
        self._client = httpx.AsyncClient(
            timeout=timeout,
            headers={
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
            },
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def get_token_holders(
        self, token: str, *, as_of: date | None = None, limit: int = HOLDER_LIMIT
    ) -> list[BitqueryTokenHolder]:
        """Largest holders of ``token`` on ``as_of`` (default: today, UTC)."""
        day = (as_of or datetime.now(UTC).date()).isoformat()
        body = {
            "query": TOKEN_HOLDERS_QUERY,
            "variables": {
                "network": self._network,
                "token": token,
                "date": day,
                "limit": limit,
            },
        }

        try:
            resp = await self._client.post(ENDPOINT, json=body)
        except httpx.TimeoutException as e:
            raise ProviderTimeoutError(PROVIDER, "TokenHolders timed out") from e
        except httpx.RequestError as e:
            raise ProviderNetworkError(PROVIDER, str(e)) from e

        if resp.status_code in (401, 402, 403):
            raise ProviderAuthError(PROVIDER, f"HTTP {resp.status_code}")
        if resp.status_code == 429:
            raise ProviderRateLimitError(PROVIDER, "HTTP 429")
        if resp.status_code != 200:
            raise ProviderResponseError(PROVIDER, f"HTTP {resp.status_code}")

        try:
            data = resp.json()
        except ValueError as e:
            raise ProviderResponseError(PROVIDER, "malformed JSON") from e

        if not isinstance(data, dict):
            raise ProviderResponseError(PROVIDER, "unexpected payload")
        if data.get("errors"):
            logger.debug(f"[BITQUERY] GraphQL errors: {data['errors']}")
            raise ProviderResponseError(PROVIDER, "GraphQL errors in response")

        items = ((data.get("data") or {}).get("EVM") or {}).get("TokenHolders") or []
        try:
            return [BitqueryTokenHolder.model_validate(item) for item in items]
        except ValidationError as e:
            raise ProviderResponseError(PROVIDER, "malformed TokenHolders item") from e

"""Natural-language explanation of a finished analysis via a chat-completions API.

Consumes a ContractAnalysis plus the caller's own API key (from their
preferences); the engine never needs it to produce an analysis.
"""

import asyncio

import httpx
from loguru import logger

from contract_scanner.models import ContractAnalysis, Preferences
from contract_scanner.parsers.exceptions import (
    ExplanationAuthError,
    ExplanationError,
    ExplanationQuotaError,
)
from contract_scanner.parsers.rate_limiter import RateLimiter
from contract_scanner.utils.formatters import format_holder_percentage, format_number

DEFAULT_BASE_URL = "https://api.openai.com/v1"
DEFAULT_MODEL = "gpt-4o-mini"
MAX_RETRIES = 2
RETRY_DELAYS = [2.0, 5.0]
NO_EXPLANATION = "No explanation available"


def build_prompt(analysis: ContractAnalysis) -> str:
    a = analysis
    if a.risk_factors:
        factors = "\n".join(f"- {f.text} ({f.severity.value} risk)" for f in a.risk_factors)
    else:
        factors = "- None detected by the static scan"

    return f"""You are a blockchain security expert. Analyze this smart contract and provide a detailed explanation in a conversational, easy-to-understand manner.

Contract Details:
- Address: {a.address}
- Network: {a.network.value}
- Token: {a.token_name or "Unknown"} ({a.token_symbol or "?"})
- Risk Score: {a.risk_score}/100 ({a.risk_level.label})
- Audit Score: {a.audit_score}/100
- Contract Age: {a.contract_age}
- Verified: {a.verification_status}
- Ownership: {a.ownership_status}
- Honeypot check: {a.honeypot_status} (buy tax {a.buy_tax:.1f}%, sell tax {a.sell_tax:.1f}%)
- Holders: {format_number(a.holder_count)}
- Total Supply (raw): {a.total_supply}
- Liquidity: {a.liquidity} ({a.liquidity_status}, LP {a.liquidity_lock_status})
- Top 10 Holders: {format_holder_percentage(a.holder_analysis.top10_percentage)}
- Creator Holding: {format_holder_percentage(a.creator_holding)}

Risk Factors:
{factors}

Please provide:
1. A summary of what this contract appears to be
2. An explanation of the main risks and concerns
3. Specific recommendations for potential investors
4. What to look out for with similar contracts

Values reported as "Unknown" could not be fetched; do not treat them as safe.
Keep the explanation accessible to non-technical users while being thorough about the security implications."""


class ExplanationClient:
    """Chat-completions client (OpenAI-compatible)."""

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_MODEL,
        base_url: str = DEFAULT_BASE_URL,
        max_rps: float = 1.0,
    ) -> None:
        if not api_key:
            raise ExplanationAuthError("An API key is required for explanations")
        self._rate_limiter = RateLimiter(max_rps)
        self._model = model
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=30.0,  # LLM responses can be slow
            headers={
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
            },
        )

    async def explain(self, analysis: ContractAnalysis) -> str:
        """Free-text commentary on ``analysis``.

        Raises ExplanationAuthError on 401/403, ExplanationQuotaError when
        rate limits or quota persist past retries, ExplanationError otherwise.
        """
        body = {
            "model": self._model,
            "messages": [{"role": "user", "content": build_prompt(analysis)}],
            "max_tokens": 1000,
            "temperature": 0.7,
        }

        for attempt in range(MAX_RETRIES + 1):
            delay = RETRY_DELAYS[min(attempt, len(RETRY_DELAYS) - 1)]
            try:
                await self._rate_limiter.acquire()
                resp = await self._client.post("/chat/completions", json=body)
            except (httpx.TimeoutException, httpx.ConnectError) as e:
                if attempt < MAX_RETRIES:
                    logger.debug(f"[LLM] {type(e).__name__}, retry in {delay}s")
                    await asyncio.sleep(delay)
                    continue
                raise ExplanationError(f"Explanation request failed: {e}") from e

            if resp.status_code in (401, 403):
                raise ExplanationAuthError(_error_message(resp, "Invalid API key"))

            if resp.status_code == 429:
                message = _error_message(resp, "Rate limit or quota exceeded")
                # insufficient_quota will not clear by waiting
                if attempt < MAX_RETRIES and "quota" not in message.lower():
                    logger.debug(f"[LLM] Rate limited, retrying in {delay}s")
                    await asyncio.sleep(delay)
                    continue
                raise ExplanationQuotaError(message)

            if resp.status_code != 200:
                logger.debug(f"[LLM] API error: {resp.status_code}")
                if resp.status_code >= 500 and attempt < MAX_RETRIES:
                    await asyncio.sleep(delay)
                    continue
                raise ExplanationError(_error_message(resp, "Failed to get AI explanation"))

            try:
                data = resp.json()
                # content is null for refusals and tool-call replies
                content = data.get("choices", [{}])[0].get("message", {}).get("content") or ""
                if not isinstance(content, str):
                    raise TypeError(f"content is {type(content).__name__}")
            except (ValueError, AttributeError, IndexError, TypeError) as e:
                raise ExplanationError("Malformed explanation response") from e
            return content.strip() or NO_EXPLANATION

        raise ExplanationQuotaError("Rate limit exceeded")

    async def close(self) -> None:
        await self._client.aclose()


def _error_message(resp: httpx.Response, default: str) -> str:
    try:
        return resp.json().get("error", {}).get("message") or default
    except (ValueError, AttributeError):
        return default


async def explain_if_configured(
    analysis: ContractAnalysis,
    preferences: Preferences,
    *,
    model: str = DEFAULT_MODEL,
    base_url: str = DEFAULT_BASE_URL,
) -> str | None:
    """Explanation when the user has an API key, None otherwise."""
    if not preferences.api_key:
        return None
    client = ExplanationClient(preferences.api_key, model=model, base_url=base_url)
    try:
        return await client.explain(analysis)
    finally:
        await client.close()

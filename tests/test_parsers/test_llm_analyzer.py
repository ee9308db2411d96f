"""Tests for the explanation client."""

from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from contract_scanner.models import ContractAnalysis, Network, Preferences, RiskFactor, Severity
from contract_scanner.parsers import risk_scorer
from contract_scanner.parsers.exceptions import ExplanationAuthError, ExplanationError, ExplanationQuotaError
from contract_scanner.parsers.llm_analyzer.client import (
    NO_EXPLANATION,
    ExplanationClient,
    build_prompt,
    explain_if_configured,
)

TOKEN = "0x1111111111111111111111111111111111111111"


def _analysis(**overrides) -> ContractAnalysis:
    fields = {
        "address": TOKEN,
        "network": Network.ETHEREUM,
        "risk_level": risk_scorer.LOW_RISK,
    }
    fields.update(overrides)
    return ContractAnalysis(**fields)


def _resp(payload, status_code: int = 200) -> MagicMock:
    resp = MagicMock()
    resp.status_code = status_code
    resp.json.return_value = payload
    return resp


def _completion(text: str) -> dict:
    return {"choices": [{"message": {"role": "assistant", "content": text}}]}


def _client(*responses) -> ExplanationClient:
    client = ExplanationClient("sk-test", max_rps=0)
    client._client = AsyncMock()
    client._client.post = AsyncMock(side_effect=list(responses))
    return client


class TestBuildPrompt:
    def test_includes_analysis_values(self) -> None:
        analysis = _analysis(
            token_name="Test",
            token_symbol="TST",
            risk_score=40,
            risk_level=risk_scorer.MEDIUM_RISK,
            risk_factors=[RiskFactor(text="Self-destruct function found", severity=Severity.HIGH, points=25)],
        )
        prompt = build_prompt(analysis)

        assert TOKEN in prompt
        assert "Test (TST)" in prompt
        assert "Risk Score: 40/100 (MEDIUM RISK)" in prompt
        assert "- Self-destruct function found (high risk)" in prompt

    def test_unknown_values_flagged(self) -> None:
        prompt = build_prompt(_analysis())
        assert "Honeypot check: Unknown" in prompt
        assert "None detected" in prompt


class TestExplanationClient:
    def test_requires_key(self) -> None:
        with pytest.raises(ExplanationAuthError):
            ExplanationClient("")

    @pytest.mark.asyncio
    async def test_explain(self) -> None:
        client = _client(_resp(_completion("  This token looks risky.  ")))

        text = await client.explain(_analysis())

        assert text == "This token looks risky."
        args, kwargs = client._client.post.call_args
        assert args[0] == "/chat/completions"
        assert kwargs["json"]["model"] == "gpt-4o-mini"
        assert kwargs["json"]["messages"][0]["role"] == "user"

    @pytest.mark.asyncio
    async def test_empty_content(self) -> None:
        client = _client(_resp(_completion("")))
        assert await client.explain(_analysis()) == NO_EXPLANATION

    @pytest.mark.asyncio
    async def test_null_content(self) -> None:
        client = _client(_resp({"choices": [{"message": {"role": "assistant", "content": None}}]}))
        assert await client.explain(_analysis()) == NO_EXPLANATION

    @pytest.mark.asyncio
    async def test_non_text_content(self) -> None:
        client = _client(_resp({"choices": [{"message": {"content": [{"type": "text"}]}}]}))
        with pytest.raises(ExplanationError, match="Malformed"):
            await client.explain(_analysis())

    @pytest.mark.asyncio
    async def test_invalid_key(self) -> None:
        client = _client(_resp({"error": {"message": "Incorrect API key provided"}}, status_code=401))
        with pytest.raises(ExplanationAuthError, match="Incorrect API key"):
            await client.explain(_analysis())

    @pytest.mark.asyncio
    async def test_insufficient_quota_not_retried(self, no_retry_delay) -> None:
        client = _client(_resp({"error": {"message": "You exceeded your current quota"}}, status_code=429))
        with pytest.raises(ExplanationQuotaError):
            await client.explain(_analysis())
        assert client._client.post.await_count == 1

    @pytest.mark.asyncio
    async def test_rate_limit_retried(self, no_retry_delay) -> None:
        limited = _resp({"error": {"message": "Rate limit reached"}}, status_code=429)
        client = _client(limited, _resp(_completion("ok")))
        assert await client.explain(_analysis()) == "ok"
        assert client._client.post.await_count == 2

    @pytest.mark.asyncio
    async def test_server_error_exhausts(self, no_retry_delay) -> None:
        err = _resp({}, status_code=503)
        client = _client(err, err, err)
        with pytest.raises(ExplanationError):
            await client.explain(_analysis())

    @pytest.mark.asyncio
    async def test_connect_error(self, no_retry_delay) -> None:
        boom = httpx.ConnectError("refused")
        client = _client(boom, boom, boom)
        with pytest.raises(ExplanationError):
            await client.explain(_analysis())


class TestExplainIfConfigured:
    @pytest.mark.asyncio
    async def test_no_key_returns_none(self) -> None:
        assert await explain_if_configured(_analysis(), Preferences()) is None

"""Shared test fixtures."""

import pytest

from config.settings import Settings


@pytest.fixture
def scanner_settings() -> Settings:
    """Settings isolated from the developer's .env."""
    return Settings(
        _env_file=None,
        etherscan_api_key="test-key",
        bitquery_api_key="",
        provider_timeout_sec=1.0,
        analysis_deadline_sec=2.0,
    )


@pytest.fixture
def no_retry_delay(monkeypatch: pytest.MonkeyPatch) -> None:
    """Zero out client backoff so retry paths run instantly."""
    from contract_scanner.parsers.coingecko import client as coingecko_client
    from contract_scanner.parsers.dexscreener import client as dexscreener_client
    from contract_scanner.parsers.etherscan import client as etherscan_client
    from contract_scanner.parsers.goplus import client as goplus_client
    from contract_scanner.parsers.llm_analyzer import client as llm_client

    monkeypatch.setattr(etherscan_client, "RETRY_DELAYS", [0.0, 0.0])
    monkeypatch.setattr(goplus_client, "RETRY_DELAYS", [0.0, 0.0])
    monkeypatch.setattr(dexscreener_client, "RETRY_DELAYS", [0.0, 0.0, 0.0])
    monkeypatch.setattr(coingecko_client, "RETRY_DELAYS", [0.0])
    monkeypatch.setattr(llm_client, "RETRY_DELAYS", [0.0, 0.0])

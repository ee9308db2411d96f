"""Analysis endpoints — run the engine, optionally explain the result."""

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request, status
from slowapi import Limiter
from slowapi.util import get_remote_address

from config.settings import Settings, settings as app_settings
from contract_scanner.api.dependencies import get_aggregator, get_settings
from contract_scanner.models import ContractAnalysis, Preferences
from contract_scanner.parsers.aggregator import SourceAggregator
from contract_scanner.parsers.exceptions import (
    ClassificationError,
    ConfigurationError,
    ExplanationAuthError,
    ExplanationError,
    ExplanationQuotaError,
)
from contract_scanner.parsers.llm_analyzer.client import explain_if_configured

router = APIRouter(prefix="/api/v1/analysis", tags=["analysis"])

# Each analysis spends ~12 upstream calls
limiter = Limiter(key_func=get_remote_address)
ANALYSIS_RATE_LIMIT = app_settings.api_rate_limit


async def _run(aggregator: SourceAggregator, address: str) -> ContractAnalysis:
    try:
        return await aggregator.analyze(address)
    except ClassificationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    except ConfigurationError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e)) from e


@router.get("/{address}")
@limiter.limit(ANALYSIS_RATE_LIMIT)
async def analyze_contract(
    request: Request,
    address: str,
    aggregator: SourceAggregator = Depends(get_aggregator),
) -> dict[str, Any]:
    """Full risk analysis for one contract address."""
    analysis = await _run(aggregator, address)
    return analysis.model_dump(mode="json", by_alias=True)


@router.post("/{address}/explain")
@limiter.limit(ANALYSIS_RATE_LIMIT)
async def explain_contract(
    request: Request,
    address: str,
    preferences: Preferences,
    aggregator: SourceAggregator = Depends(get_aggregator),
    settings: Settings = Depends(get_settings),
) -> dict[str, Any]:
    """Analysis plus AI commentary, using the caller's own API key."""
    if not preferences.api_key:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="API key is required")

    analysis = await _run(aggregator, address)
    try:
        explanation = await explain_if_configured(
            analysis, preferences, model=settings.llm_model, base_url=settings.llm_base_url
        )
    except ExplanationAuthError as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(e)) from e
    except ExplanationQuotaError as e:
        raise HTTPException(status_code=status.HTTP_429_TOO_MANY_REQUESTS, detail=str(e)) from e
    except ExplanationError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e)) from e

    return {
        "analysis": analysis.model_dump(mode="json", by_alias=True),
        "explanation": explanation,
    }

"""Health check — no auth required."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from config.settings import Settings
from contract_scanner.api.dependencies import get_settings

router = APIRouter(prefix="/api/v1", tags=["health"])


class HealthResponse(BaseModel):
    status: str
    version: str
    explorer_configured: bool
    holders_configured: bool


@router.get("/health", response_model=HealthResponse)
async def health_check(settings: Settings = Depends(get_settings)) -> HealthResponse:
    """Report whether the scanner can run a full analysis."""
    explorer_ok = bool(settings.etherscan_api_key)
    return HealthResponse(
        status="ok" if explorer_ok else "degraded",
        version="0.1.0",
        explorer_configured=explorer_ok,
        holders_configured=bool(settings.bitquery_api_key),
    )

"""FastAPI dependency injection — engine and settings."""

from __future__ import annotations

from config.settings import Settings, settings
from contract_scanner.parsers.aggregator import SourceAggregator


def get_settings() -> Settings:
    return settings


def get_aggregator() -> SourceAggregator:
    """Fresh aggregator per request; it holds no state between analyses."""
    return SourceAggregator(settings)

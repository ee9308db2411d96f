"""Source aggregator — classify, fan out to providers, merge, score.

All adapters run as concurrent tasks against the same address. The merge
waits for every task to settle, or for the analysis deadline, whichever comes
first; tasks still pending at the deadline are cancelled and count as
timeouts. A failed provider only resets the fields it owns to their sentinels.

Status thresholds:
- liquidity below $1,000 is "Inadequate", otherwise "Adequate"
- LP lock: >=50% held by burn addresses is "Burned", >=50% burned or
  time-locked is "Locked", otherwise "Unlocked"
- honeypot verdict falls back to "Suspected" when the provider gave none and
  the risk score is in the high band
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from decimal import Decimal, InvalidOperation

from loguru import logger

from config.settings import Settings, settings as default_settings
from contract_scanner.models import UNKNOWN, ContractAnalysis, Network
from contract_scanner.parsers import risk_scorer
from contract_scanner.parsers.address import require_supported
from contract_scanner.parsers.exceptions import ConfigurationError, ProviderResponseError, ProviderTimeoutError
from contract_scanner.parsers.heuristic_scanner import scan
from contract_scanner.parsers.holder_distribution import RawBalance, analyze_holders
from contract_scanner.parsers.providers import (
    LOCK_BURNED,
    LOCK_LOCKED,
    BalanceData,
    CreationTimeData,
    HolderCountData,
    HolderListData,
    HoneypotData,
    MarketData,
    ProviderAdapter,
    ProviderContext,
    ProviderResult,
    SourceCodeData,
    SupplyData,
    TokenMetadata,
    default_adapters,
    is_burn_address,
)
from contract_scanner.utils.formatters import format_age, format_usd

MIN_ADEQUATE_LIQUIDITY_USD = 1_000.0

VERIFIED = "Verified"
UNVERIFIED = "Unverified"
RENOUNCED = "Renounced"
OWNED = "Owned"
LIQUIDITY_ADEQUATE = "Adequate"
LIQUIDITY_INADEQUATE = "Inadequate"
HONEYPOT = "Honeypot"
SELLABLE = "Sellable"
SUSPECTED = "Suspected"


@dataclass
class MergedSources:
    """Provider contributions after fallbacks; local to one analysis."""

    source: str = ""
    verified: bool | None = None
    creator: str | None = None
    total_supply: str = "0"
    holder_count: int = 0
    token: TokenMetadata = field(default_factory=TokenMetadata)
    liquidity_usd: float | None = None
    honeypot: HoneypotData | None = None
    created_at: datetime | None = None
    creator_balance: str = "0"
    burned_balance: str = "0"
    holder_balances: list[RawBalance] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)  # provider -> error kind


def merge_results(results: dict[str, ProviderResult]) -> MergedSources:
    """Fold adapter results into one record; failures keep the defaults."""
    merged = MergedSources()

    for name, result in results.items():
        if not result.ok:
            merged.failed[name] = result.error.kind if result.error else "error"
            continue
        data = result.data
        if isinstance(data, SourceCodeData):
            merged.source = data.source
            merged.verified = data.verified
            merged.creator = data.creator or merged.creator
        elif isinstance(data, SupplyData):
            merged.total_supply = data.total_supply
        elif isinstance(data, HolderCountData):
            merged.holder_count = data.count
        elif isinstance(data, TokenMetadata):
            merged.token = data
        elif isinstance(data, MarketData):
            merged.liquidity_usd = data.liquidity_usd
        elif isinstance(data, HoneypotData):
            merged.honeypot = data
        elif isinstance(data, CreationTimeData):
            merged.created_at = data.created_at
        elif isinstance(data, BalanceData):
            if is_burn_address(data.holder):
                merged.burned_balance = data.balance
            else:
                merged.creator_balance = data.balance
                # creator is also known from the source provider; prefer that one
                merged.creator = merged.creator or data.holder
        elif isinstance(data, HolderListData):
            merged.holder_balances = list(data.balances)
        else:
            logger.warning(f"[AGGREGATOR] Unrecognized data from {name}: {type(data).__name__}")

    return merged


def _share(part: str, whole: str) -> float:
    """``part`` as a percentage of ``whole``, both raw integer text; 0 when undefined."""
    try:
        numerator = Decimal(part)
        denominator = Decimal(whole)
    except (InvalidOperation, ValueError):
        return 0.0
    if denominator <= 0 or numerator <= 0:
        return 0.0
    return float(min(Decimal(100), numerator / denominator * 100))


def ownership_status(honeypot: HoneypotData | None) -> str:
    if honeypot is None or honeypot.owner_address is None:
        return UNKNOWN
    owner = honeypot.owner_address.strip()
    if not owner or is_burn_address(owner):
        return RENOUNCED
    return OWNED


def honeypot_status(honeypot: HoneypotData | None, risk_score: int) -> str:
    if honeypot is not None and honeypot.is_honeypot is not None:
        return HONEYPOT if honeypot.is_honeypot else SELLABLE
    if risk_score >= risk_scorer.HIGH_RISK_THRESHOLD:
        return SUSPECTED
    return UNKNOWN


def liquidity_status(liquidity_usd: float | None) -> str:
    if liquidity_usd is None:
        return UNKNOWN
    if liquidity_usd < MIN_ADEQUATE_LIQUIDITY_USD:
        return LIQUIDITY_INADEQUATE
    return LIQUIDITY_ADEQUATE


class SourceAggregator:
    """Runs one analysis per ``analyze()`` call; holds no state between calls."""

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        adapters: list[ProviderAdapter] | None = None,
        context_factory: Callable[[Settings], ProviderContext] = ProviderContext,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._settings = settings or default_settings
        self._adapters = adapters if adapters is not None else default_adapters(self._settings)
        self._context_factory = context_factory
        self._clock = clock or (lambda: datetime.now(UTC))

    async def analyze(self, address: str) -> ContractAnalysis:
        """Analyze a token contract.

        Raises InvalidFormatError or UnsupportedNetworkError before any I/O,
        and ConfigurationError when the explorer API key is missing. Provider
        failures never raise; they show up as sentinel values.
        """
        network = require_supported(address)
        address = address.strip()

        if not self._settings.etherscan_api_key:
            raise ConfigurationError("ETHERSCAN_API_KEY is not configured")

        logger.info(f"[AGGREGATOR] Analyzing {address} ({len(self._adapters)} providers)")
        async with self._context_factory(self._settings) as ctx:
            results = await self._fetch_all(address, ctx)

        merged = merge_results(results)
        if merged.failed:
            logger.info(
                f"[AGGREGATOR] {address[:12]} degraded providers: "
                + ", ".join(f"{name}={kind}" for name, kind in sorted(merged.failed.items()))
            )
        return self._build(address, network, merged)

    async def _fetch_all(self, address: str, ctx: ProviderContext) -> dict[str, ProviderResult]:
        tasks = {
            asyncio.create_task(adapter.fetch(address, ctx), name=f"provider:{adapter.name}"): adapter
            for adapter in self._adapters
        }
        if not tasks:
            return {}

        pending: set[asyncio.Task] = set(tasks)
        try:
            _, pending = await asyncio.wait(tasks, timeout=self._settings.analysis_deadline_sec)
        finally:
            # Also runs when analyze() itself is cancelled: no adapter may
            # outlive the context that owns its HTTP clients.
            unfinished = [task for task in tasks if not task.done()]
            for task in unfinished:
                task.cancel()
            if unfinished:
                await asyncio.gather(*unfinished, return_exceptions=True)

        results: dict[str, ProviderResult] = {}
        for task, adapter in tasks.items():
            if task in pending:
                results[adapter.name] = ProviderResult.failure(
                    adapter.name,
                    ProviderTimeoutError(adapter.name, "abandoned at analysis deadline"),
                )
                continue
            exc = task.exception()
            if exc is not None:
                logger.warning(f"[AGGREGATOR] {adapter.name} raised past its boundary: {exc!r}")
                results[adapter.name] = ProviderResult.failure(
                    adapter.name, ProviderResponseError(adapter.name, repr(exc))
                )
                continue
            results[adapter.name] = task.result()
        return results

    def _build(self, address: str, network: Network, merged: MergedSources) -> ContractAnalysis:
        factors = scan(merged.source)
        risk_score = risk_scorer.score(factors)

        hp = merged.honeypot
        own_status = ownership_status(hp)
        liq_status = liquidity_status(merged.liquidity_usd)
        lock_status = hp.lp_lock_status if hp is not None else UNKNOWN
        hp_status = honeypot_status(hp, risk_score)

        holders = analyze_holders(
            merged.holder_balances,
            total_supply_hint=merged.total_supply if merged.total_supply != "0" else None,
            creator_address=merged.creator,
        )

        creator_holding = _share(merged.creator_balance, merged.total_supply) or holders.creator_holding

        contract_age = UNKNOWN
        now = self._clock()
        if merged.created_at is not None:
            contract_age = format_age(now - merged.created_at)

        audit = risk_scorer.audit_score(
            factors,
            verified=merged.verified,
            renounced=own_status == RENOUNCED,
            liquidity_adequate=liq_status == LIQUIDITY_ADEQUATE,
            lp_locked=lock_status in (LOCK_BURNED, LOCK_LOCKED),
            sellable=hp_status == SELLABLE,
        )

        if merged.verified is None:
            verification = UNKNOWN
        else:
            verification = VERIFIED if merged.verified else UNVERIFIED

        analysis = ContractAnalysis(
            address=address,
            network=network,
            token_name=merged.token.name,
            token_symbol=merged.token.symbol,
            token_image=merged.token.image,
            risk_score=risk_score,
            audit_score=audit,
            risk_level=risk_scorer.level(risk_score),
            risk_factors=factors,
            is_verified=bool(merged.verified),
            verification_status=verification,
            is_renounced=own_status == RENOUNCED,
            ownership_status=own_status,
            liquidity_usd=merged.liquidity_usd or 0.0,
            liquidity=format_usd(merged.liquidity_usd) if merged.liquidity_usd is not None else UNKNOWN,
            liquidity_status=liq_status,
            liquidity_lock_status=lock_status,
            is_honeypot=hp_status == HONEYPOT,
            honeypot_status=hp_status,
            buy_tax=(hp.buy_tax or 0.0) if hp is not None else 0.0,
            sell_tax=(hp.sell_tax or 0.0) if hp is not None else 0.0,
            holder_count=merged.holder_count,
            total_supply=merged.total_supply,
            top_holder_percent=holders.top_holders[0].percentage if holders.top_holders else 0.0,
            holder_analysis=holders,
            creator_balance=merged.creator_balance,
            creator_holding=creator_holding,
            burned_balance=merged.burned_balance,
            burned_percent=_share(merged.burned_balance, merged.total_supply),
            contract_age=contract_age,
            contract_creator=merged.creator,
            analyzed_at=now,
        )

        logger.info(
            f"[AGGREGATOR] {address[:12]} risk={analysis.risk_score} "
            f"({analysis.risk_level.label}) audit={analysis.audit_score} "
            f"factors={len(factors)}"
        )
        return analysis

"""Provider adapters — one per upstream data source.

Each adapter wraps a client call, applies its own timeout and returns a
ProviderResult: either the normalized partial data it owns or the typed
ProviderError that stopped it. Nothing raises past ``fetch()`` except
cancellation.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from loguru import logger

from config.settings import Settings
from contract_scanner.parsers.bitquery.client import BitqueryClient
from contract_scanner.parsers.coingecko.client import CoinGeckoClient
from contract_scanner.parsers.dexscreener.client import DexScreenerClient
from contract_scanner.parsers.etherscan.client import EtherscanClient
from contract_scanner.parsers.exceptions import (
    ProviderAuthError,
    ProviderError,
    ProviderResponseError,
    ProviderTimeoutError,
)
from contract_scanner.parsers.goplus.client import GoPlusClient
from contract_scanner.parsers.goplus.models import GoPlusReport
from contract_scanner.parsers.holder_distribution import RawBalance
from contract_scanner.parsers.rate_limiter import RateLimiter

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"
DEAD_ADDRESS = "0x000000000000000000000000000000000000dEaD"
BURN_ADDRESSES = frozenset({ZERO_ADDRESS, DEAD_ADDRESS.lower()})

LP_LOCK_MAJORITY = 0.5  # share of LP supply

LOCK_BURNED = "Burned"
LOCK_LOCKED = "Locked"
LOCK_UNLOCKED = "Unlocked"
LOCK_UNKNOWN = "Unknown"


def is_burn_address(address: str | None) -> bool:
    return bool(address) and address.lower() in BURN_ADDRESSES


# --- Partial data owned by each adapter ---


@dataclass(frozen=True)
class SourceCodeData:
    source: str
    verified: bool
    creator: str | None = None


@dataclass(frozen=True)
class SupplyData:
    total_supply: str  # raw integer text


@dataclass(frozen=True)
class HolderCountData:
    count: int


@dataclass(frozen=True)
class TokenMetadata:
    name: str = ""
    symbol: str = ""
    image: str = ""


@dataclass(frozen=True)
class MarketData:
    liquidity_usd: float


@dataclass(frozen=True)
class HoneypotData:
    is_honeypot: bool | None
    buy_tax: float | None = None
    sell_tax: float | None = None
    lp_lock_status: str = LOCK_UNKNOWN
    owner_address: str | None = None


@dataclass(frozen=True)
class CreationTimeData:
    created_at: datetime | None


@dataclass(frozen=True)
class BalanceData:
    holder: str
    balance: str  # raw integer text


@dataclass(frozen=True)
class HolderListData:
    balances: list[RawBalance] = field(default_factory=list)


@dataclass(frozen=True)
class ProviderResult:
    """Tagged success/failure of one adapter."""

    provider: str
    data: Any = None
    error: ProviderError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, provider: str, data: Any) -> ProviderResult:
        return cls(provider=provider, data=data)

    @classmethod
    def failure(cls, provider: str, error: ProviderError) -> ProviderResult:
        return cls(provider=provider, error=error)


# --- Per-analysis client bundle ---


class ProviderContext:
    """HTTP clients for one analysis, created on first use and closed on exit.

    All Etherscan-backed adapters share one client and one rate limiter, since
    the explorer meters calls per API key.
    """

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self._etherscan: EtherscanClient | None = None
        self._goplus: GoPlusClient | None = None
        self._dexscreener: DexScreenerClient | None = None
        self._coingecko: CoinGeckoClient | None = None
        self._bitquery: BitqueryClient | None = None

    async def __aenter__(self) -> ProviderContext:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    @property
    def etherscan(self) -> EtherscanClient:
        if self._etherscan is None:
            s = self.settings
            self._etherscan = EtherscanClient(
                s.etherscan_api_key,
                chain_id=s.chain_id,
                base_url=s.etherscan_base_url,
                rate_limiter=RateLimiter(s.etherscan_max_rps),
                timeout=s.provider_timeout_sec,
            )
        return self._etherscan

    @property
    def goplus(self) -> GoPlusClient:
        if self._goplus is None:
            self._goplus = GoPlusClient(
                chain_id=self.settings.chain_id,
                max_rps=self.settings.goplus_max_rps,
                timeout=self.settings.provider_timeout_sec,
            )
        return self._goplus

    @property
    def dexscreener(self) -> DexScreenerClient:
        if self._dexscreener is None:
            self._dexscreener = DexScreenerClient(
                chain=self.settings.dexscreener_chain,
                max_rps=self.settings.dexscreener_max_rps,
                timeout=self.settings.provider_timeout_sec,
            )
        return self._dexscreener

    @property
    def coingecko(self) -> CoinGeckoClient:
        if self._coingecko is None:
            self._coingecko = CoinGeckoClient(
                api_key=self.settings.coingecko_api_key,
                platform=self.settings.coingecko_platform,
                timeout=self.settings.provider_timeout_sec,
            )
        return self._coingecko

    @property
    def bitquery(self) -> BitqueryClient | None:
        """None when no Bitquery key is configured."""
        if self._bitquery is None and self.settings.bitquery_api_key:
            self._bitquery = BitqueryClient(
                self.settings.bitquery_api_key,
                network=self.settings.bitquery_network,
                timeout=self.settings.provider_timeout_sec,
            )
        return self._bitquery

    async def close(self) -> None:
        for client in (self._etherscan, self._goplus, self._dexscreener, self._coingecko, self._bitquery):
            if client is None:
                continue
            try:
                await client.close()
            except Exception as e:
                logger.warning(f"[PROVIDER] Failed to close {type(client).__name__}: {e}")


# --- Adapters ---


class ProviderAdapter:
    """Base adapter: subclasses implement ``_fetch`` and may raise freely."""

    name = "provider"

    def __init__(self, timeout: float = 10.0) -> None:
        self.timeout = timeout

    async def _fetch(self, address: str, ctx: ProviderContext) -> Any:
        raise NotImplementedError

    async def fetch(self, address: str, ctx: ProviderContext) -> ProviderResult:
        try:
            data = await asyncio.wait_for(self._fetch(address, ctx), timeout=self.timeout)
        except TimeoutError:
            error: ProviderError = ProviderTimeoutError(self.name, f"no response within {self.timeout}s")
        except ProviderError as e:
            error = e
        except Exception as e:
            error = ProviderResponseError(self.name, f"{type(e).__name__}: {e}")
        else:
            return ProviderResult.success(self.name, data)

        logger.debug(f"[PROVIDER] {self.name} failed ({error.kind}): {error.message}")
        return ProviderResult.failure(self.name, error)


class SourceCodeProvider(ProviderAdapter):
    name = "source_code"

    async def _fetch(self, address: str, ctx: ProviderContext) -> SourceCodeData:
        info = await ctx.etherscan.get_source_code(address)
        creator = None
        try:
            creator = await ctx.etherscan.get_contract_creator(address)
        except ProviderError as e:
            logger.debug(f"[PROVIDER] {self.name} creator lookup failed ({e.kind}): {e.message}")
        return SourceCodeData(
            source=info.SourceCode,
            verified=info.is_verified,
            creator=creator,
        )


class SupplyProvider(ProviderAdapter):
    name = "supply"

    async def _fetch(self, address: str, ctx: ProviderContext) -> SupplyData:
        return SupplyData(total_supply=await ctx.etherscan.get_token_supply(address))


class HolderCountProvider(ProviderAdapter):
    name = "holder_count"

    async def _fetch(self, address: str, ctx: ProviderContext) -> HolderCountData:
        return HolderCountData(count=await ctx.etherscan.get_holder_count(address))


class TokenMetadataProvider(ProviderAdapter):
    name = "token_metadata"

    async def _fetch(self, address: str, ctx: ProviderContext) -> TokenMetadata:
        info = await ctx.coingecko.get_contract_info(address)
        return TokenMetadata(name=info.name, symbol=info.symbol.upper(), image=info.image_url)


class MarketDataProvider(ProviderAdapter):
    name = "market_data"

    async def _fetch(self, address: str, ctx: ProviderContext) -> MarketData:
        liquidity = await ctx.dexscreener.get_liquidity_usd(address)
        return MarketData(liquidity_usd=float(liquidity))


class HoneypotProvider(ProviderAdapter):
    name = "honeypot"

    async def _fetch(self, address: str, ctx: ProviderContext) -> HoneypotData:
        report = await ctx.goplus.get_token_security(address)
        is_honeypot = report.is_honeypot
        if report.cannot_sell_all:
            is_honeypot = True
        return HoneypotData(
            is_honeypot=is_honeypot,
            buy_tax=report.buy_tax,
            sell_tax=report.sell_tax,
            lp_lock_status=lp_lock_status(report),
            owner_address=report.owner_address,
        )


def lp_lock_status(report: GoPlusReport) -> str:
    """Classify LP custody: majority burned, majority burned+locked, or neither."""
    if not report.lp_holders:
        return LOCK_UNKNOWN
    burned = sum(h.percent for h in report.lp_holders if is_burn_address(h.address))
    locked = sum(h.percent for h in report.lp_holders if h.is_locked and not is_burn_address(h.address))
    if burned >= LP_LOCK_MAJORITY:
        return LOCK_BURNED
    if burned + locked >= LP_LOCK_MAJORITY:
        return LOCK_LOCKED
    return LOCK_UNLOCKED


class CreationTimeProvider(ProviderAdapter):
    name = "creation_time"

    async def _fetch(self, address: str, ctx: ProviderContext) -> CreationTimeData:
        tx = await ctx.etherscan.get_first_transaction(address)
        if tx is None or tx.timeStamp <= 0:
            return CreationTimeData(created_at=None)
        return CreationTimeData(created_at=datetime.fromtimestamp(tx.timeStamp, tz=UTC))


class CreatorBalanceProvider(ProviderAdapter):
    """Token balance of the deployer; resolves the deployer itself."""

    name = "creator_balance"

    async def _fetch(self, address: str, ctx: ProviderContext) -> BalanceData:
        creator = await ctx.etherscan.get_contract_creator(address)
        if not creator:
            raise ProviderResponseError(self.name, "contract creator not found")
        balance = await ctx.etherscan.get_token_balance(address, creator)
        return BalanceData(holder=creator, balance=balance)


class BurnedBalanceProvider(ProviderAdapter):
    name = "burned_balance"

    async def _fetch(self, address: str, ctx: ProviderContext) -> BalanceData:
        balance = await ctx.etherscan.get_token_balance(address, DEAD_ADDRESS)
        return BalanceData(holder=DEAD_ADDRESS, balance=balance)


class HolderListProvider(ProviderAdapter):
    name = "holder_list"

    async def _fetch(self, address: str, ctx: ProviderContext) -> HolderListData:
        client = ctx.bitquery
        if client is None:
            raise ProviderAuthError(self.name, "BITQUERY_API_KEY not configured")
        holders = await client.get_token_holders(address)
        return HolderListData(
            balances=[RawBalance(address=h.Holder.Address, balance=h.raw_balance) for h in holders]
        )


def default_adapters(settings: Settings) -> list[ProviderAdapter]:
    timeout = settings.provider_timeout_sec
    return [
        SourceCodeProvider(timeout),
        SupplyProvider(timeout),
        HolderCountProvider(timeout),
        TokenMetadataProvider(timeout),
        MarketDataProvider(timeout),
        HoneypotProvider(timeout),
        CreationTimeProvider(timeout),
        CreatorBalanceProvider(timeout),
        BurnedBalanceProvider(timeout),
        HolderListProvider(timeout),
    ]

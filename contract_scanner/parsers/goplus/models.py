"""Data models for GoPlus token security responses (EVM)."""

from dataclasses import dataclass, field


@dataclass
class GoPlusLpHolder:
    """One holder of the token's liquidity-pool tokens."""

    address: str = ""
    percent: float = 0.0  # 0.0-1.0 share of LP supply
    is_locked: bool = False
    tag: str = ""


@dataclass
class GoPlusReport:
    """Token security report from GoPlus API."""

    is_honeypot: bool | None = None
    cannot_sell_all: bool | None = None
    buy_tax: float | None = None  # percentage (0-100)
    sell_tax: float | None = None  # percentage (0-100)
    owner_address: str | None = None
    lp_holders: list[GoPlusLpHolder] = field(default_factory=list)

"""Holder distribution — normalize raw balances into percentages and concentration."""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from loguru import logger

from contract_scanner.models import HolderAnalysis, TokenHolder

TOP_DISPLAY = 20
TOP_CONCENTRATION = 10


@dataclass(frozen=True)
class RawBalance:
    """Holder balance as reported by a provider (raw integer text)."""

    address: str
    balance: str


def _parse_balance(raw: str) -> Decimal | None:
    try:
        value = Decimal(str(raw).strip())
    except (InvalidOperation, ValueError):
        return None
    if not value.is_finite() or value <= 0:
        return None
    return value


def analyze_holders(
    raw_balances: list[RawBalance],
    total_supply_hint: str | int | None = None,
    creator_address: str | None = None,
) -> HolderAnalysis:
    """Build a HolderAnalysis from provider balances.

    Percentages are relative to the supply hint when it is nonzero and not
    smaller than the observed sum, otherwise to the observed sum. Holders are
    stably sorted descending by balance, so ties keep provider order.
    """
    parsed: list[tuple[str, Decimal]] = []
    for rb in raw_balances:
        value = _parse_balance(rb.balance)
        if value is None or not rb.address:
            continue
        parsed.append((rb.address, value))

    if not parsed:
        return HolderAnalysis(creator_address=creator_address)

    parsed.sort(key=lambda item: item[1], reverse=True)
    observed = sum(value for _, value in parsed)

    denominator = observed
    hint = _parse_balance(str(total_supply_hint)) if total_supply_hint is not None else None
    if hint is not None:
        if hint >= observed:
            denominator = hint
        else:
            logger.debug(
                f"[HOLDERS] Supply hint {hint} below observed sum {observed}, using observed"
            )

    holders = [
        TokenHolder(
            address=address,
            balance=format(value, "f"),
            percentage=float(value / denominator * 100),
        )
        for address, value in parsed
    ]

    top10 = min(100.0, sum(h.percentage for h in holders[:TOP_CONCENTRATION]))

    creator_holding = 0.0
    if creator_address:
        wanted = creator_address.lower()
        for h in holders:
            if h.address.lower() == wanted:
                creator_holding = h.percentage
                break

    return HolderAnalysis(
        total_holders=len(holders),
        top_holders=holders[:TOP_DISPLAY],
        top10_percentage=top10,
        creator_holding=creator_holding,
        creator_address=creator_address,
    )

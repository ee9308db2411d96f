"""Human-readable formatting for analysis values and the CLI report."""

from datetime import timedelta
from decimal import Decimal

from contract_scanner.models import ContractAnalysis


def format_number(value: float | int | Decimal) -> str:
    """Thousands separators, no decimals."""
    return f"{int(value):,}"


def format_usd(value: float | Decimal) -> str:
    return f"${float(value):,.0f}"


def format_holder_percentage(percentage: float) -> str:
    if percentage < 0.01:
        return "<0.01%"
    if percentage < 1:
        return f"{percentage:.2f}%"
    return f"{percentage:.1f}%"


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}" if count == 1 else f"{count} {unit}s"


def format_age(age: timedelta) -> str:
    """Coarse age: '45 minutes', '2 hours', '3 days', '2 weeks', '1 month', '3 years'."""
    seconds = max(0, int(age.total_seconds()))
    minutes = seconds // 60
    hours = seconds // 3600
    days = seconds // 86400
    if hours < 1:
        return _plural(max(1, minutes), "minute")
    if days < 1:
        return _plural(hours, "hour")
    if days < 7:
        return _plural(days, "day")
    if days < 30:
        return _plural(days // 7, "week")
    if days < 365:
        return _plural(days // 30, "month")
    return _plural(days // 365, "year")


def format_report(analysis: ContractAnalysis) -> str:
    """Plain-text summary for terminal output."""
    a = analysis
    token = " ".join(part for part in (a.token_name, f"${a.token_symbol}" if a.token_symbol else "") if part)
    lines = [
        f"Contract: {a.address} ({a.network.value})",
    ]
    if token:
        lines.append(f"Token: {token}")
    lines += [
        f"Risk score: {a.risk_score}/100 ({a.risk_level.label})",
        f"Audit score: {a.audit_score}/100",
        "",
        f"Verified: {a.verification_status}",
        f"Ownership: {a.ownership_status}",
        f"Honeypot: {a.honeypot_status}",
        f"Liquidity: {a.liquidity} ({a.liquidity_status}, LP {a.liquidity_lock_status})",
        f"Taxes: buy {a.buy_tax:.1f}% / sell {a.sell_tax:.1f}%",
        f"Contract age: {a.contract_age}",
        f"Holders: {format_number(a.holder_count)}",
        f"Top 10 holders: {format_holder_percentage(a.holder_analysis.top10_percentage)}",
        f"Creator holding: {format_holder_percentage(a.creator_holding)}",
        f"Burned: {format_holder_percentage(a.burned_percent)}",
    ]
    if a.contract_creator:
        lines.append(f"Creator: {a.contract_creator}")

    lines.append("")
    if a.risk_factors:
        lines.append("Risk factors:")
        for f in a.risk_factors:
            lines.append(f"  [{f.severity.value.upper():<6}] {f.text} (+{f.points})")
    else:
        lines.append("Risk factors: none detected")
    return "\n".join(lines)

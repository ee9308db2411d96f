"""Risk score, risk level and audit score.

Thresholds use the 70/40 split: >=70 high, 40-69 medium, <40 low.
"""

from collections.abc import Iterable

from contract_scanner.models import RiskFactor, RiskLevel, Severity

MAX_SCORE = 100
HIGH_RISK_THRESHOLD = 70
MEDIUM_RISK_THRESHOLD = 40

HIGH_RISK = RiskLevel(label="HIGH RISK", color="red")
MEDIUM_RISK = RiskLevel(label="MEDIUM RISK", color="yellow")
LOW_RISK = RiskLevel(label="LOW RISK", color="green")

# Audit score components (independent of risk_score)
AUDIT_VERIFIED = 35
AUDIT_RENOUNCED = 15
AUDIT_LIQUIDITY = 15
AUDIT_LP_LOCKED = 10
AUDIT_SELLABLE = 15
AUDIT_HIGH_PENALTY = 5
AUDIT_MEDIUM_PENALTY = 2
AUDIT_CEILING = 90  # no detected risk is not proof of safety


def score(factors: Iterable[RiskFactor]) -> int:
    """Sum of factor points, saturating at 100."""
    total = sum(max(0, f.points) for f in factors)
    return min(MAX_SCORE, total)


def level(risk_score: int) -> RiskLevel:
    if risk_score >= HIGH_RISK_THRESHOLD:
        return HIGH_RISK
    if risk_score >= MEDIUM_RISK_THRESHOLD:
        return MEDIUM_RISK
    return LOW_RISK


def audit_score(
    factors: Iterable[RiskFactor],
    *,
    verified: bool | None,
    renounced: bool | None,
    liquidity_adequate: bool | None,
    lp_locked: bool | None,
    sellable: bool | None,
) -> int:
    """Positive-evidence score in [0, AUDIT_CEILING].

    Unknown inputs (None) earn nothing; only confirmed signals count.
    """
    points = 0
    if verified:
        points += AUDIT_VERIFIED
    if renounced:
        points += AUDIT_RENOUNCED
    if liquidity_adequate:
        points += AUDIT_LIQUIDITY
    if lp_locked:
        points += AUDIT_LP_LOCKED
    if sellable:
        points += AUDIT_SELLABLE

    for f in factors:
        if f.severity is Severity.HIGH:
            points -= AUDIT_HIGH_PENALTY
        elif f.severity is Severity.MEDIUM:
            points -= AUDIT_MEDIUM_PENALTY

    return max(0, min(AUDIT_CEILING, points))

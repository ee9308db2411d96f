"""Tests for risk score, level and audit score."""

import itertools

import pytest

from contract_scanner.models import RiskFactor, Severity
from contract_scanner.parsers import risk_scorer


def _factor(points: int, severity: Severity = Severity.HIGH) -> RiskFactor:
    return RiskFactor(text=f"factor {points}", severity=severity, points=points)


class TestScore:
    def test_no_factors(self) -> None:
        assert risk_scorer.score([]) == 0

    def test_sum(self) -> None:
        assert risk_scorer.score([_factor(25), _factor(15)]) == 40

    def test_saturates_at_100(self) -> None:
        factors = [_factor(25), _factor(25), _factor(20), _factor(20), _factor(20), _factor(20), _factor(15)]
        assert sum(f.points for f in factors) == 145
        assert risk_scorer.score(factors) == 100

    def test_order_independent(self) -> None:
        factors = [_factor(25), _factor(10), _factor(5)]
        scores = {risk_scorer.score(p) for p in itertools.permutations(factors)}
        assert scores == {40}


class TestLevel:
    @pytest.mark.parametrize(
        ("score", "expected"),
        [
            (0, risk_scorer.LOW_RISK),
            (39, risk_scorer.LOW_RISK),
            (40, risk_scorer.MEDIUM_RISK),
            (69, risk_scorer.MEDIUM_RISK),
            (70, risk_scorer.HIGH_RISK),
            (100, risk_scorer.HIGH_RISK),
        ],
    )
    def test_boundaries(self, score: int, expected) -> None:
        assert risk_scorer.level(score) == expected

    def test_colors(self) -> None:
        assert risk_scorer.HIGH_RISK.color == "red"
        assert risk_scorer.MEDIUM_RISK.color == "yellow"
        assert risk_scorer.LOW_RISK.color == "green"


class TestAuditScore:
    def test_all_positive_evidence_hits_ceiling(self) -> None:
        audit = risk_scorer.audit_score(
            [], verified=True, renounced=True, liquidity_adequate=True, lp_locked=True, sellable=True
        )
        assert audit == risk_scorer.AUDIT_CEILING == 90

    def test_unknown_inputs_earn_nothing(self) -> None:
        audit = risk_scorer.audit_score(
            [], verified=None, renounced=None, liquidity_adequate=None, lp_locked=None, sellable=None
        )
        assert audit == 0

    def test_penalties(self) -> None:
        factors = [_factor(25, Severity.HIGH), _factor(15, Severity.MEDIUM), _factor(5, Severity.LOW)]
        audit = risk_scorer.audit_score(
            factors, verified=True, renounced=False, liquidity_adequate=False, lp_locked=False, sellable=False
        )
        assert audit == 35 - 5 - 2

    def test_never_negative(self) -> None:
        factors = [_factor(20, Severity.HIGH)] * 10
        audit = risk_scorer.audit_score(
            factors, verified=False, renounced=False, liquidity_adequate=False, lp_locked=False, sellable=False
        )
        assert audit == 0

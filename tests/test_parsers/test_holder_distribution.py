"""Tests for holder distribution analysis."""

import pytest

from contract_scanner.parsers.holder_distribution import RawBalance, analyze_holders


def _balances(*values: int) -> list[RawBalance]:
    return [RawBalance(address=f"0x{i:040x}", balance=str(v)) for i, v in enumerate(values, start=1)]


class TestAnalyzeHolders:
    def test_empty(self) -> None:
        result = analyze_holders([])
        assert result.total_holders == 0
        assert result.top_holders == []
        assert result.top10_percentage == 0.0
        assert result.creator_holding == 0.0

    def test_empty_keeps_creator_address(self) -> None:
        assert analyze_holders([], creator_address="0xabc").creator_address == "0xabc"

    def test_percentages_of_observed_sum(self) -> None:
        result = analyze_holders(_balances(200, 500, 300))

        assert [h.balance for h in result.top_holders] == ["500", "300", "200"]
        assert [h.percentage for h in result.top_holders] == pytest.approx([50.0, 30.0, 20.0])
        assert result.top10_percentage == pytest.approx(100.0)
        assert result.total_holders == 3

    def test_supply_hint_used_when_larger(self) -> None:
        result = analyze_holders(_balances(500, 300, 200), total_supply_hint="2000")
        assert [h.percentage for h in result.top_holders] == pytest.approx([25.0, 15.0, 10.0])
        assert result.top10_percentage == pytest.approx(50.0)

    def test_supply_hint_ignored_when_smaller(self) -> None:
        """A stale or mismatched hint must not push percentages above 100."""
        result = analyze_holders(_balances(500, 300, 200), total_supply_hint="100")
        assert result.top10_percentage == pytest.approx(100.0)

    def test_zero_hint_ignored(self) -> None:
        result = analyze_holders(_balances(1, 1), total_supply_hint="0")
        assert result.top10_percentage == pytest.approx(100.0)

    def test_ties_keep_provider_order(self) -> None:
        balances = [
            RawBalance(address="0xfirst", balance="100"),
            RawBalance(address="0xsecond", balance="100"),
            RawBalance(address="0xbig", balance="300"),
        ]
        result = analyze_holders(balances)
        assert [h.address for h in result.top_holders] == ["0xbig", "0xfirst", "0xsecond"]

    def test_top10_only_counts_ten(self) -> None:
        result = analyze_holders(_balances(*([10] * 20)))
        assert result.top10_percentage == pytest.approx(50.0)
        assert len(result.top_holders) == 20

    def test_top_holders_capped_at_20(self) -> None:
        result = analyze_holders(_balances(*range(1, 31)))
        assert len(result.top_holders) == 20
        assert result.total_holders == 30

    def test_creator_match_case_insensitive(self) -> None:
        balances = [
            RawBalance(address="0xAbCdEf0000000000000000000000000000000001", balance="250"),
            RawBalance(address="0x0000000000000000000000000000000000000002", balance="750"),
        ]
        result = analyze_holders(balances, creator_address="0xabcdef0000000000000000000000000000000001")
        assert result.creator_holding == pytest.approx(25.0)

    def test_creator_absent(self) -> None:
        result = analyze_holders(_balances(100), creator_address="0xnotthere")
        assert result.creator_holding == 0.0

    def test_invalid_and_zero_balances_dropped(self) -> None:
        balances = _balances(100) + [
            RawBalance(address="0xzero", balance="0"),
            RawBalance(address="0xbad", balance="abc"),
            RawBalance(address="", balance="50"),
        ]
        result = analyze_holders(balances)
        assert result.total_holders == 1
        assert result.top_holders[0].percentage == pytest.approx(100.0)

    def test_percentages_bounded(self) -> None:
        result = analyze_holders(_balances(7, 13, 999999, 1), total_supply_hint=10)
        assert all(0 <= h.percentage <= 100 for h in result.top_holders)
        assert result.top10_percentage <= 100

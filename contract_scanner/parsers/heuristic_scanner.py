"""Static pattern scan over verified contract source.

Heuristic by nature: obfuscated constructs slip through (false negatives) and
benign code containing a flagged token still fires (false positives). Both are
accepted costs of matching text instead of analysing bytecode. An empty result
means "nothing matched", never "safe" — unverified contracts have no source.
"""

import re
from dataclasses import dataclass

from contract_scanner.models import RiskFactor, Severity


@dataclass(frozen=True)
class PatternRule:
    pattern: re.Pattern[str]
    description: str
    severity: Severity
    points: int


def _rule(regex: str, description: str, severity: Severity, points: int) -> PatternRule:
    return PatternRule(re.compile(regex), description, severity, points)


# Table order is display order: factors come out in the order rules appear here.
PATTERN_RULES: tuple[PatternRule, ...] = (
    _rule(r"tx\.origin", "Use of tx.origin", Severity.HIGH, 25),
    _rule(r"selfdestruct", "Self-destruct function found", Severity.HIGH, 25),
    _rule(r"assembly", "Inline assembly used", Severity.HIGH, 20),
    _rule(r"delegatecall", "Proxy or upgradeable contract (delegatecall)", Severity.HIGH, 20),
    _rule(r"mint\(", "Owner can mint tokens", Severity.HIGH, 20),
    _rule(r"burn\(", "Owner can burn arbitrary tokens", Severity.HIGH, 15),
    _rule(r"blacklist", "Blacklist functionality present", Severity.HIGH, 15),
    _rule(r"require\(!blacklist", "Blacklist logic in transfer functions", Severity.HIGH, 15),
    _rule(r"_transfer\(", "Check for suspicious transfer modifications", Severity.HIGH, 20),
    _rule(r"revert\(", "Revert on certain addresses or actions (possible honeypot)", Severity.HIGH, 20),
    _rule(r"block\.number", "Launch period block logic", Severity.MEDIUM, 15),
    _rule(r"require\(.*maxTxAmount", "Max TX limitation logic", Severity.MEDIUM, 15),
    _rule(r"require\(.*maxWallet", "Max wallet restriction logic", Severity.MEDIUM, 10),
    _rule(r"approve\(", "Check for allowance manipulation", Severity.MEDIUM, 10),
    _rule(r"transferFrom", "Check for unlimited approval handling", Severity.MEDIUM, 10),
    _rule(r"owner\s*=|onlyOwner", "Owner pattern found", Severity.MEDIUM, 15),
    _rule(r"renounceOwnership", "Renounce ownership function found", Severity.LOW, 5),
    _rule(r'name\s*=\s*".*(ETH|BTC|USDT).*"', "Suspicious name pattern", Severity.LOW, 5),
    _rule(r'symbol\s*=\s*".*(ETH|BTC|USDT).*"', "Suspicious symbol pattern", Severity.LOW, 5),
    _rule(r"totalSupply\(", "Check totalSupply behavior", Severity.LOW, 5),
    _rule(r"decimals\(", "Custom decimals, check for manipulation", Severity.LOW, 5),
    _rule(r"Transfer\(", "Missing or misleading Transfer events", Severity.LOW, 5),
)


def scan(source: str | None, rules: tuple[PatternRule, ...] = PATTERN_RULES) -> list[RiskFactor]:
    """Return one factor per rule whose pattern occurs anywhere in ``source``."""
    if not source:
        return []

    return [
        RiskFactor(text=rule.description, severity=rule.severity, points=rule.points)
        for rule in rules
        if rule.pattern.search(source)
    ]

from contract_scanner.models.analysis import (
    UNKNOWN,
    ContractAnalysis,
    HolderAnalysis,
    Network,
    Preferences,
    RiskFactor,
    RiskLevel,
    Severity,
    TokenHolder,
)

__all__ = [
    "UNKNOWN",
    "ContractAnalysis",
    "HolderAnalysis",
    "Network",
    "Preferences",
    "RiskFactor",
    "RiskLevel",
    "Severity",
    "TokenHolder",
]

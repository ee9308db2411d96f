"""Value types produced by the risk assessment engine.

Every record is frozen: it is built once per analysis and never mutated.
Serialized field names are camelCase (``model_dump(by_alias=True)``).
"""

from datetime import datetime
from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

UNKNOWN = "Unknown"


class Network(str, Enum):
    ETHEREUM = "Ethereum"
    SOLANA = "Solana"
    INVALID = "Invalid"


class Severity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class _Record(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class RiskFactor(_Record):
    """Weighted risk indicator matched in contract source text."""

    text: str
    severity: Severity
    points: int = Field(gt=0)


class RiskLevel(_Record):
    label: str
    color: Literal["red", "yellow", "green"]


class TokenHolder(_Record):
    address: str
    balance: str  # raw integer as text
    percentage: float  # of total observed (or hinted) supply


class HolderAnalysis(_Record):
    total_holders: int = 0
    top_holders: list[TokenHolder] = []  # top 20, descending by balance
    top10_percentage: float = 0.0
    creator_holding: float = 0.0
    creator_address: str | None = None


class ContractAnalysis(_Record):
    """Terminal aggregate of one analysis request.

    Fields owned by a provider that failed keep their sentinel
    ("Unknown", 0, "0" or "") instead of being absent.
    """

    address: str
    network: Network

    token_name: str = ""
    token_symbol: str = ""
    token_image: str = ""

    risk_score: int = Field(default=0, ge=0, le=100)
    audit_score: int = Field(default=0, ge=0, le=100)
    risk_level: RiskLevel
    risk_factors: list[RiskFactor] = []

    is_verified: bool = False
    verification_status: str = UNKNOWN
    is_renounced: bool = False
    ownership_status: str = UNKNOWN
    liquidity_usd: float = 0.0
    liquidity: str = UNKNOWN  # display string, e.g. "$12,345"
    liquidity_status: str = UNKNOWN
    liquidity_lock_status: str = UNKNOWN
    is_honeypot: bool = False
    honeypot_status: str = UNKNOWN
    buy_tax: float = 0.0  # percent
    sell_tax: float = 0.0  # percent

    holder_count: int = 0
    total_supply: str = "0"
    top_holder_percent: float = 0.0
    holder_analysis: HolderAnalysis = HolderAnalysis()

    creator_balance: str = "0"
    creator_holding: float = 0.0  # percent of total supply
    burned_balance: str = "0"
    burned_percent: float = 0.0

    contract_age: str = UNKNOWN
    contract_creator: str | None = None
    analyzed_at: datetime | None = None


class Preferences(_Record):
    """User preferences supplied by an external store.

    The engine never reads these; callers pass them to collaborators.
    """

    api_key: str = ""
    theme: Literal["light", "dark"] = "dark"

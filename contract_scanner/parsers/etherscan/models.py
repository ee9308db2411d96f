"""Pydantic models for Etherscan API responses."""

from typing import Any

from pydantic import BaseModel, Field


class EtherscanEnvelope(BaseModel):
    """Common {status, message, result} wrapper; status "1" means success."""

    status: str = "0"
    message: str = ""
    result: Any = None

    model_config = {"extra": "ignore"}


class EtherscanSourceCode(BaseModel):
    SourceCode: str = ""

    model_config = {"extra": "ignore"}

    @property
    def is_verified(self) -> bool:
        return bool(self.SourceCode.strip())


class EtherscanContractCreation(BaseModel):
    contractAddress: str = ""
    contractCreator: str = ""
    txHash: str = ""

    model_config = {"extra": "ignore"}


class EtherscanTransaction(BaseModel):
    hash: str = ""
    blockNumber: int = 0
    timeStamp: int = 0  # unix seconds
    from_address: str = Field(default="", alias="from")
    to: str = ""

    model_config = {"extra": "ignore", "populate_by_name": True}

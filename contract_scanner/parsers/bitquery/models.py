"""Pydantic models for Bitquery EVM.TokenHolders GraphQL responses."""

from decimal import Decimal

from pydantic import BaseModel


class BitqueryAddress(BaseModel):
    Address: str = ""

    model_config = {"extra": "ignore"}


class BitqueryBalance(BaseModel):
    Amount: Decimal = Decimal("0")  # decimal-adjusted

    model_config = {"extra": "ignore"}


class BitqueryCurrency(BaseModel):
    Decimals: int = 0

    model_config = {"extra": "ignore"}


class BitqueryTokenHolder(BaseModel):
    Holder: BitqueryAddress = BitqueryAddress()
    Balance: BitqueryBalance = BitqueryBalance()
    Currency: BitqueryCurrency = BitqueryCurrency()

    model_config = {"extra": "ignore"}

    @property
    def raw_balance(self) -> str:
        """Balance scaled back to the token's smallest unit, as integer text."""
        raw = (self.Balance.Amount * (Decimal(10) ** self.Currency.Decimals)).to_integral_value()
        return format(raw, "f") if raw > 0 else "0"

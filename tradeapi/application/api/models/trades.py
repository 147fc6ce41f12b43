"""
Trade request/response models.

Constraints:
- symbol: 1-10 characters
- quantity, price: strictly positive
- type, status, counterparty: required, not blank
- trade_date, settlement_date: required ISO dates
- notes: optional, at most 500 characters
"""

from datetime import date

from pydantic import Field, field_validator

from tradeapi.application.api.models.base import ApiModel


class TradeCreate(ApiModel):
    """Body of POST/PUT /trades."""

    symbol: str = Field(..., min_length=1, max_length=10, description="Instrument symbol")
    quantity: int = Field(..., gt=0, description="Number of units")
    price: float = Field(..., gt=0, description="Price per unit")
    type: str = Field(..., max_length=10, description="BUY or SELL")
    status: str = Field(..., max_length=20, description="Trade lifecycle status")
    trade_date: date = Field(..., description="Execution date")
    settlement_date: date = Field(..., description="Settlement date")
    counterparty: str = Field(..., max_length=100, description="Counterparty name")
    notes: str | None = Field(default=None, max_length=500)

    @field_validator("symbol", "type", "status", "counterparty")
    @classmethod
    def not_blank(cls, v: str, info) -> str:
        if not v.strip():
            raise ValueError(f"{info.field_name} is required")
        return v


class Trade(TradeCreate):
    """A stored trade."""

    id: int

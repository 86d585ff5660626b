# growwsim/models/portfolio_model.py
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from growwsim.models.transaction_model import Transaction


class BuyRequest(BaseModel):
    symbol: str = Field(..., min_length=1, max_length=20)
    name: str = Field(..., min_length=1)
    quantity: int = Field(..., gt=0)
    price: float = Field(..., gt=0)

    @field_validator("symbol")
    @classmethod
    def upper_symbol(cls, v):
        return v.strip().upper()


class SellRequest(BaseModel):
    symbol: str = Field(..., min_length=1, max_length=20)
    quantity: int = Field(..., gt=0)
    price: float = Field(..., gt=0)

    @field_validator("symbol")
    @classmethod
    def upper_symbol(cls, v):
        return v.strip().upper()


class Holding(BaseModel):
    id: str
    user_id: str
    symbol: str
    name: str
    quantity: int
    avg_price: float
    purchase_date: datetime
    updated_at: Optional[datetime] = None


class TradeResponse(BaseModel):
    message: str
    transaction: Transaction
    new_balance: float


class HoldingValuation(BaseModel):
    symbol: str
    name: str
    quantity: int
    avg_price: float
    current_price: float
    total_invested: float
    current_value: float
    pnl: float
    pnl_percentage: float


class PortfolioSummary(BaseModel):
    holdings: List[HoldingValuation]
    total_invested: float
    current_value: float
    total_pnl: float
    total_pnl_percentage: float
    holdings_count: int


class DashboardStats(BaseModel):
    portfolio_value: float
    total_investment: float
    total_gain: float
    gain_percentage: float
    available_balance: float
    total_holdings: int
    watchlist_count: int
    recent_transactions: List[Transaction]

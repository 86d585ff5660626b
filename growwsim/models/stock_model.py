# growwsim/models/stock_model.py
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel

from growwsim.models.transaction_model import Pagination


class Stock(BaseModel):
    symbol: str
    name: str
    price: float
    change: float
    change_percent: float
    market_cap: float  # crores
    sector: str
    pe: float
    logo: str = ""
    volume: int = 0
    high_52w: Optional[float] = None
    low_52w: Optional[float] = None
    dividend: Optional[float] = 0.0
    eps: Optional[float] = 0.0
    book_value: Optional[float] = None
    is_active: bool = True
    last_updated: Optional[datetime] = None


class StockPage(BaseModel):
    stocks: List[Stock]
    pagination: Pagination


class ChartPoint(BaseModel):
    date: str
    price: float
    open: float
    high: float
    low: float
    volume: int


class HistoryPoint(BaseModel):
    date: str
    price: float
    change: float
    change_percent: float
    volume: int


class Indicators(BaseModel):
    symbol: str
    sma: float
    vwap: float
    rsi: float
    period: int
    calculated_at: datetime


class MarketIndex(BaseModel):
    name: str
    value: float
    change: float
    change_percent: float

# growwsim/models/transaction_model.py
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel


class TransactionType(str, Enum):
    BUY = "BUY"
    SELL = "SELL"
    CREDIT = "CREDIT"
    DEBIT = "DEBIT"


class TransactionStatus(str, Enum):
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


class Fees(BaseModel):
    brokerage: float = 0.0
    stt: float = 0.0
    exchange_charges: float = 0.0
    gst: float = 0.0
    stamp_duty: float = 0.0
    total: float = 0.0


class Transaction(BaseModel):
    id: str
    user_id: str
    order_id: str
    type: TransactionType
    symbol: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None
    quantity: Optional[int] = None
    price: Optional[float] = None
    total: float
    fees: Optional[Fees] = None
    method: Optional[str] = None
    status: TransactionStatus = TransactionStatus.COMPLETED
    created_at: datetime


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int


class TransactionPage(BaseModel):
    transactions: List[Transaction]
    pagination: Pagination


class TypeStats(BaseModel):
    count: int
    total_amount: float
    total_fees: float


class TransactionStats(BaseModel):
    period: str
    stats: Dict[TransactionType, TypeStats]

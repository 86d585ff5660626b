# growwsim/models/wallet_model.py
from typing import List

from pydantic import BaseModel, Field

from growwsim.models.transaction_model import Transaction


class AddFundsRequest(BaseModel):
    amount: float = Field(..., gt=0)
    method: str = "UPI"
    description: str = "Funds Added"


class WithdrawRequest(BaseModel):
    amount: float = Field(..., gt=0)
    description: str = "Funds Withdrawn"


class WalletResponse(BaseModel):
    message: str
    transaction: Transaction
    new_balance: float


class WalletSummary(BaseModel):
    balance: float
    currency: str
    recent_transactions: List[Transaction]

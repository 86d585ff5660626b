# growwsim/routers/wallet.py
from fastapi import APIRouter, Depends
from motor.motor_asyncio import AsyncIOMotorDatabase

from growwsim.config import settings
from growwsim.database import get_db
from growwsim.models.transaction_model import TransactionType
from growwsim.models.wallet_model import (
    AddFundsRequest,
    WalletResponse,
    WalletSummary,
    WithdrawRequest,
)
from growwsim.services import wallet
from growwsim.services.ledger import recent_transactions
from growwsim.utils.auth import get_current_user

router = APIRouter()


@router.get("", response_model=WalletSummary)
async def get_wallet(
    current_user: dict = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    """Balance and the latest deposits and withdrawals."""
    transactions = await recent_transactions(
        db,
        current_user["_id"],
        limit=10,
        types=[TransactionType.CREDIT, TransactionType.DEBIT],
    )
    return {
        "balance": current_user["balance"],
        "currency": settings.BASE_CURRENCY,
        "recent_transactions": transactions,
    }


@router.post("/add-funds", response_model=WalletResponse)
async def add_funds(
    request: AddFundsRequest,
    current_user: dict = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    transaction, new_balance = await wallet.add_funds(
        db, current_user["_id"], request.amount, request.method, request.description
    )
    return {
        "message": "Funds added successfully",
        "transaction": transaction,
        "new_balance": new_balance,
    }


@router.post("/withdraw", response_model=WalletResponse)
async def withdraw(
    request: WithdrawRequest,
    current_user: dict = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    transaction, new_balance = await wallet.withdraw_funds(
        db, current_user["_id"], request.amount, request.description
    )
    return {
        "message": "Withdrawal processed successfully",
        "transaction": transaction,
        "new_balance": new_balance,
    }

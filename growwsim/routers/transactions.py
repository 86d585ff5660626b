# growwsim/routers/transactions.py
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query
from motor.motor_asyncio import AsyncIOMotorDatabase

from growwsim.database import TRANSACTIONS, get_db
from growwsim.models.transaction_model import (
    TransactionPage,
    TransactionStats,
    TransactionType,
)
from growwsim.services.ledger import transaction_stats
from growwsim.services.market_data import period_start
from growwsim.utils.auth import get_current_user
from growwsim.utils.helpers import paginate, serialize_mongo_doc

router = APIRouter()


@router.get("", response_model=TransactionPage)
async def list_transactions(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    type: Optional[TransactionType] = None,
    symbol: Optional[str] = None,
    current_user: dict = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    """Newest first. Optionally narrowed to one transaction type or symbol."""
    query = {"user_id": current_user["_id"]}
    if type:
        query["type"] = type.value
    if symbol:
        query["symbol"] = symbol.upper()

    transactions = (
        await db[TRANSACTIONS]
        .find(query)
        .sort([("created_at", -1), ("_id", -1)])
        .skip((page - 1) * limit)
        .limit(limit)
        .to_list(length=limit)
    )
    total = await db[TRANSACTIONS].count_documents(query)

    return {
        "transactions": [serialize_mongo_doc(t) for t in transactions],
        "pagination": paginate(page, limit, total),
    }


@router.get("/stats", response_model=TransactionStats)
async def get_transaction_stats(
    period: Literal["1D", "1W", "1M", "3M", "6M", "1Y"] = "1M",
    current_user: dict = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    stats = await transaction_stats(db, current_user["_id"], period_start(period))
    return {"period": period, "stats": stats}

# growwsim/services/ledger.py
from datetime import datetime
from typing import Optional

import pandas as pd
from motor.motor_asyncio import AsyncIOMotorDatabase

from growwsim.database import TRANSACTIONS
from growwsim.models.transaction_model import TransactionStatus, TransactionType
from growwsim.utils.helpers import generate_order_id, serialize_mongo_doc, utcnow


def compute_fees(total: float, tx_type: TransactionType) -> dict:
    """
    Brokerage and statutory charges for an equity delivery trade.
    STT applies on the sell side only, stamp duty on the buy side only.
    """
    is_buy = tx_type == TransactionType.BUY
    brokerage = min(total * 0.0003, 20)
    stt = 0.0 if is_buy else total * 0.001
    exchange_charges = total * 0.0000345
    gst = (brokerage + exchange_charges) * 0.18
    stamp_duty = total * 0.00003 if is_buy else 0.0

    return {
        "brokerage": round(brokerage, 2),
        "stt": round(stt, 2),
        "exchange_charges": round(exchange_charges, 2),
        "gst": round(gst, 2),
        "stamp_duty": round(stamp_duty, 2),
        "total": round(brokerage + stt + exchange_charges + gst + stamp_duty, 2),
    }


async def record_transaction(
    db: AsyncIOMotorDatabase,
    user_id,
    tx_type: TransactionType,
    total: float,
    description: str,
    symbol: Optional[str] = None,
    name: Optional[str] = None,
    quantity: Optional[int] = None,
    price: Optional[float] = None,
    method: Optional[str] = None,
) -> dict:
    """Append one entry to the ledger and return it serialized."""
    doc = {
        "user_id": user_id,
        "order_id": generate_order_id(),
        "type": tx_type.value,
        "symbol": symbol,
        "name": name,
        "description": description,
        "quantity": quantity,
        "price": price,
        "total": total,
        "fees": None,
        "method": method,
        "status": TransactionStatus.COMPLETED.value,
        "created_at": utcnow(),
    }
    if tx_type in (TransactionType.BUY, TransactionType.SELL):
        doc["fees"] = compute_fees(total, tx_type)

    result = await db[TRANSACTIONS].insert_one(doc)
    doc["_id"] = result.inserted_id
    return serialize_mongo_doc(doc)


async def recent_transactions(
    db: AsyncIOMotorDatabase, user_id, limit: int = 5, types: Optional[list] = None
) -> list:
    query = {"user_id": user_id}
    if types:
        query["type"] = {"$in": [t.value for t in types]}
    transactions = (
        await db[TRANSACTIONS]
        .find(query)
        .sort([("created_at", -1), ("_id", -1)])
        .limit(limit)
        .to_list(length=limit)
    )
    return [serialize_mongo_doc(t) for t in transactions]


async def transaction_stats(db: AsyncIOMotorDatabase, user_id, since: datetime) -> dict:
    """Count, total amount and total fees per transaction type since a date."""
    transactions = await db[TRANSACTIONS].find(
        {
            "user_id": user_id,
            "status": TransactionStatus.COMPLETED.value,
            "created_at": {"$gte": since},
        },
        {"type": 1, "total": 1, "fees": 1},
    ).to_list(length=None)
    if not transactions:
        return {}

    df = pd.DataFrame(transactions)
    df["fee_total"] = [
        fees.get("total", 0.0) if isinstance(fees, dict) else 0.0 for fees in df["fees"]
    ]
    grouped = df.groupby("type").agg(
        count=("total", "size"),
        total_amount=("total", "sum"),
        total_fees=("fee_total", "sum"),
    )
    return {
        tx_type: {
            "count": int(row["count"]),
            "total_amount": round(float(row["total_amount"]), 2),
            "total_fees": round(float(row["total_fees"]), 2),
        }
        for tx_type, row in grouped.iterrows()
    }

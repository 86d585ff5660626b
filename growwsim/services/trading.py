# growwsim/services/trading.py
"""
Buy and sell execution.

A trade touches three documents: the user's balance, the holding and the
ledger. Each step is a single-document atomic write; when a later step fails
the earlier ones are undone in reverse order before the error propagates.
"""
from typing import Optional, Tuple

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from growwsim.database import HOLDINGS
from growwsim.models.transaction_model import TransactionType
from growwsim.services.ledger import record_transaction
from growwsim.services.wallet import adjust_balance, compensate, debit_balance
from growwsim.utils.exceptions import InsufficientSharesError
from growwsim.utils.helpers import utcnow
from growwsim.utils.logger import logger

MAX_HOLDING_RETRIES = 5


class HoldingConflictError(Exception):
    """Raised when a holding keeps changing underneath an update."""


async def add_to_holding(
    db: AsyncIOMotorDatabase, user_id, symbol: str, name: str, quantity: int, price: float
) -> Tuple[Optional[dict], dict]:
    """
    Merge a purchase into the user's holding.

    Returns (before, after): the holding as read before the write (None when it
    was created) and the values written. The update only applies if the
    holding still has the quantity/avg_price that was read, so a concurrent
    buy forces a re-read instead of being overwritten.
    """
    total_cost = quantity * price
    for _ in range(MAX_HOLDING_RETRIES):
        existing = await db[HOLDINGS].find_one({"user_id": user_id, "symbol": symbol})
        now = utcnow()

        if existing is None:
            doc = {
                "user_id": user_id,
                "symbol": symbol,
                "name": name,
                "quantity": quantity,
                "avg_price": price,
                "purchase_date": now,
                "created_at": now,
                "updated_at": now,
            }
            try:
                result = await db[HOLDINGS].insert_one(doc)
            except DuplicateKeyError:
                continue
            doc["_id"] = result.inserted_id
            return None, doc

        total_quantity = existing["quantity"] + quantity
        avg_price = (
            existing["avg_price"] * existing["quantity"] + total_cost
        ) / total_quantity
        result = await db[HOLDINGS].update_one(
            {
                "_id": existing["_id"],
                "quantity": existing["quantity"],
                "avg_price": existing["avg_price"],
            },
            {
                "$set": {
                    "quantity": total_quantity,
                    "avg_price": avg_price,
                    "updated_at": now,
                }
            },
        )
        if result.matched_count == 1:
            return existing, {
                **existing,
                "quantity": total_quantity,
                "avg_price": avg_price,
            }

    raise HoldingConflictError(
        f"Holding {symbol} changed concurrently {MAX_HOLDING_RETRIES} times"
    )


async def undo_holding_purchase(
    db: AsyncIOMotorDatabase, before: Optional[dict], written: dict, quantity: int, price: float
):
    """Take a purchase back out of a holding written by add_to_holding."""
    if before is None:
        result = await db[HOLDINGS].delete_one(
            {"_id": written["_id"], "quantity": written["quantity"]}
        )
        if result.deleted_count == 1:
            return
    else:
        result = await db[HOLDINGS].update_one(
            {
                "_id": written["_id"],
                "quantity": written["quantity"],
                "avg_price": written["avg_price"],
            },
            {
                "$set": {
                    "quantity": before["quantity"],
                    "avg_price": before["avg_price"],
                    "updated_at": utcnow(),
                }
            },
        )
        if result.matched_count == 1:
            return

    # The holding moved on since our write; back the purchase out arithmetically.
    for _ in range(MAX_HOLDING_RETRIES):
        current = await db[HOLDINGS].find_one({"_id": written["_id"]})
        if current is None:
            return
        remaining = current["quantity"] - quantity
        if remaining <= 0:
            await db[HOLDINGS].delete_one({"_id": current["_id"]})
            return
        avg_price = (
            current["avg_price"] * current["quantity"] - quantity * price
        ) / remaining
        result = await db[HOLDINGS].update_one(
            {"_id": current["_id"], "quantity": current["quantity"]},
            {"$set": {"quantity": remaining, "avg_price": avg_price, "updated_at": utcnow()}},
        )
        if result.matched_count == 1:
            return
    raise HoldingConflictError(f"Could not back out purchase of {written['symbol']}")


async def restore_sold_shares(
    db: AsyncIOMotorDatabase, holding: dict, quantity: int, deleted: bool
):
    """Give sold shares back to a holding after a failed sale."""
    if deleted:
        restored = {**holding, "quantity": quantity, "updated_at": utcnow()}
        try:
            await db[HOLDINGS].insert_one(restored)
            return
        except DuplicateKeyError:
            # a new holding for the symbol was opened in between
            await db[HOLDINGS].update_one(
                {"user_id": holding["user_id"], "symbol": holding["symbol"]},
                {"$inc": {"quantity": quantity}, "$set": {"updated_at": utcnow()}},
            )
            return

    await db[HOLDINGS].update_one(
        {"_id": holding["_id"]},
        {"$inc": {"quantity": quantity}, "$set": {"updated_at": utcnow()}},
    )


async def execute_buy(
    db: AsyncIOMotorDatabase, user_id, symbol: str, name: str, quantity: int, price: float
):
    """Buy quantity shares of symbol at price. Returns (transaction, new_balance)."""
    total_cost = quantity * price

    user = await debit_balance(db, user_id, total_cost)

    try:
        before, written = await add_to_holding(db, user_id, symbol, name, quantity, price)
    except Exception as e:
        logger.error(f"Holding update failed while buying {symbol} for {user_id}: {e}")
        await compensate(
            f"refund {total_cost} to {user_id}",
            adjust_balance(db, user_id, total_cost),
        )
        raise

    try:
        transaction = await record_transaction(
            db,
            user_id,
            TransactionType.BUY,
            total=total_cost,
            description=f"Stock Purchase - {symbol}",
            symbol=symbol,
            name=name,
            quantity=quantity,
            price=price,
        )
    except Exception as e:
        logger.error(f"Ledger write failed while buying {symbol} for {user_id}: {e}")
        await compensate(
            f"undo purchase of {quantity} {symbol} for {user_id}",
            undo_holding_purchase(db, before, written, quantity, price),
        )
        await compensate(
            f"refund {total_cost} to {user_id}",
            adjust_balance(db, user_id, total_cost),
        )
        raise

    logger.info(f"User {user_id} bought {quantity} {symbol} at {price} (total {total_cost})")
    return transaction, user["balance"]


async def execute_sell(
    db: AsyncIOMotorDatabase, user_id, symbol: str, quantity: int, price: float
):
    """Sell quantity shares of symbol at price. Returns (transaction, new_balance)."""
    total_revenue = quantity * price

    holding = await db[HOLDINGS].find_one_and_update(
        {"user_id": user_id, "symbol": symbol, "quantity": {"$gte": quantity}},
        {"$inc": {"quantity": -quantity}, "$set": {"updated_at": utcnow()}},
        return_document=ReturnDocument.AFTER,
    )
    if holding is None:
        raise InsufficientSharesError()

    deleted = False
    if holding["quantity"] == 0:
        result = await db[HOLDINGS].delete_one({"_id": holding["_id"], "quantity": 0})
        deleted = result.deleted_count == 1

    try:
        user = await adjust_balance(db, user_id, total_revenue)
    except Exception as e:
        logger.error(f"Balance credit failed while selling {symbol} for {user_id}: {e}")
        await compensate(
            f"return {quantity} {symbol} to {user_id}",
            restore_sold_shares(db, holding, quantity, deleted),
        )
        raise

    try:
        transaction = await record_transaction(
            db,
            user_id,
            TransactionType.SELL,
            total=total_revenue,
            description=f"Stock Sale - {symbol}",
            symbol=symbol,
            name=holding["name"],
            quantity=quantity,
            price=price,
        )
    except Exception as e:
        logger.error(f"Ledger write failed while selling {symbol} for {user_id}: {e}")
        await compensate(
            f"reverse credit of {total_revenue} for {user_id}",
            adjust_balance(db, user_id, -total_revenue),
        )
        await compensate(
            f"return {quantity} {symbol} to {user_id}",
            restore_sold_shares(db, holding, quantity, deleted),
        )
        raise

    logger.info(f"User {user_id} sold {quantity} {symbol} at {price} (total {total_revenue})")
    return transaction, user["balance"]

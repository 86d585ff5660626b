# growwsim/services/wallet.py
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument

from growwsim.database import USERS
from growwsim.models.transaction_model import TransactionType
from growwsim.services.ledger import record_transaction
from growwsim.utils.exceptions import InsufficientBalanceError, NotFoundError
from growwsim.utils.helpers import utcnow
from growwsim.utils.logger import logger


async def adjust_balance(db: AsyncIOMotorDatabase, user_id, delta: float) -> dict:
    """Unconditionally move the balance by delta and return the updated user."""
    user = await db[USERS].find_one_and_update(
        {"_id": user_id},
        {"$inc": {"balance": delta}, "$set": {"updated_at": utcnow()}},
        return_document=ReturnDocument.AFTER,
    )
    if user is None:
        raise NotFoundError("User not found")
    return user


async def debit_balance(db: AsyncIOMotorDatabase, user_id, amount: float) -> dict:
    """
    Atomically take amount from the balance, only if the balance covers it.
    Raises InsufficientBalanceError otherwise, leaving the balance untouched.
    """
    user = await db[USERS].find_one_and_update(
        {"_id": user_id, "balance": {"$gte": amount}},
        {"$inc": {"balance": -amount}, "$set": {"updated_at": utcnow()}},
        return_document=ReturnDocument.AFTER,
    )
    if user is None:
        if await db[USERS].find_one({"_id": user_id}, {"_id": 1}) is None:
            raise NotFoundError("User not found")
        raise InsufficientBalanceError()
    return user


async def compensate(action: str, coro):
    """Run a compensating write; failures are logged, never raised."""
    try:
        await coro
        logger.warning(f"Compensation applied: {action}")
    except Exception as e:
        logger.error(f"Compensation failed ({action}): {e}", exc_info=True)


async def add_funds(
    db: AsyncIOMotorDatabase, user_id, amount: float, method: str, description: str
):
    user = await adjust_balance(db, user_id, amount)
    try:
        transaction = await record_transaction(
            db,
            user_id,
            TransactionType.CREDIT,
            total=amount,
            description=description,
            method=method,
        )
    except Exception:
        logger.error(f"Ledger write failed while crediting {amount} to {user_id}")
        await compensate(
            f"reverse credit of {amount} for {user_id}",
            adjust_balance(db, user_id, -amount),
        )
        raise

    logger.info(f"Credited {amount} to {user_id} via {method}")
    return transaction, user["balance"]


async def withdraw_funds(
    db: AsyncIOMotorDatabase, user_id, amount: float, description: str
):
    user = await debit_balance(db, user_id, amount)
    try:
        transaction = await record_transaction(
            db,
            user_id,
            TransactionType.DEBIT,
            total=amount,
            description=description,
        )
    except Exception:
        logger.error(f"Ledger write failed while debiting {amount} from {user_id}")
        await compensate(
            f"refund withdrawal of {amount} for {user_id}",
            adjust_balance(db, user_id, amount),
        )
        raise

    logger.info(f"Debited {amount} from {user_id}")
    return transaction, user["balance"]

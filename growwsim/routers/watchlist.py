# growwsim/routers/watchlist.py
from typing import List

from fastapi import APIRouter, Depends
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError

from growwsim.database import WATCHLISTS, get_db
from growwsim.models.watchlist_model import WatchlistCreate, WatchlistItem
from growwsim.utils.auth import get_current_user
from growwsim.utils.exceptions import DuplicateEntryError, NotFoundError
from growwsim.utils.helpers import serialize_mongo_doc, utcnow
from growwsim.utils.logger import logger

router = APIRouter()


@router.get("", response_model=List[WatchlistItem])
async def get_watchlist(
    current_user: dict = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    items = (
        await db[WATCHLISTS]
        .find({"user_id": current_user["_id"]})
        .sort([("added_date", -1), ("_id", -1)])
        .to_list(length=None)
    )
    return [serialize_mongo_doc(item) for item in items]


@router.post("", response_model=WatchlistItem)
async def add_to_watchlist(
    item: WatchlistCreate,
    current_user: dict = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    existing = await db[WATCHLISTS].find_one(
        {"user_id": current_user["_id"], "symbol": item.symbol}
    )
    if existing:
        raise DuplicateEntryError("Stock already in watchlist")

    doc = {
        "user_id": current_user["_id"],
        "symbol": item.symbol,
        "name": item.name,
        "added_date": utcnow(),
    }
    try:
        result = await db[WATCHLISTS].insert_one(doc)
    except DuplicateKeyError:
        raise DuplicateEntryError("Stock already in watchlist")

    doc["_id"] = result.inserted_id
    logger.info(f"User {current_user['email']} is watching {item.symbol}")
    return serialize_mongo_doc(doc)


@router.delete("/{symbol}")
async def remove_from_watchlist(
    symbol: str,
    current_user: dict = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    result = await db[WATCHLISTS].delete_one(
        {"user_id": current_user["_id"], "symbol": symbol.upper()}
    )
    if result.deleted_count == 0:
        raise NotFoundError("Stock not in watchlist")
    return {"message": "Stock removed from watchlist"}

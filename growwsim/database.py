# growwsim/database.py
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING

from growwsim.config import settings
from growwsim.utils.logger import logger

USERS = "users"
STOCKS = "stocks"
HOLDINGS = "portfolios"
TRANSACTIONS = "transactions"
WATCHLISTS = "watchlists"
MARKET_DATA = "market_data"

client: Optional[AsyncIOMotorClient] = None
db: Optional[AsyncIOMotorDatabase] = None


def get_db() -> AsyncIOMotorDatabase:
    """Return the shared database handle, creating the client on first use."""
    global client, db
    if db is None:
        client = AsyncIOMotorClient(
            settings.MONGO_URI, serverSelectionTimeoutMS=settings.MONGO_TIMEOUT_MS
        )
        db = client[settings.MONGO_DB]
    return db


async def init_db(database: AsyncIOMotorDatabase):
    """Initialize database indexes"""
    await database[USERS].create_index("email", unique=True)
    await database[USERS].create_index("created_at")

    await database[STOCKS].create_index("symbol", unique=True)
    await database[STOCKS].create_index("sector")
    await database[STOCKS].create_index([("change_percent", DESCENDING)])
    await database[STOCKS].create_index([("volume", DESCENDING)])

    await database[HOLDINGS].create_index(
        [("user_id", ASCENDING), ("symbol", ASCENDING)], unique=True
    )

    await database[TRANSACTIONS].create_index(
        [("user_id", ASCENDING), ("created_at", DESCENDING)]
    )
    await database[TRANSACTIONS].create_index("order_id", unique=True)

    await database[WATCHLISTS].create_index(
        [("user_id", ASCENDING), ("symbol", ASCENDING)], unique=True
    )

    await database[MARKET_DATA].create_index(
        [("symbol", ASCENDING), ("date", DESCENDING)], unique=True
    )

    logger.info("Database indexes created successfully")


def close_db():
    global client, db
    if client is not None:
        client.close()
    client = None
    db = None

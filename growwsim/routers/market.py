from typing import List, Literal

from fastapi import APIRouter, Depends, Query
from motor.motor_asyncio import AsyncIOMotorDatabase

from growwsim.database import STOCKS, get_db
from growwsim.models.stock_model import MarketIndex, Stock

router = APIRouter()

INDICES = [
    {"name": "NIFTY 50", "value": 19865.20, "change": 245.30, "change_percent": 1.25},
    {"name": "SENSEX", "value": 66589.93, "change": 503.27, "change_percent": 0.76},
    {"name": "NIFTY BANK", "value": 44732.85, "change": -123.45, "change_percent": -0.28},
    {"name": "NIFTY IT", "value": 30456.70, "change": 892.15, "change_percent": 3.02},
]

TRENDING_SORT = {
    "gainers": ("change_percent", -1),
    "losers": ("change_percent", 1),
    "volume": ("volume", -1),
}


@router.get("/indices", response_model=List[MarketIndex])
async def get_indices():
    """
    Snapshot of the headline indices. Index levels are not simulated, so this
    is a fixed reference set.
    """
    return INDICES


@router.get("/trending", response_model=List[Stock])
async def get_trending(
    type: Literal["gainers", "losers", "volume"] = "gainers",
    limit: int = Query(10, ge=1, le=50),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    """Whole catalog ranked by day change or by volume."""
    field, direction = TRENDING_SORT[type]
    return (
        await db[STOCKS]
        .find({"is_active": True})
        .sort([(field, direction), ("symbol", 1)])
        .limit(limit)
        .to_list(length=limit)
    )

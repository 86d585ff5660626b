# growwsim/routers/stocks.py
import re
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, Query
from motor.motor_asyncio import AsyncIOMotorDatabase

from growwsim.database import STOCKS, get_db
from growwsim.models.stock_model import (
    ChartPoint,
    HistoryPoint,
    Indicators,
    Stock,
    StockPage,
)
from growwsim.services import market_data
from growwsim.utils.exceptions import NotFoundError
from growwsim.utils.helpers import paginate

router = APIRouter()

SORT_FIELDS = {
    "name": "name",
    "price": "price",
    "change": "change_percent",
    "volume": "volume",
    "market_cap": "market_cap",
    "pe": "pe",
}


def _text_filter(text: str) -> dict:
    pattern = {"$regex": re.escape(text), "$options": "i"}
    return {"$or": [{"name": pattern}, {"symbol": pattern}]}


async def _get_stock_or_404(db: AsyncIOMotorDatabase, symbol: str) -> dict:
    stock = await db[STOCKS].find_one({"symbol": symbol.upper()})
    if not stock:
        raise NotFoundError("Stock not found")
    return stock


@router.get("", response_model=StockPage)
async def list_stocks(
    search: Optional[str] = None,
    sector: Optional[str] = None,
    min_price: Optional[float] = Query(None, ge=0),
    max_price: Optional[float] = Query(None, ge=0),
    sort_by: Literal["name", "price", "change", "volume", "market_cap", "pe"] = "name",
    order: Literal["asc", "desc"] = "asc",
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    """Filter, sort and page through the active catalog."""
    query = {"is_active": True}
    if search:
        query.update(_text_filter(search))
    if sector and sector != "All":
        query["sector"] = sector

    price_range = {}
    if min_price is not None:
        price_range["$gte"] = min_price
    if max_price is not None:
        price_range["$lte"] = max_price
    if price_range:
        query["price"] = price_range

    direction = 1 if order == "asc" else -1
    stocks = (
        await db[STOCKS]
        .find(query)
        .sort([(SORT_FIELDS[sort_by], direction), ("symbol", 1)])
        .skip((page - 1) * limit)
        .limit(limit)
        .to_list(length=limit)
    )
    total = await db[STOCKS].count_documents(query)

    return {"stocks": stocks, "pagination": paginate(page, limit, total)}


@router.get("/search/{query}", response_model=List[Stock])
async def search_stocks(
    query: str,
    limit: int = Query(10, ge=1, le=50),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    return (
        await db[STOCKS]
        .find({"is_active": True, **_text_filter(query)})
        .sort("symbol", 1)
        .limit(limit)
        .to_list(length=limit)
    )


@router.get("/meta/sectors", response_model=List[str])
async def list_sectors(db: AsyncIOMotorDatabase = Depends(get_db)):
    sectors = await db[STOCKS].distinct("sector", {"is_active": True})
    return sorted(sectors)


@router.get("/trending/{kind}", response_model=List[Stock])
async def trending_stocks(
    kind: Literal["gainers", "losers", "active"],
    limit: int = Query(10, ge=1, le=50),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    return await market_data.get_trending(db, kind, limit)


@router.get("/{symbol}", response_model=Stock)
async def get_stock(symbol: str, db: AsyncIOMotorDatabase = Depends(get_db)):
    stock = await _get_stock_or_404(db, symbol)
    high_low = await market_data.get_high_low_52_week(db, stock["symbol"])
    if high_low:
        stock.update(high_low)
    return stock


@router.get("/{symbol}/chart", response_model=List[ChartPoint])
async def get_stock_chart(
    symbol: str,
    period: Literal["1D", "1W", "1M", "3M", "6M", "1Y", "2Y", "5Y"] = "1M",
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    chart = await market_data.get_chart_data(db, symbol, period)
    if not chart:
        raise NotFoundError("No chart data found")
    return chart


@router.get("/{symbol}/history", response_model=List[HistoryPoint])
async def get_stock_history(
    symbol: str,
    days: int = Query(30, ge=1, le=1825),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    await _get_stock_or_404(db, symbol)
    return await market_data.get_price_history(db, symbol, days)


@router.get("/{symbol}/indicators", response_model=Indicators)
async def get_stock_indicators(
    symbol: str,
    period: int = Query(20, ge=2, le=200),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    await _get_stock_or_404(db, symbol)
    indicators = await market_data.get_technical_indicators(db, symbol, period)
    if indicators is None:
        raise NotFoundError("Insufficient data for technical indicators")
    return indicators

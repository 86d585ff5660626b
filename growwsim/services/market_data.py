# growwsim/services/market_data.py
import random
from datetime import datetime, timedelta
from typing import List, Optional

import pandas as pd
from motor.motor_asyncio import AsyncIOMotorDatabase

from growwsim.database import MARKET_DATA, STOCKS
from growwsim.utils.helpers import utcnow
from growwsim.utils.logger import logger

PERIOD_OFFSETS = {
    "1D": pd.DateOffset(days=1),
    "1W": pd.DateOffset(weeks=1),
    "1M": pd.DateOffset(months=1),
    "3M": pd.DateOffset(months=3),
    "6M": pd.DateOffset(months=6),
    "1Y": pd.DateOffset(years=1),
    "2Y": pd.DateOffset(years=2),
    "5Y": pd.DateOffset(years=5),
}


def period_start(period: str, now: Optional[datetime] = None) -> datetime:
    now = now or utcnow()
    return (pd.Timestamp(now) - PERIOD_OFFSETS[period]).to_pydatetime()


async def candles_between(
    db: AsyncIOMotorDatabase, symbol: str, start: datetime, end: datetime
) -> List[dict]:
    return (
        await db[MARKET_DATA]
        .find({"symbol": symbol.upper(), "date": {"$gte": start, "$lte": end}})
        .sort("date", 1)
        .to_list(length=None)
    )


async def get_chart_data(db: AsyncIOMotorDatabase, symbol: str, period: str = "1M") -> list:
    now = utcnow()
    candles = await candles_between(db, symbol, period_start(period, now), now)
    return [
        {
            "date": c["date"].strftime("%Y-%m-%d"),
            "price": c["close"],
            "open": c["open"],
            "high": c["high"],
            "low": c["low"],
            "volume": c["volume"],
        }
        for c in candles
    ]


async def get_price_history(db: AsyncIOMotorDatabase, symbol: str, days: int = 30) -> list:
    now = utcnow()
    candles = await candles_between(db, symbol, now - timedelta(days=days), now)
    history = []
    for c in candles:
        change = c["close"] - c["open"]
        history.append(
            {
                "date": c["date"].strftime("%Y-%m-%d"),
                "price": c["close"],
                "change": round(change, 2),
                "change_percent": round(change / c["open"] * 100, 2) if c["open"] else 0.0,
                "volume": c["volume"],
            }
        )
    return history


async def get_high_low_52_week(db: AsyncIOMotorDatabase, symbol: str) -> Optional[dict]:
    now = utcnow()
    candles = await candles_between(db, symbol, period_start("1Y", now), now)
    if not candles:
        return None
    df = pd.DataFrame(candles)
    return {"high_52w": float(df["high"].max()), "low_52w": float(df["low"].min())}


def compute_indicators(candles: List[dict], period: int = 20) -> Optional[dict]:
    """
    SMA, VWAP and a simplified RSI over the trailing `period` candles.

    `candles` must be sorted oldest first. Returns None when there are fewer
    than `period` candles.
    """
    if period < 1 or len(candles) < period:
        return None

    df = pd.DataFrame(candles)
    window = df.tail(period)

    sma = float(window["close"].mean())

    total_volume = float(window["volume"].sum())
    if total_volume > 0:
        vwap = float((window["close"] * window["volume"]).sum()) / total_volume
    else:
        vwap = sma

    deltas = df["close"].diff().dropna().tail(period)
    gains = float(deltas.clip(lower=0).sum())
    losses = float(-deltas.clip(upper=0).sum())
    avg_gain = gains / period
    avg_loss = losses / period
    rs = 100 if avg_loss == 0 else avg_gain / avg_loss
    rsi = 100 - (100 / (1 + rs))

    return {
        "sma": round(sma, 2),
        "vwap": round(vwap, 2),
        "rsi": round(rsi, 2),
        "period": period,
    }


async def get_technical_indicators(
    db: AsyncIOMotorDatabase, symbol: str, period: int = 20
) -> Optional[dict]:
    candles = (
        await db[MARKET_DATA]
        .find({"symbol": symbol.upper()})
        .sort("date", -1)
        .limit(period + 20)
        .to_list(length=period + 20)
    )
    indicators = compute_indicators(list(reversed(candles)), period)
    if indicators is None:
        return None
    return {"symbol": symbol.upper(), **indicators, "calculated_at": utcnow()}


def generate_chart_data(
    symbol: str, base_price: float, days: int = 365, rng: Optional[random.Random] = None
) -> List[dict]:
    """
    Random-walk daily candles ending today. The walk never drops below 70%
    of the base price.
    """
    rng = rng or random.Random()
    end = pd.Timestamp(utcnow()).normalize()
    dates = pd.date_range(end=end, periods=days + 1, freq="D")

    data = []
    price = base_price
    for date in dates:
        change = (rng.random() - 0.5) * base_price * 0.03
        price = max(price + change, base_price * 0.7)

        open_ = price
        high = price * (1 + rng.random() * 0.02)
        low = price * (1 - rng.random() * 0.02)
        close = low + rng.random() * (high - low)
        volume = rng.randint(100_000, 1_100_000)

        data.append(
            {
                "symbol": symbol,
                "date": date.to_pydatetime(),
                "open": round(open_, 2),
                "high": round(high, 2),
                "low": round(low, 2),
                "close": round(close, 2),
                "volume": volume,
            }
        )
        price = close
    return data


def apply_price_update(stock: dict, new_price: float, now: Optional[datetime] = None) -> dict:
    """Fields to $set on a stock document when its price moves to new_price."""
    old_price = stock["price"]
    change = new_price - old_price
    return {
        "price": new_price,
        "change": round(change, 2),
        "change_percent": round(change / old_price * 100, 2) if old_price else 0.0,
        "last_updated": now or utcnow(),
    }


async def record_tick(
    db: AsyncIOMotorDatabase, symbol: str, old_price: float, new_price: float, volume: int, now: datetime
):
    """Fold a price tick into today's candle for symbol."""
    day = datetime(now.year, now.month, now.day)
    candle = await db[MARKET_DATA].find_one({"symbol": symbol, "date": day})
    if candle is None:
        await db[MARKET_DATA].insert_one(
            {
                "symbol": symbol,
                "date": day,
                "open": old_price,
                "high": max(old_price, new_price),
                "low": min(old_price, new_price),
                "close": new_price,
                "volume": volume,
            }
        )
        return

    await db[MARKET_DATA].update_one(
        {"_id": candle["_id"]},
        {
            "$set": {
                "high": max(candle["high"], new_price),
                "low": min(candle["low"], new_price),
                "close": new_price,
            },
            "$inc": {"volume": volume},
        },
    )


async def simulate_market_tick(
    db: AsyncIOMotorDatabase, rng: Optional[random.Random] = None, max_move: float = 0.01
) -> int:
    """Move every active stock by a bounded random step. Returns the number moved."""
    rng = rng or random.Random()
    now = utcnow()
    stocks = await db[STOCKS].find({"is_active": True}).to_list(length=None)

    for stock in stocks:
        step = rng.uniform(-max_move, max_move)
        new_price = max(round(stock["price"] * (1 + step), 2), 0.01)
        volume = rng.randint(1_000, 50_000)

        update = apply_price_update(stock, new_price, now)
        await db[STOCKS].update_one(
            {"_id": stock["_id"]}, {"$set": update, "$inc": {"volume": volume}}
        )
        await record_tick(db, stock["symbol"], stock["price"], new_price, volume, now)

    logger.info(f"Market tick applied to {len(stocks)} stocks")
    return len(stocks)


TRENDING_QUERIES = {
    "gainers": ({"change_percent": {"$gt": 0}}, ("change_percent", -1)),
    "losers": ({"change_percent": {"$lt": 0}}, ("change_percent", 1)),
    "active": ({}, ("volume", -1)),
}


async def get_trending(db: AsyncIOMotorDatabase, kind: str, limit: int = 10) -> list:
    criteria, (field, direction) = TRENDING_QUERIES[kind]
    return (
        await db[STOCKS]
        .find({"is_active": True, **criteria})
        .sort([(field, direction), ("symbol", 1)])
        .limit(limit)
        .to_list(length=limit)
    )

# growwsim/services/portfolio.py
from motor.motor_asyncio import AsyncIOMotorDatabase

from growwsim.database import HOLDINGS, STOCKS, WATCHLISTS
from growwsim.services.ledger import recent_transactions
from growwsim.utils.helpers import serialize_mongo_doc


async def list_holdings(db: AsyncIOMotorDatabase, user_id) -> list:
    holdings = (
        await db[HOLDINGS]
        .find({"user_id": user_id, "quantity": {"$gt": 0}})
        .sort("created_at", -1)
        .to_list(length=None)
    )
    return [serialize_mongo_doc(h) for h in holdings]


async def current_prices(db: AsyncIOMotorDatabase, symbols) -> dict:
    stocks = await db[STOCKS].find(
        {"symbol": {"$in": list(symbols)}}, {"symbol": 1, "price": 1}
    ).to_list(length=None)
    return {s["symbol"]: s["price"] for s in stocks}


def value_holdings(holdings: list, prices: dict) -> dict:
    """
    Mark holdings to market. A holding whose stock is not in the catalog is
    valued at its average price.
    """
    rows = []
    total_invested = 0.0
    current_value = 0.0
    for h in holdings:
        invested = h["quantity"] * h["avg_price"]
        price = prices.get(h["symbol"], h["avg_price"])
        value = h["quantity"] * price
        pnl = value - invested
        rows.append(
            {
                "symbol": h["symbol"],
                "name": h["name"],
                "quantity": h["quantity"],
                "avg_price": h["avg_price"],
                "current_price": price,
                "total_invested": invested,
                "current_value": value,
                "pnl": pnl,
                "pnl_percentage": (pnl / invested) * 100 if invested else 0.0,
            }
        )
        total_invested += invested
        current_value += value

    total_pnl = current_value - total_invested
    return {
        "holdings": rows,
        "total_invested": total_invested,
        "current_value": current_value,
        "total_pnl": total_pnl,
        "total_pnl_percentage": (total_pnl / total_invested) * 100 if total_invested else 0.0,
        "holdings_count": len(rows),
    }


async def dashboard_stats(db: AsyncIOMotorDatabase, user: dict) -> dict:
    user_id = user["_id"]
    holdings = await db[HOLDINGS].find({"user_id": user_id}).to_list(length=None)
    prices = await current_prices(db, {h["symbol"] for h in holdings})

    # only holdings with a known market price count towards the totals
    portfolio_value = 0.0
    total_investment = 0.0
    for h in holdings:
        if h["symbol"] in prices:
            portfolio_value += prices[h["symbol"]] * h["quantity"]
            total_investment += h["avg_price"] * h["quantity"]

    total_gain = portfolio_value - total_investment
    recent = await recent_transactions(db, user_id, limit=5)
    watchlist_count = await db[WATCHLISTS].count_documents({"user_id": user_id})

    return {
        "portfolio_value": portfolio_value,
        "total_investment": total_investment,
        "total_gain": total_gain,
        "gain_percentage": (total_gain / total_investment) * 100 if total_investment else 0.0,
        "available_balance": user["balance"],
        "total_holdings": len(holdings),
        "watchlist_count": watchlist_count,
        "recent_transactions": recent,
    }

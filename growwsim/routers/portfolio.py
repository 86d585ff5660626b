# growwsim/routers/portfolio.py
from typing import List

from fastapi import APIRouter, Depends
from motor.motor_asyncio import AsyncIOMotorDatabase

from growwsim.database import get_db
from growwsim.models.portfolio_model import (
    BuyRequest,
    Holding,
    PortfolioSummary,
    SellRequest,
    TradeResponse,
)
from growwsim.services import portfolio, trading
from growwsim.utils.auth import get_current_user

router = APIRouter()


@router.get("", response_model=List[Holding])
async def get_portfolio(
    current_user: dict = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    return await portfolio.list_holdings(db, current_user["_id"])


@router.get("/summary", response_model=PortfolioSummary)
async def get_portfolio_summary(
    current_user: dict = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    """Holdings marked to the current catalog price, with P&L."""
    holdings = await portfolio.list_holdings(db, current_user["_id"])
    prices = await portfolio.current_prices(db, {h["symbol"] for h in holdings})
    return portfolio.value_holdings(holdings, prices)


@router.post("/buy", response_model=TradeResponse)
async def buy_stock(
    order: BuyRequest,
    current_user: dict = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    transaction, new_balance = await trading.execute_buy(
        db, current_user["_id"], order.symbol, order.name, order.quantity, order.price
    )
    return {
        "message": "Stock purchased successfully",
        "transaction": transaction,
        "new_balance": new_balance,
    }


@router.post("/sell", response_model=TradeResponse)
async def sell_stock(
    order: SellRequest,
    current_user: dict = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    transaction, new_balance = await trading.execute_sell(
        db, current_user["_id"], order.symbol, order.quantity, order.price
    )
    return {
        "message": "Stock sold successfully",
        "transaction": transaction,
        "new_balance": new_balance,
    }

# growwsim/seed.py
"""
Populate the stock catalog and a generated daily price history.

    growwsim-seed            # reseed everything with a year of candles
    growwsim-seed --days 90
"""
import argparse
import asyncio
import random
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from growwsim.config import settings
from growwsim.database import MARKET_DATA, STOCKS, get_db, init_db
from growwsim.services.market_data import generate_chart_data
from growwsim.utils.helpers import utcnow
from growwsim.utils.logger import logger

# market_cap in crores
SAMPLE_STOCKS = [
    {"symbol": "RELIANCE", "name": "Reliance Industries Ltd", "price": 2450.50, "change": 45.30, "change_percent": 1.88, "market_cap": 1658000, "sector": "Oil & Gas", "pe": 24.5, "logo": "https://logo.clearbit.com/ril.com", "volume": 2500000, "high_52w": 2856.15, "low_52w": 2220.30, "dividend": 8.0, "eps": 99.85, "book_value": 1456.20},
    {"symbol": "TCS", "name": "Tata Consultancy Services", "price": 3650.75, "change": -25.80, "change_percent": -0.70, "market_cap": 1332000, "sector": "IT Services", "pe": 28.3, "logo": "https://logo.clearbit.com/tcs.com", "volume": 1800000, "high_52w": 4043.90, "low_52w": 3056.65, "dividend": 22.0, "eps": 129.05, "book_value": 456.80},
    {"symbol": "INFY", "name": "Infosys Limited", "price": 1420.30, "change": 18.45, "change_percent": 1.32, "market_cap": 589000, "sector": "IT Services", "pe": 25.8, "logo": "https://logo.clearbit.com/infosys.com", "volume": 3200000, "high_52w": 1729.05, "low_52w": 1234.50, "dividend": 17.0, "eps": 55.12, "book_value": 312.45},
    {"symbol": "HDFCBANK", "name": "HDFC Bank Limited", "price": 1580.90, "change": 12.60, "change_percent": 0.80, "market_cap": 875000, "sector": "Banking", "pe": 18.5, "logo": "https://logo.clearbit.com/hdfcbank.com", "volume": 2100000, "high_52w": 1725.00, "low_52w": 1363.55, "dividend": 19.0, "eps": 85.40, "book_value": 456.78},
    {"symbol": "ICICIBANK", "name": "ICICI Bank Limited", "price": 945.25, "change": -8.75, "change_percent": -0.92, "market_cap": 658000, "sector": "Banking", "pe": 16.2, "logo": "https://logo.clearbit.com/icicibank.com", "volume": 4500000, "high_52w": 1036.40, "low_52w": 756.25, "dividend": 5.0, "eps": 58.35, "book_value": 234.56},
    {"symbol": "BHARTIARTL", "name": "Bharti Airtel Limited", "price": 865.40, "change": 22.15, "change_percent": 2.63, "market_cap": 489000, "sector": "Telecom", "pe": 32.1, "logo": "https://logo.clearbit.com/airtel.in", "volume": 1900000, "high_52w": 938.40, "low_52w": 695.50, "dividend": 2.75, "eps": 26.95, "book_value": 156.78},
    {"symbol": "ITC", "name": "ITC Limited", "price": 425.80, "change": 5.30, "change_percent": 1.26, "market_cap": 528000, "sector": "FMCG", "pe": 22.8, "logo": "https://logo.clearbit.com/itcportal.com", "volume": 3800000, "high_52w": 462.35, "low_52w": 385.60, "dividend": 10.75, "eps": 18.65, "book_value": 189.45},
    {"symbol": "HCLTECH", "name": "HCL Technologies Limited", "price": 1245.60, "change": -15.40, "change_percent": -1.22, "market_cap": 338000, "sector": "IT Services", "pe": 21.5, "logo": "https://logo.clearbit.com/hcltech.com", "volume": 1600000, "high_52w": 1356.90, "low_52w": 1055.25, "dividend": 18.0, "eps": 57.85, "book_value": 245.67},
    {"symbol": "WIPRO", "name": "Wipro Limited", "price": 485.25, "change": 8.90, "change_percent": 1.87, "market_cap": 265000, "sector": "IT Services", "pe": 24.3, "logo": "https://logo.clearbit.com/wipro.com", "volume": 2200000, "high_52w": 567.80, "low_52w": 385.50, "dividend": 5.0, "eps": 19.95, "book_value": 178.90},
    {"symbol": "MARUTI", "name": "Maruti Suzuki India Limited", "price": 9850.30, "change": 125.70, "change_percent": 1.29, "market_cap": 298000, "sector": "Automobile", "pe": 28.9, "logo": "https://logo.clearbit.com/marutisuzuki.com", "volume": 450000, "high_52w": 11235.00, "low_52w": 8756.25, "dividend": 60.0, "eps": 340.85, "book_value": 2456.78},
    {"symbol": "SBIN", "name": "State Bank of India", "price": 623.75, "change": -15.40, "change_percent": -2.41, "market_cap": 556789, "sector": "Banking", "pe": 12.3, "logo": "https://logo.clearbit.com/sbi.co.in", "volume": 5200000, "high_52w": 660.40, "low_52w": 499.35, "dividend": 11.3, "eps": 50.71, "book_value": 351.60},
    {"symbol": "ASIANPAINT", "name": "Asian Paints Ltd", "price": 3234.50, "change": -89.60, "change_percent": -2.70, "market_cap": 310987, "sector": "Paints", "pe": 67.4, "logo": "https://logo.clearbit.com/asianpaints.com", "volume": 900000, "high_52w": 3590.00, "low_52w": 2685.85, "dividend": 21.25, "eps": 47.99, "book_value": 187.30},
]


async def seed_database(
    db: AsyncIOMotorDatabase, days: int = 365, rng: Optional[random.Random] = None
) -> int:
    """Replace the catalog and price history. Returns the number of stocks seeded."""
    rng = rng or random.Random()

    await db[STOCKS].delete_many({})
    await db[MARKET_DATA].delete_many({})
    logger.info("Cleared existing stocks and market data")

    now = utcnow()
    await db[STOCKS].insert_many(
        [{**stock, "is_active": True, "last_updated": now} for stock in SAMPLE_STOCKS]
    )
    logger.info(f"Inserted {len(SAMPLE_STOCKS)} stocks")

    if days > 0:
        for stock in SAMPLE_STOCKS:
            candles = generate_chart_data(stock["symbol"], stock["price"], days, rng)
            await db[MARKET_DATA].insert_many(candles)
            logger.info(f"Generated chart data for {stock['symbol']}")

    return len(SAMPLE_STOCKS)


async def seed_if_empty(db: AsyncIOMotorDatabase, days: int) -> bool:
    if await db[STOCKS].count_documents({}) > 0:
        return False
    await seed_database(db, days)
    return True


def main():
    parser = argparse.ArgumentParser(description="Seed the stock catalog")
    parser.add_argument("--days", type=int, default=settings.SEED_HISTORY_DAYS)
    parser.add_argument("--random-seed", type=int, default=None)
    args = parser.parse_args()

    async def run():
        db = get_db()
        await init_db(db)
        await seed_database(db, args.days, random.Random(args.random_seed))

    try:
        asyncio.run(run())
    except Exception as e:
        logger.error(f"Error seeding database: {e}", exc_info=True)
        raise SystemExit(1)
    logger.info("Database seeding completed successfully!")


if __name__ == "__main__":
    main()

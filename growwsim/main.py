# growwsim/main.py
from contextlib import asynccontextmanager
from datetime import datetime

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from growwsim import database
from growwsim.config import settings
from growwsim.middleware.request_logger import RequestLoggerMiddleware
from growwsim.routers import (
    auth,
    dashboard,
    market,
    portfolio,
    stocks,
    transactions,
    users,
    wallet,
    watchlist,
)
from growwsim.scheduler import shutdown_scheduler, start_scheduler
from growwsim.seed import seed_if_empty
from growwsim.utils.exceptions import TradingError, trading_error_handler
from growwsim.utils.logger import logger


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan event handler for startup and shutdown"""
    db = database.get_db()
    try:
        await database.init_db(db)
        if settings.SEED_ON_STARTUP and await seed_if_empty(
            db, settings.SEED_HISTORY_DAYS
        ):
            logger.info("Seeded empty stock catalog")
    except Exception as e:
        # keep serving; requests that need the database will fail individually
        logger.error(f"Database initialization failed: {e}", exc_info=True)

    if settings.MARKET_SIMULATION_ENABLED:
        start_scheduler()

    logger.info(f"{settings.APP_NAME} started on port {settings.BACKEND_PORT}")
    yield

    shutdown_scheduler()
    database.close_db()
    logger.info("Application shutting down")


app = FastAPI(
    title=settings.APP_NAME,
    description="Simulated stock trading: wallet, portfolio, watchlist and market data",
    version="1.0.0",
    lifespan=lifespan,
)


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestLoggerMiddleware)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": jsonable_encoder(exc.errors())},
    )


app.add_exception_handler(TradingError, trading_error_handler)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(
        f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=exc
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Something went wrong!"},
    )


prefix = settings.API_PREFIX
app.include_router(auth.router, prefix=f"{prefix}/auth", tags=["Auth"])
app.include_router(users.router, prefix=f"{prefix}/user", tags=["User"])
app.include_router(stocks.router, prefix=f"{prefix}/stocks", tags=["Stocks"])
app.include_router(market.router, prefix=f"{prefix}/market", tags=["Market"])
app.include_router(portfolio.router, prefix=f"{prefix}/portfolio", tags=["Portfolio"])
app.include_router(watchlist.router, prefix=f"{prefix}/watchlist", tags=["Watchlist"])
app.include_router(wallet.router, prefix=f"{prefix}/wallet", tags=["Wallet"])
app.include_router(
    transactions.router, prefix=f"{prefix}/transactions", tags=["Transactions"]
)
app.include_router(dashboard.router, prefix=f"{prefix}/dashboard", tags=["Dashboard"])


@app.get(f"{prefix}/health")
async def health():
    try:
        await database.get_db().command("ping")
        db_state = "connected"
    except Exception as e:
        logger.warning(f"Database ping failed: {e}")
        db_state = "disconnected"

    return {
        "status": "OK",
        "message": f"{settings.APP_NAME} is running",
        "timestamp": datetime.utcnow().isoformat(),
        "port": settings.BACKEND_PORT,
        "database": db_state,
    }


def run():
    uvicorn.run(
        "growwsim.main:app", host=settings.BACKEND_HOST, port=settings.BACKEND_PORT
    )

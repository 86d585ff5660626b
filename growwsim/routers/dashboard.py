from fastapi import APIRouter, Depends
from motor.motor_asyncio import AsyncIOMotorDatabase

from growwsim.database import get_db
from growwsim.models.portfolio_model import DashboardStats
from growwsim.services.portfolio import dashboard_stats
from growwsim.utils.auth import get_current_user

router = APIRouter()


@router.get("/stats", response_model=DashboardStats)
async def get_dashboard_stats(
    current_user: dict = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    return await dashboard_stats(db, current_user)

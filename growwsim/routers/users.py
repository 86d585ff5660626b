# growwsim/routers/users.py
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, status
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument

from growwsim.database import USERS, get_db
from growwsim.models.user_model import (
    PasswordChange,
    UserResponse,
    UserUpdate,
    to_user_response,
)
from growwsim.utils.auth import get_current_user, get_password_hash, verify_password

router = APIRouter()


@router.get("/profile", response_model=UserResponse)
async def get_profile(current_user: dict = Depends(get_current_user)):
    """Get current user information"""
    return to_user_response(current_user)


@router.put("/profile", response_model=UserResponse)
async def update_profile(
    user_update: UserUpdate,
    current_user: dict = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    """Update name and profile details. The balance only moves through the wallet."""
    update_data = {}

    if user_update.name is not None:
        update_data["name"] = user_update.name

    if user_update.profile is not None:
        update_data["profile"] = user_update.profile.model_dump()

    update_data["updated_at"] = datetime.utcnow()

    updated_user = await db[USERS].find_one_and_update(
        {"_id": current_user["_id"]},
        {"$set": update_data},
        return_document=ReturnDocument.AFTER,
    )
    return to_user_response(updated_user)


@router.post("/change-password")
async def change_password(
    password_change: PasswordChange,
    current_user: dict = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    """Change user password"""
    if not verify_password(
        password_change.old_password, current_user["hashed_password"]
    ):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Incorrect password"
        )

    await db[USERS].update_one(
        {"_id": current_user["_id"]},
        {
            "$set": {
                "hashed_password": get_password_hash(password_change.new_password),
                "updated_at": datetime.utcnow(),
            }
        },
    )

    return {"message": "Password changed successfully"}

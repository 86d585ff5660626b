# growwsim/routers/auth.py
from datetime import datetime, timedelta

from fastapi import APIRouter, Depends, HTTPException, status
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from growwsim.config import settings
from growwsim.database import USERS, get_db
from growwsim.models.user_model import (
    AuthResponse,
    UserCreate,
    UserInDB,
    UserLogin,
    to_user_response,
)
from growwsim.utils.auth import create_user_token, get_password_hash, verify_password
from growwsim.utils.exceptions import AccountLockedError, DuplicateEntryError
from growwsim.utils.logger import logger

router = APIRouter()


@router.post(
    "/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED
)
async def register_user(user: UserCreate, db: AsyncIOMotorDatabase = Depends(get_db)):
    """Register a new user"""
    existing_user = await db[USERS].find_one({"email": user.email})
    if existing_user:
        raise DuplicateEntryError("User already exists")

    user_in_db = UserInDB(
        name=user.name,
        email=user.email,
        hashed_password=get_password_hash(user.password),
    )

    try:
        result = await db[USERS].insert_one(user_in_db.model_dump())
    except DuplicateKeyError:
        # lost a race with a concurrent registration
        raise DuplicateEntryError("User already exists")

    created_user = await db[USERS].find_one({"_id": result.inserted_id})
    logger.info(f"Registered user {created_user['email']}")

    return AuthResponse(
        message="User created successfully",
        token=create_user_token(created_user),
        user=to_user_response(created_user),
    )


async def _register_failed_login(db: AsyncIOMotorDatabase, user: dict):
    lock_until = user.get("lock_until")
    if lock_until and lock_until <= datetime.utcnow():
        # an expired lock restarts the count
        await db[USERS].update_one(
            {"_id": user["_id"]},
            {"$set": {"login_attempts": 1}, "$unset": {"lock_until": ""}},
        )
        return

    updated = await db[USERS].find_one_and_update(
        {"_id": user["_id"]},
        {"$inc": {"login_attempts": 1}},
        return_document=ReturnDocument.AFTER,
    )
    attempts = updated["login_attempts"]
    if attempts >= settings.MAX_LOGIN_ATTEMPTS and not updated.get("lock_until"):
        await db[USERS].update_one(
            {"_id": user["_id"]},
            {
                "$set": {
                    "lock_until": datetime.utcnow()
                    + timedelta(minutes=settings.LOCK_MINUTES)
                }
            },
        )
        logger.warning(f"Locking account {user['email']} after {attempts} failed logins")


@router.post("/login", response_model=AuthResponse)
async def login(user_credentials: UserLogin, db: AsyncIOMotorDatabase = Depends(get_db)):
    """Login and get access token"""
    invalid_credentials = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    user = await db[USERS].find_one({"email": user_credentials.email})
    if not user:
        raise invalid_credentials

    lock_until = user.get("lock_until")
    if lock_until and lock_until > datetime.utcnow():
        raise AccountLockedError()

    if not verify_password(user_credentials.password, user["hashed_password"]):
        await _register_failed_login(db, user)
        raise invalid_credentials

    now = datetime.utcnow()
    await db[USERS].update_one(
        {"_id": user["_id"]},
        {
            "$set": {"last_login": now, "login_attempts": 0},
            "$unset": {"lock_until": ""},
        },
    )
    user["last_login"] = now

    return AuthResponse(
        message="Login successful",
        token=create_user_token(user),
        user=to_user_response(user),
    )

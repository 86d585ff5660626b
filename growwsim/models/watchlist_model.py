# growwsim/models/watchlist_model.py
from datetime import datetime

from pydantic import BaseModel, Field, field_validator


class WatchlistCreate(BaseModel):
    symbol: str = Field(..., min_length=1, max_length=20)
    name: str = Field(..., min_length=1)

    @field_validator("symbol")
    @classmethod
    def upper_symbol(cls, v):
        return v.strip().upper()


class WatchlistItem(BaseModel):
    id: str
    user_id: str
    symbol: str
    name: str
    added_date: datetime

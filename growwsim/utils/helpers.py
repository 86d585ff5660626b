# growwsim/utils/helpers.py
import math
import uuid
from datetime import datetime

from bson import ObjectId


def generate_order_id() -> str:
    return "ORD" + datetime.utcnow().strftime("%Y%m%d%H%M%S") + uuid.uuid4().hex[:6].upper()


def utcnow() -> datetime:
    return datetime.utcnow()


def serialize_mongo_doc(doc: dict) -> dict:
    """Convert ObjectId fields to strings for JSON serialization."""
    doc = dict(doc)
    if "_id" in doc:
        doc["id"] = str(doc.pop("_id"))
    if isinstance(doc.get("user_id"), ObjectId):
        doc["user_id"] = str(doc["user_id"])
    return doc


def paginate(page: int, limit: int, total: int) -> dict:
    return {
        "page": page,
        "limit": limit,
        "total": total,
        "pages": math.ceil(total / limit) if limit else 0,
    }

"""
Database Helper Functions

MongoDB helper functions used by the API endpoints.
"""

from pymongo import MongoClient, ReturnDocument
from bson import ObjectId
from bson.errors import InvalidId
from datetime import datetime, timezone
from typing import Union, List, Dict, Any, Optional
from pydantic import BaseModel

from config import DATABASE_URL, DATABASE_NAME
from errors import DatabaseUnavailableError

_client = None
db = None

if DATABASE_URL and DATABASE_NAME:
    _client = MongoClient(DATABASE_URL)
    db = _client[DATABASE_NAME]


def _require_db():
    if db is None:
        raise DatabaseUnavailableError(
            "Database not available. Check DATABASE_URL and DATABASE_NAME environment variables."
        )
    return db


def to_object_id(_id: str) -> Optional[ObjectId]:
    """Parse a string id; None when it is not a valid ObjectId."""
    try:
        return ObjectId(_id)
    except (InvalidId, TypeError):
        return None


def serialize_document(doc: Dict[str, Any]) -> Dict[str, Any]:
    """Stringify ObjectId and datetimes so the document is JSON ready"""
    doc = dict(doc)
    if "_id" in doc:
        doc["id"] = str(doc.pop("_id"))
    for key, val in list(doc.items()):
        if isinstance(val, datetime):
            doc[key] = val.isoformat()
    return doc


# Helper functions for common database operations
def create_document(collection_name: str, data: Union[BaseModel, dict]) -> str:
    """Insert a single document with timestamp"""
    database = _require_db()

    data_dict = data.model_dump() if isinstance(data, BaseModel) else dict(data)

    now = datetime.now(timezone.utc)
    data_dict['created_at'] = data_dict.get('created_at', now)
    data_dict['updated_at'] = now

    result = database[collection_name].insert_one(data_dict)
    return str(result.inserted_id)


def get_documents(collection_name: str, filter_dict: dict = None, limit: int = None, sort: List = None):
    """Get documents from collection"""
    database = _require_db()

    cursor = database[collection_name].find(filter_dict or {})
    if sort:
        cursor = cursor.sort(sort)
    if limit:
        cursor = cursor.limit(limit)
    return list(cursor)


def get_document_by_id(collection_name: str, _id: str) -> Optional[Dict[str, Any]]:
    """Fetch one document; None for unknown or malformed ids."""
    database = _require_db()
    oid = to_object_id(_id)
    if oid is None:
        return None
    return database[collection_name].find_one({"_id": oid})


def update_by_id(collection_name: str, _id: str, updates: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """Set fields on a document and return the updated document (None if absent)."""
    database = _require_db()
    oid = to_object_id(_id)
    if oid is None:
        return None
    updates = dict(updates)
    updates['updated_at'] = datetime.now(timezone.utc)
    return database[collection_name].find_one_and_update(
        {"_id": oid},
        {"$set": updates},
        return_document=ReturnDocument.AFTER,
    )


def delete_by_id(collection_name: str, _id: str) -> int:
    database = _require_db()
    oid = to_object_id(_id)
    if oid is None:
        return 0
    result = database[collection_name].delete_one({"_id": oid})
    return result.deleted_count

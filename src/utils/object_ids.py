"""
ObjectId parsing and document serialization helpers
"""

from typing import Any, Dict, List, Optional
from bson import ObjectId
from bson.errors import InvalidId
from fastapi import HTTPException

INVALID_ID_MESSAGE = "Invalid User ID format"


def parse_object_id(value: str) -> ObjectId:
    """Convert a path parameter into an ObjectId, 400 when malformed"""
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        raise HTTPException(status_code=400, detail=INVALID_ID_MESSAGE)


def serialize_document(document: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Return a JSON-ready copy of a stored document"""
    if document is None:
        return None
    serialized = dict(document)
    if isinstance(serialized.get("_id"), ObjectId):
        serialized["_id"] = str(serialized["_id"])
    return serialized


def serialize_documents(documents: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [serialize_document(document) for document in documents]

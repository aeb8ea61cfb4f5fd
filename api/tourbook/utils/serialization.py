"""
BSON <-> JSON helpers shared by services and routers
"""
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from bson import ObjectId
from bson.errors import InvalidId

from tourbook.exceptions import ValidationError


def object_id_or_none(value: Any) -> Optional[ObjectId]:
    """Parse an id from a path or query string, None when malformed"""
    if isinstance(value, ObjectId):
        return value
    try:
        return ObjectId(str(value))
    except (InvalidId, TypeError):
        return None


def to_object_id(value: Any, field: Optional[str] = None) -> ObjectId:
    """Parse an id supplied in a request body. Malformed ids are validation errors."""
    oid = object_id_or_none(value)
    if oid is None:
        raise ValidationError(f"Invalid id: {value!r}", field=field)
    return oid


def to_object_ids(values: Iterable[Any], field: Optional[str] = None) -> List[ObjectId]:
    """Parse a list of ids, dropping duplicates but keeping order"""
    seen = set()
    result = []
    for value in values:
        oid = to_object_id(value, field)
        if oid not in seen:
            seen.add(oid)
            result.append(oid)
    return result


def serialize_doc(doc: Any) -> Any:
    """
    Convert a MongoDB document into plain JSON types.

    `_id` keys become `id`, ObjectIds become strings and datetimes become
    ISO strings, recursively.
    """
    if isinstance(doc, dict):
        d: Dict[str, Any] = {}
        for k, v in doc.items():
            key = "id" if k == "_id" else k
            d[key] = serialize_doc(v)
        return d
    if isinstance(doc, list):
        return [serialize_doc(i) for i in doc]
    if isinstance(doc, ObjectId):
        return str(doc)
    if isinstance(doc, datetime):
        return doc.isoformat()
    return doc

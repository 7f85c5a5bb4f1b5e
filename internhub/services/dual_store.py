"""
Dual-store lookup - the reconciliation layer.

Every read goes to the primary (SQLAlchemy) store first and falls back
to the document (MongoDB) store when the primary path fails or comes back
empty. Both paths produce the same record shape: a plain dict with
snake_case keys and a string "id".

Ids:
- Primary store: 24-hex strings
- Document store: "_id" is a native ObjectId; references are usually
  strings but legacy documents may hold ObjectIds
"""

import logging
import re
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Optional

from bson import ObjectId
from pymongo import ReturnDocument
from pymongo.errors import PyMongoError
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from internhub.core.exceptions import StoreUnavailableError, ValidationError

logger = logging.getLogger(__name__)

Record = Dict[str, Any]

PRIMARY_ERRORS = (SQLAlchemyError,)
DOCUMENT_ERRORS = (PyMongoError,)


# ============================================================
# ID COERCION
# ============================================================

def to_object_id(value: Any) -> Optional[ObjectId]:
    """Coerce a string/ObjectId to ObjectId; None when it is not 24-hex."""
    if isinstance(value, ObjectId):
        return value
    if value is None:
        return None
    text = str(value)
    if ObjectId.is_valid(text):
        return ObjectId(text)
    return None


def stringify_id(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value)


def id_candidates(value: Any) -> List[Any]:
    """All forms an id may be stored under in the document store."""
    if value is None:
        return []
    candidates: List[Any] = [str(value)]
    oid = to_object_id(value)
    if oid is not None:
        candidates.append(oid)
    return candidates


def id_filter(value: Any) -> dict:
    return {"_id": {"$in": id_candidates(value)}}


def ref_filter(field: str, value: Any) -> dict:
    return {field: {"$in": id_candidates(value)}}


def many_ids_filter(field: str, values: Iterable[Any]) -> dict:
    candidates: List[Any] = []
    for value in values:
        candidates.extend(id_candidates(value))
    return {field: {"$in": candidates}}


# ============================================================
# RECORD CONVERSION
# ============================================================

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])([A-Z])")


def camel_to_snake(name: str) -> str:
    return _CAMEL_BOUNDARY.sub(r"_\1", name).lower()


def snake_to_camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


def document_to_record(doc: Optional[dict]) -> Optional[Record]:
    """Convert a raw document into a record (snake_case keys, string ids)."""
    if doc is None:
        return None
    record: Record = {}
    for key, value in doc.items():
        if key == "_id":
            record["id"] = str(value)
        elif isinstance(value, ObjectId):
            record[camel_to_snake(key)] = str(value)
        else:
            record[camel_to_snake(key)] = value
    return record


def record_to_document(record: Record) -> dict:
    """Convert a record into document fields; "id" becomes an ObjectId "_id"."""
    doc = {}
    for key, value in record.items():
        if key == "id":
            oid = to_object_id(value)
            doc["_id"] = oid if oid is not None else value
        else:
            doc[snake_to_camel(key)] = value
    return doc


def row_to_record(row: Any) -> Optional[Record]:
    """Convert an ORM instance into a record."""
    if row is None:
        return None
    return {column.key: getattr(row, column.key) for column in row.__table__.columns}


# ============================================================
# LOOKUPS
# ============================================================

def lookup_one(
    primary: Callable[[], Optional[Record]],
    fallback: Callable[[], Optional[Record]],
    label: str
) -> Optional[Record]:
    """
    Fetch one record, primary first.

    Returns None when neither store has the record. Raises
    StoreUnavailableError only when both stores raised.
    """
    primary_failed = False
    try:
        record = primary()
        if record is not None:
            return record
    except PRIMARY_ERRORS as e:
        primary_failed = True
        logger.warning("Primary lookup for %s failed, trying document store: %s", label, e)

    try:
        return fallback()
    except DOCUMENT_ERRORS as e:
        if primary_failed:
            logger.error("Both stores failed for %s: %s", label, e)
            raise StoreUnavailableError(f"Failed to fetch {label}") from e
        logger.warning("Document store lookup for %s failed: %s", label, e)
        return None


def merge_records(
    primary_records: List[Record],
    fallback_records: List[Record],
    key: str = "id"
) -> List[Record]:
    """Merge by key; the primary record wins on collision."""
    merged: Dict[Any, Record] = {}
    for record in fallback_records:
        merged[str(record.get(key))] = record
    for record in primary_records:
        merged[str(record.get(key))] = record
    return list(merged.values())


def sort_records(records: List[Record], sort_key: str = "created_at", descending: bool = True) -> List[Record]:
    """Sort records by a datetime-ish key; records missing the key go last."""
    present = [r for r in records if isinstance(r.get(sort_key), datetime)]
    missing = [r for r in records if not isinstance(r.get(sort_key), datetime)]
    present.sort(key=lambda r: r[sort_key], reverse=descending)
    return present + missing


def lookup_many(
    primary: Callable[[], List[Record]],
    fallback: Callable[[], List[Record]],
    label: str,
    key: str = "id",
    always_merge: bool = False,
    sort_key: Optional[str] = "created_at",
    descending: bool = True
) -> List[Record]:
    """
    Fetch a list of records from both stores and reconcile them.

    The document store is consulted when the primary path failed or came
    back empty, or always when always_merge is set.
    """
    primary_records: List[Record] = []
    primary_failed = False
    try:
        primary_records = list(primary())
    except PRIMARY_ERRORS as e:
        primary_failed = True
        logger.warning("Primary query for %s failed, trying document store: %s", label, e)

    fallback_records: List[Record] = []
    if primary_failed or always_merge or not primary_records:
        try:
            fallback_records = list(fallback())
        except DOCUMENT_ERRORS as e:
            if primary_failed:
                logger.error("Both stores failed for %s: %s", label, e)
                raise StoreUnavailableError(f"Failed to fetch {label}") from e
            logger.warning("Document store query for %s failed: %s", label, e)

    logger.debug("%s: %d primary, %d document records", label, len(primary_records), len(fallback_records))
    merged = merge_records(primary_records, fallback_records, key=key)
    if sort_key:
        merged = sort_records(merged, sort_key=sort_key, descending=descending)
    return merged


def _applied(result: Any) -> bool:
    if result is None or result is False:
        return False
    if isinstance(result, int) and not isinstance(result, bool):
        return result > 0
    return True


def write_with_fallback(
    primary: Callable[[], Any],
    fallback: Callable[[], Any],
    label: str
) -> Any:
    """
    Apply a write to the primary store, or to the document store when the
    primary write failed or did not apply (None, False or 0 rows).
    A constraint violation raises ValidationError; the document store is
    not tried.
    """
    primary_failed = False
    try:
        result = primary()
        if _applied(result):
            return result
    except IntegrityError as e:
        raise ValidationError(f"Invalid {label} data") from e
    except PRIMARY_ERRORS as e:
        primary_failed = True
        logger.warning("Primary write for %s failed, writing to document store: %s", label, e)

    try:
        return fallback()
    except DOCUMENT_ERRORS as e:
        if primary_failed:
            logger.error("Both stores failed to write %s: %s", label, e)
            raise StoreUnavailableError(f"Failed to save {label}") from e
        logger.warning("Document store write for %s failed: %s", label, e)
        return None


def apply_to_both(
    primary: Callable[[], int],
    fallback: Callable[[], int],
    label: str
) -> int:
    """
    Apply a bulk write (delete, mark-read) to both stores, since matching
    records may live in either. Returns the combined count.
    """
    total = 0
    primary_failed = False
    try:
        total += primary() or 0
    except PRIMARY_ERRORS as e:
        primary_failed = True
        logger.warning("Primary write for %s failed: %s", label, e)

    try:
        total += fallback() or 0
    except DOCUMENT_ERRORS as e:
        if primary_failed:
            logger.error("Both stores failed to write %s: %s", label, e)
            raise StoreUnavailableError(f"Failed to update {label}") from e
        logger.warning("Document store write for %s failed: %s", label, e)
    return total


def insert_document(collection: Any, record: Record) -> Record:
    """Insert a record into a document collection, keeping its id."""
    collection.insert_one(record_to_document(record))
    return record


def document_update(collection: Any, entity_id: Any, fields: Record) -> Optional[Record]:
    """Update one document by id in place; None when it does not exist."""
    doc = collection.find_one_and_update(
        id_filter(entity_id),
        {"$set": {snake_to_camel(k): v for k, v in fields.items()}},
        return_document=ReturnDocument.AFTER
    )
    return document_to_record(doc)

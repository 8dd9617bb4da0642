"""Document store backed by the documents table.

Collections are addressed by slash-separated paths such as
``projects/{projectId}/courts``. A document's child collections are plain
paths underneath it, e.g. ``projects/{projectId}/stores/{storeId}/products``;
deleting a parent document leaves its child collections in place.

Documents are schemaless JSON. Queries load the collection and evaluate
predicates in Python, so any field can be filtered or ordered on without
an index. Timestamps are stored as ISO-8601 strings in UTC.
"""
import copy
import logging
import secrets
import string
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence, Tuple

import pytz
from sqlalchemy import select, and_
from sqlalchemy.ext.asyncio import AsyncSession

from facility_admin.core.database import AsyncSessionLocal
from facility_admin.models.document import Document

logger = logging.getLogger(__name__)

AUTO_ID_ALPHABET = string.ascii_letters + string.digits
AUTO_ID_LENGTH = 20

QUERY_OPERATORS = {"==", "!=", "<", "<=", ">", ">=", "in", "not-in", "array-contains"}

# (field, operator, value), e.g. ("status", "==", "active")
Filter = Tuple[str, str, Any]


class _ServerTimestamp:
    """Sentinel replaced by the write time when a document is stored."""

    def __repr__(self):
        return "SERVER_TIMESTAMP"


SERVER_TIMESTAMP = _ServerTimestamp()

_MISSING = object()


class DocumentNotFoundError(LookupError):
    """Raised when updating a document that does not exist."""

    def __init__(self, collection: str, doc_id: str):
        super().__init__(f"No document to update: {collection}/{doc_id}")
        self.collection = collection
        self.doc_id = doc_id


@dataclass
class DocumentSnapshot:
    """A document as read from (or written to) the store."""

    id: str
    collection: str
    data: Dict[str, Any]

    @property
    def path(self) -> str:
        return f"{self.collection}/{self.id}"

    def get(self, field_path: str, default: Any = None) -> Any:
        value = get_field(self.data, field_path)
        return default if value is _MISSING else value

    def to_dict(self) -> Dict[str, Any]:
        """Return the document fields together with its id."""
        return {"id": self.id, **self.data}


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(pytz.UTC)


def new_document_id() -> str:
    """Generate a random 20 character document id."""
    return "".join(secrets.choice(AUTO_ID_ALPHABET) for _ in range(AUTO_ID_LENGTH))


def encode_value(value: Any, now: datetime) -> Any:
    """Convert a Python value into its stored JSON form."""
    if value is SERVER_TIMESTAMP:
        return now.isoformat()
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = pytz.UTC.localize(value)
        return value.astimezone(pytz.UTC).isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, dict):
        return {str(k): encode_value(v, now) for k, v in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [encode_value(v, now) for v in value]
    return value


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Parse a stored timestamp into an aware UTC datetime.

    Accepts datetimes, dates and ISO-8601 strings (with or without a
    trailing ``Z``). Naive values are taken to be UTC.

    Args:
        value: Value to parse

    Returns:
        Aware datetime, or None if the value is not a timestamp
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        parsed = pytz.UTC.localize(parsed)
    return parsed.astimezone(pytz.UTC)


def get_field(data: Dict[str, Any], field_path: str) -> Any:
    """Read a possibly dotted field path, returning a sentinel when absent."""
    current: Any = data
    for part in field_path.split("."):
        if not isinstance(current, dict) or part not in current:
            return _MISSING
        current = current[part]
    return current


def _comparable(actual: Any, expected: Any) -> Optional[Tuple[Any, Any]]:
    # Timestamps are compared as datetimes, everything else as stored
    if isinstance(expected, (datetime, date)):
        left = parse_timestamp(actual)
        if left is None:
            return None
        return left, parse_timestamp(expected)
    if isinstance(expected, Decimal):
        expected = float(expected)
    return actual, expected


def _matches(data: Dict[str, Any], flt: Filter) -> bool:
    field_path, op, expected = flt
    actual = get_field(data, field_path)
    if actual is _MISSING:
        return False

    if op == "array-contains":
        return isinstance(actual, list) and encode_value(expected, utcnow()) in actual
    if op in ("in", "not-in"):
        candidates = [encode_value(v, utcnow()) for v in expected]
        return (actual in candidates) == (op == "in")

    pair = _comparable(actual, expected)
    if pair is None:
        return False
    left, right = pair
    try:
        if op == "==":
            return left == right
        if op == "!=":
            return left != right
        if op == "<":
            return left < right
        if op == "<=":
            return left <= right
        if op == ">":
            return left > right
        if op == ">=":
            return left >= right
    except TypeError:
        return False
    return False


def _sort_key(value: Any) -> Tuple[int, Any]:
    if value is None:
        return (0, 0)
    if isinstance(value, bool):
        return (1, int(value))
    if isinstance(value, (int, float)):
        return (2, value)
    if isinstance(value, str):
        return (3, value)
    return (4, str(value))


class WriteBatch:
    """
    A group of writes committed all-or-nothing.

    If any write fails (for example an update of a missing document) the
    whole batch is rolled back.
    """

    def __init__(self, store: "DocumentStore"):
        self._store = store
        self._writes: List[Tuple[str, str, str, Optional[Dict[str, Any]]]] = []

    def set(self, collection: str, doc_id: str, data: Dict[str, Any], merge: bool = False) -> "WriteBatch":
        self._writes.append(("merge" if merge else "set", collection, doc_id, data))
        return self

    def update(self, collection: str, doc_id: str, data: Dict[str, Any]) -> "WriteBatch":
        self._writes.append(("update", collection, doc_id, data))
        return self

    def delete(self, collection: str, doc_id: str) -> "WriteBatch":
        self._writes.append(("delete", collection, doc_id, None))
        return self

    def __len__(self) -> int:
        return len(self._writes)

    async def commit(self) -> int:
        """
        Apply every queued write in one transaction.

        Returns:
            Number of writes committed
        """
        if not self._writes:
            return 0

        now = utcnow()
        async with self._store.session_factory() as db:
            try:
                for op, collection, doc_id, data in self._writes:
                    await self._store._apply(db, op, collection, doc_id, data, now)
                await db.commit()
            except Exception:
                await db.rollback()
                raise

        count = len(self._writes)
        self._writes = []
        logger.info(f"Committed batch of {count} writes")
        return count


class DocumentStore:
    """CRUD and simple queries over nested document collections."""

    def __init__(self, session_factory=None):
        """
        Initialize the store.

        Args:
            session_factory: Async session factory (defaults to the application's)
        """
        self.session_factory = session_factory or AsyncSessionLocal

    async def _get_row(self, db: AsyncSession, collection: str, doc_id: str) -> Optional[Document]:
        result = await db.execute(
            select(Document).where(
                and_(
                    Document.collection == collection,
                    Document.doc_id == doc_id,
                )
            )
        )
        return result.scalar_one_or_none()

    async def _apply(
        self,
        db: AsyncSession,
        op: str,
        collection: str,
        doc_id: str,
        data: Optional[Dict[str, Any]],
        now: datetime,
    ) -> Optional[Dict[str, Any]]:
        """Apply one write inside an open session and return the stored data."""
        row = await self._get_row(db, collection, doc_id)

        if op == "delete":
            if row is not None:
                await db.delete(row)
            return None

        encoded = encode_value(data or {}, now)

        if op == "update":
            if row is None:
                raise DocumentNotFoundError(collection, doc_id)
            stored = {**(row.data or {}), **encoded}
            row.data = stored
            return stored

        if row is None:
            db.add(Document(collection=collection, doc_id=doc_id, data=encoded))
            return encoded

        stored = {**(row.data or {}), **encoded} if op == "merge" else encoded
        row.data = stored
        return stored

    async def _write(
        self, op: str, collection: str, doc_id: str, data: Optional[Dict[str, Any]]
    ) -> Optional[Dict[str, Any]]:
        async with self.session_factory() as db:
            stored = await self._apply(db, op, collection, doc_id, data, utcnow())
            await db.commit()
        return copy.deepcopy(stored)

    async def query(
        self,
        collection: str,
        where: Optional[Sequence[Filter]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> List[DocumentSnapshot]:
        """
        Read documents of a collection.

        Without ``order_by`` documents come back ordered by id. With it,
        documents lacking the field are left out.

        Args:
            collection: Collection path
            where: Filters, all of which must match
            order_by: Field to order by
            descending: Reverse the ordering
            limit: Maximum number of documents

        Returns:
            Matching document snapshots
        """
        for _, op, _ in where or []:
            if op not in QUERY_OPERATORS:
                raise ValueError(f"Unsupported query operator: {op}")

        async with self.session_factory() as db:
            result = await db.execute(
                select(Document)
                .where(Document.collection == collection)
                .order_by(Document.doc_id)
            )
            rows = result.scalars().all()
            snapshots = [
                DocumentSnapshot(row.doc_id, collection, copy.deepcopy(row.data or {}))
                for row in rows
            ]

        for flt in where or []:
            snapshots = [s for s in snapshots if _matches(s.data, flt)]

        if order_by:
            snapshots = [s for s in snapshots if get_field(s.data, order_by) is not _MISSING]
            snapshots.sort(
                key=lambda s: _sort_key(get_field(s.data, order_by)),
                reverse=descending,
            )

        if limit is not None:
            snapshots = snapshots[:limit]

        logger.debug(f"Query {collection} returned {len(snapshots)} documents")
        return snapshots

    async def get(self, collection: str, doc_id: str) -> Optional[DocumentSnapshot]:
        """Read a single document, or None if it does not exist."""
        async with self.session_factory() as db:
            row = await self._get_row(db, collection, doc_id)
            if row is None:
                return None
            return DocumentSnapshot(doc_id, collection, copy.deepcopy(row.data or {}))

    async def add(self, collection: str, data: Dict[str, Any]) -> DocumentSnapshot:
        """Create a document with a generated id."""
        doc_id = new_document_id()
        stored = await self._write("set", collection, doc_id, data)
        return DocumentSnapshot(doc_id, collection, stored)

    async def set(
        self, collection: str, doc_id: str, data: Dict[str, Any], merge: bool = False
    ) -> DocumentSnapshot:
        """Create or overwrite a document with an explicit id."""
        stored = await self._write("merge" if merge else "set", collection, doc_id, data)
        return DocumentSnapshot(doc_id, collection, stored)

    async def update(self, collection: str, doc_id: str, data: Dict[str, Any]) -> DocumentSnapshot:
        """
        Merge fields into an existing document.

        Raises:
            DocumentNotFoundError: If the document does not exist
        """
        stored = await self._write("update", collection, doc_id, data)
        return DocumentSnapshot(doc_id, collection, stored)

    async def delete(self, collection: str, doc_id: str) -> None:
        """Delete a document. Deleting a missing document is a no-op."""
        await self._write("delete", collection, doc_id, None)

    def batch(self) -> WriteBatch:
        """Start a new write batch."""
        return WriteBatch(self)


# Singleton instance
document_store = DocumentStore()

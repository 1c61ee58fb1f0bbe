"""
Document store abstraction backed by SQLAlchemy and an in-memory test implementation.

Each entity lives in its own collection of JSON documents. Documents are
returned as plain dicts carrying an ``id`` and an ISO-8601 ``createdAt``;
listings are always sorted by creation time, newest first.
"""

from __future__ import annotations

import copy
import re
import threading
import time
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Optional, Protocol, Sequence

from sqlalchemy import JSON, Column, Float, String, create_engine, select, text
from sqlalchemy.orm import Session, declarative_base, sessionmaker

APPLICATIONS = "applications"
BOOKINGS = "bookings"
MODELS = "models"
GALLERY = "gallery"
TEAM = "team"
COMPANIES = "companies"
ABOUT = "about"
ADMINS = "admins"
NEWSLETTER = "newsletter"

_ID_PATTERN = re.compile(r"^[0-9a-f]{32}$")


def new_id() -> str:
    return uuid.uuid4().hex


def is_valid_id(value: Any) -> bool:
    return isinstance(value, str) and bool(_ID_PATTERN.match(value))


def isoformat(timestamp: float) -> str:
    return datetime.fromtimestamp(timestamp, timezone.utc).isoformat()


@dataclass(frozen=True)
class Filter:
    """A single-field predicate: ``eq`` (exact) or ``icontains`` (case-insensitive substring)."""

    field: str
    value: Any
    op: str = "eq"

    def matches(self, doc: dict) -> bool:
        current = doc.get(self.field)
        if self.op == "eq":
            return current == self.value
        if self.op == "icontains":
            if current is None:
                return False
            return str(self.value).lower() in str(current).lower()
        raise ValueError(f"Unsupported filter op: {self.op}")


def _matches_all(doc: dict, filters: Iterable[Filter]) -> bool:
    return all(f.matches(doc) for f in filters)


class DocumentStore(Protocol):
    """Interface for document persistence."""

    def insert(
        self, collection: str, doc: dict, created_at: Optional[float] = None
    ) -> dict:
        ...

    def get(self, collection: str, doc_id: str) -> Optional[dict]:
        ...

    def find(
        self,
        collection: str,
        filters: Sequence[Filter] = (),
        *,
        created_since: Optional[float] = None,
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> list[dict]:
        ...

    def find_one(
        self,
        collection: str,
        filters: Sequence[Filter] = (),
        *,
        created_since: Optional[float] = None,
    ) -> Optional[dict]:
        ...

    def count(self, collection: str, filters: Sequence[Filter] = ()) -> int:
        ...

    def update(self, collection: str, doc_id: str, changes: dict) -> Optional[dict]:
        ...

    def delete(self, collection: str, doc_id: str) -> Optional[dict]:
        ...

    def ping(self) -> None:
        ...


def _hydrate(doc_id: str, created_at: float, body: dict) -> dict:
    doc = copy.deepcopy(body)
    doc["id"] = doc_id
    doc["createdAt"] = isoformat(created_at)
    return doc


def _strip(doc: dict) -> dict:
    body = copy.deepcopy(doc)
    body.pop("id", None)
    body.pop("createdAt", None)
    return body


class InMemoryDocumentStore:
    """Simple in-memory document store for development and tests."""

    def __init__(self):
        # collection -> id -> (created_at, body)
        self.collections: Dict[str, Dict[str, tuple[float, dict]]] = {}
        self._lock = threading.Lock()

    def insert(
        self, collection: str, doc: dict, created_at: Optional[float] = None
    ) -> dict:
        doc_id = new_id()
        stamp = created_at if created_at is not None else time.time()
        with self._lock:
            self.collections.setdefault(collection, {})[doc_id] = (stamp, _strip(doc))
        return _hydrate(doc_id, stamp, doc)

    def get(self, collection: str, doc_id: str) -> Optional[dict]:
        entry = self.collections.get(collection, {}).get(doc_id)
        if not entry:
            return None
        return _hydrate(doc_id, *entry)

    def _sorted(self, collection: str, created_since: Optional[float]) -> list[dict]:
        entries = sorted(
            self.collections.get(collection, {}).items(),
            key=lambda item: item[1][0],
            reverse=True,
        )
        return [
            _hydrate(doc_id, stamp, body)
            for doc_id, (stamp, body) in entries
            if created_since is None or stamp >= created_since
        ]

    def find(
        self,
        collection: str,
        filters: Sequence[Filter] = (),
        *,
        created_since: Optional[float] = None,
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> list[dict]:
        docs = [d for d in self._sorted(collection, created_since) if _matches_all(d, filters)]
        end = None if limit is None else skip + limit
        return docs[skip:end]

    def find_one(
        self,
        collection: str,
        filters: Sequence[Filter] = (),
        *,
        created_since: Optional[float] = None,
    ) -> Optional[dict]:
        docs = self.find(collection, filters, created_since=created_since, limit=1)
        return docs[0] if docs else None

    def count(self, collection: str, filters: Sequence[Filter] = ()) -> int:
        return len(self.find(collection, filters))

    def update(self, collection: str, doc_id: str, changes: dict) -> Optional[dict]:
        with self._lock:
            entry = self.collections.get(collection, {}).get(doc_id)
            if not entry:
                return None
            stamp, body = entry
            merged = {**body, **_strip(changes)}
            self.collections[collection][doc_id] = (stamp, merged)
        return _hydrate(doc_id, stamp, merged)

    def delete(self, collection: str, doc_id: str) -> Optional[dict]:
        with self._lock:
            entry = self.collections.get(collection, {}).pop(doc_id, None)
        if not entry:
            return None
        return _hydrate(doc_id, *entry)

    def ping(self) -> None:
        return None

    def reset(self) -> None:
        """Clear all stored data (useful in tests)."""
        with self._lock:
            self.collections.clear()


class SqlDocumentStore:
    """
    SQLAlchemy-backed implementation. Accepts any SQLAlchemy URL (e.g., Postgres or SQLite for tests).
    """

    def __init__(self, database_url: str):
        if not database_url:
            raise ValueError("DATABASE_URL is required for SqlDocumentStore")
        self.engine = create_engine(
            database_url,
            future=True,
            pool_pre_ping=True,
            pool_recycle=1800,
        )
        self.Session = sessionmaker(
            bind=self.engine, class_=Session, expire_on_commit=False, future=True
        )
        Base.metadata.create_all(self.engine)

    def _to_doc(self, row: "DocumentRow") -> dict:
        return _hydrate(row.id, row.created_at, row.body or {})

    def _rows(self, session: Session, collection: str, created_since: Optional[float]):
        stmt = select(DocumentRow).where(DocumentRow.collection == collection)
        if created_since is not None:
            stmt = stmt.where(DocumentRow.created_at >= created_since)
        stmt = stmt.order_by(DocumentRow.created_at.desc())
        return session.execute(stmt).scalars().all()

    def insert(
        self, collection: str, doc: dict, created_at: Optional[float] = None
    ) -> dict:
        stamp = created_at if created_at is not None else time.time()
        with self.Session() as session:
            row = DocumentRow(
                id=new_id(),
                collection=collection,
                created_at=stamp,
                body=_strip(doc),
            )
            session.add(row)
            session.commit()
            return self._to_doc(row)

    def get(self, collection: str, doc_id: str) -> Optional[dict]:
        with self.Session() as session:
            row = session.get(DocumentRow, doc_id)
            if not row or row.collection != collection:
                return None
            return self._to_doc(row)

    def find(
        self,
        collection: str,
        filters: Sequence[Filter] = (),
        *,
        created_since: Optional[float] = None,
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> list[dict]:
        with self.Session() as session:
            docs = [self._to_doc(row) for row in self._rows(session, collection, created_since)]
        docs = [d for d in docs if _matches_all(d, filters)]
        end = None if limit is None else skip + limit
        return docs[skip:end]

    def find_one(
        self,
        collection: str,
        filters: Sequence[Filter] = (),
        *,
        created_since: Optional[float] = None,
    ) -> Optional[dict]:
        docs = self.find(collection, filters, created_since=created_since, limit=1)
        return docs[0] if docs else None

    def count(self, collection: str, filters: Sequence[Filter] = ()) -> int:
        return len(self.find(collection, filters))

    def update(self, collection: str, doc_id: str, changes: dict) -> Optional[dict]:
        with self.Session() as session:
            row = session.get(DocumentRow, doc_id)
            if not row or row.collection != collection:
                return None
            # Assign a fresh dict so the JSON column is flagged dirty.
            row.body = {**(row.body or {}), **_strip(changes)}
            session.commit()
            return self._to_doc(row)

    def delete(self, collection: str, doc_id: str) -> Optional[dict]:
        with self.Session() as session:
            row = session.get(DocumentRow, doc_id)
            if not row or row.collection != collection:
                return None
            doc = self._to_doc(row)
            session.delete(row)
            session.commit()
            return doc

    def ping(self) -> None:
        with self.engine.connect() as conn:
            conn.execute(text("SELECT 1"))


Base = declarative_base()


class DocumentRow(Base):
    __tablename__ = "documents"

    id = Column(String(32), primary_key=True)
    collection = Column(String, nullable=False, index=True)
    created_at = Column(Float, nullable=False, index=True)
    body = Column(JSON, nullable=False)

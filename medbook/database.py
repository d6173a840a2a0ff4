"""
Database engine initialisation and the document store behind the API.
"""

import secrets
import sys
from datetime import datetime
from typing import Callable, Dict, List, Optional

from sqlalchemy import (
    JSON, Column, DateTime, MetaData, String, Table, create_engine, delete, select, text, update,
)
from sqlalchemy.pool import StaticPool

metadata = MetaData()

documents = Table(
    "documents",
    metadata,
    Column("id", String(24), primary_key=True),
    Column("collection", String(64), nullable=False, index=True),
    Column("body", JSON, nullable=False),
    Column("created_at", DateTime, nullable=False),
    Column("updated_at", DateTime, nullable=False),
)


def new_id() -> str:
    """24 lowercase hex characters, the same shape as a Mongo ObjectId."""
    return secrets.token_hex(12)


def init_engine(db_uri: str):
    """Create a SQLAlchemy engine, ensure the schema exists and verify the connection."""
    kwargs = {}
    if db_uri in ("sqlite://", "sqlite:///:memory:"):
        # one shared connection so every request sees the same in-memory DB
        kwargs = {"connect_args": {"check_same_thread": False}, "poolclass": StaticPool}
    engine = create_engine(db_uri, echo=False, future=True, **kwargs)
    try:
        metadata.create_all(engine)
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except Exception as e:
        print("ERROR: could not connect to DB:", e, file=sys.stderr)
        sys.exit(1)
    print("[init] Connected to DB.")
    return engine


class DocumentStore:
    """Create/read/update/delete of JSON documents keyed by opaque ids."""

    def __init__(self, engine):
        self.engine = engine

    @staticmethod
    def _to_doc(row) -> Dict:
        doc = dict(row["body"])
        doc["id"] = row["id"]
        doc["createdAt"] = row["created_at"].isoformat()
        doc["updatedAt"] = row["updated_at"].isoformat()
        return doc

    def create(self, collection: str, body: Dict) -> Dict:
        now = datetime.utcnow()
        doc_id = new_id()
        with self.engine.begin() as conn:
            conn.execute(documents.insert().values(
                id=doc_id, collection=collection, body=body,
                created_at=now, updated_at=now,
            ))
        return self.get(collection, doc_id)

    def get(self, collection: str, doc_id: str) -> Optional[Dict]:
        sql = select(documents).where(
            documents.c.collection == collection, documents.c.id == doc_id,
        )
        with self.engine.connect() as conn:
            row = conn.execute(sql).mappings().first()
        return self._to_doc(row) if row else None

    def update(self, collection: str, doc_id: str, changes: Dict) -> Optional[Dict]:
        current = self.get(collection, doc_id)
        if current is None:
            return None
        body = {k: v for k, v in current.items() if k not in ("id", "createdAt", "updatedAt")}
        body.update(changes)
        with self.engine.begin() as conn:
            conn.execute(
                update(documents)
                .where(documents.c.collection == collection, documents.c.id == doc_id)
                .values(body=body, updated_at=datetime.utcnow())
            )
        return self.get(collection, doc_id)

    def delete(self, collection: str, doc_id: str) -> bool:
        with self.engine.begin() as conn:
            result = conn.execute(
                delete(documents)
                .where(documents.c.collection == collection, documents.c.id == doc_id)
            )
        return result.rowcount > 0

    def find(self, collection: str,
             predicate: Optional[Callable[[Dict], bool]] = None) -> List[Dict]:
        """All documents of *collection* (optionally filtered), oldest first."""
        sql = (
            select(documents)
            .where(documents.c.collection == collection)
            .order_by(documents.c.created_at)
        )
        with self.engine.connect() as conn:
            rows = conn.execute(sql).mappings().all()
        docs = [self._to_doc(r) for r in rows]
        if predicate is not None:
            docs = [d for d in docs if predicate(d)]
        return docs

    def ping(self) -> bool:
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except Exception:
            return False

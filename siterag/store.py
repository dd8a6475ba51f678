"""pgvector-backed vector store.

PgVectorStore implements the store collaborator:
- upsert: insert-or-replace one entry by (collection, id)
- query: nearest entries by cosine distance, nearest first
- ping: connectivity probe

Collections are logical names; a collection row is created the first time it is
written to. Querying a collection that does not exist returns no matches.
"""
import logging
from typing import Any, Dict, List, Optional, Sequence, Set

from sqlalchemy import select, text
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.exc import OperationalError, SQLAlchemyError

from siterag.config import settings
from siterag.db import init_db, session_scope
from siterag.errors import StoreError
from siterag.models import Collection, IndexEntry
from siterag.records import QueryMatch

logger = logging.getLogger(__name__)


def _store_error(action: str, exc: SQLAlchemyError) -> StoreError:
    return StoreError(f"{action} failed: {exc}", exc, transient=isinstance(exc, OperationalError))


class PgVectorStore:
    """Vector store over the index_entries table."""

    def __init__(self, dim: Optional[int] = None, auto_init: bool = True):
        self.dim = dim or settings.EMBEDDING_DIM
        self.auto_init = auto_init
        self._initialized = False
        self._known_collections: Set[str] = set()

    def _ensure_schema(self) -> None:
        if self.auto_init and not self._initialized:
            init_db()
            self._initialized = True

    def _check_dim(self, vector: Sequence[float]) -> None:
        if len(vector) != self.dim:
            raise StoreError(f"vector has {len(vector)} dimensions, collection expects {self.dim}")

    def upsert(self, collection: str, entry_id: str, vector: Sequence[float], metadata: Dict[str, Any]) -> None:
        """Insert or replace one entry; re-adding an id overwrites vector and metadata."""
        self._check_dim(vector)
        values = {
            "collection": collection,
            "entry_id": entry_id,
            "url": metadata.get("url") or "",
            "head": metadata.get("head") or "",
            "body": metadata.get("body") or "",
            "embedding": list(vector),
        }
        stmt = insert(IndexEntry).values(**values)
        stmt = stmt.on_conflict_do_update(
            index_elements=[IndexEntry.collection, IndexEntry.entry_id],
            set_={
                "url": stmt.excluded.url,
                "head": stmt.excluded.head,
                "body": stmt.excluded.body,
                "embedding": stmt.excluded.embedding,
                "updated_at": text("now()"),
            },
        )
        try:
            self._ensure_schema()
            with session_scope() as db:
                if collection not in self._known_collections:
                    db.execute(insert(Collection).values(name=collection).on_conflict_do_nothing())
                db.execute(stmt)
        except SQLAlchemyError as exc:
            raise _store_error(f"upsert {entry_id}", exc) from exc
        self._known_collections.add(collection)
        logger.debug("Upserted %s into %s", entry_id, collection)

    def query(self, collection: str, vector: Sequence[float], top_k: int = 1) -> List[QueryMatch]:
        """Return the top_k nearest entries by cosine distance, nearest first."""
        self._check_dim(vector)
        if top_k <= 0:
            return []
        distance = IndexEntry.embedding.cosine_distance(list(vector)).label("distance")
        stmt = (
            select(IndexEntry, distance)
            .where(IndexEntry.collection == collection)
            .order_by(distance)
            .limit(top_k)
        )
        try:
            self._ensure_schema()
            with session_scope() as db:
                rows = db.execute(stmt).all()
                return [
                    QueryMatch(id=entry.entry_id, metadata=entry.metadata_dict(), distance=float(dist))
                    for entry, dist in rows
                ]
        except SQLAlchemyError as exc:
            raise _store_error(f"query {collection}", exc) from exc

    def ping(self) -> bool:
        """Return True when the database answers a trivial query."""
        try:
            with session_scope() as db:
                db.execute(text("SELECT 1"))
        except SQLAlchemyError as exc:
            logger.warning("Store ping failed: %s", exc)
            return False
        return True

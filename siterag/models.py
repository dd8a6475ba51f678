"""Database ORM models.

- Collection: a logical namespace of index entries, created on first use.
- IndexEntry: one embedded unit (page head or body chunk) with url/head/body metadata
  and a pgvector embedding. (collection, entry_id) is unique; writes are upserts.
"""
from datetime import datetime

from pgvector.sqlalchemy import Vector
from sqlalchemy import Column, DateTime, ForeignKey, Index, String, Text

from siterag.config import settings
from siterag.db import Base


class Collection(Base):
    __tablename__ = "collections"

    name = Column(String(255), primary_key=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class IndexEntry(Base):
    """Vector-embedded page unit used for retrieval.

    Notes:
        The embedding dimension is derived from settings.EMBEDDING_DIM and must match
        the embedding model configured in siterag.config.Settings.
    """
    __tablename__ = "index_entries"

    collection = Column(String(255), ForeignKey("collections.name", ondelete="CASCADE"), primary_key=True)
    entry_id = Column(String(2048), primary_key=True)  # page url, or url#ordinal for body chunks

    url = Column(String(2048), nullable=False)
    head = Column(Text, nullable=False, default="")
    body = Column(Text, nullable=False, default="")

    embedding = Column(Vector(dim=settings.EMBEDDING_DIM), nullable=False)

    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    __table_args__ = (
        Index("idx_index_entries_url", "url"),
    )

    def metadata_dict(self):
        return {"url": self.url, "head": self.head, "body": self.body}

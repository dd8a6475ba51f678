"""Database setup and session utilities for SQLAlchemy.

This module centralizes engine/session initialization, metadata base, and helpers:
- get_engine: Lazily created engine for settings.DATABASE_URL.
- init_db: Ensures the pgvector extension exists and creates required tables and the
  IVFFLAT index over the index_entries.embedding column for vector similarity search.
- session_scope: Context-managed transactional scope for imperative workflows.

Configuration is read from siterag.config.settings.DATABASE_URL.
"""
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from siterag.config import settings

Base = declarative_base()

_engine: Optional[Engine] = None
_SessionLocal: Optional[sessionmaker] = None


def get_engine() -> Engine:
    """Return the process-wide engine, creating it on first use."""
    global _engine, _SessionLocal
    if _engine is None:
        _engine = create_engine(settings.DATABASE_URL, pool_pre_ping=True, future=True)
        _SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=_engine, future=True)
    return _engine


def init_db(engine: Optional[Engine] = None) -> None:
    """Initialize database extensions, tables, and vector indexes.

    This function is idempotent and safe to run multiple times.
    """
    engine = engine or get_engine()
    with engine.connect() as conn:
        conn.execute(text("CREATE EXTENSION IF NOT EXISTS vector"))
        conn.commit()

    # Import models after Base is defined
    from siterag import models  # noqa: F401

    Base.metadata.create_all(bind=engine)

    with engine.connect() as conn:
        conn.execute(
            text(
                """
                CREATE INDEX IF NOT EXISTS idx_index_entries_embedding_ivfflat
                ON index_entries USING ivfflat (embedding vector_cosine_ops)
                WITH (lists = 100)
                """
            )
        )
        conn.commit()


@contextmanager
def session_scope() -> Iterator[Session]:
    """Provide a transactional scope around a series of operations.

    Commits on successful exit, rolls back and re-raises on exception, always closes.
    """
    get_engine()
    session = _SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()

"""Default wiring of the OpenAI and pgvector collaborators.

build_orchestrator/build_answerer assemble the production components; ingest and
answer are the one-call entry points used by the CLI and the HTTP API.
"""
import asyncio
from typing import Optional

from siterag.config import settings
from siterag.embedding import OpenAIEmbedder
from siterag.generation import OpenAIGenerator
from siterag.ingestion import IngestionOrchestrator, PageFetcher
from siterag.records import IngestReport
from siterag.retrieval import RetrievalAnswerer
from siterag.store import PgVectorStore


def build_orchestrator(**overrides) -> IngestionOrchestrator:
    overrides.setdefault("max_pages", settings.MAX_PAGES)
    overrides.setdefault("max_depth", settings.MAX_DEPTH)
    return IngestionOrchestrator(
        fetcher=PageFetcher(),
        embedder=OpenAIEmbedder(),
        store=PgVectorStore(),
        **overrides,
    )


def build_answerer(top_k: Optional[int] = None) -> RetrievalAnswerer:
    return RetrievalAnswerer(OpenAIEmbedder(), PgVectorStore(), OpenAIGenerator(), top_k=top_k)


def ingest(url: str, **overrides) -> IngestReport:
    """Crawl and index a site, blocking until the crawl finishes."""
    return asyncio.run(build_orchestrator(**overrides).ingest(url))


def answer(question: str, top_k: Optional[int] = None) -> str:
    return build_answerer(top_k=top_k).answer(question)

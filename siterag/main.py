"""FastAPI application entrypoint and routes.

Exposes /health, /ingest and /ask. The collaborators are provided through
dependencies so they can be swapped (tests override them with in-memory fakes).
"""
import time
from typing import Callable

from fastapi import Depends, FastAPI, HTTPException

from siterag.config import settings
from siterag.db import init_db
from siterag.errors import SiteRagError
from siterag.ingestion import IngestionOrchestrator
from siterag.logging_config import setup_logging
from siterag.obs import init_tracing
from siterag.retrieval import RetrievalAnswerer
from siterag.schemas import AskRequest, AskResponse, IngestRequest, IngestResponse
from siterag.service import build_answerer, build_orchestrator
from siterag.store import PgVectorStore

app = FastAPI(title="siterag", version="0.1.0")


@app.on_event("startup")
def on_startup() -> None:
    """Configure logging/tracing and ensure the schema exists."""
    setup_logging(settings.LOG_LEVEL)
    init_tracing()
    init_db()


def get_answerer() -> RetrievalAnswerer:
    return build_answerer()


def get_orchestrator_factory() -> Callable[..., IngestionOrchestrator]:
    return build_orchestrator


def get_store() -> PgVectorStore:
    return PgVectorStore(auto_init=False)


@app.get("/health")
def health(store: PgVectorStore = Depends(get_store)):
    """Liveness probe with a store connectivity flag."""
    return {"status": "ok", "store": store.ping()}


@app.post("/ingest", response_model=IngestResponse)
async def ingest_site(
    req: IngestRequest,
    make_orchestrator: Callable[..., IngestionOrchestrator] = Depends(get_orchestrator_factory),
) -> IngestResponse:
    """Crawl and index a site; returns once the crawl has finished.

    Per-page failures are reported in the response, not as an HTTP error.
    """
    t0 = time.time()
    overrides = {k: v for k, v in req.dict().items() if k != "url" and v is not None}
    report = await make_orchestrator(**overrides).ingest(req.url)
    return IngestResponse(
        root_url=report.root_url,
        pages_fetched=report.fetched,
        entries_stored=len(report.stored_ids),
        visited=report.visited,
        failures=report.failures,
        latency_ms=int((time.time() - t0) * 1000),
    )


@app.post("/ask", response_model=AskResponse)
def ask(req: AskRequest, answerer: RetrievalAnswerer = Depends(get_answerer)) -> AskResponse:
    """Answer a user question from the indexed site."""
    t0 = time.time()
    try:
        result = answerer.ask(req.question, top_k=req.top_k)
    except SiteRagError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    return AskResponse(
        answer=result.text,
        sources=result.urls,
        latency_ms=int((time.time() - t0) * 1000),
    )

"""Site crawler and ingestor.

Crawls a site starting from a root URL, splits every page into a head record and
word-count body chunks, embeds each unit and upserts it into the vector store.

Main pieces:
- Frontier: depth-first worklist owning the visited set and optional page/depth caps
- IngestionOrchestrator: per-URL fetch -> extract -> embed/store -> follow internal links

Traversal is sequential: one collaborator call is in flight at a time. Each call runs
in a worker thread under a timeout and is retried with linear backoff when the failure
is transient. A call that times out is not retried, and the crawl waits for its worker
to return before moving on; collaborators carry their own deadlines (requests timeout,
OpenAI client timeout) so an abandoned call ends on its own.

Any error while processing a URL is contained to that URL: it is logged, recorded on
the report, and the page's links are not followed.

Without max_pages/max_depth the crawl is bounded only by the visited set, so a large
site is crawled in full.
"""
import asyncio
import logging
import threading
import time
from typing import Any, Callable, Iterable, List, Optional, Protocol, Sequence, Set, Tuple
from urllib.parse import urldefrag

from siterag.config import settings
from siterag.errors import SiteRagError
from siterag.ingestion.extract import PageExtractor
from siterag.obs import span
from siterag.records import IngestReport, PageRecord, QueryMatch
from siterag.utils import build_chunks, normalize_url, resolve_link, same_host

logger = logging.getLogger(__name__)


class Fetcher(Protocol):
    def fetch(self, url: str) -> str: ...


class Extractor(Protocol):
    def extract(self, html: str, url: str = "") -> PageRecord: ...


class Embedder(Protocol):
    def embed(self, text: str) -> List[float]: ...


class VectorStore(Protocol):
    def upsert(self, collection: str, entry_id: str, vector: Sequence[float], metadata: dict) -> None: ...

    def query(self, collection: str, vector: Sequence[float], top_k: int = 1) -> List[QueryMatch]: ...


class Frontier:
    """Depth-first worklist of (url, depth) pairs plus the visited set.

    claim() is the single check-and-mark step: it returns True exactly once per
    normalized URL for the lifetime of the frontier.
    """

    def __init__(self, max_pages: Optional[int] = None, max_depth: Optional[int] = None):
        self.max_pages = max_pages
        self.max_depth = max_depth
        self._stack: List[Tuple[str, int]] = []
        self._visited: Set[str] = set()
        self._lock = threading.Lock()

    @property
    def visited(self) -> Set[str]:
        return set(self._visited)

    @property
    def full(self) -> bool:
        return self.max_pages is not None and len(self._visited) >= self.max_pages

    def push(self, url: str, depth: int) -> None:
        self._stack.append((url, depth))

    def extend(self, urls: Iterable[str], depth: int) -> None:
        """Queue urls so that they are popped in the given order."""
        for url in reversed(list(urls)):
            self.push(url, depth)

    def pop(self) -> Optional[Tuple[str, int]]:
        if not self._stack:
            return None
        return self._stack.pop()

    def within_depth(self, depth: int) -> bool:
        return self.max_depth is None or depth <= self.max_depth

    def claim(self, url: str) -> bool:
        key = normalize_url(url)
        with self._lock:
            if key in self._visited or self.full:
                return False
            self._visited.add(key)
            return True


class IngestionOrchestrator:
    """Crawl a site and index every reachable page.

    Args:
        fetcher: Page fetcher collaborator.
        embedder: Embedding collaborator.
        store: Vector store collaborator.
        extractor: HTML extractor (defaults to PageExtractor).
        collection: Logical collection name in the store.
        chunk_words: Maximum words per body chunk.
        max_pages: Optional cap on pages claimed per run.
        max_depth: Optional cap on link depth from the root (root is depth 0).
        same_host_only: Only follow links that stay on the root URL's host.
        call_timeout: Seconds allowed per collaborator call (0 disables).
        retry_attempts: Attempts per collaborator call, including the first.
        retry_backoff: Base delay in seconds; attempt n waits n * retry_backoff.
        frontier_factory: Builds the frontier for each run (for tests and custom caps).
    """

    def __init__(
        self,
        fetcher: Fetcher,
        embedder: Embedder,
        store: VectorStore,
        extractor: Optional[Extractor] = None,
        collection: Optional[str] = None,
        chunk_words: Optional[int] = None,
        max_pages: Optional[int] = None,
        max_depth: Optional[int] = None,
        same_host_only: Optional[bool] = None,
        call_timeout: Optional[float] = None,
        retry_attempts: Optional[int] = None,
        retry_backoff: Optional[float] = None,
        frontier_factory: Optional[Callable[[], Frontier]] = None,
    ):
        self.fetcher = fetcher
        self.embedder = embedder
        self.store = store
        self.extractor = extractor or PageExtractor()
        self.collection = collection or settings.COLLECTION_NAME
        self.chunk_words = chunk_words if chunk_words is not None else settings.CHUNK_WORDS
        self.same_host_only = settings.SAME_HOST_ONLY if same_host_only is None else same_host_only
        self.call_timeout = call_timeout if call_timeout is not None else settings.CALL_TIMEOUT_SECONDS
        self.retry_attempts = max(1, retry_attempts if retry_attempts is not None else settings.RETRY_ATTEMPTS)
        self.retry_backoff = retry_backoff if retry_backoff is not None else settings.RETRY_BACKOFF_SECONDS
        self.frontier_factory = frontier_factory or (lambda: Frontier(max_pages=max_pages, max_depth=max_depth))

    async def ingest(self, url: str) -> IngestReport:
        """Crawl from url depth-first and index every page reached.

        Args:
            url: Absolute root URL.

        Returns:
            IngestReport: Visited, fetched, stored and failed URLs for this run.
        """
        frontier = self.frontier_factory()
        report = IngestReport(root_url=url)
        frontier.push(url, 0)
        t0 = time.time()
        logger.info("Starting ingestion for: %s", url)

        while not frontier.full:
            item = frontier.pop()
            if item is None:
                break
            current, depth = item

            if self.same_host_only and not same_host(current, url):
                logger.debug("Off-host, not following: %s", current)
                report.skipped.append(current)
                continue
            if not frontier.within_depth(depth):
                logger.debug("Beyond max depth %s: %s", frontier.max_depth, current)
                report.skipped.append(current)
                continue
            if not frontier.claim(current):
                logger.debug("Already visited: %s", current)
                report.skipped.append(current)
                continue
            report.visited.append(normalize_url(current))

            try:
                links = await self._ingest_page(current, report)
            except Exception as exc:
                logger.warning("Error ingesting %s: %s: %s", current, type(exc).__name__, exc)
                report.failures[current] = f"{type(exc).__name__}: {exc}"
                continue

            frontier.extend([resolve_link(current, link) for link in sorted(links)], depth + 1)

        logger.info(
            "Ingestion of %s done in %.1fs: %d pages, %d entries, %d failed",
            url, time.time() - t0, report.fetched, len(report.stored_ids), len(report.failures),
        )
        return report

    async def _ingest_page(self, url: str, report: IngestReport) -> Set[str]:
        """Fetch, extract, embed and store one page; return its raw internal links."""
        page_url = urldefrag(url).url
        html = await self._call("fetch", self.fetcher.fetch, page_url)
        report.fetched += 1

        with span("siterag.extract", {"url": page_url}):
            page = self.extractor.extract(html, page_url)
        page.url = page_url

        chunks = build_chunks(page, self.chunk_words)
        for chunk in chunks:
            vector = await self._call("embed", self.embedder.embed, chunk.text)
            await self._call("store", self.store.upsert, self.collection, chunk.entry_id, vector, chunk.metadata())
            report.stored_ids.append(chunk.entry_id)

        logger.info("[INGEST] %s -> %d entries, %d internal links", page_url, len(chunks), len(page.internal_links))
        return page.internal_links

    async def _call(self, step: str, fn: Callable[..., Any], *args: Any) -> Any:
        """Run a blocking collaborator call off the event loop with timeout and retries."""
        attempt = 1
        while True:
            try:
                with span(f"siterag.{step}", {"attempt": attempt}):
                    return await self._run_bounded(step, fn, *args)
            except SiteRagError as exc:
                if not exc.transient or attempt >= self.retry_attempts:
                    raise
                delay = self.retry_backoff * attempt
                logger.info(
                    "%s failed (attempt %d/%d): %s: %s; retrying in %.1fs",
                    step, attempt, self.retry_attempts, type(exc).__name__, exc, delay,
                )
                await asyncio.sleep(delay)
                attempt += 1

    async def _run_bounded(self, step: str, fn: Callable[..., Any], *args: Any) -> Any:
        """Run fn in a worker thread; raise asyncio.TimeoutError once the deadline passes.

        Threads cannot be cancelled, so after a timeout this still waits for the worker
        to return before raising. The next call never overlaps a timed-out one.
        """
        task = asyncio.ensure_future(asyncio.to_thread(fn, *args))
        done, _ = await asyncio.wait({task}, timeout=self.call_timeout or None)
        if task in done:
            return task.result()

        logger.warning("%s timed out after %.2fs; waiting for the worker to return", step, self.call_timeout)
        await asyncio.wait({task})
        if task.exception() is not None:
            logger.debug("%s worker failed after timeout: %s", step, task.exception())
        raise asyncio.TimeoutError(f"{step} timed out after {self.call_timeout}s")

"""Plain data records passed between the crawl, the store and the answerer.

Defines:
- PageRecord: one fetched page split into head/body markup and its links.
- Chunk: one storable unit of a page (the head, or a slice of body words).
- QueryMatch: a single nearest-neighbour result from the vector store.
- GenerationRequest: system instruction + user content sent to the generator.
- IngestReport: what a single ingestion run did.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set


@dataclass
class PageRecord:
    """A parsed page.

    Attributes:
        url: Page URL (empty until the orchestrator assigns it).
        head: Inner markup of <head>.
        body: Inner markup of <body>.
        internal_links: Raw hrefs to resolve against the page URL.
        external_links: Absolute http(s) hrefs.
    """
    url: str
    head: str
    body: str
    internal_links: Set[str] = field(default_factory=set)
    external_links: Set[str] = field(default_factory=set)


@dataclass
class Chunk:
    """A storable unit of a page.

    The head record has ordinal None and is stored under the page URL; body chunks are
    stored under "{url}#{ordinal}" so every chunk keeps its own entry.
    """
    source_url: str
    head: str
    body: str
    ordinal: Optional[int] = None

    @property
    def is_head(self) -> bool:
        return self.ordinal is None

    @property
    def entry_id(self) -> str:
        if self.ordinal is None:
            return self.source_url
        return f"{self.source_url}#{self.ordinal}"

    @property
    def text(self) -> str:
        """Text that gets embedded for this chunk."""
        return self.head if self.is_head else self.body

    def metadata(self) -> Dict[str, str]:
        return {"url": self.source_url, "head": self.head, "body": self.body}


@dataclass
class QueryMatch:
    id: str
    metadata: Dict[str, Any]
    distance: float


@dataclass
class GenerationRequest:
    system: str
    user: str

    def messages(self) -> List[Dict[str, str]]:
        return [
            {"role": "system", "content": self.system},
            {"role": "user", "content": self.user},
        ]


@dataclass
class IngestReport:
    """Outcome of one top-level ingestion call.

    Attributes:
        root_url: URL the crawl started from.
        visited: Normalized URLs claimed by the frontier, in claim order.
        fetched: Number of successful page fetches.
        stored_ids: Entry ids upserted into the store.
        skipped: URLs popped from the frontier but not processed (already visited,
            outside the host, or past a cap).
        failures: URL -> error message for pages whose processing failed.
    """
    root_url: str
    visited: List[str] = field(default_factory=list)
    fetched: int = 0
    stored_ids: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    failures: Dict[str, str] = field(default_factory=dict)

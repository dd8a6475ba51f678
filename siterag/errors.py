"""Error taxonomy shared by the collaborator adapters.

Adapters translate library exceptions (requests, BeautifulSoup, openai, SQLAlchemy)
into these types so the orchestrator can isolate failures per page and the query path
can surface them to its caller.
"""
from typing import Optional

# Statuses worth retrying; anything else in 4xx is a permanent answer from the server.
RETRYABLE_STATUS_CODES = {408, 429, 500, 502, 503, 504}


class SiteRagError(Exception):
    """Base class for every error raised by siterag collaborators."""

    transient: bool = False

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


class FetchError(SiteRagError):
    """A page could not be retrieved (network failure, bad status, timeout, bad URL)."""

    def __init__(
        self,
        url: str,
        cause: Optional[BaseException] = None,
        status: Optional[int] = None,
        message: Optional[str] = None,
    ):
        self.url = url
        self.status = status
        if message is None:
            if status is not None:
                message = f"GET {url} returned HTTP {status}"
            else:
                message = f"GET {url} failed: {cause}"
        super().__init__(message, cause)

    @property
    def transient(self) -> bool:  # type: ignore[override]
        if self.status is not None:
            return self.status in RETRYABLE_STATUS_CODES
        # Network-level failures with a cause are retried; rejected URLs are not.
        return self.cause is not None


class ParseError(SiteRagError):
    """Raw HTML could not be turned into a page record."""


class EmbedError(SiteRagError):
    """The embedding collaborator failed (quota, timeout, malformed input)."""

    def __init__(self, message: str, cause: Optional[BaseException] = None, transient: bool = False):
        super().__init__(message, cause)
        self.transient = transient


class StoreError(SiteRagError):
    """The vector store rejected an upsert or query."""

    def __init__(self, message: str, cause: Optional[BaseException] = None, transient: bool = False):
        super().__init__(message, cause)
        self.transient = transient


class GenerationError(SiteRagError):
    """The language-generation collaborator failed."""

"""HTTP page fetcher.

fetch() performs a single GET with an identifying User-Agent and a timeout. It does not
retry; retries are applied by the crawl orchestrator around each call.
"""
import logging
from typing import Dict, Optional
from urllib.parse import urlparse

import requests

from siterag.config import settings
from siterag.errors import FetchError

logger = logging.getLogger(__name__)


class PageFetcher:
    """Retrieve raw HTML for absolute http(s) URLs."""

    def __init__(
        self,
        timeout: Optional[float] = None,
        user_agent: Optional[str] = None,
        session: Optional[requests.Session] = None,
    ):
        self.timeout = timeout if timeout is not None else settings.FETCH_TIMEOUT_SECONDS
        self.headers: Dict[str, str] = {"User-Agent": user_agent or settings.USER_AGENT}
        self._http = session or requests

    def fetch(self, url: str) -> str:
        """Fetch a URL with a simple GET request.

        Args:
            url: Absolute http(s) URL to fetch.

        Returns:
            str: Response body text.

        Raises:
            FetchError: On a non-absolute or non-HTTP URL, network failure, timeout,
                or a non-success status.
        """
        parsed = urlparse(url)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise FetchError(url, message=f"not an absolute http(s) URL: {url!r}")

        try:
            resp = self._http.get(url, headers=self.headers, timeout=self.timeout)
        except requests.RequestException as exc:
            raise FetchError(url, cause=exc) from exc

        if not resp.ok:
            raise FetchError(url, status=resp.status_code)
        logger.debug("GET %s -> %s (%d bytes)", url, resp.status_code, len(resp.content or b""))
        return resp.text

"""HTML extraction: head/body inner markup and classified hyperlinks.

The markup is kept verbatim (no text-only reduction); embeddings are computed over
markup-inclusive content.
"""
from typing import Optional, Union

from bs4 import BeautifulSoup
from bs4.element import Tag

from siterag.errors import ParseError
from siterag.records import PageRecord

IGNORED_HREFS = {"", "/"}


def _inner_markup(el: Optional[Tag]) -> str:
    if el is None:
        return ""
    return el.decode_contents()


def classify_href(href: str) -> Optional[str]:
    """Classify a raw href as "internal", "external", or None when ignored.

    Anything starting with "http" (http/https) is external; every other non-trivial
    value (paths, relative, fragments, protocol-relative, other schemes) is internal.
    """
    if href in IGNORED_HREFS:
        return None
    if href.startswith("http"):
        return "external"
    return "internal"


def extract_page(html: Union[str, bytes], url: str = "") -> PageRecord:
    """Parse HTML into head markup, body markup and deduplicated link sets.

    Args:
        html: Raw page HTML.
        url: Optional page URL to stamp on the record.

    Returns:
        PageRecord: Parsed page; links are raw hrefs, not yet resolved.

    Raises:
        ParseError: If the document cannot be parsed at all.
    """
    if html is None:
        raise ParseError(f"no document to parse for {url or 'page'}")
    try:
        soup = BeautifulSoup(html, "lxml")
    except Exception as exc:
        raise ParseError(f"could not parse {url or 'page'}: {exc}", exc) from exc

    page = PageRecord(url=url, head=_inner_markup(soup.head), body=_inner_markup(soup.body))
    for a in soup.find_all("a", href=True):
        href = a["href"]
        kind = classify_href(href)
        if kind == "external":
            page.external_links.add(href)
        elif kind == "internal":
            page.internal_links.add(href)
    return page


class PageExtractor:
    """Object form of extract_page for injection into the orchestrator."""

    def extract(self, html: Union[str, bytes], url: str = "") -> PageRecord:
        return extract_page(html, url)

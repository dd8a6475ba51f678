"""Utility helpers for URL normalization/resolution and word-count chunking.

This module provides:
- normalize_url: normalization used as the visited-set key
- resolve_link: standard relative-URL resolution against a page URL
- same_host: host containment check used when same-host crawling is enabled
- chunk_text: fixed-size word-count chunking
- build_chunks: head record + body chunks for one page
"""
import re
from typing import List
from urllib.parse import urldefrag, urljoin, urlparse

from siterag.records import Chunk, PageRecord


def normalize_url(u: str) -> str:
    """Normalize URLs by removing fragments and trailing slashes.

    Args:
        u: Absolute URL.

    Returns:
        str: Normalized URL used to key the visited set.
    """
    u = re.sub(r"#.*$", "", u.strip())
    if len(u) > 1 and u.endswith("/"):
        u = u[:-1]
    return u


def resolve_link(base_url: str, href: str) -> str:
    """Resolve an internal href against the page it was found on.

    Scheme and host are inherited and the path merged per RFC 3986; the fragment is
    dropped since it never changes the fetched document.

    Args:
        base_url: URL of the page containing the link.
        href: Raw href value.

    Returns:
        str: Absolute URL without fragment.
    """
    return urldefrag(urljoin(base_url, href)).url


def same_host(a: str, b: str) -> bool:
    return urlparse(a).netloc.lower() == urlparse(b).netloc.lower()


def chunk_text(text: str, max_words: int) -> List[str]:
    """Split text into consecutive segments of at most max_words words.

    Words are whitespace-separated runs; each segment is re-joined with single spaces,
    so inter-word whitespace variation is collapsed.

    Args:
        text: Input string to split.
        max_words: Maximum number of words per segment.

    Returns:
        List[str]: Segments in original order; empty when text is empty or max_words <= 0.
    """
    if not text or max_words <= 0:
        return []
    words = text.split()
    return [" ".join(words[i:i + max_words]) for i in range(0, len(words), max_words)]


def build_chunks(page: PageRecord, max_words: int) -> List[Chunk]:
    """Expand a page into its head record followed by its body chunks.

    The head record carries the full body markup in its metadata; a blank head is
    skipped since there is nothing to embed.
    """
    chunks: List[Chunk] = []
    if page.head and page.head.strip():
        chunks.append(Chunk(source_url=page.url, head=page.head, body=page.body))
    for i, piece in enumerate(chunk_text(page.body, max_words)):
        chunks.append(Chunk(source_url=page.url, head=page.head, body=piece, ordinal=i))
    return chunks

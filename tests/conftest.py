"""Pytest fixtures: in-memory collaborators for the crawler and the answerer."""

import hashlib
import math
import threading
import time
from typing import Dict, List

import pytest

from siterag.errors import EmbedError, FetchError
from siterag.records import QueryMatch

DIM = 16


def _unit(vec):
    norm = math.sqrt(sum(x * x for x in vec)) or 1.0
    return [x / norm for x in vec]


class FakeFetcher:
    """Serves pages from a dict and records every fetch attempt."""

    def __init__(self, pages: Dict[str, str], errors: Dict[str, List[Exception]] = None, delay: float = 0.0):
        self.pages = pages
        self.errors = {k: list(v) for k, v in (errors or {}).items()}
        self.delay = delay
        self.calls: List[str] = []
        self.in_flight = 0
        self.peak = 0
        self._lock = threading.Lock()

    def fetch(self, url: str) -> str:
        with self._lock:
            self.calls.append(url)
            self.in_flight += 1
            self.peak = max(self.peak, self.in_flight)
        try:
            return self._serve(url)
        finally:
            with self._lock:
                self.in_flight -= 1

    def _serve(self, url: str) -> str:
        if self.delay:
            time.sleep(self.delay)
        queued = self.errors.get(url)
        if queued:
            raise queued.pop(0)
        if url not in self.pages:
            raise FetchError(url, status=404)
        return self.pages[url]


class FakeEmbedder:
    """Deterministic bag-of-words hashing embedder."""

    def __init__(self, poison: str = None):
        self.poison = poison
        self.calls: List[str] = []

    def embed(self, text: str) -> List[float]:
        self.calls.append(text)
        if self.poison and self.poison in text:
            raise EmbedError(f"refusing to embed text containing {self.poison!r}")
        vec = [0.0] * DIM
        for word in text.lower().split():
            h = int(hashlib.md5(word.encode("utf-8")).hexdigest(), 16)
            vec[h % DIM] += 1.0
        return _unit(vec)


class FakeStore:
    """In-memory vector store with cosine distance and upsert-by-id."""

    def __init__(self):
        self.collections: Dict[str, Dict[str, tuple]] = {}
        self.upserts: List[str] = []

    def upsert(self, collection, entry_id, vector, metadata):
        self.upserts.append(entry_id)
        self.collections.setdefault(collection, {})[entry_id] = (list(vector), dict(metadata))

    def query(self, collection, vector, top_k=1):
        entries = self.collections.get(collection, {})
        q = _unit(list(vector))
        scored = []
        for entry_id, (vec, meta) in entries.items():
            dist = 1.0 - sum(a * b for a, b in zip(q, _unit(vec)))
            scored.append(QueryMatch(id=entry_id, metadata=meta, distance=dist))
        scored.sort(key=lambda m: m.distance)
        return scored[:top_k]

    def entries(self, collection="test"):
        return self.collections.get(collection, {})


class FakeGenerator:
    def __init__(self, reply: str = "generated answer"):
        self.reply = reply
        self.requests = []

    def generate(self, request):
        self.requests.append(request)
        return self.reply


def page(title: str, body: str) -> str:
    return f"<html><head><title>{title}</title></head><body>{body}</body></html>"


@pytest.fixture
def embedder():
    return FakeEmbedder()


@pytest.fixture
def store():
    return FakeStore()


@pytest.fixture
def generator():
    return FakeGenerator()

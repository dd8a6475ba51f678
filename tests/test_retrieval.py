import pytest

from siterag.errors import EmbedError, StoreError
from siterag.generation import SYSTEM_PROMPT
from siterag.records import QueryMatch
from siterag.retrieval import RetrievalAnswerer


def _answerer(embedder, store, generator, **kw):
    return RetrievalAnswerer(embedder, store, generator, collection="test", **kw)


def test_retrieved_url_and_body_reach_the_generator(embedder, store, generator):
    meta = {"url": "https://site.com/contact", "head": "<title>Contact</title>", "body": "Email us at hi@site.com"}
    store.upsert("test", "https://site.com/contact#0", embedder.embed(meta["body"]), meta)

    out = _answerer(embedder, store, generator).answer("How do I email you?")

    assert out == "generated answer"
    request = generator.requests[0]
    assert request.system == SYSTEM_PROMPT
    assert "https://site.com/contact" in request.user
    assert "Email us at hi@site.com" in request.user
    assert "How do I email you?" in request.user


def test_nearest_entry_wins_with_top_k_one(embedder, store, generator):
    for slug, body in [("contact", "email phone address contact"), ("pricing", "plans pricing cost monthly")]:
        meta = {"url": f"https://site.com/{slug}", "head": "", "body": body}
        store.upsert("test", meta["url"], embedder.embed(body), meta)

    result = _answerer(embedder, store, generator, top_k=1).ask("pricing cost monthly plans")

    assert result.urls == ["https://site.com/pricing"]
    assert "https://site.com/contact" not in generator.requests[0].user


def test_empty_collection_still_asks_generator(embedder, store, generator):
    out = _answerer(embedder, store, generator).answer("Anything there?")

    assert out == "generated answer"
    assert generator.requests[0].user == "Query: Anything there?\n\nURL:\n\nRetrieved context: "


def test_blank_metadata_values_are_dropped(embedder, generator):
    class StaticStore:
        def query(self, collection, vector, top_k=1):
            return [
                QueryMatch(id="a", metadata={"url": "https://site.com/a", "body": "   "}, distance=0.1),
                QueryMatch(id="b", metadata={"url": "", "body": "kept body"}, distance=0.2),
            ]

    req = _answerer(embedder, StaticStore(), generator, top_k=2).build_request(
        "q", StaticStore().query("test", [0.0])
    )
    assert req.user == "Query: q\n\nURL:https://site.com/a\n\nRetrieved context: kept body"


def test_top_k_is_passed_to_store(embedder, generator):
    seen = {}

    class RecordingStore:
        def query(self, collection, vector, top_k=1):
            seen.update(collection=collection, top_k=top_k)
            return []

    _answerer(embedder, RecordingStore(), generator, top_k=3).answer("q")
    assert seen == {"collection": "test", "top_k": 3}


def test_embed_errors_propagate(store, generator):
    class BrokenEmbedder:
        def embed(self, text):
            raise EmbedError("quota exceeded")

    with pytest.raises(EmbedError):
        _answerer(BrokenEmbedder(), store, generator).answer("q")
    assert generator.requests == []


def test_store_errors_propagate(embedder, generator):
    class BrokenStore:
        def query(self, collection, vector, top_k=1):
            raise StoreError("connection lost")

    with pytest.raises(StoreError):
        _answerer(embedder, BrokenStore(), generator).answer("q")


def test_explicit_zero_top_k_reaches_the_store(embedder, generator):
    seen = {}

    class RecordingStore:
        def query(self, collection, vector, top_k=1):
            seen["top_k"] = top_k
            return []

    result = _answerer(embedder, RecordingStore(), generator, top_k=3).ask("q", top_k=0)

    assert seen == {"top_k": 0}
    assert result.urls == []

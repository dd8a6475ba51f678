from types import SimpleNamespace

import httpx
import openai
import pytest

import siterag.embedding as embedding_mod
import siterag.generation as generation_mod
from siterag.errors import EmbedError, GenerationError
from siterag.generation import SYSTEM_PROMPT, OpenAIGenerator, build_request


def _connection_error():
    return openai.APIConnectionError(request=httpx.Request("POST", "https://api.openai.com/v1"))


class DummyEmbeddings:
    def __init__(self, error=None):
        self.error = error
        self.kwargs = None

    def create(self, **kwargs):
        self.kwargs = kwargs
        if self.error:
            raise self.error
        return SimpleNamespace(data=[SimpleNamespace(embedding=[0.1, 0.2, 0.3]) for _ in kwargs["input"]])


class DummyCompletions:
    def __init__(self, error=None):
        self.error = error
        self.kwargs = None

    def create(self, **kwargs):
        self.kwargs = kwargs
        if self.error:
            raise self.error
        message = SimpleNamespace(content="  You can email hi@site.com.  ")
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def test_embedder_returns_vector(monkeypatch):
    emb = DummyEmbeddings()
    monkeypatch.setattr(embedding_mod, "get_client", lambda: SimpleNamespace(embeddings=emb))

    vec = embedding_mod.OpenAIEmbedder(model="text-embedding-3-small").embed("hello")

    assert vec == [0.1, 0.2, 0.3]
    assert emb.kwargs == {"model": "text-embedding-3-small", "input": ["hello"], "encoding_format": "float"}


def test_embedder_rejects_blank_text(monkeypatch):
    monkeypatch.setattr(embedding_mod, "get_client", lambda: pytest.fail("client used"))
    with pytest.raises(EmbedError):
        embedding_mod.OpenAIEmbedder().embed("   ")


def test_embedder_wraps_api_errors_as_transient(monkeypatch):
    emb = DummyEmbeddings(error=_connection_error())
    monkeypatch.setattr(embedding_mod, "get_client", lambda: SimpleNamespace(embeddings=emb))

    with pytest.raises(EmbedError) as ei:
        embedding_mod.OpenAIEmbedder().embed("hello")
    assert ei.value.transient is True
    assert isinstance(ei.value.cause, openai.APIConnectionError)


def test_embed_texts_empty_batch_skips_api(monkeypatch):
    monkeypatch.setattr(embedding_mod, "get_client", lambda: pytest.fail("client used"))
    assert embedding_mod.embed_texts([]) == []


def test_build_request_layout():
    req = build_request("How do we contact them?", ["https://a.com/x", "https://a.com/y"], ["body one", "body two"])
    assert req.system == SYSTEM_PROMPT
    assert req.user == (
        "Query: How do we contact them?\n\n"
        "URL:https://a.com/x, https://a.com/y\n\n"
        "Retrieved context: body one\n\nbody two"
    )
    assert req.messages() == [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": req.user},
    ]


def test_generator_sends_messages_and_strips_reply(monkeypatch):
    comp = DummyCompletions()
    client = SimpleNamespace(chat=SimpleNamespace(completions=comp))
    monkeypatch.setattr(generation_mod, "get_client", lambda: client)

    req = build_request("q", ["https://site.com"], ["ctx"])
    out = OpenAIGenerator(model="gpt-4").generate(req)

    assert out == "You can email hi@site.com."
    assert comp.kwargs["model"] == "gpt-4"
    assert comp.kwargs["messages"] == req.messages()


def test_generator_wraps_api_errors(monkeypatch):
    comp = DummyCompletions(error=_connection_error())
    monkeypatch.setattr(generation_mod, "get_client", lambda: SimpleNamespace(chat=SimpleNamespace(completions=comp)))

    with pytest.raises(GenerationError):
        OpenAIGenerator().generate(build_request("q", [], []))


def test_embedding_client_carries_the_call_deadline(monkeypatch):
    seen = {}
    monkeypatch.setattr(embedding_mod, "_client", None)
    monkeypatch.setattr(embedding_mod.settings, "CALL_TIMEOUT_SECONDS", 12.0)
    monkeypatch.setattr(embedding_mod, "OpenAI", lambda **kw: seen.update(kw) or SimpleNamespace())

    embedding_mod.get_client()

    assert seen["timeout"] == 12.0
    assert seen["max_retries"] == 0

"""Embedding utilities wrapping OpenAI's embeddings API.

Provides:
- get_client: Cached OpenAI client using the configured API key.
- embed_texts: Batch embedding for a list of strings.
- embed_query: Convenience helper to embed a single string.
- OpenAIEmbedder: the Embedder collaborator used by ingestion and retrieval.

Models and dimensions are configured via siterag.config.settings.
"""
from typing import List, Optional

import openai
from openai import OpenAI

from siterag.config import settings
from siterag.errors import EmbedError

_client: Optional[OpenAI] = None

# Rate limits, timeouts and server-side failures are worth another attempt.
_TRANSIENT = (openai.RateLimitError, openai.APITimeoutError, openai.APIConnectionError, openai.InternalServerError)


def get_client() -> OpenAI:
    """Return a cached OpenAI client initialized with the configured API key.

    Returns:
        OpenAI: A singleton-like client instance reused across calls.
    """
    global _client
    if _client is None:
        # Retries are the caller's; the timeout bounds one request end to end.
        _client = OpenAI(
            api_key=settings.OPENAI_API_KEY,
            timeout=settings.CALL_TIMEOUT_SECONDS,
            max_retries=0,
        )
    return _client


def embed_texts(texts: List[str], model: Optional[str] = None) -> List[List[float]]:
    """Embed a batch of texts using the configured OpenAI embedding model.

    Args:
        texts: List of input strings to embed.
        model: Optional model override.

    Returns:
        List[List[float]]: One embedding vector per input text.
    """
    if not texts:
        return []
    resp = get_client().embeddings.create(
        model=model or settings.OPENAI_EMBEDDING_MODEL,
        input=texts,
        encoding_format="float",
    )
    return [d.embedding for d in resp.data]


def embed_query(text: str, model: Optional[str] = None) -> List[float]:
    """Embed a single string and return its embedding vector."""
    return embed_texts([text], model=model)[0]


class OpenAIEmbedder:
    """Embedder collaborator: text -> fixed-length vector, errors as EmbedError."""

    def __init__(self, model: Optional[str] = None):
        self.model = model or settings.OPENAI_EMBEDDING_MODEL

    def embed(self, text: str) -> List[float]:
        if not text or not text.strip():
            raise EmbedError("cannot embed empty text")
        try:
            return embed_query(text, model=self.model)
        except openai.OpenAIError as exc:
            raise EmbedError(f"embedding failed: {exc}", exc, transient=isinstance(exc, _TRANSIENT)) from exc

"""Question answering over the stored index.

RetrievalAnswerer embeds the question, pulls the nearest entries from the vector
store, and hands their url/body metadata to the generator as context. Errors from any
collaborator propagate to the caller: a failed question is a failed call.
"""
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from siterag.config import settings
from siterag.generation import build_request
from siterag.ingestion.pipeline import Embedder, VectorStore
from siterag.obs import span
from siterag.records import GenerationRequest, QueryMatch

logger = logging.getLogger(__name__)


def _non_blank(values) -> List[str]:
    return [v for v in values if isinstance(v, str) and v.strip()]


@dataclass
class Answer:
    text: str
    urls: List[str] = field(default_factory=list)


class RetrievalAnswerer:
    """Answer questions from the nearest stored page content.

    Args:
        embedder: Embedding collaborator; must match the one used at ingestion.
        store: Vector store collaborator.
        generator: Object with generate(GenerationRequest) -> str.
        collection: Logical collection name.
        top_k: Number of nearest entries used as context.
    """

    def __init__(
        self,
        embedder: Embedder,
        store: VectorStore,
        generator,
        collection: Optional[str] = None,
        top_k: Optional[int] = None,
    ):
        self.embedder = embedder
        self.store = store
        self.generator = generator
        self.collection = collection or settings.COLLECTION_NAME
        self.top_k = top_k if top_k is not None else settings.TOP_K

    def retrieve(self, question: str, top_k: Optional[int] = None) -> List[QueryMatch]:
        with span("siterag.embed", {"kind": "question"}):
            vector = self.embedder.embed(question)
        with span("siterag.query", {"collection": self.collection}):
            return self.store.query(self.collection, vector, top_k if top_k is not None else self.top_k)

    def build_request(self, question: str, matches: List[QueryMatch]) -> GenerationRequest:
        bodies = _non_blank(m.metadata.get("body") for m in matches)
        urls = _non_blank(m.metadata.get("url") for m in matches)
        return build_request(question, urls, bodies)

    def ask(self, question: str, top_k: Optional[int] = None) -> Answer:
        """Answer a question and keep the source urls it was grounded on."""
        matches = self.retrieve(question, top_k)
        if not matches:
            logger.info("No stored entries matched; generating without context")
        request = self.build_request(question, matches)
        with span("siterag.generate"):
            text = self.generator.generate(request)
        return Answer(text=text, urls=_non_blank(m.metadata.get("url") for m in matches))

    def answer(self, question: str) -> str:
        """Return the generated answer text for a question."""
        return self.ask(question).text

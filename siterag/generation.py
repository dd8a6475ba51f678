"""Answer generation utilities using OpenAI chat completions.

Provides:
- get_client: Cached OpenAI client
- SYSTEM_PROMPT: the fixed support-agent instruction
- build_request: assemble the question, source URLs and retrieved bodies into a request
- OpenAIGenerator: the language-generation collaborator

Configuration is read from siterag.config.settings.
"""
from typing import List, Optional

import openai
from openai import OpenAI

from siterag.config import settings
from siterag.errors import GenerationError
from siterag.records import GenerationRequest

_client: Optional[OpenAI] = None

SYSTEM_PROMPT = (
    "You are an AI support agent expert in providing support to users on behalf of a webpage. "
    "Given the context about page content, reply the user accordingly."
)


def get_client() -> OpenAI:
    """Return a cached OpenAI Chat Completions client using the configured API key."""
    global _client
    if _client is None:
        _client = OpenAI(api_key=settings.OPENAI_API_KEY, timeout=settings.CALL_TIMEOUT_SECONDS)
    return _client


def build_request(question: str, urls: List[str], bodies: List[str]) -> GenerationRequest:
    """Create the generation request for a question and its retrieved context.

    Args:
        question: User question to answer.
        urls: Source URLs of the retrieved entries (blank values already removed).
        bodies: Retrieved body text (blank values already removed).

    Returns:
        GenerationRequest: System instruction plus user content.
    """
    context = "\n\n".join(bodies)
    user = f"Query: {question}\n\nURL:{', '.join(urls)}\n\nRetrieved context: {context}"
    return GenerationRequest(system=SYSTEM_PROMPT, user=user)


class OpenAIGenerator:
    """Send a GenerationRequest to the chat completions API and return the text."""

    def __init__(self, model: Optional[str] = None, temperature: Optional[float] = None):
        self.model = model or settings.OPENAI_MODEL
        self.temperature = temperature

    def generate(self, request: GenerationRequest) -> str:
        kwargs = {}
        if self.temperature is not None:
            kwargs["temperature"] = self.temperature
        try:
            resp = get_client().chat.completions.create(
                model=self.model,
                messages=request.messages(),
                **kwargs,
            )
        except openai.OpenAIError as exc:
            raise GenerationError(f"generation failed: {exc}", exc) from exc
        content = resp.choices[0].message.content or ""
        return content.strip()

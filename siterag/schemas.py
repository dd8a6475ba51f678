"""Pydantic request/response schemas for the API.

Defines the public contracts used by the FastAPI endpoints:
- AskRequest / AskResponse: question answering.
- IngestRequest / IngestResponse: crawling and indexing a site.
"""
from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class AskRequest(BaseModel):
    """Request body for asking a question.

    Attributes:
        question: The user question to answer.
        top_k: Optional number of nearest entries to use as context.
    """
    question: str = Field(..., min_length=1, description="User question")
    top_k: Optional[int] = Field(default=None, ge=1, le=50, description="Nearest entries to retrieve")


class AskResponse(BaseModel):
    """Response body for a question.

    Attributes:
        answer: The generated answer text.
        sources: URLs of the entries the answer was grounded on.
        latency_ms: End-to-end latency for the request in milliseconds.
    """
    answer: str
    sources: List[str]
    latency_ms: int


class IngestRequest(BaseModel):
    url: str = Field(..., min_length=1, description="Absolute root URL to crawl")
    max_pages: Optional[int] = Field(default=None, ge=1)
    max_depth: Optional[int] = Field(default=None, ge=0)
    same_host_only: Optional[bool] = None


class IngestResponse(BaseModel):
    root_url: str
    pages_fetched: int
    entries_stored: int
    visited: List[str]
    failures: Dict[str, str]
    latency_ms: int

"""Ingestion package: fetch pages, extract markup and links, crawl and index a site.

See pipeline.py for the crawl orchestrator.
"""
from siterag.ingestion.extract import PageExtractor, extract_page
from siterag.ingestion.fetch import PageFetcher
from siterag.ingestion.pipeline import Frontier, IngestionOrchestrator

__all__ = [
    "Frontier",
    "IngestionOrchestrator",
    "PageExtractor",
    "PageFetcher",
    "extract_page",
]

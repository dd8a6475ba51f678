"""siterag: crawl a website into a pgvector index and answer questions from it.

Submodules overview:
- config: Application settings and environment variable loading.
- errors: Error taxonomy shared by every collaborator adapter.
- records: Plain data records (pages, chunks, query matches, reports).
- utils: URL normalization/resolution and word-count chunking.
- ingestion: Fetching, extraction and the crawl orchestrator.
- embedding: OpenAI embeddings adapter.
- db / models / store: SQLAlchemy + pgvector persistence and the vector store.
- generation: OpenAI chat completion adapter.
- retrieval: Question answering over the stored index.
- obs: OpenTelemetry spans.
- logging_config: Logging setup for the CLI and API.
- main: FastAPI application.
- cli: Command line entry point.
"""

__version__ = "0.1.0"

"""Command line entry point.

    siterag init-db
    siterag ingest https://www.example.com [--max-pages N] [--max-depth N] [--same-host-only]
    siterag ask "How do we contact support?" [--top-k N]
"""
import argparse
import logging
import sys
from typing import List, Optional

from siterag import service
from siterag.config import settings
from siterag.db import init_db
from siterag.errors import SiteRagError
from siterag.logging_config import setup_logging
from siterag.obs import init_tracing

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="siterag", description="Index a website and answer questions about it.")
    parser.add_argument("--log-level", default=settings.LOG_LEVEL, help="Logging level (default: %(default)s)")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("init-db", help="Create the pgvector extension, tables and index")

    p_ingest = sub.add_parser("ingest", help="Crawl a site and index its pages")
    p_ingest.add_argument("url", help="Absolute root URL")
    p_ingest.add_argument("--max-pages", type=int, default=settings.MAX_PAGES, help="Stop after this many pages")
    p_ingest.add_argument("--max-depth", type=int, default=settings.MAX_DEPTH, help="Do not follow links deeper than this")
    p_ingest.add_argument("--same-host-only", action="store_true", default=settings.SAME_HOST_ONLY,
                          help="Only follow links that stay on the root URL's host")

    p_ask = sub.add_parser("ask", help="Answer a question from the index")
    p_ask.add_argument("question")
    p_ask.add_argument("--top-k", type=int, default=settings.TOP_K, help="Nearest entries to use as context")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level)
    init_tracing()

    if args.command == "init-db":
        init_db()
        logger.info("Database initialized")
        return 0

    if args.command == "ingest":
        report = service.ingest(
            args.url,
            max_pages=args.max_pages,
            max_depth=args.max_depth,
            same_host_only=args.same_host_only,
        )
        for url, err in report.failures.items():
            logger.warning("Failed: %s (%s)", url, err)
        print(f"[DONE] {report.fetched} pages, {len(report.stored_ids)} entries, {len(report.failures)} failures")
        return 0 if report.fetched else 1

    try:
        print(service.answer(args.question, top_k=args.top_k))
    except SiteRagError as exc:
        logger.error("Could not answer: %s", exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())

"""
Run the IR presentation scraping pipeline from CLI.
"""

from __future__ import annotations

import argparse
import json
import logging
import os

from app.scraping.config import STRATEGIES
from app.scraping.errors import FatalSetupError
from app.scraping.logging_utils import configure_logging, log_event
from app.services.presentation_scraping_service import PresentationScrapingService
from db.session import SessionLocal

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Scrape recent investor presentations from IR sites.")
    parser.add_argument(
        "--strategy",
        dest="strategy",
        default=None,
        choices=sorted(STRATEGIES),
        help="Crawl strategy preset. Defaults to PRESENTATION_SCRAPE_STRATEGY.",
    )
    parser.add_argument(
        "--due-only",
        dest="due_only",
        action="store_true",
        help="Only crawl companies whose scraping job is due.",
    )
    parser.add_argument(
        "--reset-catalog",
        dest="reset_catalog",
        action="store_true",
        help="Delete every stored presentation before crawling.",
    )
    parser.add_argument(
        "--retry-failed",
        dest="retry_failed",
        action="store_true",
        help="Reset failed scraping jobs to pending before crawling.",
    )
    parser.add_argument(
        "--companies-file",
        dest="companies_file",
        default=None,
        help="Optional JSON company directory used instead of the companies table.",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(os.getenv("LOG_LEVEL", "INFO"))

    service = PresentationScrapingService()
    try:
        with SessionLocal() as db:
            if args.retry_failed:
                service.retry_failed(db=db)
            stats = service.run(
                db=db,
                strategy=args.strategy,
                due_only=args.due_only,
                companies_file=args.companies_file,
                reset_catalog=args.reset_catalog,
            )
    except FatalSetupError as exc:
        log_event(logger, logging.CRITICAL, "scrape_run_aborted", error=str(exc))
        return 1

    print(json.dumps(stats.to_snapshot(), indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

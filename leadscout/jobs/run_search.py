"""CLI job to run one business search and persist the prospects."""

import argparse
import logging
from typing import Optional

from leadscout.core.config import get_settings
from leadscout.core.pipeline import IngestionResult, build_pipeline
from leadscout.core.store import create_store

logger = logging.getLogger(__name__)


def run_search_job(*, location: str, category: Optional[str], radius: int) -> IngestionResult:
    settings = get_settings()
    store = create_store(settings)
    pipeline = build_pipeline(settings, store)

    result = pipeline.ingest(location, category, radius)
    logger.info(
        "Completed search: location=%s total_found=%d no_website=%d",
        location,
        result.total_found,
        result.no_website_count,
    )
    for business in result.businesses:
        logger.info("  [%s] %s - %s (%s)", business.id, business.name, business.address, business.phone or "no phone")
    return result


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Search for local businesses without a website")
    parser.add_argument("--location", dest="location", required=True, help="City or address to search around")
    parser.add_argument("--category", dest="category", help="Business category, e.g. restaurant or retail")
    parser.add_argument("--radius", dest="radius", type=int, default=5, help="Search radius in kilometres (1-50)")
    return parser


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s - %(message)s")
    parser = build_parser()
    args = parser.parse_args()

    try:
        run_search_job(location=args.location, category=args.category, radius=args.radius)
    except ValueError as exc:
        parser.error(str(exc))


if __name__ == "__main__":
    main()

import sys
import time
import logging
import asyncio
import argparse

from config import settings
from db.catalog import Catalog
from db.history_store import HistoryStore
from models.errors import CatalogError
from scraper import run_catalog
from scrapers.registry import build_registry


logger = logging.getLogger("price-tracker")


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )


# -----------------------------------------------------------------------------
# Main entry point
# -----------------------------------------------------------------------------
async def main(argv=None) -> int:
    """Scrape every catalog product once. Returns the process exit code."""

    parser = argparse.ArgumentParser(
        description="Product and hotel room price tracker",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
        Examples:
        python main.py
        python main.py --catalog data/products.json --history-dir data/prices
        """
    )
    parser.add_argument("--catalog", default=str(settings.catalog_path), help="Path to products.json")
    parser.add_argument("--history-dir", default=str(settings.history_dir), help="Directory of per-product price history files")
    parser.add_argument("--log-level", default=settings.log_level, help="Logging level (default: %(default)s)")

    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    start = time.perf_counter()
    logger.info("Starting price tracker...")

    catalog = Catalog(args.catalog)
    try:
        products = catalog.load()
    except CatalogError as e:
        logger.error("Could not load catalog: %s", e)
        return 1

    if not products:
        logger.warning("No products found to scrape")
        return 0

    history = HistoryStore(args.history_dir, retention_days=settings.retention_days)
    registry = build_registry(settings)

    summary = await run_catalog(
        products,
        registry,
        history,
        min_delay=settings.min_delay_seconds,
        max_delay=settings.max_delay_seconds,
    )

    try:
        catalog.save(products)
    except CatalogError as e:
        logger.error("Could not save catalog: %s", e)
        return 1

    elapsed = time.perf_counter() - start
    logger.info(
        "Scraping completed in %.2f seconds: %d/%d successful",
        elapsed,
        summary.succeeded,
        summary.total,
    )
    return 0


# -----------------------------------------------------------------------------
# Entrypoint
# -----------------------------------------------------------------------------
def run() -> None:
    try:
        sys.exit(asyncio.run(main()))
    except Exception:
        logger.exception("Scraping failed")
        sys.exit(1)


if __name__ == "__main__":
    run()

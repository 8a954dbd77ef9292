import asyncio
import datetime
import logging
import random
from typing import List, Optional

from pydantic import BaseModel

from db.history_store import HistoryStore
from models.errors import ScrapeError
from models.models import HistoryEntry, Product, ScrapeFailure, ScrapeOutcome
from scrapers.registry import ScraperRegistry


logger = logging.getLogger("price-tracker")


class RunSummary(BaseModel):
    total: int = 0
    succeeded: int = 0
    failed: int = 0


# -----------------------------------------------------------------------------
# Scrape one product and record the outcome
# -----------------------------------------------------------------------------
async def scrape_product(
    product: Product,
    registry: ScraperRegistry,
    history: HistoryStore,
    now: Optional[datetime.datetime] = None,
) -> ScrapeOutcome:
    """Scrape a product, append the outcome to its history and update its status."""
    logger.info("=== Scraping: %s (%s) ===", product.name, product.url)

    try:
        outcome = await registry.dispatch(product)
    except ScrapeError as e:
        outcome = ScrapeFailure(reason=e.reason)
    except Exception as e:
        # Any failure is recorded against this product only
        logger.exception("Unexpected error scraping %s", product.id)
        outcome = ScrapeFailure(reason=str(e) or type(e).__name__)

    now = now or datetime.datetime.now(datetime.timezone.utc)
    try:
        history.append(product.id, HistoryEntry.from_outcome(outcome, now.date()), today=now.date())
    except (OSError, ValueError) as e:
        logger.error("Could not record price history for %s: %s", product.id, e)

    product.last_updated = now.isoformat()
    if outcome.ok:
        logger.info("Success: %s found price %s %s", product.id, outcome.price, outcome.currency)
        product.status = "active"
        product.last_error = None
    else:
        logger.error("Error scraping %s: %s", product.name, outcome.reason)
        product.status = "error"
        product.last_error = outcome.reason

    return outcome


# -----------------------------------------------------------------------------
# Scrape the whole catalog, one product at a time
# -----------------------------------------------------------------------------
async def run_catalog(
    products: List[Product],
    registry: ScraperRegistry,
    history: HistoryStore,
    min_delay: float = 2.0,
    max_delay: float = 5.0,
    sleep=asyncio.sleep,
) -> RunSummary:
    """
    Scrape every product sequentially with a jittered pause between them.

    Products are never scraped concurrently: parallel sessions against the
    same vendor get blocked far more often.
    """
    summary = RunSummary(total=len(products))

    for index, product in enumerate(products, 1):
        logger.info("Progress: %d/%d", index, len(products))

        outcome = await scrape_product(product, registry, history)
        if outcome.ok:
            summary.succeeded += 1
        else:
            summary.failed += 1

        if index < len(products):
            pause = random.uniform(min_delay, max_delay)
            logger.info("Waiting %.1fs before next request...", pause)
            await sleep(pause)

    logger.info("Summary: %d successful, %d failed", summary.succeeded, summary.failed)
    return summary

"""
Price History Store for Price Tracker.

This module keeps one JSON document per product holding its dated scrape
outcomes. History is append-only; retention is enforced on every write, so
there is no separate cleanup job.

Classes:
    HistoryStore: Reads and appends per-product price history files.

File format (``<history_dir>/<productId>.json``):
    {"productId": "p1",
     "prices": [{"date": "2026-10-18", "price": 12499, "currency": "INR",
                 "status": "success", "rawData": "₹12,499"}]}

Example:
    >>> store = HistoryStore("data/prices")
    >>> store.append("p1", entry)
    >>> [e.price for e in store.load("p1").prices]
"""

import datetime
import json
import logging
from pathlib import Path
from typing import Optional

from models.models import HistoryEntry, PriceHistory, utc_today


logger = logging.getLogger(__name__)

DEFAULT_RETENTION_DAYS = 60

# Keys dropped from an entry when empty; price and currency stay as null
OPTIONAL_KEYS = ("rawData", "error", "label")


class HistoryStore:
    """
    JSON-file price history, one file per product.

    Attributes:
        directory: Folder holding the history files.
        retention_days: Entries dated more than this many days before the
            write date are dropped. An entry exactly ``retention_days`` old
            is kept.
    """

    def __init__(self, directory, retention_days: int = DEFAULT_RETENTION_DAYS):
        self.directory = Path(directory)
        self.retention_days = retention_days

    def path_for(self, product_id: str) -> Path:
        return self.directory / f"{product_id}.json"

    def load(self, product_id: str) -> PriceHistory:
        """Return the stored history, or an empty one if the file does not exist."""
        path = self.path_for(product_id)
        if not path.exists():
            return PriceHistory(product_id=product_id)

        with open(path, "r", encoding="utf-8") as f:
            return PriceHistory.model_validate(json.load(f))

    def append(
        self,
        product_id: str,
        entry: HistoryEntry,
        today: Optional[datetime.date] = None,
    ) -> PriceHistory:
        """
        Append ``entry`` and prune entries older than the retention window.

        Args:
            product_id: Catalog id of the product.
            entry: The new history record.
            today: Reference date for retention (defaults to the current UTC date).

        Returns:
            The history as written.
        """
        today = today or utc_today()
        cutoff = today - datetime.timedelta(days=self.retention_days)

        history = self.load(product_id)
        history.prices.append(entry)

        before = len(history.prices)
        history.prices = [e for e in history.prices if e.date >= cutoff]
        dropped = before - len(history.prices)
        if dropped:
            logger.info("Pruned %d history entries older than %s for %s", dropped, cutoff, product_id)

        self._write(history)
        return history

    def _write(self, history: PriceHistory) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)

        prices = []
        for entry in history.prices:
            record = entry.model_dump(mode="json", by_alias=True)
            for key in OPTIONAL_KEYS:
                if record.get(key) is None:
                    record.pop(key, None)
            prices.append(record)

        document = {"productId": history.product_id, "prices": prices}
        with open(self.path_for(history.product_id), "w", encoding="utf-8") as f:
            json.dump(document, f, indent=2, ensure_ascii=False)

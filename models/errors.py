"""
Error taxonomy for Price Tracker.

Every extraction-level failure is a ``ScrapeError`` whose ``reason`` is the
short text recorded in the catalog and history. Vendor scrapers and the run
loop turn these into ``ScrapeFailure`` outcomes; only ``CatalogError`` is
allowed to end a run.
"""


class ScrapeError(Exception):
    """Base class for failures that end one product's scrape."""

    reason = "scrape failed"

    def __init__(self, reason: str = None):
        if reason is not None:
            self.reason = reason
        super().__init__(self.reason)


class BlockedByVendor(ScrapeError):
    reason = "blocked"


class PriceNotFound(ScrapeError):
    reason = "price not found"


class InvalidRange(ScrapeError):
    reason = "price out of range"


class NavigationTimeout(ScrapeError):
    reason = "timeout"


class NavigationFailed(ScrapeError):
    reason = "navigation failed"


class UnsupportedSite(ScrapeError):
    def __init__(self, site: str):
        self.site = site
        super().__init__(f"unsupported site: {site}")


class CatalogError(Exception):
    """The product catalog could not be read or written."""

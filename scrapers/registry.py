"""
Vendor scraper registry.

Maps a catalog ``site`` identifier to the scraper that handles it. New
vendors are added with ``register``; nothing here needs to change.

Classes:
    ScraperRegistry: Lookup-and-delegate dispatcher.

Functions:
    build_registry: Registry with every built-in vendor, config overrides applied.
"""

import logging
from typing import Dict, List, Optional

from models.base_scraper import BaseScraper
from models.errors import UnsupportedSite
from models.models import Product, ScrapeOutcome
from models.vendor_config import load_vendor_overrides
from scrapers.agoda_scraper import AgodaScraper
from scrapers.amazon_scraper import AmazonScraper
from scrapers.argos_scraper import ArgosScraper
from scrapers.flipkart_scraper import FlipkartScraper
from scrapers.render import PlaywrightRenderProvider


logger = logging.getLogger(__name__)


class ScraperRegistry:
    """
    Registry of vendor scrapers keyed by site identifier.

    Example:
        >>> registry = ScraperRegistry()
        >>> registry.register(AmazonScraper())
        >>> outcome = await registry.dispatch(product)
    """

    def __init__(self, scrapers: Optional[List[BaseScraper]] = None):
        self._scrapers: Dict[str, BaseScraper] = {}
        for scraper in scrapers or []:
            self.register(scraper)

    def register(self, scraper: BaseScraper) -> None:
        site = scraper.site.strip().lower()
        if site in self._scrapers:
            logger.warning("Replacing scraper registered for %s", site)
        self._scrapers[site] = scraper

    def get(self, site: str) -> BaseScraper:
        scraper = self._scrapers.get((site or "").strip().lower())
        if scraper is None:
            raise UnsupportedSite(site)
        return scraper

    def sites(self) -> List[str]:
        return sorted(self._scrapers)

    async def dispatch(self, product: Product) -> ScrapeOutcome:
        """
        Scrape ``product`` with the scraper registered for its site.

        Raises:
            UnsupportedSite: No scraper is registered for product.site.
        """
        return await self.get(product.site).scrape(product)


def build_registry(settings, render_provider=None) -> ScraperRegistry:
    """
    Build the registry of built-in vendors.

    Per-vendor overrides from ``settings.vendor_config_path`` are merged into
    each scraper's default config, and browser/diagnostic settings applied.
    """
    render_provider = render_provider or PlaywrightRenderProvider()
    overrides = load_vendor_overrides(settings.vendor_config_path)

    registry = ScraperRegistry()
    for scraper_class in (AmazonScraper, FlipkartScraper, ArgosScraper, AgodaScraper):
        scraper = scraper_class(render_provider=render_provider, diagnostics_dir=settings.diagnostics_dir)

        site_overrides = dict(overrides.get(scraper.site, {}))
        site_overrides["render"] = {**site_overrides.get("render", {}), "headless": settings.headless}
        vendor_config = scraper.vendor_config.merged(site_overrides)
        scraper = scraper.model_copy(update={"vendor_config": vendor_config})

        if isinstance(scraper, AgodaScraper):
            scraper = scraper.model_copy(update={"checkin_days_ahead": settings.checkin_days_ahead})

        registry.register(scraper)

    unknown = set(overrides) - set(registry.sites())
    if unknown:
        logger.warning("Vendor overrides for unregistered sites ignored: %s", ", ".join(sorted(unknown)))

    logger.info("Registered scrapers: %s", ", ".join(registry.sites()))
    return registry

"""
Argos Watch Scraper.

Classes:
    ArgosScraper: Scraper implementation for argoswatch.in
"""

from models.base_scraper import BaseScraper
from models.vendor_config import PriceRange, RenderOptions, VendorConfig


ARGOS_CONFIG = VendorConfig(
    site="argoswatch.in",
    price_selectors=[".price", ".product-price", "[data-price]", ".money", ".amount"],
    name_selectors=[".product-title", ".product__title", "h1"],
    min_name_length=3,
    structured_range=PriceRange(minimum=1, maximum=1000000),
    heuristic_range=PriceRange(minimum=100, maximum=500000),
    content_range=PriceRange(minimum=500, maximum=200000),
    fallback_range=PriceRange(minimum=1000, maximum=100000),
    render=RenderOptions(timeout_ms=30000),
)


class ArgosScraper(BaseScraper):
    """Web scraper for Argos Watch (argoswatch.in)."""

    site: str = "argoswatch.in"
    vendor_config: VendorConfig = ARGOS_CONFIG

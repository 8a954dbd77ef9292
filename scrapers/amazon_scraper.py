"""
Amazon India Scraper.

This module implements a scraper for www.amazon.in. Product pages are loaded
from the mobile site (m.amazon.in), which renders a lighter page and trips
bot detection less often than the desktop site.

Classes:
    AmazonScraper: Scraper implementation for amazon.in
"""

import logging

from models.base_scraper import BaseScraper
from models.models import Product
from models.vendor_config import PriceRange, RenderOptions, VendorConfig


logger = logging.getLogger(__name__)

MOBILE_USER_AGENT = (
    "Mozilla/5.0 (iPhone; CPU iPhone OS 14_7_1 like Mac OS X) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/14.1.2 Mobile/15E148 Safari/604.1"
)

AMAZON_CONFIG = VendorConfig(
    site="amazon.in",
    price_selectors=[
        ".a-price-whole",
        ".a-price",
        '[data-automation-id="list-price"]',
        ".a-color-price",
        "#price_inside_buybox",
    ],
    name_selectors=["#title", "#productTitle"],
    min_name_length=3,
    structured_range=PriceRange(minimum=1, maximum=1000000),
    heuristic_range=PriceRange(minimum=50, maximum=500000),
    content_range=PriceRange(minimum=100, maximum=200000),
    fallback_range=PriceRange(minimum=500, maximum=100000),
    block_title_markers=["access denied", "blocked", "sorry", "robot check"],
    block_url_markers=["blocked", "/errors/", "captcha"],
    render=RenderOptions(
        user_agent=MOBILE_USER_AGENT,
        viewport_width=375,
        viewport_height=667,
        is_mobile=True,
        timeout_ms=30000,
    ),
)


def to_mobile_url(url: str) -> str:
    """
    Point an amazon.in product URL at the mobile site.

    Example:
        >>> to_mobile_url("https://www.amazon.in/dp/B0C1234567")
        'https://m.amazon.in/dp/B0C1234567'
    """
    return url.replace("www.amazon.in", "m.amazon.in", 1)


class AmazonScraper(BaseScraper):
    """
    Web scraper for Amazon India (www.amazon.in).

    Attributes:
        site: Identifier "amazon.in"
        vendor_config: AMAZON_CONFIG unless overridden

    Example:
        >>> scraper = AmazonScraper()
        >>> outcome = await scraper.scrape(product)
    """

    site: str = "amazon.in"
    vendor_config: VendorConfig = AMAZON_CONFIG

    def build_url(self, product: Product) -> str:
        url = to_mobile_url(product.url)
        logger.debug("Amazon: using mobile URL %s", url)
        return url

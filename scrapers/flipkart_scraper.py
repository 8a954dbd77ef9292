"""
Flipkart Scraper.

Flipkart ships obfuscated, frequently rotated class names, so the selector
list below goes stale quickly; the heuristic and content tiers carry most of
the weight when it does.

Classes:
    FlipkartScraper: Scraper implementation for www.flipkart.com
"""

from models.base_scraper import BaseScraper
from models.vendor_config import PriceRange, RenderOptions, VendorConfig


FLIPKART_CONFIG = VendorConfig(
    site="flipkart.com",
    price_selectors=[
        "._1_WHN1",
        "._30jeq3._16Jk6d",
        "._3I9_wc._2p6lqe",
        ".notranslate._1_WHN1",
        "._25b18c .notranslate",
        "._1vC4OE",
        "._3qQ9m1",
        "._16Jk6d",
        ".CEmiEU .Nx9bqj",
        "._2rQ-NK",
    ],
    name_selectors=[".B_NuCI", "._35KyD6", ".yhZ0Tl", ".x-product-title-label", "._2V5EHH"],
    min_name_length=6,
    structured_range=PriceRange(minimum=1, maximum=1000000),
    heuristic_range=PriceRange(minimum=100, maximum=50000),
    content_range=PriceRange(minimum=1000, maximum=20000),
    fallback_range=PriceRange(minimum=1000, maximum=20000),
    render=RenderOptions(
        viewport_width=1366,
        viewport_height=768,
        timeout_ms=45000,
        settle_ms=3000,
    ),
)


class FlipkartScraper(BaseScraper):
    """
    Web scraper for Flipkart (www.flipkart.com).

    Uses the shared four-tier pipeline with Flipkart's selectors and the
    kitchen-appliance price bands the catalog currently tracks.
    """

    site: str = "flipkart.com"
    vendor_config: VendorConfig = FLIPKART_CONFIG

"""Tests for the vendor registry and dispatcher."""

import json
from decimal import Decimal

import pytest

from config import Settings
from conftest import FakeRenderProvider
from models.base_scraper import BaseScraper
from models.errors import UnsupportedSite
from models.models import Product, ScrapeSuccess
from models.vendor_config import PriceRange, VendorConfig
from scrapers.registry import ScraperRegistry, build_registry


class StaticScraper(BaseScraper):
    """Returns a fixed outcome without loading anything."""

    site: str = "example.in"
    vendor_config: VendorConfig = VendorConfig(
        site="example.in",
        structured_range=PriceRange(minimum=1, maximum=10),
        heuristic_range=PriceRange(minimum=1, maximum=10),
        content_range=PriceRange(minimum=1, maximum=10),
        fallback_range=PriceRange(minimum=1, maximum=10),
    )

    async def scrape(self, product):
        return ScrapeSuccess(price=Decimal("5"), currency="INR", raw_text="₹5", label=product.name)


def product(site):
    return Product(id="p1", name="Thing", site=site, url=f"https://{site}/p/1")


@pytest.mark.asyncio
async def test_dispatch_delegates_by_site():
    registry = ScraperRegistry([StaticScraper(render_provider=FakeRenderProvider({}))])

    outcome = await registry.dispatch(product("example.in"))

    assert outcome.price == Decimal("5")
    assert outcome.label == "Thing"


@pytest.mark.asyncio
async def test_dispatch_unknown_site_raises():
    registry = ScraperRegistry()

    with pytest.raises(UnsupportedSite) as excinfo:
        await registry.dispatch(product("ebay.in"))

    assert excinfo.value.reason == "unsupported site: ebay.in"


def test_site_lookup_is_case_insensitive():
    scraper = StaticScraper(render_provider=FakeRenderProvider({}))
    registry = ScraperRegistry([scraper])

    assert registry.get("Example.IN ") is scraper


def test_build_registry_registers_builtin_vendors(tmp_path):
    registry = build_registry(Settings(_env_file=None), render_provider=FakeRenderProvider({}))

    assert registry.sites() == ["agoda.com", "amazon.in", "argoswatch.in", "flipkart.com"]


def test_build_registry_applies_overrides(tmp_path):
    overrides = tmp_path / "vendors.json"
    overrides.write_text(
        json.dumps(
            {
                "flipkart.com": {
                    "price_selectors": [".Nx9bqj"],
                    "content_range": {"minimum": 500, "maximum": 9000},
                    "render": {"timeout_ms": 90000},
                }
            }
        ),
        encoding="utf-8",
    )
    settings = Settings(
        _env_file=None,
        vendor_config_path=overrides,
        headless=False,
        checkin_days_ahead=14,
        diagnostics_dir=tmp_path / "debug",
    )

    registry = build_registry(settings, render_provider=FakeRenderProvider({}))

    flipkart = registry.get("flipkart.com")
    assert flipkart.vendor_config.price_selectors == [".Nx9bqj"]
    assert flipkart.vendor_config.content_range.maximum == Decimal("9000")
    assert flipkart.vendor_config.render.timeout_ms == 90000
    assert flipkart.vendor_config.render.settle_ms == 3000
    assert flipkart.vendor_config.render.headless is False
    assert flipkart.diagnostics_dir == tmp_path / "debug"
    assert registry.get("agoda.com").checkin_days_ahead == 14
    assert registry.get("amazon.in").vendor_config.price_selectors[0] == ".a-price-whole"


def test_price_range_must_be_ordered():
    with pytest.raises(ValueError):
        PriceRange(minimum=10, maximum=1)

"""
Per-vendor extraction configuration.

Selector lists, plausibility ranges and browser options live here as data,
injected into each vendor scraper. Overrides can be loaded from a JSON file
so a changed selector does not require a code change.

Classes:
    PriceRange: Inclusive plausibility bounds for one extraction tier.
    RenderOptions: How the headless browser should load a vendor page.
    VendorConfig: Everything a vendor scraper needs besides its code.
"""

import json
import logging
from decimal import Decimal
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, model_validator


logger = logging.getLogger(__name__)

DESKTOP_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/121.0.0.0 Safari/537.36"
)

DEFAULT_HEADERS = {
    "Accept-Language": "en-US,en;q=0.9",
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
}


class PriceRange(BaseModel):
    """Inclusive [minimum, maximum] bounds for a plausible price."""

    minimum: Decimal
    maximum: Decimal

    @model_validator(mode="after")
    def _ordered(self):
        if self.minimum > self.maximum:
            raise ValueError(f"minimum {self.minimum} is above maximum {self.maximum}")
        return self

    def contains(self, value: Decimal) -> bool:
        return self.minimum <= value <= self.maximum


class RenderOptions(BaseModel):
    """
    Browser settings used when loading a page.

    Attributes:
        user_agent: User-Agent header and navigator string.
        viewport_width / viewport_height: Page viewport in CSS pixels.
        is_mobile: Emulate a touch-capable mobile device.
        extra_headers: Additional HTTP headers sent with every request.
        wait_until: Playwright navigation wait policy.
        timeout_ms: Navigation timeout.
        settle_ms: Extra wait after load for late JS rendering.
        headless: Run the browser without a window.
    """

    user_agent: str = DESKTOP_USER_AGENT
    viewport_width: int = 1366
    viewport_height: int = 768
    is_mobile: bool = False
    extra_headers: Dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_HEADERS))
    wait_until: str = "networkidle"
    timeout_ms: int = 30000
    settle_ms: int = 0
    headless: bool = True


class VendorConfig(BaseModel):
    """
    Extraction settings for one vendor site.

    The four ranges follow the tiers: structured selectors, attribute
    heuristics, raw content scan, bare-number scan. Later tiers are noisier,
    so their ranges should be at least as tight as the earlier ones.
    """

    site: str
    currency: str = "INR"
    price_selectors: List[str] = Field(default_factory=list)
    name_selectors: List[str] = Field(default_factory=list)
    min_name_length: int = 1
    room_selectors: List[str] = Field(default_factory=list)
    structured_range: PriceRange
    heuristic_range: PriceRange
    content_range: PriceRange
    fallback_range: PriceRange
    block_title_markers: List[str] = Field(
        default_factory=lambda: ["access denied", "blocked", "sorry", "robot check"]
    )
    block_url_markers: List[str] = Field(
        default_factory=lambda: ["blocked", "/errors/", "captcha"]
    )
    max_ancestor_depth: int = 6
    render: RenderOptions = Field(default_factory=RenderOptions)

    def merged(self, overrides: dict) -> "VendorConfig":
        """Return a copy with ``overrides`` applied and re-validated."""
        data = self.model_dump()
        for key, value in overrides.items():
            if isinstance(value, dict) and isinstance(data.get(key), dict):
                data[key] = {**data[key], **value}
            else:
                data[key] = value
        return VendorConfig.model_validate(data)


def load_vendor_overrides(path: Optional[Path]) -> Dict[str, dict]:
    """
    Read per-site override blocks from a JSON file.

    The file maps a site identifier to a partial VendorConfig, e.g.
    ``{"flipkart.com": {"price_selectors": [".Nx9bqj"]}}``. A missing path
    means no overrides.
    """
    if path is None:
        return {}

    path = Path(path)
    if not path.exists():
        logger.warning("Vendor config file %s not found, using built-in defaults", path)
        return {}

    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    if not isinstance(data, dict):
        raise ValueError(f"Vendor config file {path} must contain a JSON object")

    logger.info("Loaded vendor overrides for %s", ", ".join(sorted(data)) or "no sites")
    return data

"""
Base Scraper Class.

This module defines the base class for all vendor-specific scrapers.
Every vendor runs the same tiered extraction pipeline over a rendered page;
subclasses supply configuration and override the hooks where the vendor
behaves differently.

Tiers, tried in order until one yields a price inside its plausible range:
    A. structured  - vendor CSS selectors believed to hold the price
    B. heuristic   - price-ish classes and currency-bearing leaf elements,
                     ranked by prominence
    C. content     - regex scan of the serialized HTML
    D. bare number - free-standing digit groups in the visible text

Classes:
    ExtractionParams: Per-call inputs (final URL, optional target label).
    BaseScraper: Base class with the shared pipeline.
"""

import logging
import re
from abc import ABC
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from bs4 import BeautifulSoup
from pydantic import BaseModel, Field

from models.errors import BlockedByVendor, InvalidRange, PriceNotFound, ScrapeError
from models.models import (
    ConfidenceTier,
    PriceCandidate,
    Product,
    ScrapeFailure,
    ScrapeOutcome,
    ScrapeSuccess,
)
from models.vendor_config import PriceRange, VendorConfig
from scrapers.price_parser import (
    NUMBER,
    contains_excluded_phrase,
    parse_candidate,
    parse_price,
)
from scrapers.render import PlaywrightRenderProvider


logger = logging.getLogger(__name__)

CURRENCY_IN_TEXT = re.compile(r"(?:₹|\bINR\b|\bRs\b\.?)\s*\d")

CONTENT_PATTERNS = [
    re.compile(r"(?:₹|INR|Rs\.?)\s*(\d[\d,]*(?:\.\d{1,2})?)"),
    re.compile(r'"price"\s*:\s*"?(\d[\d,]*(?:\.\d{1,2})?)'),
    re.compile(r'class="[^"]*price[^"]*"[^>]*>([^<]*\d[^<]*)<', re.IGNORECASE),
]

TAG = re.compile(r"<[^>]+>")

MAX_PRICE_TEXT_LENGTH = 60
CONTEXT_CHARS = 30

EMPHASIS_TAGS = {"h1", "h2", "h3", "strong", "b"}
STRUCK_TAGS = ["del", "s", "strike"]
PREFERRED_CLASS_HINTS = ("final", "selling", "current", "offer", "deal", "sale")
DECOY_CLASS_HINTS = ("strike", "mrp", "original", "old", "was", "list-price", "crossed")

# Computed style of leaf nodes that show a currency-prefixed number.
PROMINENCE_PROBE = """
() => Array.from(document.querySelectorAll('body *'))
    .filter(el => el.children.length === 0 && /(₹|INR|Rs\\.?)\\s*\\d/.test(el.textContent || ''))
    .slice(0, 300)
    .map(el => {
        const style = window.getComputedStyle(el);
        return {
            text: (el.textContent || '').trim(),
            fontSize: parseFloat(style.fontSize) || 0,
            fontWeight: parseInt(style.fontWeight, 10) || 400,
            struck: (style.textDecorationLine || '').includes('line-through'),
        };
    })
"""


class ExtractionParams(BaseModel):
    url: str
    target_label: Optional[str] = None


class ExtractionAttempt(BaseModel):
    """Bookkeeping for one extract() call."""

    out_of_range: List[Any] = Field(default_factory=list)


class BaseScraper(BaseModel, ABC):
    """
    Base class for vendor-specific price scrapers.

    Subclasses set ``site`` and ``vendor_config`` and may override
    ``build_url``, ``params_for`` and ``tiers``.

    Attributes:
        site: Site identifier used by the catalog (e.g., "amazon.in").
        vendor_config: Selectors, ranges and browser options for the vendor.
        render_provider: Object exposing ``load_page(url, options)`` as an
            async context manager.
        diagnostics_dir: Where to save a screenshot when every tier fails.

    Example:
        >>> scraper = AmazonScraper()
        >>> outcome = await scraper.scrape(product)
        >>> if outcome.ok:
        ...     print(outcome.price, outcome.currency)
    """

    site: str
    vendor_config: VendorConfig
    render_provider: Any = Field(default_factory=PlaywrightRenderProvider)
    diagnostics_dir: Optional[Path] = None

    class Config:
        arbitrary_types_allowed = True

    @property
    def currency(self) -> str:
        return self.vendor_config.currency

    # ------------------------------------------------------------------
    # Vendor hooks
    # ------------------------------------------------------------------
    def build_url(self, product: Product) -> str:
        return product.url

    def params_for(self, product: Product, url: str) -> ExtractionParams:
        return ExtractionParams(url=url)

    def tiers(self, params: ExtractionParams):
        return [
            ("structured", self.structured_tier),
            ("heuristic", self.heuristic_tier),
            ("content", self.content_tier),
            ("bare number", self.bare_number_tier),
        ]

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------
    async def scrape(self, product: Product) -> ScrapeOutcome:
        """
        Load the product page and extract its price.

        The render session is opened and closed here, so it is released on
        every exit path. Navigation timeouts and failures come back as
        ScrapeFailure rather than exceptions.

        Args:
            product: Catalog entry to scrape.

        Returns:
            ScrapeSuccess or ScrapeFailure.
        """
        url = self.build_url(product)
        params = self.params_for(product, url)

        logger.info("Scraping %s for product=%s", self.site, product.id)

        try:
            async with self.render_provider.load_page(url, self.vendor_config.render) as session:
                return await self.extract(session, params)
        except ScrapeError as e:
            logger.error("%s: scrape failed for product=%s: %s", self.site, product.id, e.reason)
            return ScrapeFailure(reason=e.reason)

    async def extract(self, session, params: ExtractionParams) -> ScrapeOutcome:
        """Run the block check and the tiers against an already loaded page."""
        try:
            await self.check_blocked(session)
            candidate = await self.run_tiers(session, params)
        except ScrapeError as e:
            logger.warning("%s: %s for %s", self.site, e.reason, params.url)
            return ScrapeFailure(reason=e.reason)

        label = candidate.label or await self.extract_name(session)

        return ScrapeSuccess(
            price=candidate.value,
            currency=self.currency,
            raw_text=candidate.raw_text,
            label=label,
            confidence=candidate.tier,
        )

    async def check_blocked(self, session) -> None:
        """Raise BlockedByVendor if the page looks like an anti-bot wall."""
        title = (await session.title() or "").lower()
        url = (await session.current_url() or "").lower()

        logger.debug("%s: page title=%r url=%s", self.site, title, url)

        if any(marker.lower() in title for marker in self.vendor_config.block_title_markers):
            raise BlockedByVendor()
        if any(marker.lower() in url for marker in self.vendor_config.block_url_markers):
            raise BlockedByVendor()

    async def run_tiers(self, session, params: ExtractionParams) -> PriceCandidate:
        attempt = ExtractionAttempt()

        for name, tier in self.tiers(params):
            candidate = await tier(session, params, attempt)
            if candidate is not None:
                logger.info(
                    "%s: found price %s via %s tier (%s)",
                    self.site,
                    candidate.value,
                    name,
                    candidate.raw_text,
                )
                return candidate
            logger.debug("%s: %s tier found nothing", self.site, name)

        await self.capture_diagnostics(session)

        if attempt.out_of_range:
            logger.warning(
                "%s: prices outside plausible range at every tier: %s",
                self.site,
                ", ".join(str(v) for v in attempt.out_of_range[:5]),
            )
            raise InvalidRange()
        raise PriceNotFound()

    # ------------------------------------------------------------------
    # Tier A
    # ------------------------------------------------------------------
    async def structured_tier(self, session, params, attempt) -> Optional[PriceCandidate]:
        for selector in self.vendor_config.price_selectors:
            try:
                elements = await session.query_all(selector)
            except Exception as e:
                logger.debug("%s: selector %s failed: %s", self.site, selector, e)
                continue

            for element in elements:
                text = await element.text_content()
                candidate = self._check(
                    text, self.vendor_config.structured_range, ConfidenceTier.STRUCTURED, attempt
                )
                if candidate:
                    logger.debug("%s: selector %s matched %r", self.site, selector, text)
                    return candidate
        return None

    # ------------------------------------------------------------------
    # Tier B
    # ------------------------------------------------------------------
    async def heuristic_tier(self, session, params, attempt) -> Optional[PriceCandidate]:
        soup = BeautifulSoup(await session.full_html(), "lxml")
        prominence = await self.probe_prominence(session)

        return self.rank_elements(
            self.heuristic_elements(soup),
            self.vendor_config.heuristic_range,
            ConfidenceTier.HEURISTIC,
            attempt,
            prominence=prominence,
            target_label=params.target_label,
        )

    def heuristic_elements(self, root) -> List[Tuple[Any, bool]]:
        """
        Price-ish elements under ``root`` as (element, matched_price_selector)
        pairs: price/amount classes, configured selectors and currency leaves.
        """
        known = set()
        for selector in self.vendor_config.price_selectors:
            try:
                known.update(id(el) for el in root.select(selector))
            except Exception:
                continue

        found = []
        for element in root.find_all(True):
            if element.name in ("script", "style", "noscript"):
                continue
            classes = " ".join(element.get("class", []))
            if id(element) in known or "price" in classes.lower() or "amount" in classes:
                found.append((element, id(element) in known))
            elif not element.find(True) and CURRENCY_IN_TEXT.search(element.get_text()):
                found.append((element, False))
        return found

    def rank_elements(
        self,
        elements,
        price_range: PriceRange,
        tier: ConfidenceTier,
        attempt: ExtractionAttempt,
        prominence: Optional[Dict[str, dict]] = None,
        target_label: Optional[str] = None,
    ) -> Optional[PriceCandidate]:
        """Parse every element, score the valid ones and return the best."""
        ranked: List[Tuple[float, int, PriceCandidate]] = []

        for order, (element, known) in enumerate(elements):
            text = element.get_text(" ", strip=True)
            if not text or len(text) > MAX_PRICE_TEXT_LENGTH:
                continue

            candidate = self._check(text, price_range, tier, attempt)
            if candidate is None:
                continue

            candidate.score = score_element(element, text, prominence or {}, target_label, known)
            ranked.append((candidate.score, -order, candidate))

        if not ranked:
            return None

        ranked.sort(key=lambda item: (item[0], item[1]), reverse=True)
        best = ranked[0][2]
        logger.debug(
            "%s: %d %s candidates, best %s (score %.1f)",
            self.site,
            len(ranked),
            tier.value,
            best.raw_text,
            best.score,
        )
        return best

    async def probe_prominence(self, session) -> Dict[str, dict]:
        """Computed font size/weight of currency leaves, keyed by text. Empty if unavailable."""
        try:
            rows = await session.evaluate(PROMINENCE_PROBE)
        except Exception as e:
            logger.debug("%s: prominence probe failed: %s", self.site, e)
            return {}

        if not isinstance(rows, list):
            return {}
        return {row["text"]: row for row in rows if isinstance(row, dict) and row.get("text")}

    # ------------------------------------------------------------------
    # Tier C
    # ------------------------------------------------------------------
    async def content_tier(self, session, params, attempt) -> Optional[PriceCandidate]:
        html = await session.full_html()
        price_range = self.vendor_config.content_range

        for pattern in CONTENT_PATTERNS:
            matches = list(pattern.finditer(html))
            logger.debug("%s: pattern %s found %d matches", self.site, pattern.pattern, len(matches))

            for match in matches:
                if is_decoy_context(html, match.start(), match.end(1)):
                    continue
                candidate = parse_candidate(
                    match.group(1), price_range.minimum, price_range.maximum, ConfidenceTier.CONTENT_SCAN
                )
                if candidate:
                    candidate.raw_text = TAG.sub("", match.group(0)).strip()
                    return candidate
        return None

    # ------------------------------------------------------------------
    # Tier D
    # ------------------------------------------------------------------
    async def bare_number_tier(self, session, params, attempt) -> Optional[PriceCandidate]:
        soup = BeautifulSoup(await session.full_html(), "lxml")
        for element in soup(["script", "style", "noscript", "head"]):
            element.decompose()
        text = " ".join(soup.get_text(" ").split())
        price_range = self.vendor_config.fallback_range

        for match in NUMBER.finditer(text):
            digits = match.group(0)
            if looks_like_year(digits):
                continue
            if is_decoy_context(text, match.start(), match.end()):
                continue

            value = parse_price(digits)
            if value is None or not price_range.contains(value):
                continue

            snippet = text[max(0, match.start() - 20): match.end() + 20].strip()
            return PriceCandidate(
                value=value,
                raw_text=f"[low-confidence] {snippet}",
                tier=ConfidenceTier.BARE_NUMBER,
            )
        return None

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    async def extract_name(self, session) -> Optional[str]:
        """Product display name, or None. Never fails the scrape."""
        for selector in self.vendor_config.name_selectors:
            try:
                elements = await session.query_all(selector)
            except Exception as e:
                logger.debug("%s: name selector %s failed: %s", self.site, selector, e)
                continue

            for element in elements:
                name = " ".join((await element.text_content()).split())
                if len(name) >= self.vendor_config.min_name_length:
                    return name
        return None

    async def capture_diagnostics(self, session) -> None:
        """Save a screenshot and log page stats after every tier failed."""
        try:
            html = await session.full_html()
            logger.info(
                "%s: diagnostics html_length=%d has_rupee=%s has_inr=%s",
                self.site,
                len(html),
                "₹" in html,
                "INR" in html,
            )

            if self.diagnostics_dir is None:
                return

            directory = Path(self.diagnostics_dir)
            directory.mkdir(parents=True, exist_ok=True)
            path = directory / f"{self.site.replace('.', '-')}-debug.png"
            await session.screenshot(str(path))
            logger.info("%s: saved debug screenshot to %s", self.site, path)
        except Exception as e:
            logger.warning("%s: could not capture diagnostics: %s", self.site, e)

    def _check(self, text, price_range: PriceRange, tier, attempt) -> Optional[PriceCandidate]:
        candidate = parse_candidate(text, price_range.minimum, price_range.maximum, tier)
        if candidate is None and text and not contains_excluded_phrase(text):
            value = parse_price(text)
            if value is not None:
                attempt.out_of_range.append(value)
        return candidate


def preceding_text(text: str, position: int) -> str:
    """Up to CONTEXT_CHARS of tag-free text right before ``position``."""
    return TAG.sub(" ", text[max(0, position - CONTEXT_CHARS * 3): position])[-CONTEXT_CHARS:]


def following_text(text: str, position: int) -> str:
    """The first word right after ``position``, tags removed."""
    words = TAG.sub(" ", text[position: position + CONTEXT_CHARS * 3]).split()
    return words[0] if words else ""


def is_decoy_context(text: str, start: int, end: int) -> bool:
    """
    True when the number at text[start:end] is labelled as something other
    than a price, e.g. "1,204 ratings", "₹1,500 off" or "Save ₹300".
    """
    return contains_excluded_phrase(preceding_text(text, start)) or contains_excluded_phrase(
        following_text(text, end)
    )


def looks_like_year(digits: str) -> bool:
    return len(digits) == 4 and digits.isdigit() and 1900 <= int(digits) <= 2099


def score_element(
    element,
    text: str,
    prominence: Dict[str, dict],
    target_label: Optional[str],
    known_price: bool = False,
) -> float:
    """
    Prominence score for a price-bearing element; higher is more likely the
    displayed selling price.
    """
    score = 1.0

    live = prominence.get(text)
    if live:
        score += float(live.get("fontSize") or 0) / 4
        if (live.get("fontWeight") or 400) >= 600:
            score += 1
        if live.get("struck"):
            score -= 5
    else:
        size = re.search(r"font-size\s*:\s*(\d+(?:\.\d+)?)px", element.get("style", ""))
        if size:
            score += float(size.group(1)) / 4

    if known_price:
        score += 2
    if element.name in EMPHASIS_TAGS:
        score += 1

    classes = " ".join(element.get("class", []) + (element.parent.get("class", []) if element.parent else []))
    classes = classes.lower()
    if any(hint in classes for hint in PREFERRED_CLASS_HINTS):
        score += 2
    if any(hint in classes for hint in DECOY_CLASS_HINTS):
        score -= 3
    if element.name in STRUCK_TAGS or element.find_parent(STRUCK_TAGS):
        score -= 5

    if target_label and near_label(element, target_label):
        score += 3

    return score


def near_label(element, label: str, levels: int = 3) -> bool:
    label = label.lower()
    parent = element.parent
    for _ in range(levels):
        if parent is None or parent.name == "[document]":
            return False
        if label in parent.get_text(" ", strip=True).lower():
            return True
        parent = parent.parent
    return False

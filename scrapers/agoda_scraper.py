"""
Agoda Hotel Room Scraper.

This module implements a scraper for a single hotel's room list on
www.agoda.com. Unlike the retail scrapers it looks for the price of one
specific room type, and it has to pick the stay dates itself: an Agoda URL
with stale dates renders an "unavailable" page instead of failing.

Classes:
    AgodaScraper: Scraper implementation for agoda.com

Functions:
    stay_dates: Check-in / check-out dates for a one-night stay.
    generate_stay_url: Rewrite the date and occupancy query parameters.
"""

import datetime
import logging
import re
from typing import List, Optional, Tuple
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from bs4 import BeautifulSoup

from models.base_scraper import BaseScraper, ExtractionParams
from models.models import ConfidenceTier, PriceCandidate, Product, utc_today
from models.vendor_config import PriceRange, RenderOptions, VendorConfig


logger = logging.getLogger(__name__)

DEFAULT_ROOM_TYPE = "Deluxe King Pool View"

# Words that appear in nearly every room name and say nothing about which one
ROOM_STOPWORDS = {"room", "rooms", "with", "and", "the", "for", "bed", "beds"}

MAX_LABEL_TEXT_LENGTH = 120

AGODA_CONFIG = VendorConfig(
    site="agoda.com",
    price_selectors=[
        '[data-selenium="display-price-room"]',
        ".PropertyPriceSection__Value",
        ".PriceDisplay__Value",
        '[data-selenium="hotel-rooms-room-price"]',
        ".room-price-section .currency",
        ".PropertyPriceSection .currency",
        ".Price__Value",
        ".price-display",
        '[class*="Price"] [class*="Value"]',
        ".price .currency",
    ],
    room_selectors=[
        '[data-selenium="hotel-rooms-room-name"]',
        ".RoomGridRow__RoomName",
        ".RoomName",
        ".room-type-name",
        ".PropertyRoomRow__RoomName",
    ],
    structured_range=PriceRange(minimum=500, maximum=100000),
    heuristic_range=PriceRange(minimum=1000, maximum=50000),
    content_range=PriceRange(minimum=2000, maximum=30000),
    fallback_range=PriceRange(minimum=2000, maximum=30000),
    max_ancestor_depth=6,
    render=RenderOptions(
        viewport_width=1920,
        viewport_height=1080,
        timeout_ms=60000,
        settle_ms=5000,
    ),
)


def stay_dates(today: datetime.date, days_ahead: int = 7) -> Tuple[datetime.date, datetime.date]:
    """Check-in ``days_ahead`` days from ``today``, check-out one night later."""
    check_in = today + datetime.timedelta(days=days_ahead)
    return check_in, check_in + datetime.timedelta(days=1)


def generate_stay_url(base_url: str, today: datetime.date, days_ahead: int = 7) -> str:
    """
    Rewrite an Agoda hotel URL for a one-night, one-adult stay.

    Sets checkIn, checkOut, adults=1, children=0, rooms=1 and los=1, keeping
    every other query parameter and its position.

    Example:
        >>> generate_stay_url("https://www.agoda.com/h.html?checkIn=2020-01-01&adults=2",
        ...                   datetime.date(2026, 10, 18))
        'https://www.agoda.com/h.html?checkIn=2026-10-25&adults=1&checkOut=2026-10-26&children=0&rooms=1&los=1'
    """
    check_in, check_out = stay_dates(today, days_ahead)
    parts = urlsplit(base_url)

    query = dict(parse_qsl(parts.query, keep_blank_values=True))
    query.update(
        {
            "checkIn": check_in.isoformat(),
            "checkOut": check_out.isoformat(),
            "adults": "1",
            "children": "0",
            "rooms": "1",
            "los": "1",
        }
    )

    return urlunsplit((parts.scheme, parts.netloc, parts.path, urlencode(query), parts.fragment))


def significant_words(label: str) -> List[str]:
    words = re.findall(r"[a-z0-9]+", label.lower())
    return [w for w in words if len(w) > 2 and w not in ROOM_STOPWORDS]


def label_score(text: str, label: str) -> int:
    """
    How well ``text`` names the target room: the full label as a substring
    beats any number of whole-word matches; 0 means no match.
    """
    text = text.lower()
    words = significant_words(label)
    if label.lower() in text:
        return len(words) + 100
    return sum(1 for word in words if re.search(rf"\b{re.escape(word)}\b", text))


class AgodaScraper(BaseScraper):
    """
    Web scraper for Agoda hotel pages (www.agoda.com).

    Tier A here is the room match: find the node naming the target room and
    read the nearest price in its container. If no room matches, the
    generic heuristic, content and bare-number tiers run with lodging ranges.

    Attributes:
        site: Identifier "agoda.com"
        checkin_days_ahead: Days from today to the check-in date.
        default_room_type: Room searched for when the product has none.
    """

    site: str = "agoda.com"
    vendor_config: VendorConfig = AGODA_CONFIG
    checkin_days_ahead: int = 7
    default_room_type: str = DEFAULT_ROOM_TYPE

    def build_url(self, product: Product, today: Optional[datetime.date] = None) -> str:
        url = generate_stay_url(product.url, today or utc_today(), self.checkin_days_ahead)
        logger.info("Agoda: generated URL with stay dates: %s", url)
        return url

    def params_for(self, product: Product, url: str) -> ExtractionParams:
        return ExtractionParams(url=url, target_label=product.room_type or self.default_room_type)

    def tiers(self, params: ExtractionParams):
        return [
            ("room match", self.room_tier),
            ("heuristic", self.heuristic_tier),
            ("content", self.content_tier),
            ("bare number", self.bare_number_tier),
        ]

    async def room_tier(self, session, params, attempt) -> Optional[PriceCandidate]:
        if not params.target_label:
            return None

        soup = BeautifulSoup(await session.full_html(), "lxml")
        matches = self.find_room_nodes(soup, params.target_label)
        logger.info("Agoda: %d nodes match room type %r", len(matches), params.target_label)

        for node, room_name in matches:
            candidate = self.price_near(node, attempt)
            if candidate:
                candidate.label = room_name
                return candidate
        return None

    def find_room_nodes(self, soup, label: str):
        """
        Nodes naming the target room as (node, room_name), best match first.

        Configured room-name selectors are searched first; when none of them
        match anything, every short text-bearing element is considered, but
        it must carry the full label or at least two of its significant words.
        Ties go to the shortest text, then document order.
        """
        nodes = []
        for selector in self.vendor_config.room_selectors:
            try:
                nodes.extend(soup.select(selector))
            except Exception as e:
                logger.debug("Agoda: room selector %s failed: %s", selector, e)

        # Arbitrary page text needs a stronger match than a room-name element
        min_score = 1
        if not nodes:
            min_score = min(2, len(significant_words(label))) or 1
            seen = set()
            for string in soup.find_all(string=True):
                parent = string.parent
                if parent is None or parent.name in ("script", "style", "noscript", "title", "[document]"):
                    continue
                if id(parent) not in seen:
                    seen.add(id(parent))
                    nodes.append(parent)

        scored = []
        for order, node in enumerate(nodes):
            text = node.get_text(" ", strip=True)
            if not text or len(text) > MAX_LABEL_TEXT_LENGTH:
                continue
            score = label_score(text, label)
            if score >= min_score:
                scored.append((score, -len(text), -order, node, text))

        # Equal scores: the shortest text is the most specific node
        scored.sort(key=lambda item: item[:3], reverse=True)
        return [(node, text) for _, _, _, node, text in scored]

    def price_near(self, node, attempt) -> Optional[PriceCandidate]:
        """
        Walk up from ``node`` until an ancestor holds a valid price.

        Stops after ``max_ancestor_depth`` levels or at the document root.
        Configured price selectors inside the container are preferred over
        generic currency-bearing elements.
        """
        price_range = self.vendor_config.structured_range
        container = node

        for _ in range(self.vendor_config.max_ancestor_depth):
            container = container.parent
            if container is None or container.name == "[document]":
                return None

            for selector in self.vendor_config.price_selectors:
                try:
                    elements = container.select(selector)
                except Exception:
                    continue
                for element in elements:
                    candidate = self._check(
                        element.get_text(" ", strip=True), price_range, ConfidenceTier.STRUCTURED, attempt
                    )
                    if candidate:
                        return candidate

            candidate = self.rank_elements(
                self.heuristic_elements(container), price_range, ConfidenceTier.STRUCTURED, attempt
            )
            if candidate:
                return candidate

        return None

"""
Price text parsing shared by every vendor scraper.

All functions here are pure: the same text always yields the same result,
so they can be tested without a browser.

Functions:
    normalize_price_text: Strip currency markers and collapse whitespace.
    contains_excluded_phrase: Detect decoy text (discounts, ratings, EMI...).
    parse_price: First number in the text as a Decimal, no range check.
    parse_candidate: parse_price plus exclusion and range validation.
"""

import re
from decimal import Decimal, InvalidOperation
from typing import Optional

from models.models import ConfidenceTier, PriceCandidate


CURRENCY_MARKERS = re.compile(r"₹|\bINR\b|\bRs\b\.?", re.IGNORECASE)

EXCLUDED_PHRASES = re.compile(
    r"\b(?:delivery|deliver|ratings?|reviews?|discount|emi|warranty|seller|off|save|saved|savings)\b",
    re.IGNORECASE,
)

# Western (1,234,567) or Indian (1,23,456) grouping, or plain digits, with
# at most two fractional digits. A trailing bare "." is allowed ("12,499.").
NUMBER = re.compile(
    r"(?<![\d.,])"
    r"(\d{1,3}(?:,\d{3})+|\d{1,2}(?:,\d{2})+,\d{3}|\d+)"
    r"(?:\.(\d{1,2}))?"
    r"(?!\d|[.,]\d)"
)


def normalize_price_text(text: str) -> str:
    """Remove currency symbols/words and collapse whitespace."""
    if not text:
        return ""
    text = CURRENCY_MARKERS.sub(" ", text)
    return " ".join(text.split())


def contains_excluded_phrase(text: str) -> bool:
    """
    Return True when the text reads like a decoy rather than a price.

    Discount badges ("10% off"), ratings, EMI offers, delivery charges and
    similar blurbs sit right next to real prices and carry digits of their own.
    """
    if not text:
        return False
    return "%" in text or EXCLUDED_PHRASES.search(text) is not None


def parse_price(text: str) -> Optional[Decimal]:
    """
    Parse the first price-shaped number in ``text``.

    Args:
        text: Raw element or page text, currency markers allowed.

    Returns:
        The value as a Decimal, or None if no number could be read.

    Example:
        >>> parse_price("₹1,23,456.50")
        Decimal('123456.50')
    """
    match = NUMBER.search(normalize_price_text(text))
    if not match:
        return None

    whole = match.group(1).replace(",", "")
    fraction = match.group(2)
    try:
        return Decimal(f"{whole}.{fraction}") if fraction else Decimal(whole)
    except InvalidOperation:
        return None


def in_range(value: Decimal, range_min, range_max) -> bool:
    return Decimal(str(range_min)) <= value <= Decimal(str(range_max))


def parse_candidate(
    text: str,
    range_min,
    range_max,
    tier: ConfidenceTier = ConfidenceTier.STRUCTURED,
) -> Optional[PriceCandidate]:
    """
    Turn raw text into a validated price candidate.

    Args:
        text: Raw text taken from the page.
        range_min: Lowest plausible price (inclusive).
        range_max: Highest plausible price (inclusive).
        tier: Confidence tier to stamp on the candidate.

    Returns:
        PriceCandidate, or None if the text is a decoy, has no number, or the
        number falls outside [range_min, range_max].
    """
    if not text or contains_excluded_phrase(text):
        return None

    value = parse_price(text)
    if value is None or not in_range(value, range_min, range_max):
        return None

    return PriceCandidate(value=value, raw_text=text.strip(), tier=tier)

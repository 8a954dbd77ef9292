"""
Data Models for Price Tracker.

This module defines Pydantic models used throughout the Price Tracker
application for type safety and data validation.

Classes:
    ConfidenceTier: Extraction tier a price was found at, best first.
    Product: A tracked product loaded from the catalog.
    PriceCandidate: A parsed, range-validated price proposed by one tier.
    ScrapeSuccess / ScrapeFailure: The two shapes of a scrape outcome.
    HistoryEntry: One dated record in a product's price history.
    PriceHistory: The on-disk history document for one product.
"""

import datetime
from decimal import Decimal
from enum import Enum
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, Field, field_serializer, model_validator


class ConfidenceTier(str, Enum):
    """Fallback stage a candidate came from, ordered by confidence."""

    STRUCTURED = "structured"
    HEURISTIC = "heuristic"
    CONTENT_SCAN = "content_scan"
    BARE_NUMBER = "bare_number"


ProductStatus = Literal["pending", "active", "error"]


def utc_today() -> datetime.date:
    """Current date in UTC; stay dates and history dates both use this clock."""
    return datetime.datetime.now(datetime.timezone.utc).date()


class Product(BaseModel):
    """
    A product tracked by the catalog.

    Field names are snake_case in Python and camelCase in the catalog file
    (``roomType``, ``lastError``, ``lastUpdated``). Keys the tracker does not
    know about are kept so the catalog round-trips untouched.

    Example:
        >>> product = Product(id="p1", name="Mixer", site="flipkart.com",
        ...                   url="https://www.flipkart.com/p/itm1")
        >>> product.status
        'pending'
    """

    id: str
    name: str
    site: str
    url: str
    room_type: Optional[str] = Field(default=None, alias="roomType")
    status: ProductStatus = "pending"
    last_error: Optional[str] = Field(default=None, alias="lastError")
    last_updated: Optional[str] = Field(default=None, alias="lastUpdated")

    class Config:
        populate_by_name = True
        extra = "allow"


class PriceCandidate(BaseModel):
    value: Decimal
    raw_text: str
    tier: ConfidenceTier
    score: float = 0.0
    label: Optional[str] = None


class ScrapeSuccess(BaseModel):
    """
    Successful scrape of one product page.

    Attributes:
        price: Parsed price as a Decimal for precise financial calculations.
        currency: ISO 4217 currency code (e.g., "INR").
        raw_text: The page text the price was read from.
        label: Product display name, or the matched room name for lodging.
        confidence: Tier the price was found at.
    """

    status: Literal["success"] = "success"
    price: Decimal
    currency: str
    raw_text: str
    label: Optional[str] = None
    confidence: ConfidenceTier = ConfidenceTier.STRUCTURED

    @property
    def ok(self) -> bool:
        return True


class ScrapeFailure(BaseModel):
    """Failed scrape, carrying a short human-readable reason."""

    status: Literal["error"] = "error"
    reason: str

    @property
    def ok(self) -> bool:
        return False


ScrapeOutcome = Union[ScrapeSuccess, ScrapeFailure]


class HistoryEntry(BaseModel):
    """
    One dated record in a product's price history.

    A success carries ``price``, ``currency`` and ``rawData``; an error
    carries ``error`` and no price.
    """

    date: datetime.date
    price: Optional[Decimal] = None
    currency: Optional[str] = None
    status: Literal["success", "error"]
    raw_data: Optional[str] = Field(default=None, alias="rawData")
    error: Optional[str] = None
    label: Optional[str] = None

    class Config:
        populate_by_name = True

    @model_validator(mode="after")
    def _price_matches_status(self):
        if self.status == "success" and self.price is None:
            raise ValueError("successful history entry requires a price")
        if self.status == "error" and self.price is not None:
            raise ValueError("error history entry must not carry a price")
        return self

    @field_serializer("price")
    def _serialize_price(self, price: Optional[Decimal]):
        # Stored as a JSON number, integral prices without a fraction
        if price is None:
            return None
        if price == price.to_integral_value():
            return int(price)
        return float(price)

    @classmethod
    def from_outcome(cls, outcome: ScrapeOutcome, day: datetime.date) -> "HistoryEntry":
        if outcome.ok:
            return cls(
                date=day,
                price=outcome.price,
                currency=outcome.currency,
                status="success",
                raw_data=outcome.raw_text,
                label=outcome.label,
            )
        return cls(date=day, status="error", error=outcome.reason)


class PriceHistory(BaseModel):
    product_id: str = Field(alias="productId")
    prices: List[HistoryEntry] = Field(default_factory=list)

    class Config:
        populate_by_name = True

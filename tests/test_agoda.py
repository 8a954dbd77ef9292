"""Tests for the Agoda room-price scraper."""

import datetime
from decimal import Decimal
from urllib.parse import parse_qs, urlsplit

import pytest

from conftest import FakeRenderProvider, FakeSession
from models.base_scraper import ExtractionParams
from models.models import ConfidenceTier, Product, utc_today
from scrapers.agoda_scraper import (
    AGODA_CONFIG,
    AgodaScraper,
    generate_stay_url,
    label_score,
    stay_dates,
)


TODAY = datetime.date(2026, 10, 18)
BASE_URL = (
    "https://www.agoda.com/sunset-bay/hotel/goa-in.html"
    "?finalPriceView=1&checkIn=2024-01-05&los=3&adults=2&children=1&rooms=2&cid=1844104"
)


def agoda(**kwargs):
    return AgodaScraper(render_provider=FakeRenderProvider({}), **kwargs)


def params(label="Deluxe King Pool View"):
    return ExtractionParams(url=BASE_URL, target_label=label)


def test_stay_dates_one_night_a_week_out():
    assert stay_dates(TODAY) == (datetime.date(2026, 10, 25), datetime.date(2026, 10, 26))
    assert stay_dates(TODAY, days_ahead=1) == (datetime.date(2026, 10, 19), datetime.date(2026, 10, 20))


def test_stay_dates_cross_month_end():
    assert stay_dates(datetime.date(2026, 12, 28)) == (datetime.date(2027, 1, 4), datetime.date(2027, 1, 5))


def test_generate_stay_url_rewrites_dates_and_occupancy():
    url = generate_stay_url(BASE_URL, TODAY)
    parts = urlsplit(url)
    query = parse_qs(parts.query)

    assert parts.netloc == "www.agoda.com"
    assert parts.path == "/sunset-bay/hotel/goa-in.html"
    assert query["checkIn"] == ["2026-10-25"]
    assert query["checkOut"] == ["2026-10-26"]
    assert query["adults"] == ["1"]
    assert query["children"] == ["0"]
    assert query["rooms"] == ["1"]
    assert query["los"] == ["1"]
    assert query["finalPriceView"] == ["1"]
    assert query["cid"] == ["1844104"]


def test_generate_stay_url_adds_missing_parameters():
    query = parse_qs(urlsplit(generate_stay_url("https://www.agoda.com/h.html", TODAY, days_ahead=3)).query)

    assert query["checkIn"] == ["2026-10-21"]
    assert query["checkOut"] == ["2026-10-22"]
    assert query["los"] == ["1"]


def test_label_score_prefers_full_label():
    label = "Deluxe King Pool View"

    assert label_score("Deluxe King Pool View - Free cancellation", label) > label_score("Deluxe King Room", label)
    assert label_score("Deluxe King Room", label) == 2
    assert label_score("Superior Twin Room", label) == 0
    assert label_score("Overview", label) == 0


@pytest.mark.asyncio
async def test_room_match_returns_price_from_same_row(agoda_session):
    outcome = await agoda().extract(agoda_session, params())

    assert outcome.ok
    assert outcome.price == Decimal("13442")
    assert outcome.currency == "INR"
    assert outcome.label == "Deluxe King Pool View"
    assert outcome.confidence == ConfidenceTier.STRUCTURED


@pytest.mark.asyncio
async def test_room_match_by_significant_words():
    session = FakeSession(
        """
        <html><head><title>Sunset Bay - Agoda</title></head><body>
        <div class="RoomGridRow">
          <span class="RoomName">Standard Double</span>
          <span class="Price__Value">₹7,100</span>
        </div>
        <div class="RoomGridRow">
          <span class="RoomName">Deluxe Room, King Bed, Pool Access</span>
          <span class="Price__Value">₹12,850</span>
        </div>
        </body></html>
        """
    )

    outcome = await agoda().extract(session, params())

    assert outcome.price == Decimal("12850")
    assert outcome.label == "Deluxe Room, King Bed, Pool Access"


@pytest.mark.asyncio
async def test_room_match_without_known_room_selectors():
    session = FakeSession(
        """
        <html><head><title>Sunset Bay - Agoda</title></head><body>
        <section>
          <div><h4>Garden Cottage</h4><span>₹ 6,200</span></div>
          <div><h4>Deluxe King Pool View</h4><p>Breakfast included</p><span>₹ 13,442</span></div>
        </section>
        </body></html>
        """
    )

    outcome = await agoda().extract(session, params())

    assert outcome.price == Decimal("13442")
    assert outcome.label == "Deluxe King Pool View"


@pytest.mark.asyncio
async def test_ancestor_walk_is_bounded():
    session = FakeSession(
        """
        <html><head><title>Sunset Bay - Agoda</title></head><body>
        <section>
          <span class="Price__Value">₹ 12,000</span>
          <div><div><div><span class="RoomName">Deluxe King Pool View</span></div></div></div>
        </section>
        </body></html>
        """
    )
    scraper = agoda(vendor_config=AGODA_CONFIG.merged({"max_ancestor_depth": 2}))

    outcome = await scraper.extract(session, params())

    assert outcome.price == Decimal("12000")
    assert outcome.confidence == ConfidenceTier.HEURISTIC
    assert outcome.label is None


@pytest.mark.asyncio
async def test_unknown_room_falls_back_to_lodging_range():
    session = FakeSession(
        """
        <html><head><title>Sunset Bay - Agoda</title></head><body>
        <div class="tax-note">Taxes ₹450</div>
        <div class="PriceDisplay__Value">₹8,999</div>
        </body></html>
        """
    )

    outcome = await agoda().extract(session, params("Presidential Suite"))

    assert outcome.ok
    assert outcome.price == Decimal("8999")
    assert outcome.confidence == ConfidenceTier.HEURISTIC


@pytest.mark.asyncio
async def test_access_denied_page_is_blocked():
    session = FakeSession(
        "<html><head><title>Access Denied</title></head><body>"
        "<span class='RoomName'>Deluxe King Pool View</span><span class='Price__Value'>₹13,442</span>"
        "</body></html>"
    )

    outcome = await agoda().extract(session, params())

    assert not outcome.ok
    assert outcome.reason == "blocked"


@pytest.mark.asyncio
async def test_scrape_requests_dated_url_with_room_type(agoda_session):
    provider = FakeRenderProvider({"agoda.com": agoda_session})
    scraper = AgodaScraper(render_provider=provider, checkin_days_ahead=7)
    product = Product(id="h1", name="Sunset Bay", site="agoda.com", url=BASE_URL, roomType="Deluxe King Pool View")

    outcome = await scraper.scrape(product)

    query = parse_qs(urlsplit(provider.requested[0]).query)
    check_in, check_out = stay_dates(utc_today())
    assert query["checkIn"] == [check_in.isoformat()]
    assert query["checkOut"] == [check_out.isoformat()]
    assert outcome.label == "Deluxe King Pool View"
    assert agoda_session.closed


@pytest.mark.asyncio
async def test_page_text_needs_more_than_one_room_word():
    session = FakeSession(
        """
        <html><head><title>Sunset Bay - Agoda</title></head><body>
        <nav>
          <div><a>Overview</a></div>
          <div><a>Pool &amp; Spa</a></div>
          <div><span>From ₹ 4,100</span></div>
        </nav>
        </body></html>
        """
    )

    outcome = await agoda().extract(session, params())

    assert outcome.price == Decimal("4100")
    assert outcome.confidence == ConfidenceTier.HEURISTIC
    assert outcome.label is None

"""Shared fixtures: a static-HTML stand-in for the headless browser."""

from contextlib import asynccontextmanager

import pytest
from bs4 import BeautifulSoup


class FakeElement:
    def __init__(self, tag):
        self._tag = tag

    async def text_content(self) -> str:
        return self._tag.get_text().strip()


class FakeSession:
    """Serves a fixed HTML document through the render session surface."""

    def __init__(self, html, title=None, url="https://example.com/", evaluate_result=None):
        self.html = html
        self.soup = BeautifulSoup(html, "lxml")
        if title is None and self.soup.title is not None:
            title = self.soup.title.get_text()
        self._title = title or ""
        self._url = url
        self.evaluate_result = evaluate_result
        self.screenshots = []
        self.closed = False

    async def current_url(self):
        return self._url

    async def title(self):
        return self._title

    async def query_all(self, selector):
        return [FakeElement(tag) for tag in self.soup.select(selector)]

    async def evaluate(self, expression, arg=None):
        return self.evaluate_result if self.evaluate_result is not None else []

    async def full_html(self):
        return self.html

    async def screenshot(self, path):
        self.screenshots.append(path)

    async def close(self):
        self.closed = True


class FakeRenderProvider:
    """
    Returns the session whose key is a substring of the requested URL.
    A value that is an exception is raised instead, like a failed navigation.
    """

    def __init__(self, pages):
        self.pages = pages
        self.requested = []

    @asynccontextmanager
    async def load_page(self, url, options):
        self.requested.append(url)
        page = next((p for key, p in self.pages.items() if key in url), None)
        if page is None:
            raise AssertionError(f"no fake page for {url}")
        if isinstance(page, Exception):
            raise page
        try:
            yield page
        finally:
            await page.close()


AMAZON_PAGE = """
<html><head><title>Prestige Iris 750 W Mixer Grinder : Amazon.in</title></head>
<body>
  <span id="title">Prestige Iris 750 W Mixer Grinder</span>
  <div class="a-section">
    <span class="savingsPercentage">-38%</span>
    <span class="a-price"><span class="a-price-symbol">₹</span><span class="a-price-whole">12,499.</span></span>
  </div>
  <span class="a-text-price">M.R.P.: ₹19,999</span>
  <div class="rating">4.3 out of 5 stars, 1,204 ratings</div>
</body></html>
"""

AGODA_PAGE = """
<html><head><title>Sunset Bay Resort, Goa - Agoda</title></head>
<body>
  <div class="RoomGridRow">
    <span class="RoomGridRow__RoomName">Superior Twin</span>
    <div class="PriceBlock"><span class="PropertyPriceSection__Value">₹9,870</span></div>
  </div>
  <div class="RoomGridRow">
    <span class="RoomGridRow__RoomName">Deluxe King Pool View</span>
    <div class="PriceBlock">
      <del class="PriceDisplay__Strike">₹16,500</del>
      <span class="PropertyPriceSection__Value">₹13,442</span>
    </div>
  </div>
</body></html>
"""

BLOCKED_PAGE = """
<html><head><title>Access Denied</title></head>
<body><span class="_30jeq3 _16Jk6d">₹2,999</span></body></html>
"""


@pytest.fixture
def amazon_session():
    return FakeSession(AMAZON_PAGE, url="https://m.amazon.in/dp/B0C1234567")


@pytest.fixture
def agoda_session():
    return FakeSession(AGODA_PAGE, url="https://www.agoda.com/sunset-bay/hotel/goa-in.html")


@pytest.fixture
def blocked_session():
    return FakeSession(BLOCKED_PAGE, url="https://www.flipkart.com/mixer/p/itm1")

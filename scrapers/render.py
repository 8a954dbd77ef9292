"""
Headless browser glue.

Wraps Playwright behind the small surface the vendor scrapers use, so the
extraction code never touches the browser API directly and tests can swap in
a static-HTML session.

Classes:
    PlaywrightElement: Element handle exposing text_content().
    PlaywrightSession: One loaded page.
    PlaywrightRenderProvider: Opens a browser per page load and always closes it.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, List

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError
from playwright.async_api import async_playwright

from models.errors import NavigationFailed, NavigationTimeout
from models.vendor_config import RenderOptions


logger = logging.getLogger(__name__)

BROWSER_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-gpu",
    "--disable-blink-features=AutomationControlled",
]


class PlaywrightElement:
    def __init__(self, handle):
        self._handle = handle

    async def text_content(self) -> str:
        text = await self._handle.text_content()
        return (text or "").strip()


class PlaywrightSession:
    """A rendered page, queryable until the provider closes it."""

    def __init__(self, page: Page):
        self._page = page

    async def current_url(self) -> str:
        return self._page.url

    async def title(self) -> str:
        return await self._page.title()

    async def query_all(self, selector: str) -> List[PlaywrightElement]:
        handles = await self._page.query_selector_all(selector)
        return [PlaywrightElement(h) for h in handles]

    async def evaluate(self, expression: str, arg: Any = None) -> Any:
        return await self._page.evaluate(expression, arg)

    async def full_html(self) -> str:
        return await self._page.content()

    async def screenshot(self, path: str) -> None:
        await self._page.screenshot(path=path, full_page=True)

    async def close(self) -> None:
        await self._page.close()


class PlaywrightRenderProvider:
    """
    Loads one URL per browser launch.

    Example:
        >>> provider = PlaywrightRenderProvider()
        >>> async with provider.load_page(url, RenderOptions()) as session:
        ...     print(await session.title())
    """

    @asynccontextmanager
    async def load_page(self, url: str, options: RenderOptions) -> AsyncIterator[PlaywrightSession]:
        """
        Render ``url`` and yield a session; the browser is closed on exit.

        Raises:
            NavigationTimeout: The page did not load within options.timeout_ms.
            NavigationFailed: The browser could not start, or any other
                Playwright error while the page was open (a redirect that
                destroys the execution context, a detached element...).
        """
        async with async_playwright() as p:
            try:
                browser = await p.chromium.launch(headless=options.headless, args=BROWSER_ARGS)
            except PlaywrightError as e:
                logger.error("Could not launch browser: %s", e)
                raise NavigationFailed(f"browser launch failed: {e.message}") from e

            try:
                context = await browser.new_context(
                    user_agent=options.user_agent,
                    viewport={"width": options.viewport_width, "height": options.viewport_height},
                    is_mobile=options.is_mobile,
                    has_touch=options.is_mobile,
                    extra_http_headers=options.extra_headers,
                )
                page = await context.new_page()

                logger.info("Navigating to %s", url)
                await page.goto(url, wait_until=options.wait_until, timeout=options.timeout_ms)

                if options.settle_ms:
                    await asyncio.sleep(options.settle_ms / 1000)

                yield PlaywrightSession(page)
            except PlaywrightTimeoutError as e:
                logger.warning("Timed out on %s: %s", url, e)
                raise NavigationTimeout(f"timeout after {options.timeout_ms} ms") from e
            except PlaywrightError as e:
                logger.warning("Browser error on %s: %s", url, e)
                raise NavigationFailed(f"navigation failed: {e.message}") from e
            finally:
                await browser.close()

"""
Browser session and page adapter for the GIS portal.

``BrowserSession`` owns the Playwright process, browser and context for one
scrape and always tears them down on exit. ``PortalPage`` is the thin page
capability surface the rest of the scraper uses (navigate, query, click,
type, evaluate).
"""

from __future__ import annotations

from contextlib import suppress
from typing import Any, Optional, Sequence

from loguru import logger
from playwright.async_api import ElementHandle, Page, async_playwright
from playwright_stealth import Stealth

from lawrence_gis import config

LOCAL_LAUNCH_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-accelerated-2d-canvas",
    "--no-first-run",
    "--no-zygote",
    "--disable-gpu",
]

# Constrained serverless hosts: no /dev/shm, single process, no GPU.
SERVERLESS_LAUNCH_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--single-process",
    "--no-zygote",
    "--disable-gpu",
    "--hide-scrollbars",
    "--disable-web-security",
]


def launch_args(serverless: bool) -> list[str]:
    return list(SERVERLESS_LAUNCH_ARGS if serverless else LOCAL_LAUNCH_ARGS)


class PortalPage:
    """Wraps a Playwright ``Page`` with the handful of operations the scraper needs."""

    def __init__(self, page: Page):
        self.page = page

    @property
    def url(self) -> str:
        return self.page.url

    async def navigate(self, url: str, timeout_ms: int = config.SEARCH_PAGE_TIMEOUT_MS, wait_until: str = "domcontentloaded"):
        return await self.page.goto(url, timeout=timeout_ms, wait_until=wait_until)

    async def find_first(self, selectors: Sequence[str]) -> tuple[str, ElementHandle] | None:
        """First selector with a match, with its element."""
        for selector in selectors:
            handle = await self.page.query_selector(selector)
            if handle:
                return selector, handle
        return None

    async def find_all(self, selector: str) -> list[ElementHandle]:
        return await self.page.query_selector_all(selector)

    async def evaluate(self, script: str, arg: Any = None) -> Any:
        return await self.page.evaluate(script, arg)

    async def click(self, selector: str, timeout_ms: int = config.CLICK_TIMEOUT_MS) -> None:
        await self.page.click(selector, timeout=timeout_ms)

    async def type_over(self, handle: ElementHandle, text: str) -> None:
        """Select the field's current contents and type over them."""
        await handle.click(click_count=3)
        await handle.type(text)

    async def go_back(self, timeout_ms: int = config.SEARCH_PAGE_TIMEOUT_MS) -> None:
        await self.page.go_back(timeout=timeout_ms)

    async def close(self) -> None:
        await self.page.close()


class BrowserSession:
    """
    One headless browser for the lifetime of a scrape.

    Usage::

        async with BrowserSession() as session:
            page = await session.new_page()
    """

    def __init__(
        self,
        headless: bool = config.HEADLESS,
        serverless: bool = config.SERVERLESS,
        user_agent: str = config.USER_AGENT,
        executable_path: Optional[str] = config.CHROMIUM_EXECUTABLE_PATH,
    ):
        self.headless = headless
        self.serverless = serverless
        self.user_agent = user_agent
        self.executable_path = executable_path
        self.playwright = None
        self.browser = None
        self.context = None

    async def __aenter__(self) -> "BrowserSession":
        try:
            await self.start()
        except BaseException:
            await self.close()
            raise
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def start(self) -> None:
        self.playwright = await async_playwright().start()
        logger.info(
            "Launching chromium (headless={headless}, serverless={serverless})",
            headless=self.headless,
            serverless=self.serverless,
        )
        launch_kwargs: dict[str, Any] = {
            "headless": self.headless,
            "args": launch_args(self.serverless),
        }
        if self.executable_path:
            launch_kwargs["executable_path"] = self.executable_path
        self.browser = await self.playwright.chromium.launch(**launch_kwargs)
        self.context = await self.browser.new_context(
            user_agent=self.user_agent,
            viewport=config.VIEWPORT,
            locale="en-US",
        )

    async def new_page(self) -> PortalPage:
        if self.context is None:
            raise RuntimeError("Browser session not started")
        page = await self.context.new_page()
        await Stealth().apply_stealth_async(page)
        return PortalPage(page)

    async def close(self) -> None:
        """Close Playwright resources; safe to call more than once."""
        if self.context:
            with suppress(Exception):
                await self.context.close()
        if self.browser:
            with suppress(Exception):
                await self.browser.close()
        if self.playwright:
            with suppress(Exception):
                await self.playwright.stop()
        self.context = None
        self.browser = None
        self.playwright = None
        logger.debug("Browser session closed")

"""Rendered fetch tier: headless Chromium for client-side rendered prices.

The browser is launched per attempt and always closed on the way out, so a
failing page can never leak a Chromium process.
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import structlog
from playwright.async_api import (
    Browser,
    Error as PlaywrightError,
    Route,
    TimeoutError as PlaywrightTimeoutError,
    async_playwright,
)

from pricewatch.config import settings
from pricewatch.core.exceptions import RenderEngineError
from pricewatch.scrapers.base import TIER_RENDERED
from pricewatch.scrapers.utils.retry import browser_launch_retry
from pricewatch.scrapers.utils.user_agents import get_chrome_user_agent

logger = structlog.get_logger(__name__)

LAUNCH_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-accelerated-2d-canvas",
    "--disable-gpu",
    "--window-size=1920,1080",
    "--disable-blink-features=AutomationControlled",
]

# Heavy resources that never carry price data
BLOCKED_RESOURCE_TYPES = {"image", "stylesheet", "font", "media"}

# Minimal stealth JS to mask automation signals
STEALTH_JS = """
Object.defineProperty(navigator, 'webdriver', { get: () => undefined });
Object.defineProperty(navigator, 'languages', { get: () => ['en-IN', 'en-US', 'en'] });
Object.defineProperty(navigator, 'plugins', { get: () => [1, 2, 3, 4, 5] });
window.chrome = { runtime: {} };
"""


async def _block_heavy_resources(route: Route) -> None:
    if route.request.resource_type in BLOCKED_RESOURCE_TYPES:
        await route.abort()
    else:
        await route.continue_()


class RenderedFetchTier:
    """Loads a page in headless Chromium and returns the final DOM as HTML."""

    name = TIER_RENDERED

    def __init__(self, headless: Optional[bool] = None, timeout: Optional[float] = None):
        """Initialize the rendered tier.

        Args:
            headless: Run Chromium headless (default from settings)
            timeout: Navigation timeout in seconds (default from settings)
        """
        self._headless = settings.RENDER_HEADLESS if headless is None else headless
        self._timeout = timeout if timeout is not None else settings.RENDER_TIMEOUT_SECONDS

    @asynccontextmanager
    async def launch_browser(self) -> AsyncIterator[Browser]:
        """Start Playwright and Chromium for one attempt, closing both on exit.

        Raises:
            RenderEngineError: If Chromium cannot be started
        """
        async with async_playwright() as playwright:
            try:
                browser = await self._launch(playwright)
            except (PlaywrightError, OSError) as e:
                logger.error("browser_launch_failed", error=str(e))
                raise RenderEngineError(str(e)) from e

            logger.debug("browser_started", headless=self._headless)
            try:
                yield browser
            finally:
                await browser.close()
                logger.debug("browser_closed")

    @browser_launch_retry
    async def _launch(self, playwright) -> Browser:
        return await playwright.chromium.launch(headless=self._headless, args=LAUNCH_ARGS)

    async def fetch(self, url: str) -> Optional[str]:
        """Render the page and return its HTML, or None when navigation fails.

        Raises:
            RenderEngineError: If the browser cannot be started
        """
        async with self.launch_browser() as browser:
            context = await browser.new_context(
                user_agent=get_chrome_user_agent(),
                viewport={"width": 1920, "height": 1080},
                locale="en-IN",
                java_script_enabled=True,
            )
            try:
                await context.add_init_script(STEALTH_JS)
                await context.route("**/*", _block_heavy_resources)
                page = await context.new_page()

                logger.info("rendering_url", url=url)
                await page.goto(url, wait_until="networkidle", timeout=self._timeout * 1000)
                return await page.content()
            except PlaywrightTimeoutError:
                logger.info("render_timeout", url=url, timeout=self._timeout)
                return None
            except PlaywrightError as e:
                logger.info("render_failed", url=url, error=str(e))
                return None
            finally:
                await context.close()

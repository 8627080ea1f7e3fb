"""Tests for the fast (httpx) and rendered (Playwright) fetch tiers."""

from contextlib import asynccontextmanager
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest
from playwright.async_api import Error as PlaywrightError, TimeoutError as PlaywrightTimeoutError
from structlog.testing import capture_logs

from pricewatch.core.exceptions import RenderEngineError
from pricewatch.scrapers.fetchers import FastFetchTier, RenderedFetchTier

URL = "https://www.flipkart.com/apple-iphone-15/p/itm6ac6485515ae4"


# ============================================================================
# TESTS: FAST FETCH TIER
# ============================================================================

class TestFastFetchTier:
    """Tests for FastFetchTier."""

    async def test_success_returns_html(self):
        """Test a 200 response returns the body with browser-like headers sent."""
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["headers"] = request.headers
            return httpx.Response(200, text="<html><h1>iPhone 15</h1></html>")

        tier = FastFetchTier(transport=httpx.MockTransport(handler))
        html = await tier.fetch(URL)

        assert html == "<html><h1>iPhone 15</h1></html>"
        assert "Mozilla/5.0" in seen["headers"]["user-agent"]
        assert seen["headers"]["accept-language"].startswith("en")
        assert "text/html" in seen["headers"]["accept"]

    @pytest.mark.parametrize("status_code", [403, 503, 404, 500])
    async def test_error_status_is_tier_failure(self, status_code):
        """Test blocked and other non-success statuses return None."""
        tier = FastFetchTier(transport=httpx.MockTransport(lambda r: httpx.Response(status_code, text="blocked")))
        assert await tier.fetch(URL) is None

    async def test_follows_redirects(self):
        """Test a short redirect chain is followed."""
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/dl/short":
                return httpx.Response(301, headers={"Location": URL})
            return httpx.Response(200, text="<html>final</html>")

        tier = FastFetchTier(transport=httpx.MockTransport(handler))
        assert await tier.fetch("https://www.flipkart.com/dl/short") == "<html>final</html>"

    async def test_redirect_loop_is_tier_failure(self):
        """Test exceeding the redirect limit returns None."""
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request.url)
            return httpx.Response(302, headers={"Location": f"https://www.flipkart.com/hop/{len(calls)}"})

        tier = FastFetchTier(max_redirects=5, transport=httpx.MockTransport(handler))

        assert await tier.fetch(URL) is None
        assert len(calls) == 6

    async def test_timeout_is_tier_failure(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        tier = FastFetchTier(transport=httpx.MockTransport(handler))
        assert await tier.fetch(URL) is None

    async def test_connection_error_is_tier_failure(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        tier = FastFetchTier(transport=httpx.MockTransport(handler))
        assert await tier.fetch(URL) is None


# ============================================================================
# TESTS: RENDERED FETCH TIER
# ============================================================================

def fake_playwright(launch):
    """Stand-in for async_playwright() whose chromium.launch is ``launch``."""
    playwright = MagicMock()
    playwright.chromium.launch = launch

    @asynccontextmanager
    async def factory():
        yield playwright

    return factory


def fake_browser(goto=None, content="<html><span>₹61,999</span></html>"):
    page = MagicMock()
    page.goto = goto or AsyncMock()
    page.content = AsyncMock(return_value=content)

    context = MagicMock()
    context.add_init_script = AsyncMock()
    context.route = AsyncMock()
    context.new_page = AsyncMock(return_value=page)
    context.close = AsyncMock()

    browser = MagicMock()
    browser.new_context = AsyncMock(return_value=context)
    browser.close = AsyncMock()
    return browser, context, page


class TestRenderedFetchTier:
    """Tests for RenderedFetchTier with Playwright replaced by mocks."""

    async def test_renders_page(self):
        """Test the rendered DOM is returned and the browser is closed."""
        browser, context, page = fake_browser()
        launch = AsyncMock(return_value=browser)

        with patch("pricewatch.scrapers.fetchers.rendered.async_playwright", fake_playwright(launch)):
            html = await RenderedFetchTier(timeout=50).fetch(URL)

        assert html == "<html><span>₹61,999</span></html>"
        page.goto.assert_awaited_once_with(URL, wait_until="networkidle", timeout=50000)
        context.route.assert_awaited_once()
        context.close.assert_awaited_once()
        browser.close.assert_awaited_once()

    async def test_navigation_timeout_returns_none(self):
        """Test a page that never settles is a tier failure, and cleanup still runs."""
        browser, context, _ = fake_browser(goto=AsyncMock(side_effect=PlaywrightTimeoutError("Timeout 50000ms exceeded")))
        launch = AsyncMock(return_value=browser)

        with patch("pricewatch.scrapers.fetchers.rendered.async_playwright", fake_playwright(launch)):
            assert await RenderedFetchTier().fetch(URL) is None

        context.close.assert_awaited_once()
        browser.close.assert_awaited_once()

    async def test_launch_failure_raises_render_engine_error(self):
        """Test Chromium that cannot start is retried once, then surfaced."""
        launch = AsyncMock(side_effect=PlaywrightError("Executable doesn't exist"))

        with capture_logs() as logs:
            with patch("pricewatch.scrapers.fetchers.rendered.async_playwright", fake_playwright(launch)):
                with pytest.raises(RenderEngineError):
                    await RenderedFetchTier().fetch(URL)

        assert launch.await_count == 2
        retries = [e for e in logs if e["event"].startswith("Retrying")]
        assert len(retries) == 1
        assert retries[0]["log_level"] == "warning"

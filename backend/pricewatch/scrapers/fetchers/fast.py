"""Fast fetch tier: one plain HTTP GET of the product page."""

from typing import Optional

import httpx
import structlog

from pricewatch.config import settings
from pricewatch.scrapers.base import TIER_FAST
from pricewatch.scrapers.utils.user_agents import build_browser_headers

logger = structlog.get_logger(__name__)

BLOCKED_STATUSES = {403, 503}


class FastFetchTier:
    """Fetches static HTML with browser-like headers.

    Any transport error, timeout or non-success status is a tier failure
    (``None``), never an exception: the pipeline escalates to the next tier.
    """

    name = TIER_FAST

    def __init__(
        self,
        timeout: Optional[float] = None,
        max_redirects: Optional[int] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the fast tier.

        Args:
            timeout: Request timeout in seconds (default from settings)
            max_redirects: Maximum redirect hops (default from settings)
            transport: Optional httpx transport, used by tests
        """
        self._timeout = timeout if timeout is not None else settings.FETCH_TIMEOUT_SECONDS
        self._max_redirects = max_redirects if max_redirects is not None else settings.FETCH_MAX_REDIRECTS
        self._transport = transport

    async def fetch(self, url: str) -> Optional[str]:
        """GET the page and return its HTML, or None when the tier fails."""
        try:
            async with httpx.AsyncClient(
                headers=build_browser_headers(),
                timeout=self._timeout,
                follow_redirects=True,
                max_redirects=self._max_redirects,
                transport=self._transport,
            ) as client:
                response = await client.get(url)
        except httpx.TooManyRedirects:
            logger.info("fast_fetch_too_many_redirects", url=url, max_redirects=self._max_redirects)
            return None
        except httpx.TimeoutException:
            logger.info("fast_fetch_timeout", url=url, timeout=self._timeout)
            return None
        except httpx.HTTPError as e:
            logger.info("fast_fetch_failed", url=url, error=str(e))
            return None

        if response.status_code in BLOCKED_STATUSES:
            logger.info("fast_fetch_blocked", url=url, status_code=response.status_code)
            return None
        if not response.is_success:
            logger.info("fast_fetch_bad_status", url=url, status_code=response.status_code)
            return None

        return response.text

"""Catch-all adapter for merchants without dedicated selectors."""

import structlog
from bs4 import BeautifulSoup

from pricewatch.scrapers.base import ExtractionResult, SOURCE_GENERIC, ZERO
from pricewatch.scrapers.utils.normalizer import PriceNormalizer

logger = structlog.get_logger(__name__)


class GenericAdapter:
    """Heading-plus-regex extraction that works on most product pages.

    Name is the first ``<h1>`` (falling back to ``<title>``); price is the
    first currency-prefixed number anywhere in the page text.
    """

    def __init__(self, fallback_name: str = "Product"):
        self.fallback_name = fallback_name

    def extract(self, soup: BeautifulSoup) -> ExtractionResult:
        try:
            heading = soup.find("h1")
            name = heading.get_text(" ", strip=True) if heading else ""
            if not name and soup.title:
                name = soup.title.get_text(strip=True)

            body = soup.body or soup
            price = PriceNormalizer.extract_currency_price(body.get_text(" ", strip=True))
        except Exception as e:
            logger.warning("generic_adapter_failed", error=str(e))
            return ExtractionResult(name=self.fallback_name, source=SOURCE_GENERIC)

        return ExtractionResult(
            name=name or self.fallback_name,
            current_price=price or ZERO,
            source=SOURCE_GENERIC,
        )

"""Selector-driven merchant adapter.

Every supported merchant is one :class:`SelectorAdapter` value configured
with ordered CSS selector lists. Supporting a new merchant means adding a
new configured value to the registry, not writing a subclass.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Sequence, Tuple

import structlog
from bs4 import BeautifulSoup

from pricewatch.scrapers.base import ExtractionResult, SOURCE_MERCHANT, ZERO
from pricewatch.scrapers.platform import MerchantId
from pricewatch.scrapers.utils.normalizer import PriceNormalizer

logger = structlog.get_logger(__name__)


def absolutize_image_url(url: Optional[str]) -> Optional[str]:
    """Turn protocol-relative image URLs into https URLs."""
    if not url:
        return None
    url = url.strip()
    if url.startswith("//"):
        return f"https:{url}"
    if url.startswith("data:"):
        # Inline placeholders are never the real product image
        return None
    return url or None


@dataclass(frozen=True)
class SelectorAdapter:
    """Maps a merchant's product page markup to an ExtractionResult.

    Each field is read with the first selector that yields a usable value.
    Missing fields default to empty/zero instead of failing.
    """

    merchant: MerchantId
    display_name: str
    name_selectors: Tuple[str, ...]
    price_selectors: Tuple[str, ...]
    original_price_selectors: Tuple[str, ...] = ()
    # (selector, attribute) pairs, tried in order
    image_selectors: Tuple[Tuple[str, str], ...] = ()

    @property
    def fallback_name(self) -> str:
        return f"{self.display_name} Product"

    def extract(self, soup: BeautifulSoup) -> ExtractionResult:
        """Extract name, prices and image from a parsed product page.

        Args:
            soup: Parsed HTML document

        Returns:
            ExtractionResult; zero price when no selector matched
        """
        try:
            name = self._first_text(soup, self.name_selectors)
            current_price = self._first_price(soup, self.price_selectors)
            original_price = self._first_price(soup, self.original_price_selectors)
            image_url = self._first_attribute(soup, self.image_selectors)
        except Exception as e:
            logger.warning("merchant_adapter_failed", merchant=self.merchant.value, error=str(e))
            return ExtractionResult(
                name=self.fallback_name,
                platform=self.merchant.value,
                source=SOURCE_MERCHANT,
            )

        return ExtractionResult(
            name=name or self.fallback_name,
            current_price=current_price or ZERO,
            original_price=original_price or ZERO,
            image_url=image_url,
            platform=self.merchant.value,
            source=SOURCE_MERCHANT,
        )

    @staticmethod
    def _first_text(soup: BeautifulSoup, selectors: Sequence[str]) -> str:
        for selector in selectors:
            elem = soup.select_one(selector)
            if elem:
                text = elem.get_text(" ", strip=True)
                if text:
                    return text
        return ""

    @staticmethod
    def _first_price(soup: BeautifulSoup, selectors: Sequence[str]) -> Optional[Decimal]:
        for selector in selectors:
            elem = soup.select_one(selector)
            if not elem:
                continue
            price = PriceNormalizer.clean_price_string(elem.get_text(strip=True))
            if price and price > 0:
                return price
        return None

    @staticmethod
    def _first_attribute(soup: BeautifulSoup, selectors: Sequence[Tuple[str, str]]) -> Optional[str]:
        for selector, attribute in selectors:
            elem = soup.select_one(selector)
            if not elem:
                continue
            url = absolutize_image_url(elem.get(attribute))
            if url:
                return url
        return None

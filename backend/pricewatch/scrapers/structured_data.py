"""schema.org JSON-LD product extraction.

Structured product/offer blocks carry explicit price fields, so they are
trusted ahead of any selector-based merchant parsing.
"""

import json
from decimal import Decimal
from typing import Any, Dict, Iterator, List, Optional

import structlog
from bs4 import BeautifulSoup

from pricewatch.scrapers.base import ExtractionResult, SOURCE_STRUCTURED_DATA, ZERO
from pricewatch.scrapers.utils.normalizer import PriceNormalizer

logger = structlog.get_logger(__name__)

PRODUCT_TYPES = {"Product", "SoftwareApplication"}


class StructuredDataExtractor:
    """Reads the first Product offer found in ``application/ld+json`` scripts."""

    def extract(self, soup: BeautifulSoup) -> Optional[ExtractionResult]:
        """Extract a product snapshot from JSON-LD blocks.

        Args:
            soup: Parsed HTML document

        Returns:
            ExtractionResult for the first product with an offer, or None
        """
        for block in self._iter_blocks(soup):
            for item in self._iter_items(block):
                if not self._is_product(item):
                    continue
                offer = self._first_offer(item.get("offers"))
                if not offer:
                    continue
                try:
                    return self._to_result(item, offer)
                except (TypeError, ValueError) as e:
                    logger.debug("structured_data_offer_invalid", error=str(e))
        return None

    def _iter_blocks(self, soup: BeautifulSoup) -> Iterator[Any]:
        for script in soup.find_all("script", attrs={"type": "application/ld+json"}):
            raw = script.string or script.get_text()
            if not raw or not raw.strip():
                continue
            try:
                yield json.loads(raw)
            except json.JSONDecodeError:
                # Malformed blocks are common; the next one may still be valid
                continue

    @staticmethod
    def _iter_items(block: Any) -> Iterator[Dict[str, Any]]:
        if isinstance(block, list):
            items: List[Any] = block
        elif isinstance(block, dict) and isinstance(block.get("@graph"), list):
            items = block["@graph"]
        else:
            items = [block]
        for item in items:
            if isinstance(item, dict):
                yield item

    @staticmethod
    def _is_product(item: Dict[str, Any]) -> bool:
        item_type = item.get("@type")
        if isinstance(item_type, list):
            return any(t in PRODUCT_TYPES for t in item_type)
        return item_type in PRODUCT_TYPES

    @staticmethod
    def _first_offer(offers: Any) -> Optional[Dict[str, Any]]:
        if isinstance(offers, list):
            offers = offers[0] if offers else None
        return offers if isinstance(offers, dict) else None

    def _to_result(self, item: Dict[str, Any], offer: Dict[str, Any]) -> ExtractionResult:
        price = self._to_decimal(offer.get("price")) or self._to_decimal(offer.get("highPrice"))
        if price is None:
            price = self._to_decimal(offer.get("lowPrice"))

        spec = offer.get("priceSpecification")
        if isinstance(spec, list):
            spec = spec[0] if spec else None
        original = self._to_decimal(spec.get("maxPrice")) if isinstance(spec, dict) else None

        return ExtractionResult(
            name=str(item.get("name") or "").strip(),
            current_price=price or ZERO,
            original_price=original or ZERO,
            image_url=self._image_url(item.get("image")),
            source=SOURCE_STRUCTURED_DATA,
        )

    @staticmethod
    def _to_decimal(value: Any) -> Optional[Decimal]:
        if value is None or isinstance(value, bool):
            return None
        if isinstance(value, (int, float)):
            value = str(value)
        if not isinstance(value, str):
            return None
        return PriceNormalizer.clean_price_string(value)

    @staticmethod
    def _image_url(image: Any) -> Optional[str]:
        if isinstance(image, list):
            image = image[0] if image else None
        if isinstance(image, dict):
            image = image.get("url") or image.get("contentUrl")
        return image if isinstance(image, str) and image else None

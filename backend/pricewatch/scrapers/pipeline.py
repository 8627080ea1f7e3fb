"""Tiered product extraction pipeline.

Control flow is two explicit ordered lists:

* fetch tiers (fast HTTP, then rendered Chromium), and
* per-document strategies (structured data, then the merchant adapter).

Tiers are tried in order; on each fetched document the strategies are
tried in order; the first result with a positive price wins. When every
tier is exhausted, a known merchant's page gets one generic-adapter pass
over the last fetched document, and finally a placeholder is returned.
"""

from decimal import Decimal
from typing import Callable, List, Optional, Protocol, Sequence, Tuple

import structlog
from bs4 import BeautifulSoup

from pricewatch.config import settings
from pricewatch.core.exceptions import RenderEngineError
from pricewatch.scrapers.base import (
    ExtractionResult,
    SOURCE_PLACEHOLDER,
    apply_original_price_sanity,
    parse_document,
)
from pricewatch.scrapers.fetchers import FastFetchTier, RenderedFetchTier
from pricewatch.scrapers.platform import MerchantId, detect_platform
from pricewatch.scrapers.registry import AdapterRegistry
from pricewatch.scrapers.structured_data import StructuredDataExtractor

logger = structlog.get_logger(__name__)


class FetchTier(Protocol):
    """A way of turning a URL into HTML. Returns None when the tier fails."""

    name: str

    async def fetch(self, url: str) -> Optional[str]:
        ...


# (strategy name, callable(soup) -> Optional[ExtractionResult])
DocumentStrategy = Tuple[str, Callable[[BeautifulSoup], Optional[ExtractionResult]]]


def placeholder_result(merchant: MerchantId) -> ExtractionResult:
    """Last-resort result when no tier produced a price."""
    return ExtractionResult(
        name=f"Product from {merchant.value}",
        platform=merchant.value,
        source=SOURCE_PLACEHOLDER,
    )


class ExtractionPipeline:
    """Extracts a normalized product snapshot from a product URL.

    Bad pages never raise: they degrade to a lower-confidence result or the
    placeholder. Only :class:`RenderEngineError` (Chromium cannot start)
    propagates to the caller.
    """

    def __init__(
        self,
        tiers: Optional[Sequence[FetchTier]] = None,
        registry: Optional[AdapterRegistry] = None,
        structured_extractor: Optional[StructuredDataExtractor] = None,
        max_original_ratio: Optional[Decimal] = None,
    ):
        """Initialize the pipeline.

        Args:
            tiers: Ordered fetch tiers (default: fast, then rendered if enabled)
            registry: Merchant adapter registry
            structured_extractor: JSON-LD extractor
            max_original_ratio: Original/current price ratio above which the
                original price is discarded
        """
        if tiers is None:
            tiers = [FastFetchTier()]
            if settings.RENDER_ENABLED:
                tiers.append(RenderedFetchTier())
        self.tiers: List[FetchTier] = list(tiers)
        self.registry = registry or AdapterRegistry()
        self.structured_extractor = structured_extractor or StructuredDataExtractor()
        self.max_original_ratio = (
            max_original_ratio if max_original_ratio is not None else settings.ORIGINAL_PRICE_MAX_RATIO
        )
        self.logger = logger.bind(service="extraction_pipeline")

    def document_strategies(self, merchant: MerchantId) -> List[DocumentStrategy]:
        """Ordered strategies applied to every fetched document."""
        adapter = self.registry.get_adapter(merchant)
        return [
            ("structured_data", self.structured_extractor.extract),
            ("merchant_adapter", adapter.extract),
        ]

    async def extract(self, url: str) -> ExtractionResult:
        """Run the tiered extraction for a product URL.

        Args:
            url: Product page URL

        Returns:
            ExtractionResult with a positive price, or the placeholder

        Raises:
            RenderEngineError: If the rendered tier cannot start Chromium
        """
        merchant = detect_platform(url)
        self.logger.info("extracting_product", url=url, platform=merchant.value)

        strategies = self.document_strategies(merchant)
        last_document: Optional[BeautifulSoup] = None
        last_tier: Optional[str] = None

        for tier in self.tiers:
            html = await self._fetch(tier, url)
            if not html:
                continue

            soup = parse_document(html)
            last_document, last_tier = soup, tier.name

            result = self._apply_strategies(strategies, soup)
            if result is not None:
                result = result.with_context(platform=merchant.value, tier=tier.name)
                self.logger.info(
                    "extraction_succeeded",
                    url=url,
                    platform=merchant.value,
                    tier=tier.name,
                    source=result.source,
                    price=str(result.current_price),
                )
                return result

            self.logger.info("tier_without_price", url=url, tier=tier.name)

        if last_document is not None and self.registry.has_adapter(merchant):
            generic = self.registry.generic_adapter(merchant)
            result = self._run_strategy("generic_adapter", generic.extract, last_document)
            if result is not None:
                self.logger.info(
                    "generic_fallback_succeeded",
                    url=url,
                    platform=merchant.value,
                    price=str(result.current_price),
                )
                return result.with_context(platform=merchant.value, tier=last_tier)

        self.logger.warning("extraction_exhausted", url=url, platform=merchant.value)
        return placeholder_result(merchant)

    async def _fetch(self, tier: FetchTier, url: str) -> Optional[str]:
        try:
            return await tier.fetch(url)
        except RenderEngineError:
            raise
        except Exception as e:
            # A tier that blows up on one page is just a failed tier
            self.logger.warning("tier_failed", tier=tier.name, url=url, error=str(e))
            return None

    def _apply_strategies(
        self, strategies: Sequence[DocumentStrategy], soup: BeautifulSoup
    ) -> Optional[ExtractionResult]:
        for name, strategy in strategies:
            result = self._run_strategy(name, strategy, soup)
            if result is not None:
                return result
        return None

    def _run_strategy(
        self,
        name: str,
        strategy: Callable[[BeautifulSoup], Optional[ExtractionResult]],
        soup: BeautifulSoup,
    ) -> Optional[ExtractionResult]:
        """Run one strategy; return its sanitized result only if it has a price."""
        try:
            result = strategy(soup)
        except Exception as e:
            self.logger.warning("strategy_failed", strategy=name, error=str(e))
            return None

        if result is None or not result.has_price:
            return None
        return apply_original_price_sanity(result, self.max_original_ratio)

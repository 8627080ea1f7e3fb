"""Shared scraper data structures and the adapter interface.

Every extraction strategy (structured data, merchant adapters, generic
fallback) produces an :class:`ExtractionResult`, and every document-level
strategy satisfies the :class:`DocumentAdapter` protocol.
"""

from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Optional, Protocol

from bs4 import BeautifulSoup

ZERO = Decimal("0")

# Strategy names recorded on ExtractionResult.source
SOURCE_STRUCTURED_DATA = "structured_data"
SOURCE_MERCHANT = "merchant"
SOURCE_GENERIC = "generic"
SOURCE_PLACEHOLDER = "placeholder"

# Tier names recorded on ExtractionResult.tier
TIER_FAST = "fast"
TIER_RENDERED = "rendered"


@dataclass
class ExtractionResult:
    """Normalized product snapshot produced by one extraction run.

    Transient: never persisted directly. The price monitor and the
    add-product flow copy what they need onto the ORM models.
    """

    name: str
    current_price: Decimal = ZERO
    original_price: Decimal = ZERO
    image_url: Optional[str] = None
    platform: str = "unknown"
    source: str = SOURCE_PLACEHOLDER
    tier: Optional[str] = None

    def __post_init__(self):
        """Validate data after initialization."""
        if self.current_price is None or self.current_price < 0:
            raise ValueError("current_price must be a non-negative Decimal")
        if self.original_price is None or self.original_price < 0:
            self.original_price = ZERO

    @property
    def has_price(self) -> bool:
        """Whether this result satisfies the pipeline's success predicate."""
        return self.current_price > 0

    def with_context(self, **changes) -> "ExtractionResult":
        """Return a copy with pipeline context (platform, tier, source) filled in."""
        return replace(self, **changes)


class DocumentAdapter(Protocol):
    """Capability shared by all document-level extraction strategies."""

    def extract(self, soup: BeautifulSoup) -> ExtractionResult:
        """Map a parsed document to a result. Must not raise."""
        ...


def parse_document(html: str) -> BeautifulSoup:
    """Parse fetched HTML the same way for every tier."""
    return BeautifulSoup(html, "html.parser")


def apply_original_price_sanity(result: ExtractionResult, max_ratio: Decimal) -> ExtractionResult:
    """Drop an original price that is implausibly larger than the current price.

    A ratio above ``max_ratio`` is parsing noise (concatenated digits,
    paise read as rupees), not a real discount.
    """
    if result.current_price > 0 and result.original_price > result.current_price * max_ratio:
        return replace(result, original_price=ZERO)
    return result

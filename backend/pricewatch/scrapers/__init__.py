"""Product page extraction and price monitoring.

This package provides:
- Platform detection and merchant adapters
- Fast (HTTP) and rendered (Chromium) fetch tiers
- The tiered extraction pipeline
- The periodic price monitor scheduler
"""

from .base import ExtractionResult, DocumentAdapter
from .platform import MerchantId, detect_platform
from .pipeline import ExtractionPipeline
from .registry import AdapterRegistry

__all__ = [
    # Data structures
    "ExtractionResult",
    "DocumentAdapter",
    # Platform detection
    "MerchantId",
    "detect_platform",
    # Pipeline
    "ExtractionPipeline",
    "AdapterRegistry",
]

"""Registry mapping merchants to their document adapters."""

from typing import Dict, Mapping, Optional

import structlog

from pricewatch.scrapers.base import DocumentAdapter
from pricewatch.scrapers.adapters import GenericAdapter, MERCHANT_ADAPTERS
from pricewatch.scrapers.platform import MerchantId


logger = structlog.get_logger(__name__)


class AdapterRegistry:
    """Dispatches a MerchantId to the adapter that understands its markup.

    Merchants without a registered adapter, including ``unknown``, get a
    GenericAdapter.
    """

    def __init__(self, adapters: Optional[Mapping[MerchantId, DocumentAdapter]] = None):
        """Initialize the registry.

        Args:
            adapters: Initial merchant -> adapter mapping (defaults to all
                built-in merchant adapters)
        """
        source = MERCHANT_ADAPTERS if adapters is None else adapters
        self._adapters: Dict[MerchantId, DocumentAdapter] = dict(source)

    def register_adapter(self, merchant: MerchantId, adapter: DocumentAdapter) -> None:
        """Register (or replace) the adapter for a merchant.

        Args:
            merchant: Merchant identifier
            adapter: Object with an ``extract(soup) -> ExtractionResult`` method
        """
        if not callable(getattr(adapter, "extract", None)):
            raise ValueError(f"Adapter must define extract(soup): {adapter!r}")
        if merchant == MerchantId.UNKNOWN:
            raise ValueError("The unknown merchant always uses the generic adapter")

        self._adapters[merchant] = adapter
        logger.info("adapter_registered", merchant=merchant.value)

    def get_adapter(self, merchant: MerchantId) -> DocumentAdapter:
        """Adapter for a merchant, falling back to a GenericAdapter."""
        adapter = self._adapters.get(merchant)
        if adapter is None:
            return self.generic_adapter(merchant)
        return adapter

    def generic_adapter(self, merchant: MerchantId) -> GenericAdapter:
        """Generic fallback labelled for the given merchant."""
        return GenericAdapter(fallback_name=f"{merchant.value} Product")

    def has_adapter(self, merchant: MerchantId) -> bool:
        """Check whether a dedicated adapter is registered for a merchant."""
        return merchant in self._adapters

    def get_registered_merchants(self) -> list[MerchantId]:
        """Merchants with a dedicated adapter."""
        return list(self._adapters.keys())

"""Product service for tracked products and their price history.

Handles adding products from a URL (through the extraction pipeline or
from manually entered data), owner edits, soft removal and the price
history stream used by charts.
"""

from datetime import timedelta
from decimal import Decimal, InvalidOperation
from typing import List, Optional
from uuid import UUID

import structlog
from sqlalchemy import select, and_
from sqlalchemy.ext.asyncio import AsyncSession

from pricewatch.config import settings
from pricewatch.core.exceptions import NotFoundError, PriceWatchException, RenderEngineError
from pricewatch.models.base import utcnow
from pricewatch.models.price_history import PriceSample
from pricewatch.models.product import TrackedProduct
from pricewatch.scrapers.base import ExtractionResult, SOURCE_MERCHANT
from pricewatch.scrapers.pipeline import ExtractionPipeline, placeholder_result
from pricewatch.scrapers.platform import MerchantId, detect_platform

logger = structlog.get_logger(__name__)

PLACEHOLDER_NAME_PREFIX = "Product from"


def normalize_platform(platform: Optional[str], url: Optional[str] = None) -> MerchantId:
    """Map a user-supplied merchant name onto MerchantId.

    Values outside the known set fall back to detecting the merchant from
    the URL, which yields ``UNKNOWN`` when that fails too.
    """
    value = (platform or "").strip().lower()
    try:
        return MerchantId(value)
    except ValueError:
        return detect_platform(url or "")


class ProductService:
    """Service for managing tracked products and price history."""

    def __init__(self, db: AsyncSession):
        """Initialize product service.

        Args:
            db: Async database session
        """
        self.db = db
        self.logger = logger.bind(service="product_service")

    async def add_product_from_url(
        self,
        user_id: UUID,
        url: Optional[str],
        pipeline: Optional[ExtractionPipeline] = None,
        name: Optional[str] = None,
        current_price: Optional[Decimal] = None,
        image_url: Optional[str] = None,
        platform: Optional[str] = None,
    ) -> TrackedProduct:
        """Start tracking a product.

        Manually entered name, price and platform skip extraction entirely.
        Otherwise the URL goes through the extraction pipeline. A page that
        yields nothing still becomes a placeholder product; only a rendering
        engine that cannot start is reported to the caller.

        The initial price sample is written only when the price is positive.

        Args:
            user_id: Owner UUID
            url: Product page URL
            pipeline: Extraction pipeline (required when extracting)
            name: Manually entered product name
            current_price: Manually entered price
            image_url: Manually entered image URL
            platform: Manually entered merchant identifier

        Returns:
            The new TrackedProduct

        Raises:
            PriceWatchException: If neither a URL nor manual details are given,
                or the manual price is not a non-negative number
            RenderEngineError: If the rendered tier cannot start Chromium
        """
        if name and current_price is not None and platform:
            result = self._manual_result(url, name, current_price, image_url, platform)
            self.logger.info("product_added_manually", platform=result.platform)
        elif url:
            result = await self._extract(url, pipeline)
        else:
            raise PriceWatchException("Please provide either URL or product details")

        product = TrackedProduct(
            user_id=user_id,
            name=result.name,
            url=url or "#",
            platform=result.platform,
            current_price=result.current_price,
            original_price=result.original_price or None,
            image_url=result.image_url,
            currency=settings.DEFAULT_CURRENCY,
            last_checked_at=utcnow(),
        )
        self.db.add(product)
        await self.db.flush()

        if result.current_price > 0:
            self.db.add(
                PriceSample(
                    product_id=product.id,
                    price=result.current_price,
                    currency=product.currency,
                )
            )

        await self.db.commit()

        self.logger.info(
            "product_added",
            product_id=str(product.id),
            platform=product.platform,
            source=result.source,
            price=str(product.current_price),
        )
        return product

    def _manual_result(
        self,
        url: Optional[str],
        name: str,
        current_price,
        image_url: Optional[str],
        platform: str,
    ) -> ExtractionResult:
        try:
            price = Decimal(str(current_price))
        except InvalidOperation:
            raise PriceWatchException(f"Invalid price: {current_price}")
        if not price.is_finite() or price < 0:
            raise PriceWatchException(f"Invalid price: {current_price}")

        # Manual entries have no separate list price
        return ExtractionResult(
            name=name,
            current_price=price,
            original_price=price,
            image_url=image_url,
            platform=normalize_platform(platform, url).value,
            source=SOURCE_MERCHANT,
        )

    async def _extract(self, url: str, pipeline: Optional[ExtractionPipeline]) -> ExtractionResult:
        merchant = detect_platform(url)
        if pipeline is None:
            self.logger.warning("no_pipeline_for_extraction", url=url)
            return placeholder_result(merchant)

        try:
            return await pipeline.extract(url)
        except RenderEngineError as e:
            self.logger.error("render_engine_unavailable", url=url, error=e.message)
            raise
        except Exception as e:
            self.logger.error("add_product_extraction_failed", url=url, error=str(e))
            return placeholder_result(merchant)

    async def get_product(self, product_id: UUID) -> TrackedProduct:
        """Get a product by id.

        Raises:
            NotFoundError: If no such product exists
        """
        product = await self.db.get(TrackedProduct, product_id)
        if product is None:
            raise NotFoundError("Product", str(product_id))
        return product

    async def get_products_for_user(self, user_id: UUID) -> List[TrackedProduct]:
        """Active products of a user, newest first."""
        result = await self.db.execute(
            select(TrackedProduct)
            .where(and_(
                TrackedProduct.user_id == user_id,
                TrackedProduct.is_active == True,
            ))
            .order_by(TrackedProduct.created_at.desc())
        )
        return list(result.scalars().all())

    async def get_price_history(
        self,
        product_id: UUID,
        days: int = 30,
    ) -> List[PriceSample]:
        """Get price history for a product within a time window.

        Args:
            product_id: Product UUID
            days: Number of days to look back (default: 30)

        Returns:
            List of PriceSample records, ordered chronologically
        """
        cutoff = utcnow() - timedelta(days=days)

        result = await self.db.execute(
            select(PriceSample)
            .where(and_(
                PriceSample.product_id == product_id,
                PriceSample.recorded_at >= cutoff,
            ))
            .order_by(PriceSample.recorded_at.asc())
        )
        history = list(result.scalars().all())

        self.logger.info(
            "price_history_fetched",
            product_id=str(product_id),
            days=days,
            count=len(history),
        )
        return history

    async def update_product(
        self,
        product_id: UUID,
        name: Optional[str] = None,
        current_price: Optional[Decimal] = None,
        image_url: Optional[str] = None,
        category: Optional[str] = None,
    ) -> TrackedProduct:
        """Apply an owner edit. A changed positive price appends a sample.

        Raises:
            NotFoundError: If the product does not exist
        """
        product = await self.get_product(product_id)

        if name:
            product.name = name
        if image_url is not None:
            product.image_url = image_url or None
        if category:
            product.category = category

        if current_price is not None:
            new_price = Decimal(str(current_price))
            if new_price > 0 and new_price != product.current_price:
                product.current_price = new_price
                product.last_checked_at = utcnow()
                self.db.add(
                    PriceSample(
                        product_id=product.id,
                        price=new_price,
                        currency=product.currency,
                    )
                )
                self.logger.info("price_edited", product_id=str(product.id), price=str(new_price))

        await self.db.commit()
        return product

    async def deactivate_product(self, product_id: UUID) -> bool:
        """Stop tracking a product. Rows are kept; only ``is_active`` flips."""
        product = await self.db.get(TrackedProduct, product_id)
        if product is None:
            return False

        product.is_active = False
        await self.db.commit()
        self.logger.info("product_deactivated", product_id=str(product_id))
        return True

    async def get_trending_products(self, limit: int = 12) -> List[TrackedProduct]:
        """Recently added products that were extracted cleanly.

        Placeholders, unknown merchants and products without a price or
        image are left out.
        """
        result = await self.db.execute(
            select(TrackedProduct)
            .where(and_(
                TrackedProduct.is_active == True,
                TrackedProduct.current_price > 0,
                TrackedProduct.image_url.is_not(None),
                TrackedProduct.image_url != "",
                TrackedProduct.platform != MerchantId.UNKNOWN.value,
                TrackedProduct.name.not_like(f"{PLACEHOLDER_NAME_PREFIX}%"),
            ))
            .order_by(TrackedProduct.created_at.desc())
            .limit(limit)
        )
        return list(result.scalars().all())

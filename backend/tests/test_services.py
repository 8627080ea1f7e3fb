"""Test suite for PriceWatch persistence services.

Tests cover:
- Product service (add from URL or manual data, edits, history, trending)
- Alert service (create, re-target, update, soft delete)
- Price check service (per-product persistence rules)
"""

from datetime import timedelta
from decimal import Decimal
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from pricewatch.core.exceptions import NotFoundError, PriceWatchException, RenderEngineError
from pricewatch.models import PriceAlert, PriceSample, TrackedProduct, User
from pricewatch.models.base import utcnow
from pricewatch.scrapers.base import ExtractionResult, SOURCE_STRUCTURED_DATA
from pricewatch.services.alert_service import AlertService
from pricewatch.services.price_check_service import (
    PriceCheckService,
    STATUS_NO_PRICE,
    STATUS_UNCHANGED,
    STATUS_UPDATED,
)
from pricewatch.services.product_service import ProductService

from conftest import make_pipeline


async def samples_for(db: AsyncSession, product_id) -> list:
    result = await db.execute(
        select(PriceSample).where(PriceSample.product_id == product_id).order_by(PriceSample.recorded_at)
    )
    return list(result.scalars().all())


# ============================================================================
# TESTS: PRODUCT SERVICE
# ============================================================================

class TestProductService:
    """Tests for ProductService."""

    async def test_add_product_from_url(self, test_db: AsyncSession, sample_user: User):
        """Test adding a product fills it from the extraction result."""
        pipeline = AsyncMock()
        pipeline.extract.return_value = ExtractionResult(
            name="boAt Rockerz 450",
            current_price=Decimal("1499"),
            original_price=Decimal("3990"),
            image_url="https://rukminim2.flixcart.com/rockerz.jpg",
            platform="flipkart",
            source=SOURCE_STRUCTURED_DATA,
            tier="fast",
        )
        service = ProductService(test_db)

        product = await service.add_product_from_url(
            user_id=sample_user.id,
            url="https://www.flipkart.com/boat-rockerz-450/p/itm1",
            pipeline=pipeline,
        )

        assert product.id is not None
        assert product.name == "boAt Rockerz 450"
        assert product.platform == "flipkart"
        assert product.current_price == Decimal("1499")
        assert product.original_price == Decimal("3990")
        assert product.currency == "INR"
        history = await samples_for(test_db, product.id)
        assert [h.price for h in history] == [Decimal("1499")]

    async def test_manual_details_skip_extraction(self, test_db: AsyncSession, sample_user: User):
        pipeline = AsyncMock()
        product = await ProductService(test_db).add_product_from_url(
            user_id=sample_user.id,
            url=None,
            pipeline=pipeline,
            name="Local store blender",
            current_price=Decimal("3499"),
            platform="unknown",
        )

        pipeline.extract.assert_not_awaited()
        assert product.url == "#"
        assert product.current_price == Decimal("3499")
        assert product.original_price == Decimal("3499")

    @pytest.mark.parametrize(
        "platform,url,expected",
        [
            ("Flipkart", None, "flipkart"),
            ("  AMAZON ", None, "amazon"),
            ("Amazon India", "https://www.amazon.in/dp/B0CHX1W1XY", "amazon"),
            ("Amazon India", None, "unknown"),
            ("my local shop", "https://shop.example.com/item/1", "unknown"),
        ],
    )
    async def test_manual_platform_is_a_known_merchant(
        self, test_db: AsyncSession, sample_user: User, platform, url, expected
    ):
        """Test a free-text merchant name is stored as a MerchantId value."""
        product = await ProductService(test_db).add_product_from_url(
            user_id=sample_user.id,
            url=url,
            name="Echo Dot (5th Gen)",
            current_price=Decimal("4499"),
            platform=platform,
        )

        assert product.platform == expected

    @pytest.mark.parametrize("price", [Decimal("-1"), "not a price", "NaN"])
    async def test_manual_price_must_be_non_negative(self, test_db: AsyncSession, sample_user: User, price):
        with pytest.raises(PriceWatchException):
            await ProductService(test_db).add_product_from_url(
                user_id=sample_user.id,
                url=None,
                name="Echo Dot (5th Gen)",
                current_price=price,
                platform="amazon",
            )

        assert await ProductService(test_db).get_products_for_user(sample_user.id) == []

    async def test_extraction_failure_degrades_to_placeholder(self, test_db: AsyncSession, sample_user: User):
        """Test an unexpected extraction error still yields a tracked placeholder without history."""
        pipeline = AsyncMock()
        pipeline.extract.side_effect = RuntimeError("connection pool closed")

        product = await ProductService(test_db).add_product_from_url(
            user_id=sample_user.id,
            url="https://www.myntra.com/tshirts/roadster/123/buy",
            pipeline=pipeline,
        )

        assert product.name == "Product from myntra"
        assert product.platform == "myntra"
        assert product.current_price == Decimal("0")
        assert await samples_for(test_db, product.id) == []

    async def test_render_engine_failure_is_reported(self, test_db: AsyncSession, sample_user: User):
        """Test a browser that cannot start fails the add instead of saving a placeholder."""
        pipeline = AsyncMock()
        pipeline.extract.side_effect = RenderEngineError("Executable doesn't exist")

        with pytest.raises(RenderEngineError):
            await ProductService(test_db).add_product_from_url(
                user_id=sample_user.id,
                url="https://www.myntra.com/tshirts/roadster/123/buy",
                pipeline=pipeline,
            )

        assert await ProductService(test_db).get_products_for_user(sample_user.id) == []

    async def test_add_requires_url_or_details(self, test_db: AsyncSession, sample_user: User):
        with pytest.raises(PriceWatchException):
            await ProductService(test_db).add_product_from_url(user_id=sample_user.id, url="")

    async def test_update_product_records_price_change(self, test_db: AsyncSession, sample_product: TrackedProduct):
        service = ProductService(test_db)

        await service.update_product(sample_product.id, name="Galaxy S24 256GB", current_price=Decimal("61500"))
        product = await service.update_product(sample_product.id, current_price=Decimal("61500"))

        assert product.name == "Galaxy S24 256GB"
        assert product.current_price == Decimal("61500")
        assert len(await samples_for(test_db, sample_product.id)) == 1

    async def test_update_missing_product(self, test_db: AsyncSession):
        with pytest.raises(NotFoundError):
            await ProductService(test_db).update_product(uuid4(), name="x")

    async def test_deactivate_product(self, test_db: AsyncSession, sample_product: TrackedProduct):
        service = ProductService(test_db)

        assert await service.deactivate_product(sample_product.id) is True
        assert (await service.get_product(sample_product.id)).is_active is False
        assert await service.get_products_for_user(sample_product.user_id) == []
        assert await service.deactivate_product(uuid4()) is False

    async def test_price_history_window(self, test_db: AsyncSession, sample_product: TrackedProduct):
        """Test only samples inside the window are returned, oldest first."""
        now = utcnow()
        test_db.add_all([
            PriceSample(product_id=sample_product.id, price=Decimal("65000"), recorded_at=now - timedelta(days=45)),
            PriceSample(product_id=sample_product.id, price=Decimal("63000"), recorded_at=now - timedelta(days=10)),
            PriceSample(product_id=sample_product.id, price=Decimal("62000"), recorded_at=now - timedelta(days=1)),
        ])
        await test_db.commit()

        history = await ProductService(test_db).get_price_history(sample_product.id, days=30)

        assert [h.price for h in history] == [Decimal("63000"), Decimal("62000")]

    async def test_trending_excludes_placeholders(
        self, test_db: AsyncSession, sample_user: User, sample_product: TrackedProduct
    ):
        test_db.add_all([
            TrackedProduct(
                user_id=sample_user.id, name="Product from ajio", url="https://www.ajio.com/p/1",
                platform="ajio", current_price=Decimal("999"), image_url="https://img/1.jpg",
            ),
            TrackedProduct(
                user_id=sample_user.id, name="Mystery gadget", url="https://example.org/g",
                platform="unknown", current_price=Decimal("999"), image_url="https://img/2.jpg",
            ),
            TrackedProduct(
                user_id=sample_user.id, name="No image kettle", url="https://www.croma.com/k/p/1",
                platform="croma", current_price=Decimal("1999"),
            ),
        ])
        await test_db.commit()

        trending = await ProductService(test_db).get_trending_products()

        assert [p.id for p in trending] == [sample_product.id]


# ============================================================================
# TESTS: ALERT SERVICE
# ============================================================================

class TestAlertService:
    """Tests for AlertService."""

    async def test_create_alert(self, test_db: AsyncSession, sample_user: User, sample_product: TrackedProduct):
        alert = await AlertService(test_db).create_alert(sample_user.id, sample_product.id, Decimal("60000"))

        assert alert.id is not None
        assert alert.is_active is True
        assert alert.is_notified is False

    async def test_duplicate_retargets_existing(self, test_db, sample_user, sample_alert: PriceAlert):
        service = AlertService(test_db)
        alert = await service.create_alert(sample_user.id, sample_alert.product_id, Decimal("58000"))

        assert alert.id == sample_alert.id
        assert alert.target_price == Decimal("58000")
        assert len(await service.get_alerts_for_user(sample_user.id)) == 1

    async def test_rejects_non_positive_target(self, test_db, sample_user, sample_product):
        with pytest.raises(PriceWatchException):
            await AlertService(test_db).create_alert(sample_user.id, sample_product.id, Decimal("0"))

    async def test_update_alert(self, test_db, sample_user, sample_alert: PriceAlert):
        service = AlertService(test_db)

        updated = await service.update_alert(sample_alert.id, sample_user.id, target_price=Decimal("59000"))
        assert updated.target_price == Decimal("59000")

        assert await service.update_alert(sample_alert.id, uuid4(), is_active=False) is None

    async def test_delete_alert_is_soft(self, test_db, sample_user, sample_alert: PriceAlert):
        service = AlertService(test_db)

        assert await service.delete_alert(sample_alert.id, sample_user.id) is True
        assert await service.get_alerts_for_user(sample_user.id) == []
        assert len(await service.get_alerts_for_user(sample_user.id, active_only=False)) == 1


# ============================================================================
# TESTS: PRICE CHECK SERVICE
# ============================================================================

class TestPriceCheckService:
    """Tests for PriceCheckService."""

    @pytest.mark.parametrize(
        "price,status,expected_price,samples",
        [
            ("61000", STATUS_UPDATED, "61000", 1),
            ("62000", STATUS_UNCHANGED, "62000", 0),
            ("0", STATUS_NO_PRICE, "62000", 0),
        ],
    )
    async def test_persistence_rules(
        self, test_db, sample_product: TrackedProduct, notifier, price, status, expected_price, samples
    ):
        service = PriceCheckService(test_db, make_pipeline(price), notifier)
        outcome = await service.check_product(sample_product)

        assert outcome.status == status
        assert sample_product.current_price == Decimal(expected_price)
        assert sample_product.last_checked_at is not None
        assert len(await samples_for(test_db, sample_product.id)) == samples

    async def test_sample_uses_product_currency(self, test_db, sample_product: TrackedProduct, notifier):
        sample_product.currency = "USD"
        await test_db.commit()

        await PriceCheckService(test_db, make_pipeline("700"), notifier).check_product(sample_product)

        assert (await samples_for(test_db, sample_product.id))[0].currency == "USD"

    async def test_zero_price_skips_alerts(self, test_db, sample_product, sample_alert, notifier):
        outcome = await PriceCheckService(test_db, make_pipeline("0"), notifier).check_product(sample_product)

        assert outcome.alerts_sent == 0
        notifier.send.assert_not_awaited()

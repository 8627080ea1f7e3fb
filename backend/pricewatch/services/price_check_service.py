"""Single-product price check: extract, persist, evaluate alerts.

This service is the bridge between the extraction pipeline and the
database, used by the scheduler for every item of a batch and for
on-demand checks of one product.
"""

from dataclasses import dataclass
from decimal import Decimal
import uuid

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from pricewatch.models.base import utcnow
from pricewatch.models.price_history import PriceSample
from pricewatch.models.product import TrackedProduct
from pricewatch.notify.base import Notifier
from pricewatch.scrapers.pipeline import ExtractionPipeline
from pricewatch.services.alert_evaluator import AlertEvaluator

logger = structlog.get_logger(__name__)

STATUS_UPDATED = "updated"
STATUS_UNCHANGED = "unchanged"
STATUS_NO_PRICE = "no_price"


@dataclass
class PriceCheckOutcome:
    """What a single product check did."""

    product_id: uuid.UUID
    status: str
    previous_price: Decimal
    new_price: Decimal
    source: str
    alerts_sent: int = 0

    @property
    def price_changed(self) -> bool:
        return self.status == STATUS_UPDATED


class PriceCheckService:
    """Checks one tracked product and records what changed."""

    def __init__(self, db: AsyncSession, pipeline: ExtractionPipeline, notifier: Notifier):
        """Initialize price check service.

        Args:
            db: Async database session
            pipeline: Extraction pipeline used to read the product page
            notifier: Transport handed to the alert evaluator
        """
        self.db = db
        self.pipeline = pipeline
        self.alert_evaluator = AlertEvaluator(db, notifier)
        self.logger = logger.bind(service="price_check_service")

    async def check_product(self, product: TrackedProduct) -> PriceCheckOutcome:
        """Extract the current price and persist the observation.

        - positive and changed: new price, last check time and a new sample
        - positive and unchanged: last check time only
        - zero: last check time only; a known price is never overwritten
        - any positive price then goes through alert evaluation

        Args:
            product: Tracked product attached to this service's session

        Returns:
            PriceCheckOutcome describing the check

        Raises:
            RenderEngineError: If the rendered tier cannot start Chromium
            SQLAlchemyError: If persisting the observation fails
        """
        result = await self.pipeline.extract(product.url)
        new_price = result.current_price
        previous_price = product.current_price or Decimal("0")
        now = utcnow()

        product.last_checked_at = now
        if new_price > 0 and new_price != previous_price:
            product.current_price = new_price
            self.db.add(
                PriceSample(
                    product_id=product.id,
                    price=new_price,
                    currency=product.currency,
                    recorded_at=now,
                )
            )
            status = STATUS_UPDATED
            self.logger.info(
                "price_updated",
                product_id=str(product.id),
                old_price=str(previous_price),
                new_price=str(new_price),
            )
        elif new_price > 0:
            status = STATUS_UNCHANGED
            self.logger.info("price_unchanged", product_id=str(product.id), price=str(new_price))
        else:
            status = STATUS_NO_PRICE
            self.logger.info("price_not_found", product_id=str(product.id), source=result.source)

        await self.db.commit()

        outcome = PriceCheckOutcome(
            product_id=product.id,
            status=status,
            previous_price=previous_price,
            new_price=new_price,
            source=result.source,
        )

        if new_price > 0:
            outcome.alerts_sent = await self.alert_evaluator.evaluate(
                product.id,
                new_price,
                previous_price=previous_price if previous_price > 0 else None,
            )

        return outcome

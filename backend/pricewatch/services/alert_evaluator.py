"""Price alert evaluation and one-shot notification dispatch.

An alert fires at most once per threshold crossing: it is only ever
loaded while ``is_notified`` is false, and the flag is committed right
after a successful send. A crash between the send and the commit can
repeat the notification on the next cycle; that window is accepted.
"""

import uuid
from decimal import Decimal
from typing import List, Optional

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from pricewatch.models.base import utcnow
from pricewatch.models.price_alert import PriceAlert
from pricewatch.notify.base import Notifier
from pricewatch.notify.formatters import build_price_drop_body, build_price_drop_subject

logger = structlog.get_logger(__name__)


class AlertEvaluator:
    """Compares a new price against pending alerts and notifies owners."""

    def __init__(self, db: AsyncSession, notifier: Notifier):
        """Initialize alert evaluator.

        Args:
            db: Async database session
            notifier: Transport used to deliver notifications
        """
        self.db = db
        self.notifier = notifier
        self.logger = logger.bind(service="alert_evaluator")

    async def get_pending_alerts(self, product_id: uuid.UUID) -> List[PriceAlert]:
        """Active alerts for a product that have not been notified yet."""
        stmt = (
            select(PriceAlert)
            .options(selectinload(PriceAlert.user), selectinload(PriceAlert.product))
            .where(
                PriceAlert.product_id == product_id,
                PriceAlert.is_active == True,
                PriceAlert.is_notified == False,
            )
            .order_by(PriceAlert.created_at)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def evaluate(
        self,
        product_id: uuid.UUID,
        new_price: Decimal,
        previous_price: Optional[Decimal] = None,
    ) -> int:
        """Notify every pending alert whose target the new price satisfies.

        Args:
            product_id: Tracked product UUID
            new_price: Newly observed positive price
            previous_price: Price before this observation, for the email body

        Returns:
            Number of notifications dispatched
        """
        alerts = await self.get_pending_alerts(product_id)
        dispatched = 0

        for alert in alerts:
            if new_price > alert.target_price:
                continue

            if not await self._dispatch(alert, new_price, previous_price):
                # Stays unnotified; the next cycle tries again
                continue

            alert.is_notified = True
            alert.notified_at = utcnow()
            await self.db.commit()
            dispatched += 1

            self.logger.info(
                "alert_notified",
                alert_id=str(alert.id),
                product_id=str(product_id),
                target_price=str(alert.target_price),
                new_price=str(new_price),
            )

        return dispatched

    async def _dispatch(
        self,
        alert: PriceAlert,
        new_price: Decimal,
        previous_price: Optional[Decimal],
    ) -> bool:
        user = alert.user
        product = alert.product
        if not user or not user.email:
            self.logger.warning("alert_without_recipient", alert_id=str(alert.id))
            return False

        subject = build_price_drop_subject(product.name)
        body = build_price_drop_body(
            user_name=user.name,
            product_name=product.name,
            product_url=product.url,
            new_price=new_price,
            target_price=alert.target_price,
            old_price=previous_price,
            image_url=product.image_url,
        )

        try:
            delivered = await self.notifier.send(user.email, subject, body)
        except Exception as e:
            self.logger.error("alert_dispatch_failed", alert_id=str(alert.id), error=str(e))
            return False

        if not delivered:
            self.logger.warning("alert_dispatch_failed", alert_id=str(alert.id), recipient=user.email)
        return delivered

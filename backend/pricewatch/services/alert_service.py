"""Price alert service for user subscriptions."""

import uuid
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from pricewatch.core.exceptions import PriceWatchException
from pricewatch.models.price_alert import PriceAlert


class AlertService:
    """Handles CRUD for user price alerts."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_alerts_for_user(
        self, user_id: uuid.UUID, active_only: bool = True
    ) -> List[PriceAlert]:
        """Get all price alerts for a user."""
        stmt = (
            select(PriceAlert)
            .options(selectinload(PriceAlert.product))
            .where(PriceAlert.user_id == user_id)
        )
        if active_only:
            stmt = stmt.where(PriceAlert.is_active == True)
        stmt = stmt.order_by(PriceAlert.created_at.desc())

        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def create_alert(
        self,
        user_id: uuid.UUID,
        product_id: uuid.UUID,
        target_price: Decimal,
    ) -> PriceAlert:
        """Create a price alert. An existing active alert is re-targeted instead."""
        if target_price <= 0:
            raise PriceWatchException("Target price must be positive")

        stmt = select(PriceAlert).where(
            PriceAlert.user_id == user_id,
            PriceAlert.product_id == product_id,
            PriceAlert.is_active == True,
        )
        result = await self.db.execute(stmt)
        existing = result.scalars().first()

        if existing:
            existing.target_price = target_price
            await self.db.commit()
            return existing

        alert = PriceAlert(
            user_id=user_id,
            product_id=product_id,
            target_price=target_price,
        )
        self.db.add(alert)
        await self.db.commit()
        return alert

    async def update_alert(
        self,
        alert_id: uuid.UUID,
        user_id: uuid.UUID,
        target_price: Optional[Decimal] = None,
        is_active: Optional[bool] = None,
    ) -> Optional[PriceAlert]:
        """Change an alert's target or active flag. None if not the user's alert.

        Notification state is left untouched: a notified alert stays notified.
        """
        alert = await self._get_owned(alert_id, user_id)
        if not alert:
            return None

        if target_price is not None:
            if target_price <= 0:
                raise PriceWatchException("Target price must be positive")
            alert.target_price = target_price
        if is_active is not None:
            alert.is_active = is_active

        await self.db.commit()
        return alert

    async def delete_alert(
        self, alert_id: uuid.UUID, user_id: uuid.UUID
    ) -> bool:
        """Deactivate a price alert."""
        alert = await self._get_owned(alert_id, user_id)
        if not alert:
            return False

        alert.is_active = False
        await self.db.commit()
        return True

    async def _get_owned(self, alert_id: uuid.UUID, user_id: uuid.UUID) -> Optional[PriceAlert]:
        stmt = select(PriceAlert).where(
            PriceAlert.id == alert_id,
            PriceAlert.user_id == user_id,
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

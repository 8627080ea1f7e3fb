"""PriceAlert model for user price notifications."""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Optional

from sqlalchemy import ForeignKey, Numeric, Boolean, DateTime, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship

from pricewatch.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin

if TYPE_CHECKING:
    from pricewatch.models.user import User
    from pricewatch.models.product import TrackedProduct


class PriceAlert(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """User's price alert subscription for a product."""

    __tablename__ = "price_alerts"

    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    product_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("tracked_products.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    target_price: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False,
        comment="Alert when price drops to or below this"
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True,
        comment="Whether alert is still active"
    )
    # Sole idempotency guard for dispatch: set only after a successful send.
    is_notified: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False,
        comment="Whether the notification for this alert has been sent"
    )
    notified_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )

    __table_args__ = (
        Index("idx_price_alerts_product_pending", "product_id", "is_active", "is_notified"),
    )

    # Relationships
    user: Mapped["User"] = relationship(back_populates="price_alerts")
    product: Mapped["TrackedProduct"] = relationship()

    def __repr__(self) -> str:
        return f"<PriceAlert(user={self.user_id}, product={self.product_id}, target={self.target_price})>"

"""Price history samples for tracked products."""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import String, ForeignKey, Numeric, DateTime, Boolean, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship

from pricewatch.models.base import Base, UUIDPrimaryKeyMixin, utcnow

if TYPE_CHECKING:
    from pricewatch.models.product import TrackedProduct


class PriceSample(UUIDPrimaryKeyMixin, Base):
    """One confirmed price observation.

    Samples are append-only: nothing in the monitor updates or deletes them.
    """

    __tablename__ = "price_samples"

    product_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("tracked_products.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, comment="Observed price")
    currency: Mapped[str] = mapped_column(String(5), nullable=False, default="INR")
    is_available: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    recorded_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
        comment="When this price was observed"
    )

    __table_args__ = (
        Index("idx_price_samples_product_recorded", "product_id", "recorded_at"),
    )

    product: Mapped["TrackedProduct"] = relationship(back_populates="price_history")

    def __repr__(self) -> str:
        return f"<PriceSample(product_id={self.product_id}, price={self.price}, recorded_at={self.recorded_at})>"

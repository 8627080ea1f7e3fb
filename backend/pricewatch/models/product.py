"""Tracked product model: a retail page a user is watching."""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Optional

from sqlalchemy import String, ForeignKey, Boolean, Numeric, DateTime, Index, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from pricewatch.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin

if TYPE_CHECKING:
    from pricewatch.models.user import User
    from pricewatch.models.price_history import PriceSample


class TrackedProduct(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """Product page tracked on behalf of a user.

    Updated by the price monitor (current price, last check time) and by
    owner edits. Removal only flips ``is_active``; the monitor never deletes rows.
    """

    __tablename__ = "tracked_products"

    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    # Product info
    name: Mapped[str] = mapped_column(String(500), nullable=False, comment="Product name")
    url: Mapped[str] = mapped_column(String(2000), nullable=False, comment="Product page URL")
    platform: Mapped[str] = mapped_column(
        String(30),
        nullable=False,
        default="unknown",
        index=True,
        comment="Merchant identifier detected from the URL"
    )
    category: Mapped[str] = mapped_column(String(100), nullable=False, default="Electronics")

    # Pricing
    current_price: Mapped[Decimal] = mapped_column(
        Numeric(12, 2),
        nullable=False,
        default=Decimal("0"),
        comment="Latest known good price, 0 when never extracted"
    )
    original_price: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(12, 2),
        nullable=True,
        comment="Baseline/MRP price shown by the merchant"
    )
    currency: Mapped[str] = mapped_column(String(5), nullable=False, default="INR")

    # Media
    image_url: Mapped[Optional[str]] = mapped_column(String(2000), nullable=True)

    # Status
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    last_checked_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        comment="Last time the price monitor visited this product"
    )

    __table_args__ = (
        CheckConstraint("current_price >= 0", name="ck_tracked_products_price_non_negative"),
        Index("idx_tracked_products_user_active", "user_id", "is_active"),
        Index("idx_tracked_products_active_checked", "is_active", "last_checked_at"),
    )

    # Relationships
    user: Mapped["User"] = relationship(back_populates="products")
    price_history: Mapped[list["PriceSample"]] = relationship(
        back_populates="product",
        cascade="all, delete-orphan",
        order_by="PriceSample.recorded_at"
    )

    def __repr__(self) -> str:
        return f"<TrackedProduct(id={self.id}, name='{self.name[:50]}', platform={self.platform})>"

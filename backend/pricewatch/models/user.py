"""User model: owner of tracked products and recipient of price alerts."""

from typing import TYPE_CHECKING, List

from sqlalchemy import String, Boolean
from sqlalchemy.orm import Mapped, mapped_column, relationship

from pricewatch.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin

if TYPE_CHECKING:
    from pricewatch.models.product import TrackedProduct
    from pricewatch.models.price_alert import PriceAlert


class User(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """Application user.

    Credentials and sessions live in the account service; this table only
    carries what the monitor needs to address a notification.
    """

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(
        String(320), unique=True, nullable=False, index=True,
        comment="Notification recipient address"
    )
    name: Mapped[str] = mapped_column(
        String(100), nullable=False, default="",
        comment="Display name used in notification greetings"
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True,
        comment="Whether user account is active"
    )

    # Relationships
    products: Mapped[List["TrackedProduct"]] = relationship(
        back_populates="user", cascade="all, delete-orphan"
    )
    price_alerts: Mapped[List["PriceAlert"]] = relationship(
        back_populates="user", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}')>"

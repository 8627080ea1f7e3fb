"""Price check batch tracking and monitoring."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import String, Text, Integer, Numeric, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from pricewatch.models.base import Base, UUIDPrimaryKeyMixin, utcnow


class PriceCheckRun(UUIDPrimaryKeyMixin, Base):
    """Tracks execution of price check batches.

    Each scheduler batch creates a PriceCheckRun record to track status,
    counts and errors.
    """

    __tablename__ = "price_check_runs"

    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="running",
        index=True,
        comment="Status: 'running', 'completed', 'failed'"
    )

    # Timing
    started_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )
    completed_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    duration_seconds: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(10, 2),
        nullable=True,
    )

    # Metrics
    items_checked: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    prices_changed: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    items_failed: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    alerts_sent: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    error_message: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        comment="Error message if the batch aborted"
    )

    def __repr__(self) -> str:
        return f"<PriceCheckRun(id={self.id}, status='{self.status}', started_at={self.started_at})>"

"""SQLAlchemy models for PriceWatch.

All models are imported here so ``Base.metadata`` knows every table.
"""

from pricewatch.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin
from pricewatch.models.user import User
from pricewatch.models.product import TrackedProduct
from pricewatch.models.price_history import PriceSample
from pricewatch.models.price_alert import PriceAlert
from pricewatch.models.price_check_run import PriceCheckRun

__all__ = [
    "Base",
    "TimestampMixin",
    "UUIDPrimaryKeyMixin",
    "User",
    "TrackedProduct",
    "PriceSample",
    "PriceAlert",
    "PriceCheckRun",
]

"""Price check request/response schemas."""

from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class BatchStatsResponse(BaseModel):
    """Counts from one price check batch."""

    status: str
    checked: int = 0
    prices_changed: int = 0
    unchanged: int = 0
    no_price: int = 0
    failed: int = 0
    alerts_sent: int = 0


class PriceCheckResponse(BaseModel):
    """Outcome of checking a single product."""

    model_config = ConfigDict(from_attributes=True)

    product_id: UUID
    status: str
    previous_price: Decimal
    new_price: Decimal
    source: str
    alerts_sent: int = 0

"""Pydantic schemas for the PriceWatch API."""

from pricewatch.schemas.common import ApiResponse
from pricewatch.schemas.health import HealthCheckResponse
from pricewatch.schemas.price_check import BatchStatsResponse, PriceCheckResponse

__all__ = [
    "ApiResponse",
    "HealthCheckResponse",
    "BatchStatsResponse",
    "PriceCheckResponse",
]

"""API v1 router -- aggregates all v1 endpoint routers."""

from fastapi import APIRouter

from pricewatch.api.v1 import health, price_checks

api_v1_router = APIRouter()

api_v1_router.include_router(health.router, tags=["health"])
api_v1_router.include_router(price_checks.router, prefix="/price-checks", tags=["price-checks"])

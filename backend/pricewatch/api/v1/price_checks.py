"""On-demand price check endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException

from pricewatch.core.exceptions import NotFoundError, RenderEngineError
from pricewatch.dependencies import get_price_monitor
from pricewatch.schemas import ApiResponse, BatchStatsResponse, PriceCheckResponse
from pricewatch.scrapers.scheduler import PriceMonitorScheduler

router = APIRouter()


@router.post("/run", response_model=ApiResponse[BatchStatsResponse])
async def run_price_check_batch(
    monitor: PriceMonitorScheduler = Depends(get_price_monitor),
):
    """Run one price check batch now (used by external cron in serverless setups)."""
    stats = await monitor.run_batch()
    return ApiResponse[BatchStatsResponse](data=BatchStatsResponse(**stats))


@router.post("/products/{product_id}", response_model=ApiResponse[PriceCheckResponse])
async def check_product_price(
    product_id: UUID,
    monitor: PriceMonitorScheduler = Depends(get_price_monitor),
):
    """Check one product's price immediately."""
    try:
        outcome = await monitor.check_product(product_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)
    except RenderEngineError as e:
        raise HTTPException(status_code=503, detail=e.message)

    return ApiResponse[PriceCheckResponse](data=PriceCheckResponse.model_validate(outcome))

"""Health check endpoint."""

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from pricewatch.dependencies import get_db, get_price_monitor
from pricewatch.schemas import HealthCheckResponse
from pricewatch.scrapers.scheduler import PriceMonitorScheduler

router = APIRouter()


@router.get("/health", response_model=HealthCheckResponse)
async def health_check(
    db: AsyncSession = Depends(get_db),
    monitor: PriceMonitorScheduler = Depends(get_price_monitor),
):
    """Return service health status.

    Checks database connectivity and reports whether the periodic price
    check job is scheduled. A stopped scheduler is not an error: serverless
    deployments run batches on demand.
    """
    services = {}

    try:
        result = await db.execute(text("SELECT 1"))
        result.scalar()
        db_status = "ok"
    except Exception as e:
        db_status = f"error: {str(e)}"

    services["database"] = db_status

    scheduler_status = "running" if monitor.is_running() else "stopped"
    services["scheduler"] = scheduler_status
    job = monitor.get_job_status()

    return HealthCheckResponse(
        status="ok" if db_status == "ok" else "degraded",
        database=db_status,
        scheduler=scheduler_status,
        next_run=job["next_run"] if job else None,
        services=services,
    )

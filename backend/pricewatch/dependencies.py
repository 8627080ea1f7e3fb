"""FastAPI dependency injection providers."""

from typing import AsyncGenerator

from fastapi import HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from pricewatch.db.session import async_session_factory
from pricewatch.scrapers.scheduler import PriceMonitorScheduler


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Yield a database session for request-scoped usage.

    The session is automatically committed on success or rolled back on error.
    Always closed after the request completes.
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


def get_price_monitor(request: Request) -> PriceMonitorScheduler:
    """The monitor built in the app lifespan.

    It exists even when the cron trigger is disabled, so batches can still
    be run on demand.
    """
    monitor = getattr(request.app.state, "price_monitor", None)
    if monitor is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Price monitor is not initialized",
        )
    return monitor

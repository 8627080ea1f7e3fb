"""PriceWatch Backend -- FastAPI Application Entry Point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from pricewatch.api.v1.router import api_v1_router
from pricewatch.config import settings
from pricewatch.db.session import async_session_factory, engine
from pricewatch.models import Base
from pricewatch.notify import build_notifier
from pricewatch.scrapers.pipeline import ExtractionPipeline
from pricewatch.scrapers.scheduler import PriceMonitorScheduler

# Configure logging
logging.basicConfig(
    level=logging.INFO if settings.DEBUG else logging.WARNING,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: startup and shutdown events."""
    # Startup
    logger.info("Starting PriceWatch API server...")
    logger.info(f"Environment: {settings.ENVIRONMENT}")

    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables verified/created")
    except Exception as e:
        logger.error(f"Database init failed: {e}", exc_info=True)

    monitor = PriceMonitorScheduler(
        async_session_factory,
        pipeline=ExtractionPipeline(),
        notifier=build_notifier(),
    )
    app.state.price_monitor = monitor

    if settings.SCHEDULER_ENABLED and settings.ENVIRONMENT != "test":
        monitor.start()
        logger.info(f"Price monitor scheduled with cron '{monitor.cron}'")
    else:
        logger.info("Price monitor cron disabled; batches run on demand only")

    yield

    # Shutdown
    logger.info("Shutting down PriceWatch API server...")
    if monitor.is_running():
        await monitor.stop()
    await engine.dispose()


app = FastAPI(
    title="PriceWatch API",
    description="Retail price monitoring and price drop alerts",
    version="0.1.0",
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.FRONTEND_URL, "http://localhost:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_v1_router, prefix="/api/v1")


@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "name": "PriceWatch API",
        "version": "0.1.0",
        "docs": "/docs" if settings.DEBUG else None,
        "health": "/api/v1/health",
    }

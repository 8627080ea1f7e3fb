"""APScheduler-based price monitor.

A single cron job sweeps a bounded batch of active tracked products,
oldest-checked first, and runs each through the extraction pipeline,
price persistence and alert evaluation. Items are processed one at a
time with a fixed delay between them to stay polite to merchants.
"""

import asyncio
import time
import uuid
from decimal import Decimal
from typing import Any, Dict, List, Optional

import structlog
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from pricewatch.config import settings
from pricewatch.core.exceptions import NotFoundError
from pricewatch.models.base import utcnow
from pricewatch.models.price_check_run import PriceCheckRun
from pricewatch.models.product import TrackedProduct
from pricewatch.notify import Notifier, build_notifier
from pricewatch.scrapers.pipeline import ExtractionPipeline
from pricewatch.services.price_check_service import (
    PriceCheckOutcome,
    PriceCheckService,
    STATUS_NO_PRICE,
    STATUS_UNCHANGED,
    STATUS_UPDATED,
)

logger = structlog.get_logger(__name__)

JOB_ID = "price_check_batch"

STATUS_SKIPPED = "skipped"


def empty_stats() -> Dict[str, Any]:
    return {
        "status": "completed",
        "checked": 0,
        "prices_changed": 0,
        "unchanged": 0,
        "no_price": 0,
        "failed": 0,
        "alerts_sent": 0,
    }


class PriceMonitorScheduler:
    """Runs periodic price check batches using APScheduler.

    The scheduler:
    - Registers one cron job with ``max_instances=1``
    - Serializes batches and single checks behind one lock, whoever calls them
    - Loads the least recently checked active products each run
    - Isolates every item in its own session; one bad item never stops a batch
    - Records each batch to the price_check_runs table
    """

    def __init__(
        self,
        db_session_factory: async_sessionmaker[AsyncSession],
        pipeline: Optional[ExtractionPipeline] = None,
        notifier: Optional[Notifier] = None,
        cron: Optional[str] = None,
        batch_size: Optional[int] = None,
        inter_item_delay: Optional[float] = None,
    ):
        """Initialize price monitor scheduler.

        Args:
            db_session_factory: Async session factory for database access
            pipeline: Extraction pipeline (default: built from settings)
            notifier: Notification transport (default: email or log)
            cron: Crontab expression for the batch job
            batch_size: Maximum products per batch
            inter_item_delay: Seconds to wait before each product
        """
        self.db_session_factory = db_session_factory
        self.pipeline = pipeline or ExtractionPipeline()
        self.notifier = notifier or build_notifier()
        self.cron = cron or settings.PRICE_CHECK_CRON
        self.batch_size = batch_size if batch_size is not None else settings.PRICE_CHECK_BATCH_SIZE
        self.inter_item_delay = (
            inter_item_delay if inter_item_delay is not None else settings.PRICE_CHECK_DELAY_SECONDS
        )
        self.scheduler = AsyncIOScheduler(timezone="UTC")
        self._check_lock = asyncio.Lock()
        self.logger = logger.bind(service="price_monitor_scheduler")

    def start(self) -> None:
        """Register the cron job and start the scheduler."""
        if self.scheduler.running:
            self.logger.warning("scheduler_already_running")
            return

        self.scheduler.add_job(
            func=self.run_batch,
            trigger=CronTrigger.from_crontab(self.cron, timezone="UTC"),
            id=JOB_ID,
            name="Price check batch",
            replace_existing=True,
            max_instances=1,  # A slow batch must not overlap the next tick
            coalesce=True,
        )
        self.scheduler.start()
        self.logger.info("scheduler_started", cron=self.cron, batch_size=self.batch_size)

    async def stop(self) -> None:
        """Stop the scheduler. Safe to call when it is not running.

        APScheduler may queue the shutdown on the event loop, so yield once
        to let it run before returning.
        """
        if self.scheduler.running:
            self.scheduler.shutdown(wait=True)
            await asyncio.sleep(0)
            self.logger.info("scheduler_stopped")
        else:
            self.logger.warning("scheduler_not_running")

    def is_running(self) -> bool:
        return self.scheduler.running

    def get_job_status(self) -> Optional[dict]:
        """Next run and trigger of the batch job, None when not scheduled."""
        job = self.scheduler.get_job(JOB_ID)
        if not job:
            return None
        next_run = getattr(job, "next_run_time", None)
        return {
            "job_id": job.id,
            "next_run": next_run.isoformat() if next_run else None,
            "trigger": str(job.trigger),
        }

    async def run_batch(self) -> Dict[str, Any]:
        """Check one batch of active products.

        Never raises: per-item failures are logged and counted, and a batch
        that cannot even load its products is reported with status "failed".
        A call made while another batch or single check is in progress is
        not queued; it returns at once with status "skipped".

        Returns:
            Stats dict with per-outcome counts
        """
        if self._check_lock.locked():
            self.logger.warning("batch_skipped_check_in_progress")
            stats = empty_stats()
            stats["status"] = STATUS_SKIPPED
            return stats

        async with self._check_lock:
            return await self._run_batch()

    async def _run_batch(self) -> Dict[str, Any]:
        stats = empty_stats()
        start_time = time.monotonic()
        run_id = await self._start_run()

        try:
            product_ids = await self._load_batch()
        except Exception as e:
            self.logger.error("batch_load_failed", error=str(e), exc_info=True)
            stats["status"] = "failed"
            await self._finish_run(run_id, stats, start_time, error_message=str(e))
            return stats

        self.logger.info("batch_started", size=len(product_ids))

        for product_id in product_ids:
            await asyncio.sleep(self.inter_item_delay)
            try:
                outcome = await self._check_product(product_id)
            except Exception as e:
                stats["failed"] += 1
                self.logger.error(
                    "price_check_failed",
                    product_id=str(product_id),
                    error=str(e),
                    exc_info=True,
                )
                continue

            self._count(stats, outcome)

        await self._finish_run(run_id, stats, start_time)
        self.logger.info("batch_completed", **stats)
        return stats

    async def check_product(self, product_id: uuid.UUID) -> PriceCheckOutcome:
        """Check a single product now, in its own session.

        Waits for a running batch to finish first so an alert is never
        evaluated by two checks at once.

        Raises:
            NotFoundError: If the product does not exist or is inactive
            RenderEngineError: If the rendered tier cannot start Chromium
        """
        async with self._check_lock:
            return await self._check_product(product_id)

    async def _check_product(self, product_id: uuid.UUID) -> PriceCheckOutcome:
        async with self.db_session_factory() as db:
            product = await db.get(TrackedProduct, product_id)
            if product is None or not product.is_active:
                raise NotFoundError("Product", str(product_id))

            service = PriceCheckService(db, self.pipeline, self.notifier)
            return await service.check_product(product)

    async def _load_batch(self) -> List[uuid.UUID]:
        async with self.db_session_factory() as db:
            result = await db.execute(
                select(TrackedProduct.id)
                .where(TrackedProduct.is_active == True)
                .order_by(
                    TrackedProduct.last_checked_at.asc().nulls_first(),
                    TrackedProduct.created_at.asc(),
                )
                .limit(self.batch_size)
            )
            return list(result.scalars().all())

    @staticmethod
    def _count(stats: Dict[str, Any], outcome: PriceCheckOutcome) -> None:
        stats["checked"] += 1
        stats["alerts_sent"] += outcome.alerts_sent
        if outcome.status == STATUS_UPDATED:
            stats["prices_changed"] += 1
        elif outcome.status == STATUS_UNCHANGED:
            stats["unchanged"] += 1
        elif outcome.status == STATUS_NO_PRICE:
            stats["no_price"] += 1

    async def _start_run(self) -> Optional[uuid.UUID]:
        """Create the PriceCheckRun record. Bookkeeping only; failures are logged."""
        try:
            async with self.db_session_factory() as db:
                run = PriceCheckRun(status="running", started_at=utcnow())
                db.add(run)
                await db.commit()
                return run.id
        except Exception as e:
            self.logger.warning("price_check_run_not_recorded", error=str(e))
            return None

    async def _finish_run(
        self,
        run_id: Optional[uuid.UUID],
        stats: Dict[str, Any],
        start_time: float,
        error_message: Optional[str] = None,
    ) -> None:
        if run_id is None:
            return

        duration = time.monotonic() - start_time
        try:
            async with self.db_session_factory() as db:
                run = await db.get(PriceCheckRun, run_id)
                if run is None:
                    return
                run.status = stats["status"]
                run.completed_at = utcnow()
                run.duration_seconds = Decimal(str(round(duration, 2)))
                run.items_checked = stats["checked"]
                run.prices_changed = stats["prices_changed"]
                run.items_failed = stats["failed"]
                run.alerts_sent = stats["alerts_sent"]
                run.error_message = error_message
                await db.commit()
        except Exception as e:
            self.logger.warning("price_check_run_not_recorded", run_id=str(run_id), error=str(e))

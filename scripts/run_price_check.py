"""Manual price check runner.

Runs one monitor batch against the configured database (the entry point
for external cron in deployments where the in-process scheduler is
disabled), or extracts a single URL and prints what the pipeline found.

Usage:
    python scripts/run_price_check.py batch
    python scripts/run_price_check.py batch --batch-size 10 --delay 0
    python scripts/run_price_check.py extract https://www.amazon.in/dp/B0EXAMPLE
    python scripts/run_price_check.py extract <url> --no-render
"""

import argparse
import asyncio
import logging
import os
import sys

# Add backend to path so we can import pricewatch modules
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "backend"))

from pricewatch.db.session import async_session_factory, engine
from pricewatch.models import Base
from pricewatch.notify import build_notifier
from pricewatch.scrapers.fetchers import FastFetchTier, RenderedFetchTier
from pricewatch.scrapers.pipeline import ExtractionPipeline
from pricewatch.scrapers.scheduler import PriceMonitorScheduler


def build_pipeline(render: bool) -> ExtractionPipeline:
    tiers = [FastFetchTier()]
    if render:
        tiers.append(RenderedFetchTier())
    return ExtractionPipeline(tiers=tiers)


async def run_batch(batch_size: int = None, delay: float = None, render: bool = True) -> int:
    """Run one price check batch and print its stats."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    monitor = PriceMonitorScheduler(
        async_session_factory,
        pipeline=build_pipeline(render),
        notifier=build_notifier(),
        batch_size=batch_size,
        inter_item_delay=delay,
    )
    stats = await monitor.run_batch()
    await engine.dispose()

    print(f"\n{'='*70}")
    print(f"  Price Check Batch: {stats['status']}")
    print(f"{'='*70}")
    for key in ("checked", "prices_changed", "unchanged", "no_price", "failed", "alerts_sent"):
        print(f"  {key.replace('_', ' ').title():<16} {stats[key]}")
    print(f"{'='*70}\n")

    return 0 if stats["status"] == "completed" else 1


async def run_extract(url: str, render: bool = True) -> int:
    """Extract a single URL and print the result."""
    result = await build_pipeline(render).extract(url)

    print(f"\n{'='*70}")
    print(f"  {result.name}")
    print(f"{'='*70}")
    print(f"  Platform:       {result.platform}")
    print(f"  Price:          {result.current_price}")
    if result.original_price:
        print(f"  Original:       {result.original_price}")
    print(f"  Image:          {result.image_url or '-'}")
    print(f"  Source / tier:  {result.source} / {result.tier or '-'}")
    print(f"{'='*70}\n")

    return 0 if result.has_price else 1


def main():
    parser = argparse.ArgumentParser(description="Run PriceWatch price checks manually")
    parser.add_argument("--no-render", action="store_true", help="Skip the headless Chromium tier")
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    batch = subparsers.add_parser("batch", help="Run one monitor batch")
    batch.add_argument("--batch-size", type=int, default=None, help="Products per batch")
    batch.add_argument("--delay", type=float, default=None, help="Seconds between products")

    extract = subparsers.add_parser("extract", help="Extract a single product URL")
    extract.add_argument("url", help="Product page URL")

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    if args.command == "batch":
        code = asyncio.run(run_batch(args.batch_size, args.delay, render=not args.no_render))
    else:
        code = asyncio.run(run_extract(args.url, render=not args.no_render))
    sys.exit(code)


if __name__ == "__main__":
    main()

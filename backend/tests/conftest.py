"""Pytest configuration and shared fixtures."""

import os

# Settings are read at import time; point them at a throwaway database and
# keep the scheduler, Chromium and SMTP out of the test run.
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["ENVIRONMENT"] = "test"
os.environ["RENDER_ENABLED"] = "false"
os.environ["SMTP_HOST"] = ""

from decimal import Decimal
from typing import Optional
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from pricewatch.models import Base, User, TrackedProduct, PriceAlert
from pricewatch.scrapers.base import ExtractionResult, SOURCE_MERCHANT, SOURCE_PLACEHOLDER


@pytest.fixture
def anyio_backend():
    """Use asyncio as the async backend for tests."""
    return "asyncio"


@pytest_asyncio.fixture
async def session_factory():
    """Session factory bound to an in-memory SQLite database."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest_asyncio.fixture
async def test_db(session_factory) -> AsyncSession:
    """A single session on the in-memory database."""
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def sample_user(test_db: AsyncSession) -> User:
    user = User(email="asha@example.com", name="Asha")
    test_db.add(user)
    await test_db.commit()
    await test_db.refresh(user)
    return user


@pytest_asyncio.fixture
async def sample_product(test_db: AsyncSession, sample_user: User) -> TrackedProduct:
    """A tracked Amazon phone priced at 62,000."""
    product = TrackedProduct(
        user_id=sample_user.id,
        name="Galaxy S24 (Onyx Black, 256GB)",
        url="https://www.amazon.in/dp/B0CS5XW6TN",
        platform="amazon",
        current_price=Decimal("62000"),
        image_url="https://m.media-amazon.com/images/I/s24.jpg",
    )
    test_db.add(product)
    await test_db.commit()
    await test_db.refresh(product)
    return product


@pytest_asyncio.fixture
async def sample_alert(test_db: AsyncSession, sample_user: User, sample_product: TrackedProduct) -> PriceAlert:
    """Alert on the sample product with a 60,000 target."""
    alert = PriceAlert(
        user_id=sample_user.id,
        product_id=sample_product.id,
        target_price=Decimal("60000"),
    )
    test_db.add(alert)
    await test_db.commit()
    await test_db.refresh(alert)
    return alert


def make_result(price, name: str = "Galaxy S24", platform: str = "amazon") -> ExtractionResult:
    """ExtractionResult as a merchant adapter would return it."""
    price = Decimal(str(price))
    return ExtractionResult(
        name=name,
        current_price=price,
        platform=platform,
        source=SOURCE_MERCHANT if price > 0 else SOURCE_PLACEHOLDER,
    )


def make_pipeline(*prices, side_effect=None) -> AsyncMock:
    """Pipeline double whose extract() returns the given prices in order."""
    pipeline = AsyncMock()
    if side_effect is not None:
        pipeline.extract.side_effect = side_effect
    elif len(prices) == 1:
        pipeline.extract.return_value = make_result(prices[0])
    else:
        pipeline.extract.side_effect = [make_result(p) for p in prices]
    return pipeline


@pytest.fixture
def notifier() -> AsyncMock:
    """Notifier double that reports every send as delivered."""
    mock = AsyncMock()
    mock.send.return_value = True
    return mock


def html_page(body: str, title: Optional[str] = None, head: str = "") -> str:
    title_html = f"<title>{title}</title>" if title else ""
    return f"<html><head>{title_html}{head}</head><body>{body}</body></html>"

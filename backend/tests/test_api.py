"""Tests for the health and on-demand price check endpoints."""

from decimal import Decimal
from uuid import uuid4

import httpx
import pytest_asyncio

from pricewatch.dependencies import get_db
from pricewatch.main import app
from pricewatch.scrapers.scheduler import PriceMonitorScheduler

from conftest import make_pipeline


@pytest_asyncio.fixture
async def monitor(session_factory, notifier) -> PriceMonitorScheduler:
    return PriceMonitorScheduler(
        session_factory,
        pipeline=make_pipeline("59999"),
        notifier=notifier,
        inter_item_delay=0,
    )


@pytest_asyncio.fixture
async def client(session_factory, monitor):
    """HTTP client against the app, wired to the in-memory database."""
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.state.price_monitor = monitor

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
    del app.state.price_monitor


class TestHealth:
    async def test_health(self, client: httpx.AsyncClient):
        response = await client.get("/api/v1/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "ok"
        assert body["database"] == "ok"
        assert body["scheduler"] == "stopped"
        assert body["next_run"] is None


class TestPriceChecks:
    async def test_run_batch(self, client: httpx.AsyncClient, sample_product, sample_alert):
        response = await client.post("/api/v1/price-checks/run")

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["status"] == "completed"
        assert data["checked"] == 1
        assert data["prices_changed"] == 1
        assert data["alerts_sent"] == 1

    async def test_check_single_product(self, client: httpx.AsyncClient, sample_product):
        response = await client.post(f"/api/v1/price-checks/products/{sample_product.id}")

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["status"] == "updated"
        assert Decimal(data["previous_price"]) == Decimal("62000")
        assert Decimal(data["new_price"]) == Decimal("59999")

    async def test_check_unknown_product(self, client: httpx.AsyncClient):
        response = await client.post(f"/api/v1/price-checks/products/{uuid4()}")
        assert response.status_code == 404

    async def test_monitor_not_initialized(self, client: httpx.AsyncClient):
        app.state.price_monitor = None

        response = await client.post("/api/v1/price-checks/run")

        assert response.status_code == 503

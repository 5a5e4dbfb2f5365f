"""End-to-end scenarios through the whole pipeline on in-memory doubles.

An event is staged in the outbox, relayed onto an in-memory queue, consumed
by the projector and read back through the analytics API.
"""

import json
from datetime import UTC, datetime
from decimal import Decimal
from unittest.mock import MagicMock

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy import func, select

from analytics import dependencies as analytics_dependencies
from analytics.application.services import AnalyticsQueryService
from analytics.infrastructure.repository import SqlAnalyticsRepository
from analytics.presentation import routes as analytics_routes
from infrastructure.outbox.relay import OutboxRelay
from infrastructure.outbox.repository import OutboxRepository
from infrastructure.outbox.store import SqlOutboxStore
from projection.application.consumer import ProjectionConsumer
from projection.application.projector import IdempotentProjector
from projection.infrastructure.models import ProcessedEventModel, ProductSalesModel
from projection.infrastructure.view_store import SqlViewUnitOfWork

NOW = datetime(2024, 1, 1, 10, 15, 30, tzinfo=UTC)


class QueuedMessage:
    def __init__(self, queue: str, body: bytes, message_id: str | None) -> None:
        self.queue = queue
        self.body = body
        self.message_id = message_id
        self.redelivered = False
        self.settled: str | None = None

    async def ack(self) -> None:
        self.settled = "ack"

    async def nack(self, requeue: bool = True) -> None:
        self.settled = "nack"


class InMemoryQueue:
    """Delivery channel holding published messages until drained."""

    def __init__(self) -> None:
        self.pending: list[QueuedMessage] = []

    async def publish(self, topic: str, body: bytes, message_id: str | None = None) -> None:
        self.pending.append(QueuedMessage(topic, body, message_id))

    async def consume(self, queues, handler) -> None:
        raise NotImplementedError

    async def close(self) -> None:
        pass

    async def drain(self, handler) -> list[QueuedMessage]:
        delivered, self.pending = self.pending, []
        for message in delivered:
            await handler(message)
        return delivered


@pytest.fixture
def queue() -> InMemoryQueue:
    return InMemoryQueue()


@pytest.fixture
def consumer(queue, read_sessionmaker) -> ProjectionConsumer:
    projector = IdempotentProjector(SqlViewUnitOfWork(read_sessionmaker), probe=MagicMock())
    return ProjectionConsumer(
        channel=queue,
        projector=projector,
        queues=["order-events", "product-events"],
        probe=MagicMock(),
    )


@pytest_asyncio.fixture
async def api_client(read_sessionmaker):
    async def service_override():
        async with read_sessionmaker() as session:
            yield AnalyticsQueryService(
                SqlAnalyticsRepository(session), probe=MagicMock(), clock=lambda: NOW
            )

    app = FastAPI()
    app.dependency_overrides[analytics_dependencies.get_analytics_query_service] = (
        service_override
    )
    app.include_router(analytics_routes.router, prefix="/api")

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as client:
        yield client


class TestOrderScenario:
    """A two-book order from customer c1 at 10:15 UTC."""

    @pytest.mark.asyncio
    async def test_order_flows_into_every_view(
        self, write_sessionmaker, queue, consumer, api_client, make_order
    ):
        async with write_sessionmaker() as session:
            async with session.begin():
                await OutboxRepository(session).append(make_order())

        relay = OutboxRelay(SqlOutboxStore(write_sessionmaker), queue, probe=MagicMock())
        await relay.run_once()
        delivered = await queue.drain(consumer.handle)

        assert [m.settled for m in delivered] == ["ack"]
        assert delivered[0].message_id == "e1"

        sales = await api_client.get("/api/analytics/products/1/sales")
        assert sales.json() == {
            "productId": 1,
            "totalQuantitySold": 2,
            "totalRevenue": 20.0,
            "orderCount": 1,
        }

        category = await api_client.get("/api/analytics/categories/Books/revenue")
        assert category.json() == {"category": "Books", "totalRevenue": 20.0, "totalOrders": 1}

        customer = await api_client.get("/api/analytics/customers/c1/lifetime-value")
        assert customer.json() == {
            "customerId": "c1",
            "totalSpent": 20.0,
            "orderCount": 1,
            "lastOrderDate": "2024-01-01T10:15:00Z",
        }

        hourly = await api_client.get("/api/analytics/hourly-sales/2024-01-01T10:00:00Z")
        assert hourly.json() == {
            "hour": "2024-01-01T10:00:00Z",
            "totalOrders": 1,
            "totalRevenue": 20.0,
        }

        sync = await api_client.get("/api/analytics/sync-status")
        assert sync.json() == {
            "lastProcessedEventTimestamp": "2024-01-01T10:15:00Z",
            "lagSeconds": 30,
        }

    @pytest.mark.asyncio
    async def test_redelivery_changes_nothing(
        self, queue, consumer, read_sessionmaker, make_order
    ):
        body = json.dumps(
            {
                "eventId": "e1",
                "eventType": "OrderCreated",
                "customerId": "c1",
                "items": [{"productId": 1, "quantity": 2, "price": 10, "category": "Books"}],
                "total": 20,
                "timestamp": "2024-01-01T10:15:00Z",
            }
        ).encode()

        await queue.publish("order-events", body, message_id="e1")
        await queue.publish("order-events", body, message_id="e1")
        delivered = await queue.drain(consumer.handle)

        assert [m.settled for m in delivered] == ["ack", "ack"]
        async with read_sessionmaker() as session:
            row = await session.get(ProductSalesModel, 1)
            ledger_rows = await session.scalar(
                select(func.count()).where(ProcessedEventModel.event_id == "e1")
            )

        assert (row.total_quantity_sold, row.total_revenue, row.order_count) == (
            2,
            Decimal("20"),
            1,
        )
        assert ledger_rows == 1

    @pytest.mark.asyncio
    async def test_unknown_event_is_acked_without_effect(
        self, queue, consumer, read_sessionmaker, api_client
    ):
        await queue.publish(
            "order-events",
            b'{"eventId": "x1", "eventType": "OrderShipped", "orderId": 1}',
        )
        delivered = await queue.drain(consumer.handle)

        assert [m.settled for m in delivered] == ["ack"]
        async with read_sessionmaker() as session:
            assert await session.scalar(
                select(func.count()).select_from(ProcessedEventModel)
            ) == 0

        sync = await api_client.get("/api/analytics/sync-status")
        assert sync.json() == {"lastProcessedEventTimestamp": None, "lagSeconds": None}

        missing = await api_client.get("/api/analytics/products/1/sales")
        assert missing.status_code == 404

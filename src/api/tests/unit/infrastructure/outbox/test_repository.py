"""Unit tests for OutboxRepository against an in-memory database."""

from datetime import UTC, datetime, timedelta
from decimal import Decimal
from uuid import uuid4

import pytest
from sqlalchemy import func, select

from infrastructure.outbox.models import OutboxModel
from infrastructure.outbox.repository import OutboxRepository
from shared_kernel.events import PriceChanged
from shared_kernel.outbox import IOutboxRepository


def outbox_row(created_at: datetime, published_at: datetime | None = None) -> OutboxModel:
    return OutboxModel(
        id=uuid4(),
        topic="order-events",
        payload={"eventId": str(uuid4()), "eventType": "OrderCreated"},
        created_at=created_at,
        published_at=published_at,
    )


class TestAppend:
    """Tests for staging events in the caller's transaction."""

    @pytest.mark.asyncio
    async def test_implements_outbox_repository_port(self, write_sessionmaker):
        async with write_sessionmaker() as session:
            assert isinstance(OutboxRepository(session), IOutboxRepository)

    @pytest.mark.asyncio
    async def test_append_stages_serialized_event(self, write_sessionmaker, make_order):
        """The record carries the wire payload and the event's topic."""
        async with write_sessionmaker() as session:
            repository = OutboxRepository(session)

            record = await repository.append(make_order())

            assert record.topic == "order-events"
            assert record.payload["eventId"] == "e1"
            assert record.payload["eventType"] == "OrderCreated"
            assert record.is_published is False
            assert record.event_id == "e1"

    @pytest.mark.asyncio
    async def test_append_routes_catalog_events_to_product_topic(
        self, write_sessionmaker
    ):
        event = PriceChanged(
            event_id="p1",
            product_id=1,
            old_price=Decimal("1"),
            new_price=Decimal("2"),
            timestamp=datetime(2024, 1, 1, tzinfo=UTC),
        )
        async with write_sessionmaker() as session:
            record = await OutboxRepository(session).append(event)

        assert record.topic == "product-events"

    @pytest.mark.asyncio
    async def test_append_does_not_commit(self, write_sessionmaker, make_order):
        """Rolling back the caller's transaction discards the record."""
        async with write_sessionmaker() as session:
            await OutboxRepository(session).append(make_order())
            await session.rollback()

        async with write_sessionmaker() as session:
            count = await session.scalar(select(func.count()).select_from(OutboxModel))

        assert count == 0

    @pytest.mark.asyncio
    async def test_append_persists_with_caller_commit(self, write_sessionmaker, make_order):
        async with write_sessionmaker() as session:
            async with session.begin():
                await OutboxRepository(session).append(make_order())

        async with write_sessionmaker() as session:
            records = await OutboxRepository(session).fetch_unpublished()

        assert [r.event_id for r in records] == ["e1"]


class TestFetchAndMark:
    """Tests for the relay-facing queries."""

    @pytest.mark.asyncio
    async def test_fetch_unpublished_oldest_first(self, write_sessionmaker):
        base = datetime(2024, 1, 1, tzinfo=UTC)
        newest = outbox_row(base + timedelta(seconds=2))
        oldest = outbox_row(base)
        middle = outbox_row(base + timedelta(seconds=1))
        published = outbox_row(base - timedelta(seconds=1), published_at=base)

        async with write_sessionmaker() as session:
            async with session.begin():
                session.add_all([newest, oldest, middle, published])

        async with write_sessionmaker() as session:
            records = await OutboxRepository(session).fetch_unpublished(limit=10)

        assert [r.id for r in records] == [oldest.id, middle.id, newest.id]

    @pytest.mark.asyncio
    async def test_fetch_unpublished_respects_limit(self, write_sessionmaker):
        base = datetime(2024, 1, 1, tzinfo=UTC)
        rows = [outbox_row(base + timedelta(seconds=i)) for i in range(5)]
        async with write_sessionmaker() as session:
            async with session.begin():
                session.add_all(rows)

        async with write_sessionmaker() as session:
            records = await OutboxRepository(session).fetch_unpublished(limit=2)

        assert [r.id for r in records] == [rows[0].id, rows[1].id]

    @pytest.mark.asyncio
    async def test_claim_returns_unpublished_record(self, write_sessionmaker):
        row = outbox_row(datetime(2024, 1, 1, tzinfo=UTC))
        async with write_sessionmaker() as session:
            async with session.begin():
                session.add(row)

        async with write_sessionmaker() as session:
            async with session.begin():
                record = await OutboxRepository(session).claim(row.id)

        assert record is not None
        assert record.id == row.id

    @pytest.mark.asyncio
    async def test_claim_skips_published_record(self, write_sessionmaker):
        """A record another relay already marked is not handed out again."""
        row = outbox_row(
            datetime(2024, 1, 1, tzinfo=UTC),
            published_at=datetime(2024, 1, 1, 0, 0, 1, tzinfo=UTC),
        )
        async with write_sessionmaker() as session:
            async with session.begin():
                session.add(row)

        async with write_sessionmaker() as session:
            async with session.begin():
                assert await OutboxRepository(session).claim(row.id) is None

    @pytest.mark.asyncio
    async def test_mark_published(self, write_sessionmaker):
        row = outbox_row(datetime(2024, 1, 1, tzinfo=UTC))
        async with write_sessionmaker() as session:
            async with session.begin():
                session.add(row)

        async with write_sessionmaker() as session:
            async with session.begin():
                await OutboxRepository(session).mark_published(row.id)

        async with write_sessionmaker() as session:
            assert await OutboxRepository(session).fetch_unpublished() == []
            model = await session.get(OutboxModel, row.id)
            assert model.published_at is not None

"""Unit tests for ProjectionConsumer message settlement."""

import asyncio
import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from projection.application.consumer import ProjectionConsumer
from projection.domain.value_objects import ProjectionOutcome
from shared_kernel.events import EventDecodingError

ORDER_BODY = json.dumps(
    {
        "eventId": "e1",
        "eventType": "OrderCreated",
        "orderId": 1,
        "customerId": "c1",
        "items": [{"productId": 1, "quantity": 2, "price": 10, "category": "Books"}],
        "total": 20,
        "timestamp": "2024-01-01T10:15:00Z",
    }
).encode()


class FakeMessage:
    """Delivered message double recording how it was settled."""

    def __init__(self, body: bytes, queue: str = "order-events") -> None:
        self.body = body
        self.queue = queue
        self.redelivered = False
        self.message_id = "e1"
        self.acked = False
        self.nacked_with: bool | None = None

    async def ack(self) -> None:
        self.acked = True

    async def nack(self, requeue: bool = True) -> None:
        self.nacked_with = requeue


@pytest.fixture
def projector() -> AsyncMock:
    projector = AsyncMock()
    projector.project.return_value = ProjectionOutcome.APPLIED
    return projector


@pytest.fixture
def channel() -> MagicMock:
    channel = MagicMock()
    channel.close = AsyncMock()
    return channel


@pytest.fixture
def probe() -> MagicMock:
    probe = MagicMock()
    probe.with_context.return_value = probe
    return probe


@pytest.fixture
def consumer(channel, projector, probe) -> ProjectionConsumer:
    return ProjectionConsumer(
        channel=channel,
        projector=projector,
        queues=["order-events", "product-events"],
        probe=probe,
    )


class TestHandle:
    """Tests for settling a single delivery."""

    @pytest.mark.asyncio
    async def test_projected_event_is_acked(self, consumer, projector):
        message = FakeMessage(ORDER_BODY)

        await consumer.handle(message)

        assert message.acked is True
        assert message.nacked_with is None
        event = projector.project.await_args.args[0]
        assert event.event_id == "e1"

    @pytest.mark.asyncio
    async def test_duplicate_is_acked(self, consumer, projector):
        projector.project.return_value = ProjectionOutcome.DUPLICATE
        message = FakeMessage(ORDER_BODY)

        await consumer.handle(message)

        assert message.acked is True

    @pytest.mark.asyncio
    async def test_unknown_event_type_is_acked_and_dropped(
        self, consumer, projector, probe
    ):
        """Unknown events never reach the projector and never block the queue."""
        message = FakeMessage(b'{"eventId": "x1", "eventType": "OrderShipped"}')

        await consumer.handle(message)

        assert message.acked is True
        projector.project.assert_not_awaited()
        assert probe.event_dropped.call_args.args[0] == "unknown_event_type"

    @pytest.mark.asyncio
    async def test_malformed_payload_is_acked_and_dropped(
        self, consumer, projector, probe
    ):
        message = FakeMessage(b"not json at all")

        await consumer.handle(message)

        assert message.acked is True
        projector.project.assert_not_awaited()
        assert probe.event_dropped.call_args.args[0] == "malformed_event"

    @pytest.mark.asyncio
    async def test_overflowing_number_is_acked_and_dropped(
        self, consumer, projector, probe
    ):
        message = FakeMessage(
            b'{"eventId": "e9", "eventType": "OrderCreated", "customerId": "c1",'
            b' "items": [{"productId": 1, "quantity": 1e400, "price": 10}],'
            b' "total": 10, "timestamp": "2024-01-01T10:15:00Z"}'
        )

        await consumer.handle(message)

        assert message.acked is True
        assert message.nacked_with is None
        projector.project.assert_not_awaited()
        assert probe.event_dropped.call_args.args[0] == "malformed_event"

    @pytest.mark.asyncio
    async def test_any_decoding_error_is_acked_and_dropped(
        self, channel, projector, probe
    ):
        """Every EventDecodingError settles the message, not only the known subclasses."""
        codec = MagicMock()
        codec.decode.side_effect = EventDecodingError("unreadable")
        consumer = ProjectionConsumer(
            channel=channel,
            projector=projector,
            queues=["order-events"],
            codec=codec,
            probe=probe,
        )
        message = FakeMessage(ORDER_BODY)

        await consumer.handle(message)

        assert message.acked is True
        assert message.nacked_with is None
        projector.project.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_projection_failure_is_nacked_with_requeue(self, consumer, projector):
        projector.project.side_effect = RuntimeError("read database unavailable")
        message = FakeMessage(ORDER_BODY)

        await consumer.handle(message)

        assert message.acked is False
        assert message.nacked_with is True

    @pytest.mark.asyncio
    async def test_probe_is_bound_to_delivery(self, consumer, probe):
        await consumer.handle(FakeMessage(ORDER_BODY, queue="order-events"))

        context = probe.with_context.call_args.args[0]
        assert context.queue == "order-events"
        assert context.extra == {"message_id": "e1", "redelivered": False}


class TestLifecycle:
    """Tests for starting and stopping the consume task."""

    @pytest.mark.asyncio
    async def test_start_consumes_configured_queues(self, channel, consumer, probe):
        consumed = asyncio.Event()

        async def consume(queues, handler):
            assert queues == ["order-events", "product-events"]
            assert handler == consumer.handle
            consumed.set()
            await asyncio.Event().wait()

        channel.consume = consume

        await consumer.start()
        await asyncio.wait_for(consumed.wait(), timeout=1.0)
        assert consumer.is_running is True

        await consumer.stop()

        assert consumer.is_running is False
        channel.close.assert_awaited_once()
        probe.consumer_started.assert_called_once_with(["order-events", "product-events"])
        probe.consumer_stopped.assert_called_once()

    @pytest.mark.asyncio
    async def test_stop_without_start_closes_channel(self, channel, consumer):
        await consumer.stop()

        channel.close.assert_awaited_once()

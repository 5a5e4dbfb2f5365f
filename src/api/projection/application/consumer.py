"""Projection consumer settling delivered messages.

Bridges the delivery channel and the projector: decodes each message,
hands the event to the projector and settles the message according to
the outcome.

- decoded and projected (or a duplicate): ack
- unknown event type or malformed payload: ack and drop, nothing applied
- projection failed: nack with requeue, the broker redelivers later
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from typing import TYPE_CHECKING

from projection.application.observability import DefaultProjectorProbe
from shared_kernel.events import EventDecodingError, UnknownEventTypeError
from shared_kernel.events.serialization import EventCodec
from shared_kernel.observability_context import ObservationContext

if TYPE_CHECKING:
    from projection.application.observability import ProjectorProbe
    from projection.application.projector import IdempotentProjector
    from shared_kernel.outbox.ports import DeliveredMessage, DeliveryChannel


class ProjectionConsumer:
    """Long-running consumer feeding delivered events to the projector."""

    def __init__(
        self,
        channel: DeliveryChannel,
        projector: IdempotentProjector,
        queues: Sequence[str],
        codec: EventCodec | None = None,
        probe: ProjectorProbe | None = None,
    ) -> None:
        self._channel = channel
        self._projector = projector
        self._queues = list(queues)
        self._codec = codec or EventCodec()
        self._probe = probe or DefaultProjectorProbe()
        self._task: asyncio.Task | None = None

    @property
    def is_running(self) -> bool:
        """True while the consume task is alive."""
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        """Start consuming in a background task."""
        if self.is_running:
            return

        self._probe.consumer_started(self._queues)
        self._task = asyncio.create_task(
            self._channel.consume(self._queues, self.handle),
            name="projection-consumer",
        )

    async def stop(self) -> None:
        """Close the channel and wait for the consume task to end."""
        await self._channel.close()

        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

        self._probe.consumer_stopped()

    async def handle(self, message: DeliveredMessage) -> None:
        """Decode, project and settle a single message."""
        probe = self._probe.with_context(
            ObservationContext(
                queue=message.queue,
                extra={
                    "message_id": message.message_id,
                    "redelivered": message.redelivered,
                },
            )
        )

        try:
            event = self._codec.decode(message.body)
        except UnknownEventTypeError as e:
            probe.event_dropped("unknown_event_type", str(e))
            await message.ack()
            return
        except EventDecodingError as e:
            probe.event_dropped("malformed_event", str(e))
            await message.ack()
            return

        try:
            await self._projector.project(event)
        except Exception:
            # Already rolled back and reported by the projector
            await message.nack(requeue=True)
            return

        await message.ack()

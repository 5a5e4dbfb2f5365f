"""Outbox relay forwarding staged events to the delivery channel.

The relay runs as a background task within the FastAPI application (or
standalone via the ``orderview-relay`` entry point), polling the outbox
table and publishing pending records with at-least-once semantics.
"""

from __future__ import annotations

import asyncio
import json
from typing import TYPE_CHECKING

from shared_kernel.outbox.exceptions import RelayCycleError
from shared_kernel.outbox.observability import DefaultRelayProbe
from shared_kernel.outbox.value_objects import RelayBatchResult

if TYPE_CHECKING:
    from shared_kernel.outbox.observability import RelayProbe
    from shared_kernel.outbox.ports import DeliveryChannel, OutboxStore


async def relay_pending(
    store: OutboxStore,
    channel: DeliveryChannel,
    batch_size: int,
    probe: RelayProbe,
) -> RelayBatchResult:
    """Run one poll cycle: publish and mark up to ``batch_size`` records.

    Records are handled oldest first, one claim transaction each. The first
    failure aborts the cycle: records published before it stay published and
    the rest remain pending for the next cycle. A record that was published
    but could not be marked is published again later; consumers deduplicate
    on the event id.

    Args:
        store: Outbox store to read and mark records in
        channel: Delivery channel to publish to
        batch_size: Maximum number of records to handle
        probe: Observability probe

    Returns:
        Counts for the cycle

    Raises:
        RelayCycleError: If fetching, publishing or marking fails
    """
    published = 0
    skipped = 0

    try:
        records = await store.fetch_unpublished(batch_size)

        for candidate in records:
            async with store.claim(candidate.id) as claim:
                if claim is None:
                    skipped += 1
                    probe.record_skipped(candidate.id)
                    continue

                record = claim.record
                body = json.dumps(record.payload).encode("utf-8")
                await channel.publish(record.topic, body, message_id=record.event_id)
                await claim.mark_published()

            published += 1
            probe.record_published(record.id, record.topic)

    except Exception as e:
        raise RelayCycleError(str(e), published=published) from e

    probe.batch_relayed(len(records), published)
    return RelayBatchResult(fetched=len(records), published=published, skipped=skipped)


class OutboxRelay:
    """Background relay that polls the outbox and publishes pending records.

    The poll loop is a single asyncio task owned by this object, started and
    stopped explicitly. A failed cycle is reported and retried on the next
    tick; only stop() ends the loop.
    """

    def __init__(
        self,
        store: OutboxStore,
        channel: DeliveryChannel,
        probe: RelayProbe | None = None,
        poll_interval_seconds: float = 5.0,
        batch_size: int = 10,
    ) -> None:
        """Initialize the relay.

        Args:
            store: Outbox store to poll
            channel: Delivery channel to publish to
            probe: Observability probe for logging/metrics
            poll_interval_seconds: Delay between poll cycles
            batch_size: Maximum records per poll cycle
        """
        self._store = store
        self._channel = channel
        self._probe = probe or DefaultRelayProbe()
        self._poll_interval = poll_interval_seconds
        self._batch_size = batch_size
        self._task: asyncio.Task | None = None

    @property
    def is_running(self) -> bool:
        """True while the poll loop task is alive."""
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        """Start the poll loop. Calling start() on a running relay is a no-op."""
        if self.is_running:
            return

        self._probe.relay_started(self._poll_interval, self._batch_size)
        self._task = asyncio.create_task(self._poll_loop(), name="outbox-relay")

    async def stop(self) -> None:
        """Cancel the poll loop and wait for it to finish."""
        if self._task is None:
            return

        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass

        self._task = None
        self._probe.relay_stopped()

    async def run_once(self) -> RelayBatchResult:
        """Run a single poll cycle."""
        return await relay_pending(
            self._store, self._channel, self._batch_size, self._probe
        )

    async def _poll_loop(self) -> None:
        while True:
            try:
                await self.run_once()
            except RelayCycleError as e:
                self._probe.cycle_failed(str(e), e.published)

            await asyncio.sleep(self._poll_interval)

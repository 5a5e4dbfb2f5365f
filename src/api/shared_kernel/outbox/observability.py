"""Observability probes for the outbox relay and the delivery channel.

Following Domain Oriented Observability, probes capture domain-significant
events and metrics without cluttering business logic with logging concerns.
"""

from __future__ import annotations

import structlog
from typing import Protocol
from uuid import UUID


logger = structlog.get_logger()


class RelayProbe(Protocol):
    """Protocol for outbox relay observability.

    Implementations can log, emit metrics, or send traces.
    """

    def relay_started(self, poll_interval: float, batch_size: int) -> None:
        """Called when the relay's poll loop starts."""
        ...

    def relay_stopped(self) -> None:
        """Called when the relay stops."""
        ...

    def record_published(self, record_id: UUID, topic: str) -> None:
        """Called when a record is published and marked."""
        ...

    def record_skipped(self, record_id: UUID) -> None:
        """Called when a record was published or locked by someone else."""
        ...

    def batch_relayed(self, fetched: int, published: int) -> None:
        """Called when a poll cycle completes."""
        ...

    def cycle_failed(self, error: str, published: int) -> None:
        """Called when a poll cycle aborts; remaining records wait for the next."""
        ...


class DefaultRelayProbe:
    """Default implementation using structlog.

    Logs all relay events with appropriate log levels.
    """

    def __init__(self) -> None:
        """Initialize the probe with a logger."""
        self._log = logger.bind(component="outbox_relay")

    def relay_started(self, poll_interval: float, batch_size: int) -> None:
        """Log relay start."""
        self._log.info(
            "outbox_relay_started",
            poll_interval=poll_interval,
            batch_size=batch_size,
        )

    def relay_stopped(self) -> None:
        """Log relay stop."""
        self._log.info("outbox_relay_stopped")

    def record_published(self, record_id: UUID, topic: str) -> None:
        """Log a published record."""
        self._log.info(
            "outbox_record_published",
            record_id=str(record_id),
            topic=topic,
        )

    def record_skipped(self, record_id: UUID) -> None:
        """Log a record another relay got to first."""
        self._log.debug("outbox_record_skipped", record_id=str(record_id))

    def batch_relayed(self, fetched: int, published: int) -> None:
        """Log batch completion."""
        if fetched > 0:
            self._log.info(
                "outbox_batch_relayed", fetched=fetched, published=published
            )

    def cycle_failed(self, error: str, published: int) -> None:
        """Log an aborted poll cycle."""
        self._log.warning(
            "outbox_relay_cycle_failed",
            error=error,
            published=published,
        )


class DeliveryChannelProbe(Protocol):
    """Protocol for delivery channel observability.

    Implementations can log, emit metrics, or send traces for connection
    lifecycle and message flow.
    """

    def state_changed(self, old_state: str, new_state: str) -> None:
        """Called on every connection state transition."""
        ...

    def connection_failed(self, error: str, retry_in: float | None) -> None:
        """Called when connecting fails or an open connection is lost."""
        ...

    def queue_declared(self, queue: str) -> None:
        """Called when a durable queue is declared."""
        ...

    def message_published(self, topic: str, message_id: str | None) -> None:
        """Called when the broker accepts a published message."""
        ...

    def consumer_subscribed(self, queues: list[str], prefetch_count: int) -> None:
        """Called when consumers are (re)attached to their queues."""
        ...

    def channel_closed(self) -> None:
        """Called when the channel is closed on request."""
        ...


class DefaultDeliveryChannelProbe:
    """Default implementation using structlog."""

    def __init__(self) -> None:
        """Initialize the probe with a logger."""
        self._log = logger.bind(component="delivery_channel")

    def state_changed(self, old_state: str, new_state: str) -> None:
        """Log state transition."""
        self._log.debug(
            "delivery_channel_state_changed",
            old_state=old_state,
            new_state=new_state,
        )

    def connection_failed(self, error: str, retry_in: float | None) -> None:
        """Log connection failure."""
        self._log.warning(
            "delivery_channel_connection_failed",
            error=error,
            retry_in=retry_in,
        )

    def queue_declared(self, queue: str) -> None:
        """Log queue declaration."""
        self._log.debug("delivery_channel_queue_declared", queue=queue)

    def message_published(self, topic: str, message_id: str | None) -> None:
        """Log accepted publish."""
        self._log.debug(
            "delivery_channel_message_published",
            topic=topic,
            message_id=message_id,
        )

    def consumer_subscribed(self, queues: list[str], prefetch_count: int) -> None:
        """Log consumer subscription."""
        self._log.info(
            "delivery_channel_consumer_subscribed",
            queues=queues,
            prefetch_count=prefetch_count,
        )

    def channel_closed(self) -> None:
        """Log channel close."""
        self._log.info("delivery_channel_closed")

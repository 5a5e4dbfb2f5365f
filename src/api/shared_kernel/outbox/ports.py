"""Protocols (ports) for the outbox pattern and the delivery channel.

These protocols define the interfaces between the write side, the relay,
the delivery channel and the projector. Infrastructure provides the
SQLAlchemy and AMQP implementations; tests provide in-memory ones.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Sequence
from contextlib import AbstractAsyncContextManager
from typing import TYPE_CHECKING, Protocol, runtime_checkable
from uuid import UUID

if TYPE_CHECKING:
    from shared_kernel.events import DomainEvent
    from shared_kernel.outbox.value_objects import OutboxRecord


@runtime_checkable
class IOutboxRepository(Protocol):
    """Repository for outbox record persistence.

    The repository shares the same database session as the calling command
    handler, ensuring that event appends happen within the same transaction
    as the domain mutation they announce. It never commits.
    """

    async def append(self, event: "DomainEvent") -> "OutboxRecord":
        """Stage an event in the outbox within the current transaction.

        Args:
            event: The domain event to append; its event_id becomes the
                record id

        Returns:
            The staged record (unpublished)
        """
        ...

    async def fetch_unpublished(self, limit: int = 10) -> list["OutboxRecord"]:
        """Fetch unpublished records ordered by creation time.

        Args:
            limit: Maximum number of records to fetch

        Returns:
            List of unpublished OutboxRecord objects, oldest first
        """
        ...

    async def claim(self, record_id: UUID) -> "OutboxRecord | None":
        """Lock a single unpublished record for the current transaction.

        Returns:
            The record, or None if it is already published or locked by
            another relay instance
        """
        ...

    async def mark_published(self, record_id: UUID) -> None:
        """Set published_at on a record within the current transaction.

        Args:
            record_id: The UUID of the record to mark
        """
        ...


@runtime_checkable
class OutboxClaim(Protocol):
    """A record held exclusively by one relay for one transaction."""

    @property
    def record(self) -> "OutboxRecord":
        """The claimed record."""
        ...

    async def mark_published(self) -> None:
        """Stage the published_at transition; durable when the claim exits."""
        ...


@runtime_checkable
class OutboxStore(Protocol):
    """Durable outbox as seen by the relay.

    Each claim is its own transaction: leaving the claim context normally
    commits, leaving it with an exception rolls back. This keeps every
    record's publish-and-mark independent of the others in a batch.
    """

    async def fetch_unpublished(self, limit: int) -> list["OutboxRecord"]:
        """Return up to ``limit`` unpublished records, oldest first."""
        ...

    def claim(
        self, record_id: UUID
    ) -> AbstractAsyncContextManager[OutboxClaim | None]:
        """Open a transaction holding the record, or yield None if gone."""
        ...


@runtime_checkable
class DeliveredMessage(Protocol):
    """A message handed to a consumer, awaiting settlement.

    Exactly one of ack() or nack() must be called per message.
    """

    @property
    def body(self) -> bytes:
        """Raw message body."""
        ...

    @property
    def queue(self) -> str:
        """Queue the message was consumed from."""
        ...

    @property
    def redelivered(self) -> bool:
        """True if the broker has delivered this message before."""
        ...

    @property
    def message_id(self) -> str | None:
        """Producer-assigned message id, if any."""
        ...

    async def ack(self) -> None:
        """Remove the message from the queue permanently."""
        ...

    async def nack(self, requeue: bool = True) -> None:
        """Reject the message, returning it to the queue when requeue is set."""
        ...


MessageHandler = Callable[[DeliveredMessage], Awaitable[None]]


@runtime_checkable
class DeliveryChannel(Protocol):
    """Durable at-least-once queue between the relay and the projector."""

    async def publish(
        self, topic: str, body: bytes, message_id: str | None = None
    ) -> None:
        """Publish a persistent message to the queue named ``topic``.

        Returns once the broker has accepted the message.

        Raises:
            DeliveryChannelUnavailableError: If the broker cannot be reached
        """
        ...

    async def consume(self, queues: Sequence[str], handler: MessageHandler) -> None:
        """Deliver messages from ``queues`` to ``handler`` until closed.

        Reconnects and re-subscribes on connection loss. Returns only after
        close() is called.
        """
        ...

    async def close(self) -> None:
        """Stop consuming and release the broker connection."""
        ...

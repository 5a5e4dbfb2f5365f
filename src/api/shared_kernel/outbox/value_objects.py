"""Value objects for the outbox pattern.

Value objects are immutable descriptors that provide type safety and
domain semantics for outbox records.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any
from uuid import UUID


@dataclass(frozen=True)
class OutboxRecord:
    """Represents a single row in the outbox table.

    This is an immutable value object that captures the state of an outbox
    record as it exists in the database. It carries everything the relay
    needs to forward the event to the delivery channel.

    Attributes:
        id: Unique identifier of the record
        topic: Delivery topic (queue name) the event is published under
        payload: Wire-format event document
        created_at: When the write side inserted the record
        published_at: When the relay marked it published (None if pending)
    """

    id: UUID
    topic: str
    payload: dict[str, Any]
    created_at: datetime
    published_at: datetime | None = None

    @property
    def event_id(self) -> str | None:
        """The eventId carried in the payload, used as the message id."""
        event_id = self.payload.get("eventId")
        return str(event_id) if event_id is not None else None

    @property
    def is_published(self) -> bool:
        """Check if this record has been handed to the delivery channel.

        Returns:
            True if published_at is set, False otherwise
        """
        return self.published_at is not None


@dataclass(frozen=True)
class RelayBatchResult:
    """Outcome of a single relay poll cycle.

    Attributes:
        fetched: Number of unpublished records selected for the cycle
        published: Number of records published and marked in this cycle
        skipped: Records already claimed or published by another relay
    """

    fetched: int
    published: int
    skipped: int = 0

    @property
    def completed(self) -> bool:
        """True when every fetched record was handled."""
        return self.published + self.skipped == self.fetched

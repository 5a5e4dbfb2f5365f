"""Outbox repository implementation.

This module provides the SQLAlchemy implementation of the outbox repository.
It handles persisting domain events to the outbox table and the row-level
operations the relay performs on them.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from infrastructure.outbox.models import OutboxModel
from shared_kernel.events.serialization import EventCodec
from shared_kernel.outbox.value_objects import OutboxRecord

if TYPE_CHECKING:
    from shared_kernel.events import DomainEvent


class OutboxRepository:
    """SQLAlchemy implementation of the outbox repository.

    This repository shares the same database session as the calling command
    handler, ensuring that event appends happen within the same transaction
    as the state change. This is critical for the atomicity guarantee of the
    outbox pattern.

    The repository only calls session.add() and session.execute() - it never
    calls session.commit(). The caller owns the transaction boundary.
    """

    def __init__(
        self,
        session: AsyncSession,
        codec: EventCodec | None = None,
    ) -> None:
        """Initialize the repository with a session and codec.

        Args:
            session: The SQLAlchemy async session (shared with the caller)
            codec: The event codec for converting events to payloads
        """
        self._session = session
        self._codec = codec or EventCodec()

    async def append(self, event: DomainEvent) -> OutboxRecord:
        """Append an event to the outbox within the current transaction.

        The event is serialized to its wire payload and routed to the topic
        its type is published under. The transaction is not committed.

        Args:
            event: The domain event to append

        Returns:
            The staged, unpublished record
        """
        model = OutboxModel(
            id=uuid4(),
            topic=self._codec.topic_for(event),
            payload=self._codec.serialize(event),
            created_at=datetime.now(UTC),
            published_at=None,
        )

        self._session.add(model)
        await self._session.flush()

        return model.to_value_object()

    async def fetch_unpublished(self, limit: int = 10) -> list[OutboxRecord]:
        """Fetch unpublished records ordered by creation time.

        No lock is taken here; each record is locked individually by claim()
        so that a slow publish never holds the whole batch.

        Args:
            limit: Maximum number of records to fetch

        Returns:
            List of unpublished OutboxRecord value objects, oldest first
        """
        stmt = (
            select(OutboxModel)
            .where(OutboxModel.published_at.is_(None))
            .order_by(OutboxModel.created_at)
            .limit(limit)
        )

        result = await self._session.execute(stmt)
        models = result.scalars().all()

        return [model.to_value_object() for model in models]

    async def claim(self, record_id: UUID) -> OutboxRecord | None:
        """Lock a single unpublished record for the current transaction.

        Uses FOR UPDATE SKIP LOCKED so that concurrent relays never publish
        the same record at the same time, and re-checks published_at so a
        record another relay already marked is not published again.

        Args:
            record_id: The UUID of the record to claim

        Returns:
            The record, or None if it is already published or locked
        """
        stmt = (
            select(OutboxModel)
            .where(OutboxModel.id == record_id)
            .where(OutboxModel.published_at.is_(None))
            .with_for_update(skip_locked=True)
        )

        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        return model.to_value_object() if model is not None else None

    async def mark_published(self, record_id: UUID) -> None:
        """Mark a record as published.

        Sets the published_at timestamp to the current UTC time.

        Args:
            record_id: The UUID of the record to mark as published
        """
        stmt = (
            update(OutboxModel)
            .where(OutboxModel.id == record_id)
            .values(published_at=datetime.now(UTC))
        )

        await self._session.execute(stmt)

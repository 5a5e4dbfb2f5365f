"""SQLAlchemy-backed outbox store used by the relay.

Each claim runs in its own session and transaction so that every record's
publish-and-mark commits independently of the rest of the batch.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from infrastructure.outbox.repository import OutboxRepository
from shared_kernel.outbox.value_objects import OutboxRecord


class SqlOutboxClaim:
    """A record locked by the enclosing claim transaction."""

    def __init__(self, repository: OutboxRepository, record: OutboxRecord) -> None:
        self._repository = repository
        self._record = record

    @property
    def record(self) -> OutboxRecord:
        return self._record

    async def mark_published(self) -> None:
        await self._repository.mark_published(self._record.id)


class SqlOutboxStore:
    """Outbox store over a write-side sessionmaker."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        """Initialize the store.

        Args:
            session_factory: Factory for creating write database sessions
        """
        self._session_factory = session_factory

    async def fetch_unpublished(self, limit: int) -> list[OutboxRecord]:
        """Return up to ``limit`` unpublished records, oldest first."""
        async with self._session_factory() as session:
            return await OutboxRepository(session).fetch_unpublished(limit)

    @asynccontextmanager
    async def claim(self, record_id: UUID) -> AsyncIterator[SqlOutboxClaim | None]:
        """Hold the record for one transaction.

        Commits when the block exits normally and rolls back when it raises,
        so a failed publish leaves the record unpublished.
        """
        async with self._session_factory() as session:
            async with session.begin():
                repository = OutboxRepository(session)
                record = await repository.claim(record_id)
                if record is None:
                    yield None
                else:
                    yield SqlOutboxClaim(repository, record)

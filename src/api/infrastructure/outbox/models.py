"""SQLAlchemy ORM models for the outbox pattern.

This module provides the database model for the outbox table used in
the transactional outbox pattern.
"""

from __future__ import annotations

from datetime import datetime, timezone
from uuid import UUID, uuid4

from sqlalchemy import JSON, DateTime, Index, String, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column

from infrastructure.database.models import Base, utc_now
from shared_kernel.outbox.value_objects import OutboxRecord


class OutboxModel(Base):
    """ORM model for the outbox table.

    Stores domain events written in the same transaction as the state
    change they announce, until the relay hands them to the delivery
    channel.

    The table uses a partial index for efficient polling:
    - idx_outbox_unpublished: For fetching pending records oldest first
    """

    __tablename__ = "outbox"
    __table_args__ = (
        Index(
            "idx_outbox_unpublished",
            "created_at",
            postgresql_where=text("published_at IS NULL"),
            sqlite_where=text("published_at IS NULL"),
        ),
    )

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    topic: Mapped[str] = mapped_column(String(255), nullable=False)
    payload: Mapped[dict] = mapped_column(JSON, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
    )
    published_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    def to_value_object(self) -> OutboxRecord:
        """Convert this ORM model to an OutboxRecord value object.

        Returns:
            An immutable OutboxRecord with all fields copied from this model.
        """
        return OutboxRecord(
            id=self.id,
            topic=self.topic,
            payload=self.payload,
            created_at=_as_utc(self.created_at),
            published_at=_as_utc(self.published_at)
            if self.published_at is not None
            else None,
        )

    def __repr__(self) -> str:
        """Return string representation."""
        return (
            f"<OutboxModel("
            f"id={self.id}, "
            f"topic={self.topic}, "
            f"published_at={self.published_at}"
            f")>"
        )


def _as_utc(value: datetime) -> datetime:
    # SQLite returns naive datetimes; all stored values are UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value

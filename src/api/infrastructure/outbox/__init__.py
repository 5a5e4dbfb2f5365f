"""Infrastructure layer for the outbox pattern.

Contains SQLAlchemy models, repository and store implementations, and the
relay that forwards outbox records to the delivery channel.
"""

from infrastructure.outbox.models import OutboxModel
from infrastructure.outbox.relay import OutboxRelay, relay_pending
from infrastructure.outbox.repository import OutboxRepository
from infrastructure.outbox.store import SqlOutboxStore

__all__ = [
    "OutboxModel",
    "OutboxRelay",
    "OutboxRepository",
    "SqlOutboxStore",
    "relay_pending",
]

"""Outbox pattern implementation for reliable event propagation.

This module provides the transactional outbox pattern: the write side
stages events next to its state changes, and the relay forwards them to
the delivery channel with at-least-once semantics.
"""

from shared_kernel.outbox.ports import (
    DeliveredMessage,
    DeliveryChannel,
    IOutboxRepository,
    OutboxClaim,
    OutboxStore,
)
from shared_kernel.outbox.value_objects import OutboxRecord, RelayBatchResult

__all__ = [
    "DeliveredMessage",
    "DeliveryChannel",
    "IOutboxRepository",
    "OutboxClaim",
    "OutboxRecord",
    "OutboxStore",
    "RelayBatchResult",
]

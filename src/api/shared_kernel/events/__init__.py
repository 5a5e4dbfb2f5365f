"""Domain events shared between the write side and the projector.

Events are immutable facts. Each carries its own ``event_id``, generated
once at command time, which is the identity used for deduplication
downstream.
"""

from uuid import uuid4

from shared_kernel.events.exceptions import (
    EventDecodingError,
    MalformedEventError,
    UnknownEventTypeError,
)
from shared_kernel.events.orders import (
    UNCATEGORIZED,
    LineItem,
    OrderCreated,
    hour_bucket,
)
from shared_kernel.events.products import PriceChanged, ProductCreated

# Closed set of events carried through the delivery channel
DomainEvent = OrderCreated | ProductCreated | PriceChanged


def new_event_id() -> str:
    """Generate the identity for a freshly raised event."""
    return str(uuid4())


__all__ = [
    "DomainEvent",
    "EventDecodingError",
    "LineItem",
    "MalformedEventError",
    "OrderCreated",
    "PriceChanged",
    "ProductCreated",
    "UNCATEGORIZED",
    "UnknownEventTypeError",
    "hour_bucket",
    "new_event_id",
]

"""Order domain events.

Events raised by the order command handlers and folded into the sales
views by the projector.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from decimal import Decimal

UNCATEGORIZED = "Uncategorized"


def hour_bucket(timestamp: datetime) -> datetime:
    """Truncate a timestamp to the start of its UTC hour.

    Naive timestamps are taken as UTC.
    """
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=UTC)
    return timestamp.astimezone(UTC).replace(minute=0, second=0, microsecond=0)


@dataclass(frozen=True)
class LineItem:
    """Immutable snapshot of one order line at order time.

    Attributes:
        product_id: The product that was ordered
        quantity: Number of units ordered
        price: Unit price charged for the product
        category: Category of the product when the order was placed
    """

    product_id: int
    quantity: int
    price: Decimal
    category: str = UNCATEGORIZED

    @property
    def revenue(self) -> Decimal:
        """Revenue contributed by this line (quantity x unit price)."""
        return self.price * self.quantity


@dataclass(frozen=True)
class OrderCreated:
    """Event raised when an order has been placed and stock reserved.

    Attributes:
        event_id: Globally unique identity of this event (a UUID string
            when produced by this service)
        order_id: The id of the created order, if the producer sent one
        customer_id: The customer who placed the order
        items: The order lines, enriched with product category
        total: Order total as computed by the write side
        timestamp: When the order was created (UTC)
    """

    event_id: str
    order_id: int | None
    customer_id: str
    items: tuple[LineItem, ...]
    total: Decimal
    timestamp: datetime

    def revenue_by_category(self) -> dict[str, Decimal]:
        """Sum line revenue per distinct category, in first-seen order."""
        revenue: dict[str, Decimal] = {}
        for item in self.items:
            revenue[item.category] = revenue.get(item.category, Decimal("0")) + (
                item.revenue
            )
        return revenue

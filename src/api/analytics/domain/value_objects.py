"""Value objects returned by analytics queries.

Each mirrors one materialized view row as of the last projected event.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal


@dataclass(frozen=True)
class ProductSales:
    product_id: int
    total_quantity_sold: int
    total_revenue: Decimal
    order_count: int


@dataclass(frozen=True)
class CategoryMetrics:
    category: str
    total_revenue: Decimal
    total_orders: int


@dataclass(frozen=True)
class CustomerLifetimeValue:
    customer_id: str
    total_spent: Decimal
    order_count: int
    last_order_date: datetime | None


@dataclass(frozen=True)
class HourlySales:
    hour: datetime
    total_orders: int
    total_revenue: Decimal


@dataclass(frozen=True)
class CatalogProduct:
    product_id: int
    name: str | None
    category: str | None
    price: Decimal
    stock: int | None
    updated_at: datetime


@dataclass(frozen=True)
class SyncStatus:
    """Staleness of the read model.

    Attributes:
        last_processed_event_timestamp: Timestamp of the most recently
            applied event, or None if nothing has been projected yet
        lag_seconds: Whole seconds between that timestamp and now, never
            negative; None when there is no timestamp
    """

    last_processed_event_timestamp: datetime | None
    lag_seconds: int | None

    @classmethod
    def at(cls, last_processed: datetime | None, now: datetime) -> SyncStatus:
        """Compute the staleness of ``last_processed`` as seen at ``now``.

        Lag is rounded half up to whole seconds and clamped at zero, since
        event timestamps may run ahead of the reader's clock.
        """
        if last_processed is None:
            return cls(last_processed_event_timestamp=None, lag_seconds=None)

        elapsed = (now - last_processed).total_seconds()
        return cls(
            last_processed_event_timestamp=last_processed,
            lag_seconds=max(0, math.floor(elapsed + 0.5)),
        )

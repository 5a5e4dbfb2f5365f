"""Repository protocols (ports) for the projection bounded context.

The view store is the only writer of the materialized views, the
processed-event ledger and the sync status. All of its methods run inside
one unit-of-work transaction per event.
"""

from __future__ import annotations

from contextlib import AbstractAsyncContextManager
from datetime import datetime
from typing import Protocol, runtime_checkable

from projection.domain.value_objects import (
    CatalogEntry,
    CategoryContribution,
    CustomerContribution,
    HourlyContribution,
    PriceUpdate,
    ProductSalesContribution,
)


@runtime_checkable
class IViewStore(Protocol):
    """Transaction-scoped writer for the read model.

    Every ``add_*`` method is a single atomic upsert: it creates the row
    with the contribution as its initial value, or adds the contribution to
    the existing accumulators. Concurrent projectors racing on the same key
    never lose an update.
    """

    async def is_processed(self, event_id: str) -> bool:
        """Check the processed-event ledger for ``event_id``."""
        ...

    async def record_processed(self, event_id: str) -> None:
        """Insert ``event_id`` into the processed-event ledger.

        Raises:
            sqlalchemy.exc.IntegrityError: If another projector recorded the
                same event first; the transaction must roll back
        """
        ...

    async def add_product_sales(self, contribution: ProductSalesContribution) -> None:
        """Add quantity, revenue and order count to a product sales row."""
        ...

    async def add_category_metrics(self, contribution: CategoryContribution) -> None:
        """Add revenue and order count to a category metrics row."""
        ...

    async def add_customer_value(self, contribution: CustomerContribution) -> None:
        """Add spend and order count to a customer row.

        The last order timestamp is replaced by the contribution's, not
        maximized; out-of-order delivery may leave an older value.
        """
        ...

    async def add_hourly_sales(self, contribution: HourlyContribution) -> None:
        """Add revenue and order count to the row of an hour bucket."""
        ...

    async def upsert_catalog_entry(self, entry: CatalogEntry) -> None:
        """Replace a catalog row with the entry's state (last writer wins)."""
        ...

    async def update_catalog_price(self, update: PriceUpdate) -> None:
        """Set a catalog row's price, creating a bare row if none exists."""
        ...

    async def set_sync_status(self, timestamp: datetime, monotonic: bool = False) -> None:
        """Record the timestamp of the last applied event.

        Args:
            timestamp: Event timestamp to store
            monotonic: When set, an older timestamp never replaces a newer one
        """
        ...


@runtime_checkable
class IViewUnitOfWork(Protocol):
    """Opens one read-model transaction per projected event."""

    def transaction(self) -> AbstractAsyncContextManager[IViewStore]:
        """Yield a view store bound to a new transaction.

        Leaving the block normally commits; leaving it with an exception
        rolls every change back, ledger row included.
        """
        ...

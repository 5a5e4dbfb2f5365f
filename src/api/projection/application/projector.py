"""Idempotent projector applying domain events to the read model.

Each event is projected in one read-model transaction:

1. look the event id up in the processed-event ledger, stop if present;
2. apply the event's contributions to the views;
3. record the event timestamp as the sync status;
4. insert the ledger row;
5. commit.

Any failure rolls the transaction back, so an event is either fully
applied and recorded or not applied at all. Redelivering an applied event
is a no-op.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from projection.application.observability import DefaultProjectorProbe
from projection.domain.value_objects import (
    CatalogEntry,
    OrderContribution,
    PriceUpdate,
    ProjectionOutcome,
)
from shared_kernel.events import OrderCreated, PriceChanged, ProductCreated

if TYPE_CHECKING:
    from projection.application.observability import ProjectorProbe
    from projection.ports.repositories import IViewStore, IViewUnitOfWork
    from shared_kernel.events import DomainEvent


class IdempotentProjector:
    """Applies each event's effects to the views exactly once.

    The processed-event ledger is the only deduplication guard. The
    projector never acknowledges messages itself; callers ack only after
    project() returns, that is after the commit.
    """

    def __init__(
        self,
        unit_of_work: IViewUnitOfWork,
        probe: ProjectorProbe | None = None,
        monotonic_sync_status: bool = False,
    ) -> None:
        """Initialize the projector.

        Args:
            unit_of_work: Opens one read-model transaction per event
            probe: Observability probe for logging/metrics
            monotonic_sync_status: Never move the sync marker backwards
        """
        self._unit_of_work = unit_of_work
        self._probe = probe or DefaultProjectorProbe()
        self._monotonic_sync_status = monotonic_sync_status

    async def project(self, event: DomainEvent) -> ProjectionOutcome:
        """Apply an event to the views in a single transaction.

        Args:
            event: The decoded domain event

        Returns:
            APPLIED if the views changed, DUPLICATE if the event was
            already processed

        Raises:
            Exception: Any store error; nothing of the event is committed
        """
        event_type = type(event).__name__

        try:
            async with self._unit_of_work.transaction() as views:
                if await views.is_processed(event.event_id):
                    outcome = ProjectionOutcome.DUPLICATE
                else:
                    await self._apply(views, event)
                    await views.set_sync_status(
                        event.timestamp, monotonic=self._monotonic_sync_status
                    )
                    await views.record_processed(event.event_id)
                    outcome = ProjectionOutcome.APPLIED
        except Exception as e:
            self._probe.projection_failed(event.event_id, event_type, str(e))
            raise

        if outcome is ProjectionOutcome.DUPLICATE:
            self._probe.duplicate_skipped(event.event_id, event_type)
        else:
            self._probe.event_projected(event.event_id, event_type)
        return outcome

    async def _apply(self, views: IViewStore, event: DomainEvent) -> None:
        match event:
            case OrderCreated():
                contribution = OrderContribution.from_event(event)
                for product in contribution.products:
                    await views.add_product_sales(product)
                for category in contribution.categories:
                    await views.add_category_metrics(category)
                await views.add_customer_value(contribution.customer)
                await views.add_hourly_sales(contribution.hourly)

            case ProductCreated():
                await views.upsert_catalog_entry(CatalogEntry.from_event(event))

            case PriceChanged():
                await views.update_catalog_price(PriceUpdate.from_event(event))

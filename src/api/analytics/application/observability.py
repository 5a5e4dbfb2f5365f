"""Domain probes for the analytics application layer.

Following Domain Oriented Observability pattern.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class AnalyticsQueryProbe(Protocol):
    """Domain probe for read-model queries."""

    def view_looked_up(self, view: str, key: str, found: bool) -> None:
        """Record a point lookup against a materialized view."""
        ...

    def sync_status_read(self, lag_seconds: int | None) -> None:
        """Record that the read-model staleness was reported."""
        ...

    def with_context(self, context: ObservationContext) -> AnalyticsQueryProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultAnalyticsQueryProbe:
    """Default implementation using structlog."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        if self._context is None:
            return {}
        return self._context.as_dict()

    def with_context(self, context: ObservationContext) -> DefaultAnalyticsQueryProbe:
        return DefaultAnalyticsQueryProbe(logger=self._logger, context=context)

    def view_looked_up(self, view: str, key: str, found: bool) -> None:
        self._logger.debug(
            "analytics_view_looked_up",
            view=view,
            key=key,
            found=found,
            **self._get_context_kwargs(),
        )

    def sync_status_read(self, lag_seconds: int | None) -> None:
        self._logger.debug(
            "analytics_sync_status_read",
            lag_seconds=lag_seconds,
            **self._get_context_kwargs(),
        )

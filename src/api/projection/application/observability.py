"""Domain probes for the projection application layer.

Following Domain Oriented Observability pattern.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class ProjectorProbe(Protocol):
    """Domain probe for projector and consumer operations."""

    def event_projected(self, event_id: str, event_type: str) -> None:
        """Record that an event's effects were committed to the views."""
        ...

    def duplicate_skipped(self, event_id: str, event_type: str) -> None:
        """Record that an already-processed event was redelivered."""
        ...

    def projection_failed(self, event_id: str, event_type: str, error: str) -> None:
        """Record that projecting an event failed and was rolled back."""
        ...

    def event_dropped(self, reason: str, error: str) -> None:
        """Record that an undecodable message was acknowledged and dropped."""
        ...

    def consumer_started(self, queues: list[str]) -> None:
        """Record that the projection consumer started."""
        ...

    def consumer_stopped(self) -> None:
        """Record that the projection consumer stopped."""
        ...

    def with_context(self, context: ObservationContext) -> ProjectorProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultProjectorProbe:
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

    def with_context(self, context: ObservationContext) -> DefaultProjectorProbe:
        return DefaultProjectorProbe(logger=self._logger, context=context)

    def event_projected(self, event_id: str, event_type: str) -> None:
        self._logger.info(
            "projection_event_applied",
            event_id=event_id,
            event_type=event_type,
            **self._get_context_kwargs(),
        )

    def duplicate_skipped(self, event_id: str, event_type: str) -> None:
        self._logger.info(
            "projection_duplicate_skipped",
            event_id=event_id,
            event_type=event_type,
            **self._get_context_kwargs(),
        )

    def projection_failed(self, event_id: str, event_type: str, error: str) -> None:
        self._logger.error(
            "projection_failed",
            event_id=event_id,
            event_type=event_type,
            error=error,
            **self._get_context_kwargs(),
        )

    def event_dropped(self, reason: str, error: str) -> None:
        self._logger.warning(
            "projection_event_dropped",
            reason=reason,
            error=error,
            **self._get_context_kwargs(),
        )

    def consumer_started(self, queues: list[str]) -> None:
        self._logger.info(
            "projection_consumer_started",
            queues=queues,
            **self._get_context_kwargs(),
        )

    def consumer_stopped(self) -> None:
        self._logger.info(
            "projection_consumer_stopped",
            **self._get_context_kwargs(),
        )

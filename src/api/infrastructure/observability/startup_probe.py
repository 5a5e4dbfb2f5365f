"""Domain probe for application startup and lifecycle events.

Following Domain-Oriented Observability patterns, this probe captures
domain-significant events during application initialization and shutdown.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class StartupProbe(Protocol):
    """Domain probe for application startup operations."""

    def component_started(self, component: str) -> None:
        """Record that a background pipeline component was started."""
        ...

    def component_disabled(self, component: str) -> None:
        """Record that a pipeline component is disabled by configuration."""
        ...

    def component_stopped(self, component: str) -> None:
        """Record that a pipeline component was stopped at shutdown."""
        ...

    def with_context(self, context: ObservationContext) -> StartupProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultStartupProbe:
    """Default implementation of StartupProbe using structlog."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        """Get context metadata as kwargs for logging."""
        if self._context is None:
            return {}
        return self._context.as_dict()

    def with_context(self, context: ObservationContext) -> DefaultStartupProbe:
        """Create a new probe with observation context bound."""
        return DefaultStartupProbe(logger=self._logger, context=context)

    def component_started(self, component: str) -> None:
        """Record that a pipeline component was started."""
        self._logger.info(
            "pipeline_component_started",
            component=component,
            **self._get_context_kwargs(),
        )

    def component_disabled(self, component: str) -> None:
        """Record that a pipeline component is disabled."""
        self._logger.info(
            "pipeline_component_disabled",
            component=component,
            **self._get_context_kwargs(),
        )

    def component_stopped(self, component: str) -> None:
        """Record that a pipeline component was stopped."""
        self._logger.info(
            "pipeline_component_stopped",
            component=component,
            **self._get_context_kwargs(),
        )

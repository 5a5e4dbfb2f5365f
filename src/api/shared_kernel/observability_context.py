"""Observation context for domain-oriented observability.

Observation contexts collect and manage contextual metadata for instrumentation,
following the Domain Oriented Observability pattern.

See: https://martinfowler.com/articles/domain-oriented-observability.html
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class ObservationContext:
    """Immutable context containing metadata for observability.

    Captures message-scoped metadata that should be included with all
    instrumentation events, so that every log line about one delivery can
    be correlated.

    Attributes:
        request_id: Identifier for the current HTTP request (if applicable).
        event_id: Identifier of the domain event being handled.
        event_type: Type tag of the domain event being handled.
        queue: Queue the message was consumed from.
        extra: Additional contextual metadata.

    Example:
        context = ObservationContext(event_id="...", queue="order-events")
        probe = DefaultProjectorProbe().with_context(context)
    """

    request_id: str | None = None
    event_id: str | None = None
    event_type: str | None = None
    queue: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def as_dict(self) -> dict[str, Any]:
        """Convert context to a dictionary for logging.

        Only includes non-None values to keep logs clean.
        """
        result: dict[str, Any] = {}
        if self.request_id is not None:
            result["request_id"] = self.request_id
        if self.event_id is not None:
            result["event_id"] = self.event_id
        if self.event_type is not None:
            result["event_type"] = self.event_type
        if self.queue is not None:
            result["queue"] = self.queue
        result.update(self.extra)
        return result

    def with_extra(self, **kwargs: Any) -> ObservationContext:
        """Create a new context with additional extra metadata."""
        return ObservationContext(
            request_id=self.request_id,
            event_id=self.event_id,
            event_type=self.event_type,
            queue=self.queue,
            extra={**self.extra, **kwargs},
        )

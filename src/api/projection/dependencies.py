"""Dependency injection for the projection bounded context.

Wires the projector to the read database and the consumer to a delivery
channel.
"""

from infrastructure.database.dependencies import get_read_sessionmaker
from infrastructure.dependencies import create_delivery_channel
from infrastructure.settings import get_projector_settings
from projection.application.consumer import ProjectionConsumer
from projection.application.observability import (
    DefaultProjectorProbe,
    ProjectorProbe,
)
from projection.application.projector import IdempotentProjector
from projection.infrastructure.view_store import SqlViewUnitOfWork
from shared_kernel.events.serialization import EventCodec
from shared_kernel.outbox.ports import DeliveryChannel


def get_projector_probe() -> ProjectorProbe:
    """Get ProjectorProbe instance.

    Returns:
        DefaultProjectorProbe instance for observability
    """
    return DefaultProjectorProbe()


def get_idempotent_projector() -> IdempotentProjector:
    """Create a projector writing to the read database."""
    settings = get_projector_settings()
    return IdempotentProjector(
        unit_of_work=SqlViewUnitOfWork(get_read_sessionmaker()),
        probe=get_projector_probe(),
        monotonic_sync_status=settings.monotonic_sync_status,
    )


def create_projection_consumer(
    channel: DeliveryChannel | None = None,
) -> ProjectionConsumer:
    """Create the projection consumer.

    Args:
        channel: Channel to consume from; a new AMQP channel by default

    Returns:
        A ProjectionConsumer that has not been started
    """
    settings = get_projector_settings()
    return ProjectionConsumer(
        channel=channel or create_delivery_channel(),
        projector=get_idempotent_projector(),
        queues=settings.queues,
        codec=EventCodec(),
        probe=get_projector_probe(),
    )

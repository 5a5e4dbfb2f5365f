"""Shared infrastructure dependencies.

Provides ONLY shared infrastructure resources (delivery channels and the
outbox relay). Does NOT import from bounded contexts to maintain DDD
boundaries.
"""

from infrastructure.database.dependencies import get_write_sessionmaker
from infrastructure.messaging.channel import AmqpDeliveryChannel
from infrastructure.outbox.relay import OutboxRelay
from infrastructure.outbox.store import SqlOutboxStore
from infrastructure.settings import get_broker_settings, get_relay_settings
from shared_kernel.outbox.observability import DefaultRelayProbe
from shared_kernel.outbox.ports import DeliveryChannel


def create_delivery_channel() -> AmqpDeliveryChannel:
    """Create a delivery channel configured from broker settings.

    Each long-running component gets its own channel, and with it its own
    broker connection.
    """
    return AmqpDeliveryChannel.from_settings(get_broker_settings())


def create_outbox_relay(channel: DeliveryChannel | None = None) -> OutboxRelay:
    """Create the outbox relay over the write database.

    Args:
        channel: Channel to publish to; a new AMQP channel by default

    Returns:
        An OutboxRelay that has not been started
    """
    settings = get_relay_settings()
    return OutboxRelay(
        store=SqlOutboxStore(get_write_sessionmaker()),
        channel=channel or create_delivery_channel(),
        probe=DefaultRelayProbe(),
        poll_interval_seconds=settings.poll_interval_seconds,
        batch_size=settings.batch_size,
    )

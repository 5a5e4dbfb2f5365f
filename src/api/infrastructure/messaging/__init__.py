"""Messaging infrastructure - durable delivery channel over RabbitMQ."""

from infrastructure.messaging.channel import (
    AmqpDeliveredMessage,
    AmqpDeliveryChannel,
    ConnectionState,
)

__all__ = [
    "AmqpDeliveredMessage",
    "AmqpDeliveryChannel",
    "ConnectionState",
]

"""AMQP implementation of the delivery channel.

One durable queue per topic, bound to the default exchange. Messages are
published persistent with publisher confirms and consumed with manual
acknowledgement. The channel object owns its connection and moves through
an explicit state machine::

    DISCONNECTED -> CONNECTING -> CONNECTED -> DISCONNECTED (error or close)

Consumers reconnect with a fixed backoff, re-declare their queues and
re-subscribe. Messages that were unacknowledged when a connection dropped
are redelivered by the broker.
"""

from __future__ import annotations

import asyncio
import contextlib
from collections.abc import Awaitable, Callable, Sequence
from enum import StrEnum
from functools import partial
from typing import TYPE_CHECKING, Any

import aio_pika
from aio_pika import DeliveryMode, Message
from aio_pika.exceptions import AMQPException, ChannelInvalidStateError

from shared_kernel.outbox.exceptions import DeliveryChannelUnavailableError
from shared_kernel.outbox.observability import DefaultDeliveryChannelProbe

if TYPE_CHECKING:
    from aio_pika.abc import (
        AbstractChannel,
        AbstractConnection,
        AbstractIncomingMessage,
        AbstractQueue,
    )

    from infrastructure.settings import BrokerSettings
    from shared_kernel.outbox.observability import DeliveryChannelProbe
    from shared_kernel.outbox.ports import MessageHandler

ConnectFactory = Callable[..., Awaitable["AbstractConnection"]]

_CONNECTION_ERRORS = (
    AMQPException,
    ChannelInvalidStateError,
    OSError,
    asyncio.TimeoutError,
)


class ConnectionState(StrEnum):
    """Connection states for the delivery channel.

    Attributes:
        DISCONNECTED: No usable broker connection.
        CONNECTING: A connection attempt is in progress.
        CONNECTED: Connection and channel are open.
    """

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"


class AmqpDeliveredMessage:
    """A consumed AMQP message awaiting ack or nack."""

    def __init__(self, message: AbstractIncomingMessage, queue: str) -> None:
        self._message = message
        self._queue = queue

    @property
    def body(self) -> bytes:
        return self._message.body

    @property
    def queue(self) -> str:
        return self._queue

    @property
    def redelivered(self) -> bool:
        return bool(self._message.redelivered)

    @property
    def message_id(self) -> str | None:
        return self._message.message_id

    async def ack(self) -> None:
        await self._message.ack()

    async def nack(self, requeue: bool = True) -> None:
        await self._message.nack(requeue=requeue)


class AmqpDeliveryChannel:
    """Durable at-least-once delivery channel backed by RabbitMQ.

    Publishing and consuming share the same connection handling: a publish
    while disconnected makes a single connect attempt and raises
    DeliveryChannelUnavailableError if it fails, while consume() keeps
    reconnecting until close() is called.
    """

    def __init__(
        self,
        url: str,
        prefetch_count: int = 1,
        reconnect_delay_seconds: float = 5.0,
        connection_timeout_seconds: float = 10.0,
        probe: DeliveryChannelProbe | None = None,
        connect: ConnectFactory | None = None,
    ) -> None:
        """Initialize the channel. No connection is made until first use.

        Args:
            url: AMQP connection URL
            prefetch_count: Unacknowledged messages one consumer may hold
            reconnect_delay_seconds: Fixed delay between reconnect attempts
            connection_timeout_seconds: Timeout for a single connect attempt
            probe: Observability probe for logging/metrics
            connect: Connection factory, aio_pika.connect by default
        """
        self._url = url
        self._prefetch_count = prefetch_count
        self._reconnect_delay = reconnect_delay_seconds
        self._connection_timeout = connection_timeout_seconds
        self._probe = probe or DefaultDeliveryChannelProbe()
        self._connect = connect or aio_pika.connect

        self._state = ConnectionState.DISCONNECTED
        self._connection: AbstractConnection | None = None
        self._channel: AbstractChannel | None = None
        self._queues: dict[str, AbstractQueue] = {}
        self._connection_lock = asyncio.Lock()
        self._connection_lost = asyncio.Event()
        self._stopped = asyncio.Event()
        self._closing = False

    @classmethod
    def from_settings(
        cls,
        settings: BrokerSettings,
        probe: DeliveryChannelProbe | None = None,
    ) -> AmqpDeliveryChannel:
        """Create a channel configured from broker settings."""
        return cls(
            url=settings.url.get_secret_value(),
            prefetch_count=settings.prefetch_count,
            reconnect_delay_seconds=settings.reconnect_delay_seconds,
            connection_timeout_seconds=settings.connection_timeout_seconds,
            probe=probe,
        )

    @property
    def state(self) -> ConnectionState:
        """Current connection state."""
        return self._state

    async def publish(
        self, topic: str, body: bytes, message_id: str | None = None
    ) -> None:
        """Publish a persistent message to the durable queue named ``topic``.

        Raises:
            DeliveryChannelUnavailableError: If the channel is closed or the
                broker cannot be reached
        """
        if self._closing:
            raise DeliveryChannelUnavailableError("Delivery channel is closed")

        message = Message(
            body=body,
            delivery_mode=DeliveryMode.PERSISTENT,
            message_id=message_id,
            content_type="application/json",
        )

        try:
            channel = await self._ensure_channel()
            await self._declare_queue(channel, topic)
            await channel.default_exchange.publish(message, routing_key=topic)
        except _CONNECTION_ERRORS as e:
            await self._reset_connection()
            self._probe.connection_failed(str(e), retry_in=None)
            raise DeliveryChannelUnavailableError(
                f"Failed to publish to {topic}: {e}"
            ) from e

        self._probe.message_published(topic, message_id)

    async def consume(self, queues: Sequence[str], handler: MessageHandler) -> None:
        """Deliver messages from ``queues`` to ``handler`` until closed.

        The handler must settle every message with ack() or nack().
        """
        while not self._closing:
            try:
                channel = await self._ensure_channel()
                lost = self._connection_lost
                await channel.set_qos(prefetch_count=self._prefetch_count)
                for name in queues:
                    queue = await self._declare_queue(channel, name)
                    await queue.consume(partial(self._dispatch, handler, name))
                self._probe.consumer_subscribed(list(queues), self._prefetch_count)

                await lost.wait()
            except _CONNECTION_ERRORS as e:
                await self._reset_connection()
                self._probe.connection_failed(str(e), retry_in=self._reconnect_delay)

            if self._closing:
                break

            await self._backoff()

    async def close(self) -> None:
        """Stop consuming and close the broker connection."""
        self._closing = True
        self._stopped.set()

        connection = self._connection
        self._connection = None
        self._channel = None
        self._queues.clear()

        if connection is not None and not connection.is_closed:
            await connection.close()

        self._set_state(ConnectionState.DISCONNECTED)
        self._connection_lost.set()
        self._probe.channel_closed()

    async def _ensure_channel(self) -> AbstractChannel:
        async with self._connection_lock:
            if self._channel is not None and not self._channel.is_closed:
                return self._channel

            # A channel closed by the broker can leave its connection open
            await self._close_stale_connection()

            self._set_state(ConnectionState.CONNECTING)
            try:
                connection = await self._connect(
                    self._url, timeout=self._connection_timeout
                )
                channel = await connection.channel(publisher_confirms=True)
            except BaseException:
                self._set_state(ConnectionState.DISCONNECTED)
                raise

            self._connection_lost = asyncio.Event()
            connection.close_callbacks.add(self._on_connection_closed)
            channel.close_callbacks.add(self._on_channel_closed)
            self._connection = connection
            self._channel = channel
            self._queues.clear()
            self._set_state(ConnectionState.CONNECTED)
            return channel

    async def _close_stale_connection(self) -> None:
        connection = self._connection
        self._connection = None
        self._channel = None
        if connection is not None and not connection.is_closed:
            with contextlib.suppress(*_CONNECTION_ERRORS):
                await connection.close()

    async def _declare_queue(self, channel: AbstractChannel, name: str) -> AbstractQueue:
        queue = self._queues.get(name)
        if queue is None:
            queue = await channel.declare_queue(name, durable=True)
            self._queues[name] = queue
            self._probe.queue_declared(name)
        return queue

    async def _dispatch(
        self,
        handler: MessageHandler,
        queue: str,
        message: AbstractIncomingMessage,
    ) -> None:
        await handler(AmqpDeliveredMessage(message, queue))

    def _on_connection_closed(self, sender: Any, exc: BaseException | None = None) -> None:
        if sender is not self._connection:
            return

        self._connection = None
        self._channel = None
        self._queues.clear()
        self._set_state(ConnectionState.DISCONNECTED)
        if exc is not None and not self._closing:
            self._probe.connection_failed(str(exc), retry_in=self._reconnect_delay)
        self._connection_lost.set()

    def _on_channel_closed(self, sender: Any, exc: BaseException | None = None) -> None:
        if sender is not self._channel:
            return

        # The connection stays open; it is closed before the next connect
        self._channel = None
        self._queues.clear()
        self._set_state(ConnectionState.DISCONNECTED)
        if exc is not None and not self._closing:
            self._probe.connection_failed(str(exc), retry_in=self._reconnect_delay)
        self._connection_lost.set()

    async def _reset_connection(self) -> None:
        connection = self._connection
        self._connection = None
        self._channel = None
        self._queues.clear()
        self._set_state(ConnectionState.DISCONNECTED)
        self._connection_lost.set()

        if connection is not None and not connection.is_closed:
            # The connection is already unusable; a failing close changes nothing
            with contextlib.suppress(*_CONNECTION_ERRORS):
                await connection.close()

    async def _backoff(self) -> None:
        try:
            await asyncio.wait_for(self._stopped.wait(), timeout=self._reconnect_delay)
        except asyncio.TimeoutError:
            pass

    def _set_state(self, new_state: ConnectionState) -> None:
        old_state = self._state
        if old_state is new_state:
            return
        self._state = new_state
        self._probe.state_changed(old_state.value, new_state.value)

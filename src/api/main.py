"""Main FastAPI application entry point.

Hosts the analytics API and, when enabled, the outbox relay and the
projection consumer as background tasks. The ``run_relay`` and
``run_projector`` entry points run a single pipeline component without
the HTTP server.
"""

import asyncio
import signal
from collections.abc import Awaitable, Callable
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request

from analytics.presentation import routes as analytics_routes
from infrastructure.database.dependencies import close_database_connections
from infrastructure.dependencies import create_delivery_channel, create_outbox_relay
from infrastructure.logging import configure_logging
from infrastructure.observability import DefaultStartupProbe
from infrastructure.settings import get_projector_settings, get_relay_settings
from infrastructure.version import __version__
from projection.dependencies import create_projection_consumer

_startup_probe = DefaultStartupProbe()


@asynccontextmanager
async def orderview_lifespan(app: FastAPI):
    """Application lifespan context.

    Manages:
    - Logging configuration
    - Outbox relay and projection consumer start/stop
    - Database engine lifecycle (created lazily, disposed on shutdown)
    """
    configure_logging()

    relay_channel = None
    app.state.relay = None
    app.state.relay_channel = None
    app.state.consumer = None
    app.state.consumer_channel = None

    if get_relay_settings().enabled:
        relay_channel = create_delivery_channel()
        app.state.relay_channel = relay_channel
        app.state.relay = create_outbox_relay(relay_channel)
        await app.state.relay.start()
        _startup_probe.component_started("outbox_relay")
    else:
        _startup_probe.component_disabled("outbox_relay")

    if get_projector_settings().enabled:
        app.state.consumer_channel = create_delivery_channel()
        app.state.consumer = create_projection_consumer(app.state.consumer_channel)
        await app.state.consumer.start()
        _startup_probe.component_started("projection_consumer")
    else:
        _startup_probe.component_disabled("projection_consumer")

    try:
        yield
    finally:
        if app.state.consumer is not None:
            await app.state.consumer.stop()
            _startup_probe.component_stopped("projection_consumer")

        if app.state.relay is not None:
            await app.state.relay.stop()
            await relay_channel.close()
            _startup_probe.component_stopped("outbox_relay")

        await close_database_connections()


app = FastAPI(
    title="Orderview API",
    description="Eventually consistent sales analytics over an outbox-fed read model",
    version=__version__,
    lifespan=orderview_lifespan,
)

# Include Analytics bounded context routes
app.include_router(analytics_routes.router, prefix="/api")


@app.get("/health")
def health():
    """Basic health check endpoint."""
    return {"status": "ok"}


@app.get("/health/pipeline")
def health_pipeline(request: Request) -> dict:
    """Report whether the relay and consumer run and their channel states."""
    state = request.app.state

    def component(worker, channel) -> dict:
        if worker is None:
            return {"enabled": False, "running": False, "channel": None}
        return {
            "enabled": True,
            "running": worker.is_running,
            "channel": channel.state.value,
        }

    return {
        "relay": component(
            getattr(state, "relay", None), getattr(state, "relay_channel", None)
        ),
        "projector": component(
            getattr(state, "consumer", None), getattr(state, "consumer_channel", None)
        ),
    }


async def _run_until_signalled(
    start: Callable[[], Awaitable[None]],
    stop: Callable[[], Awaitable[None]],
) -> None:
    stopped = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, stopped.set)

    await start()
    try:
        await stopped.wait()
    finally:
        await stop()
        await close_database_connections()


def run_relay() -> None:
    """Run the outbox relay until SIGINT or SIGTERM."""
    configure_logging(component="relay")
    channel = create_delivery_channel()
    relay = create_outbox_relay(channel)

    async def stop() -> None:
        await relay.stop()
        await channel.close()

    asyncio.run(_run_until_signalled(relay.start, stop))


def run_projector() -> None:
    """Run the projection consumer until SIGINT or SIGTERM."""
    configure_logging(component="projector")
    consumer = create_projection_consumer()

    asyncio.run(_run_until_signalled(consumer.start, consumer.stop))

"""Shared Kernel module.

Holds the pieces the write side, the relay, the projection context and the
analytics context all agree on: the domain event types with their JSON
wire codec, the outbox ports, and the observation context used by probes.
It depends on nothing but the standard library and structlog.
"""

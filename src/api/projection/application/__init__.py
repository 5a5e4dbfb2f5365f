"""Projection application layer - projector and consumer."""

from projection.application.consumer import ProjectionConsumer
from projection.application.projector import IdempotentProjector

__all__ = ["IdempotentProjector", "ProjectionConsumer"]

"""Ports for the projection bounded context."""

from projection.ports.repositories import IViewStore, IViewUnitOfWork

__all__ = ["IViewStore", "IViewUnitOfWork"]

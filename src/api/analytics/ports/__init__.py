"""Ports for the analytics bounded context."""

from analytics.ports.repositories import IAnalyticsRepository

__all__ = ["IAnalyticsRepository"]

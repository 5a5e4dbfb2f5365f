"""Analytics infrastructure - SQL queries over the read-model views."""

from analytics.infrastructure.repository import SqlAnalyticsRepository

__all__ = ["SqlAnalyticsRepository"]

"""Analytics application layer."""

from analytics.application.services import AnalyticsQueryService

__all__ = ["AnalyticsQueryService"]

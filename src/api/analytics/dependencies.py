"""Dependency injection for the analytics bounded context.

Composes the read-database session with the analytics repository and
service.
"""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from analytics.application.observability import (
    AnalyticsQueryProbe,
    DefaultAnalyticsQueryProbe,
)
from analytics.application.services import AnalyticsQueryService
from analytics.infrastructure.repository import SqlAnalyticsRepository
from infrastructure.database.dependencies import get_read_session


def get_analytics_query_probe() -> AnalyticsQueryProbe:
    """Get AnalyticsQueryProbe instance.

    Returns:
        DefaultAnalyticsQueryProbe instance for observability
    """
    return DefaultAnalyticsQueryProbe()


def get_analytics_query_service(
    session: Annotated[AsyncSession, Depends(get_read_session)],
    probe: Annotated[AnalyticsQueryProbe, Depends(get_analytics_query_probe)],
) -> AnalyticsQueryService:
    """Get request-scoped AnalyticsQueryService.

    Args:
        session: Read-database session for this request
        probe: Observability probe

    Returns:
        AnalyticsQueryService instance
    """
    return AnalyticsQueryService(
        repository=SqlAnalyticsRepository(session),
        probe=probe,
    )

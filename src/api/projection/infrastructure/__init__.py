"""Projection infrastructure - read-model tables and the SQL view store."""

from projection.infrastructure.models import (
    CategoryMetricsModel,
    CustomerLifetimeValueModel,
    HourlySalesModel,
    ProcessedEventModel,
    ProductCatalogModel,
    ProductSalesModel,
    SyncStatusModel,
)
from projection.infrastructure.view_store import SqlViewStore, SqlViewUnitOfWork

__all__ = [
    "CategoryMetricsModel",
    "CustomerLifetimeValueModel",
    "HourlySalesModel",
    "ProcessedEventModel",
    "ProductCatalogModel",
    "ProductSalesModel",
    "SqlViewStore",
    "SqlViewUnitOfWork",
    "SyncStatusModel",
]

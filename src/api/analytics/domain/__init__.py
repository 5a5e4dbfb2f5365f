"""Analytics domain layer - read-model value objects."""

from analytics.domain.value_objects import (
    CatalogProduct,
    CategoryMetrics,
    CustomerLifetimeValue,
    HourlySales,
    ProductSales,
    SyncStatus,
)

__all__ = [
    "CatalogProduct",
    "CategoryMetrics",
    "CustomerLifetimeValue",
    "HourlySales",
    "ProductSales",
    "SyncStatus",
]

"""Projection domain layer - view contributions and projection outcomes."""

from projection.domain.value_objects import (
    CatalogEntry,
    CategoryContribution,
    CustomerContribution,
    HourlyContribution,
    OrderContribution,
    PriceUpdate,
    ProductSalesContribution,
    ProjectionOutcome,
)

__all__ = [
    "CatalogEntry",
    "CategoryContribution",
    "CustomerContribution",
    "HourlyContribution",
    "OrderContribution",
    "PriceUpdate",
    "ProductSalesContribution",
    "ProjectionOutcome",
]

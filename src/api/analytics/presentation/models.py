"""Pydantic models for analytics API responses.

Field names are serialized in camelCase. Money is reported as a JSON
number.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from analytics.domain.value_objects import (
    CatalogProduct,
    CategoryMetrics,
    CustomerLifetimeValue,
    HourlySales,
    ProductSales,
    SyncStatus,
)


class ProductSalesResponse(BaseModel):
    """Response model for product sales."""

    product_id: int = Field(..., serialization_alias="productId")
    total_quantity_sold: int = Field(..., serialization_alias="totalQuantitySold")
    total_revenue: float = Field(..., serialization_alias="totalRevenue")
    order_count: int = Field(..., serialization_alias="orderCount")

    @classmethod
    def from_domain(cls, sales: ProductSales) -> ProductSalesResponse:
        return cls(
            product_id=sales.product_id,
            total_quantity_sold=sales.total_quantity_sold,
            total_revenue=float(sales.total_revenue),
            order_count=sales.order_count,
        )


class CategoryRevenueResponse(BaseModel):
    """Response model for category revenue."""

    category: str
    total_revenue: float = Field(..., serialization_alias="totalRevenue")
    total_orders: int = Field(..., serialization_alias="totalOrders")

    @classmethod
    def from_domain(cls, metrics: CategoryMetrics) -> CategoryRevenueResponse:
        return cls(
            category=metrics.category,
            total_revenue=float(metrics.total_revenue),
            total_orders=metrics.total_orders,
        )


class CustomerLifetimeValueResponse(BaseModel):
    """Response model for customer lifetime value."""

    customer_id: str = Field(..., serialization_alias="customerId")
    total_spent: float = Field(..., serialization_alias="totalSpent")
    order_count: int = Field(..., serialization_alias="orderCount")
    last_order_date: datetime | None = Field(..., serialization_alias="lastOrderDate")

    @classmethod
    def from_domain(
        cls, value: CustomerLifetimeValue
    ) -> CustomerLifetimeValueResponse:
        return cls(
            customer_id=value.customer_id,
            total_spent=float(value.total_spent),
            order_count=value.order_count,
            last_order_date=value.last_order_date,
        )


class HourlySalesResponse(BaseModel):
    """Response model for the sales of one hour."""

    hour: datetime
    total_orders: int = Field(..., serialization_alias="totalOrders")
    total_revenue: float = Field(..., serialization_alias="totalRevenue")

    @classmethod
    def from_domain(cls, sales: HourlySales) -> HourlySalesResponse:
        return cls(
            hour=sales.hour,
            total_orders=sales.total_orders,
            total_revenue=float(sales.total_revenue),
        )


class ProductResponse(BaseModel):
    """Response model for a catalog product."""

    product_id: int = Field(..., serialization_alias="productId")
    name: str | None
    category: str | None
    price: float
    stock: int | None
    updated_at: datetime = Field(..., serialization_alias="updatedAt")

    @classmethod
    def from_domain(cls, product: CatalogProduct) -> ProductResponse:
        return cls(
            product_id=product.product_id,
            name=product.name,
            category=product.category,
            price=float(product.price),
            stock=product.stock,
            updated_at=product.updated_at,
        )


class SyncStatusResponse(BaseModel):
    """Response model for read-model staleness.

    Both fields are null until the first event has been projected.
    """

    last_processed_event_timestamp: datetime | None = Field(
        ..., serialization_alias="lastProcessedEventTimestamp"
    )
    lag_seconds: int | None = Field(..., serialization_alias="lagSeconds")

    @classmethod
    def from_domain(cls, status: SyncStatus) -> SyncStatusResponse:
        return cls(
            last_processed_event_timestamp=status.last_processed_event_timestamp,
            lag_seconds=status.lag_seconds,
        )

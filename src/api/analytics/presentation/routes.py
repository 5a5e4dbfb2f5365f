"""HTTP routes for the analytics bounded context.

Point lookups against the read model. All data is eventually consistent
with the write side; /sync-status reports how far behind it is.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from analytics.application.services import AnalyticsQueryService
from analytics.dependencies import get_analytics_query_service
from analytics.presentation.models import (
    CategoryRevenueResponse,
    CustomerLifetimeValueResponse,
    HourlySalesResponse,
    ProductResponse,
    ProductSalesResponse,
    SyncStatusResponse,
)

router = APIRouter(prefix="/analytics", tags=["analytics"])

Service = Annotated[AnalyticsQueryService, Depends(get_analytics_query_service)]


@router.get("/products/{product_id}/sales")
async def get_product_sales(product_id: int, service: Service) -> ProductSalesResponse:
    """Get sales aggregates for a product.

    Raises:
        HTTPException: 404 if the product has no sales
    """
    sales = await service.get_product_sales(product_id)
    if sales is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Sales for product {product_id} not found",
        )
    return ProductSalesResponse.from_domain(sales)


@router.get("/products/{product_id}")
async def get_product(product_id: int, service: Service) -> ProductResponse:
    """Get the catalog entry for a product.

    Raises:
        HTTPException: 404 if the product is not in the catalog
    """
    product = await service.get_product(product_id)
    if product is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Product {product_id} not found",
        )
    return ProductResponse.from_domain(product)


@router.get("/categories/{category}/revenue")
async def get_category_revenue(
    category: str, service: Service
) -> CategoryRevenueResponse:
    """Get revenue and order count for a category (case-insensitive).

    Raises:
        HTTPException: 404 if the category has no orders
    """
    metrics = await service.get_category_metrics(category)
    if metrics is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Category {category} not found",
        )
    return CategoryRevenueResponse.from_domain(metrics)


@router.get("/customers/{customer_id}/lifetime-value")
async def get_customer_lifetime_value(
    customer_id: str, service: Service
) -> CustomerLifetimeValueResponse:
    """Get lifetime spend for a customer.

    Raises:
        HTTPException: 404 if the customer has no orders
    """
    value = await service.get_customer_lifetime_value(customer_id)
    if value is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Customer {customer_id} not found",
        )
    return CustomerLifetimeValueResponse.from_domain(value)


@router.get("/hourly-sales/{hour}")
async def get_hourly_sales(hour: datetime, service: Service) -> HourlySalesResponse:
    """Get sales for the UTC hour containing ``hour`` (ISO-8601).

    Raises:
        HTTPException: 404 if there were no orders in that hour
    """
    sales = await service.get_hourly_sales(hour)
    if sales is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Sales for hour {hour.isoformat()} not found",
        )
    return HourlySalesResponse.from_domain(sales)


@router.get("/sync-status")
async def get_sync_status(service: Service) -> SyncStatusResponse:
    """Get the staleness of the read model."""
    sync_status = await service.get_sync_status()
    return SyncStatusResponse.from_domain(sync_status)

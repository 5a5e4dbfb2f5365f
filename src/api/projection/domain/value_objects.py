"""Value objects for the projection domain.

An event's effect on the views is expressed as a set of contributions:
the amounts it adds to each additive aggregate. Contributions are pure
functions of the event, so applying the same event always adds the same
amounts, and the views are the sum of the contributions of every applied
event regardless of delivery order.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import StrEnum

from shared_kernel.events import (
    OrderCreated,
    PriceChanged,
    ProductCreated,
    hour_bucket,
)


class ProjectionOutcome(StrEnum):
    """Result of handing one event to the projector."""

    APPLIED = "applied"
    DUPLICATE = "duplicate"


@dataclass(frozen=True)
class ProductSalesContribution:
    """What one order line adds to a product's sales row."""

    product_id: int
    quantity: int
    revenue: Decimal
    orders: int = 1


@dataclass(frozen=True)
class CategoryContribution:
    """What one order adds to a category's metrics row.

    Revenue is the sum over the order's lines in that category; the order
    is counted once per distinct category.
    """

    category: str
    revenue: Decimal
    orders: int = 1


@dataclass(frozen=True)
class CustomerContribution:
    """What one order adds to a customer's lifetime value row."""

    customer_id: str
    spent: Decimal
    order_at: datetime
    orders: int = 1


@dataclass(frozen=True)
class HourlyContribution:
    """What one order adds to the sales row of its hour."""

    hour: datetime
    revenue: Decimal
    orders: int = 1


@dataclass(frozen=True)
class OrderContribution:
    """All view contributions of a single OrderCreated event."""

    products: tuple[ProductSalesContribution, ...]
    categories: tuple[CategoryContribution, ...]
    customer: CustomerContribution
    hourly: HourlyContribution

    @classmethod
    def from_event(cls, event: OrderCreated) -> OrderContribution:
        """Compute the contributions of an order.

        One product contribution per line item (a product listed on two
        lines counts two orders), one category contribution per distinct
        category, and a single customer and hourly contribution using the
        order total.
        """
        return cls(
            products=tuple(
                ProductSalesContribution(
                    product_id=item.product_id,
                    quantity=item.quantity,
                    revenue=item.revenue,
                )
                for item in event.items
            ),
            categories=tuple(
                CategoryContribution(category=category, revenue=revenue)
                for category, revenue in event.revenue_by_category().items()
            ),
            customer=CustomerContribution(
                customer_id=event.customer_id,
                spent=event.total,
                order_at=event.timestamp,
            ),
            hourly=HourlyContribution(
                hour=hour_bucket(event.timestamp),
                revenue=event.total,
            ),
        )


@dataclass(frozen=True)
class CatalogEntry:
    """Full catalog row state carried by a ProductCreated event."""

    product_id: int
    name: str
    category: str
    price: Decimal
    stock: int
    updated_at: datetime

    @classmethod
    def from_event(cls, event: ProductCreated) -> CatalogEntry:
        return cls(
            product_id=event.product_id,
            name=event.name,
            category=event.category,
            price=event.price,
            stock=event.stock,
            updated_at=event.timestamp,
        )


@dataclass(frozen=True)
class PriceUpdate:
    """New unit price for a catalog row, from a PriceChanged event."""

    product_id: int
    price: Decimal
    updated_at: datetime

    @classmethod
    def from_event(cls, event: PriceChanged) -> PriceUpdate:
        return cls(
            product_id=event.product_id,
            price=event.new_price,
            updated_at=event.timestamp,
        )

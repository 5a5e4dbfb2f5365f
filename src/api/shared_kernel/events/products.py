"""Product catalogue domain events."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal


@dataclass(frozen=True)
class ProductCreated:
    """Event raised when a product is added to the catalogue.

    Attributes:
        event_id: Globally unique identity of this event
        product_id: The id of the new product
        name: Display name of the product
        category: Category the product is listed under
        price: Initial unit price
        stock: Initial stock level
        timestamp: When the product was created (UTC)
    """

    event_id: str
    product_id: int
    name: str
    category: str
    price: Decimal
    stock: int
    timestamp: datetime


@dataclass(frozen=True)
class PriceChanged:
    """Event raised when a product's unit price is updated.

    Only emitted when the new price differs from the stored one.
    """

    event_id: str
    product_id: int
    old_price: Decimal
    new_price: Decimal
    timestamp: datetime

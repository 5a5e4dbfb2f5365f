"""Unit tests for projection domain value objects."""

from datetime import UTC, datetime
from decimal import Decimal

from projection.domain.value_objects import (
    CatalogEntry,
    OrderContribution,
    PriceUpdate,
)
from shared_kernel.events import LineItem, PriceChanged, ProductCreated


class TestOrderContribution:
    """Tests for deriving view contributions from an order."""

    def test_single_line_order(self, make_order):
        contribution = OrderContribution.from_event(make_order())

        assert len(contribution.products) == 1
        product = contribution.products[0]
        assert (product.product_id, product.quantity, product.revenue, product.orders) == (
            1,
            2,
            Decimal("20"),
            1,
        )
        assert [(c.category, c.revenue, c.orders) for c in contribution.categories] == [
            ("Books", Decimal("20"), 1)
        ]
        assert contribution.customer.customer_id == "c1"
        assert contribution.customer.spent == Decimal("20")
        assert contribution.hourly.hour == datetime(2024, 1, 1, 10, 0, tzinfo=UTC)

    def test_category_counted_once_per_order(self, make_order):
        """Two lines in one category add one order to that category."""
        order = make_order(
            items=(
                LineItem(1, 1, Decimal("10"), "Books"),
                LineItem(2, 2, Decimal("5"), "Books"),
                LineItem(3, 1, Decimal("7"), "Toys"),
            )
        )

        contribution = OrderContribution.from_event(order)

        assert {c.category: (c.revenue, c.orders) for c in contribution.categories} == {
            "Books": (Decimal("20"), 1),
            "Toys": (Decimal("7"), 1),
        }
        assert len(contribution.products) == 3

    def test_customer_and_hourly_use_order_total(self, make_order):
        """The write side's total may include amounts not on any line."""
        order = make_order(total=Decimal("23.50"))

        contribution = OrderContribution.from_event(order)

        assert contribution.customer.spent == Decimal("23.50")
        assert contribution.hourly.revenue == Decimal("23.50")
        assert contribution.products[0].revenue == Decimal("20")

    def test_order_without_lines_still_counts_for_customer(self, make_order):
        contribution = OrderContribution.from_event(
            make_order(items=(), total=Decimal("0"))
        )

        assert contribution.products == ()
        assert contribution.categories == ()
        assert contribution.customer.orders == 1
        assert contribution.hourly.orders == 1


class TestCatalogValueObjects:
    """Tests for catalog entries and price updates."""

    def test_catalog_entry_from_product_created(self):
        timestamp = datetime(2024, 2, 1, tzinfo=UTC)
        event = ProductCreated("p1", 3, "Widget", "Tools", Decimal("9.99"), 100, timestamp)

        entry = CatalogEntry.from_event(event)

        assert entry == CatalogEntry(3, "Widget", "Tools", Decimal("9.99"), 100, timestamp)

    def test_price_update_uses_new_price(self):
        timestamp = datetime(2024, 2, 2, tzinfo=UTC)
        event = PriceChanged("p2", 3, Decimal("9.99"), Decimal("12.50"), timestamp)

        update = PriceUpdate.from_event(event)

        assert update.price == Decimal("12.50")
        assert update.updated_at == timestamp

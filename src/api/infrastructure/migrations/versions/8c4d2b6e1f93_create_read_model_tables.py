"""create_read_model_tables

Create the materialized views, the processed-event ledger and the
sync status singleton in the read database.

Revision ID: 8c4d2b6e1f93
Revises:
Create Date: 2026-10-19 09:20:05.771302

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op


# revision identifiers, used by Alembic.
revision: str = "8c4d2b6e1f93"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = ("read",)
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "product_sales_view",
        sa.Column("product_id", sa.Integer(), nullable=False),
        sa.Column("total_quantity_sold", sa.Integer(), nullable=False, server_default="0"),
        sa.Column(
            "total_revenue", sa.Numeric(14, 2), nullable=False, server_default="0"
        ),
        sa.Column("order_count", sa.Integer(), nullable=False, server_default="0"),
        sa.PrimaryKeyConstraint("product_id"),
    )
    op.create_table(
        "category_metrics_view",
        sa.Column("category_name", sa.String(length=255), nullable=False),
        sa.Column(
            "total_revenue", sa.Numeric(14, 2), nullable=False, server_default="0"
        ),
        sa.Column("total_orders", sa.Integer(), nullable=False, server_default="0"),
        sa.PrimaryKeyConstraint("category_name"),
    )
    op.create_table(
        "customer_ltv_view",
        sa.Column("customer_id", sa.String(length=255), nullable=False),
        sa.Column("total_spent", sa.Numeric(14, 2), nullable=False, server_default="0"),
        sa.Column("order_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("last_order_date", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("customer_id"),
    )
    op.create_table(
        "hourly_sales_view",
        sa.Column("hour_timestamp", sa.DateTime(timezone=True), nullable=False),
        sa.Column("total_orders", sa.Integer(), nullable=False, server_default="0"),
        sa.Column(
            "total_revenue", sa.Numeric(14, 2), nullable=False, server_default="0"
        ),
        sa.PrimaryKeyConstraint("hour_timestamp"),
    )
    op.create_table(
        "products_read_view",
        sa.Column("product_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=True),
        sa.Column("category", sa.String(length=255), nullable=True),
        sa.Column("price", sa.Numeric(14, 2), nullable=False),
        sa.Column("stock", sa.Integer(), nullable=True),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("NOW()"),
        ),
        sa.PrimaryKeyConstraint("product_id"),
    )
    # Case-insensitive category lookups
    op.create_index(
        "idx_category_metrics_lower_name",
        "category_metrics_view",
        [sa.text("lower(category_name)")],
        unique=False,
    )

    sync_status = op.create_table(
        "sync_status",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column(
            "last_processed_event_timestamp", sa.DateTime(timezone=True), nullable=True
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.bulk_insert(sync_status, [{"id": 1, "last_processed_event_timestamp": None}])

    op.create_table(
        "processed_events",
        sa.Column("event_id", sa.String(length=255), nullable=False),
        sa.Column(
            "processed_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("NOW()"),
        ),
        sa.PrimaryKeyConstraint("event_id"),
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table("processed_events")
    op.drop_table("sync_status")
    op.drop_index("idx_category_metrics_lower_name", table_name="category_metrics_view")
    op.drop_table("products_read_view")
    op.drop_table("hourly_sales_view")
    op.drop_table("customer_ltv_view")
    op.drop_table("category_metrics_view")
    op.drop_table("product_sales_view")

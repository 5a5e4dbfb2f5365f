"""create_outbox_table

Create the outbox table for the transactional outbox pattern.
This table stores domain events written in the same transaction as the
state change they announce, until the relay publishes them.

Revision ID: 3f1a9c2e7b40
Revises:
Create Date: 2026-10-19 09:12:41.220931

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op


# revision identifiers, used by Alembic.
revision: str = "3f1a9c2e7b40"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = ("write",)
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "outbox",
        sa.Column("id", sa.UUID(), nullable=False),
        sa.Column("topic", sa.String(length=255), nullable=False),  # queue name
        sa.Column("payload", sa.JSON(), nullable=False),  # wire-format event
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("NOW()"),
        ),
        sa.Column(
            "published_at", sa.DateTime(timezone=True), nullable=True
        ),  # NULL until relayed
        sa.PrimaryKeyConstraint("id"),
    )
    # Index for efficiently fetching unpublished records ordered by creation time
    op.create_index(
        "idx_outbox_unpublished",
        "outbox",
        ["created_at"],
        unique=False,
        postgresql_where=sa.text("published_at IS NULL"),
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index("idx_outbox_unpublished", table_name="outbox")
    op.drop_table("outbox")

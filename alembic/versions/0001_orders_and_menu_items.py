from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect
from sqlalchemy.dialects import postgresql


revision = "0001_orders_and_menu_items"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    bind = op.get_bind()
    inspector = inspect(bind)
    tables = set(inspector.get_table_names())

    if "orders" not in tables:
        op.create_table(
            "orders",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("table_id", sa.Integer(), nullable=False),
            sa.Column("items", postgresql.JSONB().with_variant(sa.JSON(), "sqlite"), nullable=False),
            sa.Column("total", sa.Float(), nullable=False, server_default="0"),
            sa.Column("status", sa.String(length=20), nullable=False, server_default="pending"),
            sa.Column("paid", sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
            sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        )
        op.create_index("ix_orders_table_id", "orders", ["table_id"], unique=False)
        op.create_index("ix_orders_status", "orders", ["status"], unique=False)

    if "menu_items" not in tables:
        op.create_table(
            "menu_items",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("name", sa.String(length=120), nullable=False),
            sa.Column("price", sa.Float(), nullable=False),
            sa.Column("description", sa.Text(), nullable=True),
            sa.Column("image_url", sa.String(length=500), nullable=True),
            sa.Column("available", sa.Boolean(), nullable=False, server_default=sa.true()),
            sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        )
        op.create_index("ix_menu_items_available", "menu_items", ["available"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_menu_items_available", table_name="menu_items")
    op.drop_table("menu_items")
    op.drop_index("ix_orders_status", table_name="orders")
    op.drop_index("ix_orders_table_id", table_name="orders")
    op.drop_table("orders")

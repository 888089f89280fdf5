"""initial schema

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-19

"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision = "0001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps(with_updated_at: bool = True) -> list[sa.Column]:
    columns = [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        )
    ]
    if with_updated_at:
        columns.append(
            sa.Column(
                "updated_at",
                sa.DateTime(timezone=True),
                server_default=sa.text("now()"),
                nullable=False,
            )
        )
    return columns


def upgrade() -> None:
    op.create_table(
        "restaurants",
        sa.Column("id", sa.String(length=50), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column(
            "status",
            sa.String(length=20),
            server_default=sa.text("'active'"),
            nullable=False,
        ),
        sa.Column(
            "is_open", sa.Boolean(), server_default=sa.text("true"), nullable=False
        ),
        sa.Column(
            "auto_open_close",
            sa.Boolean(),
            server_default=sa.text("true"),
            nullable=False,
        ),
        sa.Column(
            "opening_hours", postgresql.JSONB(astext_type=sa.Text()), nullable=True
        ),
        sa.Column(
            "timezone",
            sa.String(length=64),
            server_default=sa.text("'Asia/Kolkata'"),
            nullable=False,
        ),
        sa.Column("last_status_update", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.CheckConstraint(
            "status IN ('active', 'inactive', 'suspended', 'closed')",
            name="valid_restaurant_status",
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "idx_restaurants_auto_open_close",
        "restaurants",
        ["auto_open_close", "status"],
        unique=False,
    )

    op.create_table(
        "products",
        sa.Column("id", sa.String(length=50), nullable=False),
        sa.Column("restaurant_id", sa.String(length=50), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("price", sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column(
            "is_available",
            sa.Boolean(),
            server_default=sa.text("true"),
            nullable=False,
        ),
        sa.Column(
            "tags",
            postgresql.JSONB(astext_type=sa.Text()),
            server_default=sa.text("'[]'::jsonb"),
            nullable=False,
        ),
        *_timestamps(with_updated_at=False),
        sa.ForeignKeyConstraint(
            ["restaurant_id"], ["restaurants.id"], ondelete="CASCADE"
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "idx_products_restaurant_id", "products", ["restaurant_id"], unique=False
    )

    op.create_table(
        "time_range_product_groups",
        sa.Column("id", sa.BigInteger(), sa.Identity(always=False), nullable=False),
        sa.Column("restaurant_id", sa.String(length=50), nullable=False),
        sa.Column("group_name", sa.String(length=100), nullable=False),
        sa.Column("start_time", sa.String(length=5), nullable=False),
        sa.Column("end_time", sa.String(length=5), nullable=False),
        sa.Column(
            "is_active", sa.Boolean(), server_default=sa.text("true"), nullable=False
        ),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ["restaurant_id"], ["restaurants.id"], ondelete="CASCADE"
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "idx_time_groups_restaurant_id",
        "time_range_product_groups",
        ["restaurant_id"],
        unique=False,
    )

    op.create_table(
        "time_range_product_group_items",
        sa.Column("id", sa.BigInteger(), sa.Identity(always=False), nullable=False),
        sa.Column("group_id", sa.BigInteger(), nullable=False),
        sa.Column("product_id", sa.String(length=50), nullable=False),
        *_timestamps(with_updated_at=False),
        sa.ForeignKeyConstraint(
            ["group_id"], ["time_range_product_groups.id"], ondelete="CASCADE"
        ),
        sa.ForeignKeyConstraint(["product_id"], ["products.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("group_id", "product_id", name="uq_time_group_product"),
    )
    op.create_index(
        "idx_time_group_items_product_id",
        "time_range_product_group_items",
        ["product_id"],
        unique=False,
    )

    op.create_table(
        "orders",
        sa.Column("id", sa.String(length=50), nullable=False),
        sa.Column("user_id", sa.String(length=50), nullable=False),
        sa.Column("restaurant_id", sa.String(length=50), nullable=False),
        sa.Column("cart_id", sa.String(length=50), nullable=False),
        sa.Column(
            "order_status",
            sa.String(length=20),
            server_default=sa.text("'pending'"),
            nullable=False,
        ),
        sa.Column(
            "order_logs",
            postgresql.JSONB(astext_type=sa.Text()),
            server_default=sa.text("'[]'::jsonb"),
            nullable=False,
        ),
        sa.Column(
            "total_amount",
            sa.Numeric(precision=10, scale=2),
            server_default=sa.text("0"),
            nullable=False,
        ),
        sa.Column("customer_name", sa.String(length=255), nullable=True),
        sa.Column("customer_contact", sa.String(length=30), nullable=True),
        sa.Column(
            "delivery_address", postgresql.JSONB(astext_type=sa.Text()), nullable=True
        ),
        *_timestamps(),
        sa.CheckConstraint(
            "order_status IN ('pending', 'confirmed', 'preparing', 'dispatched', "
            "'delivered', 'cancelled')",
            name="valid_order_status",
        ),
        sa.ForeignKeyConstraint(
            ["restaurant_id"], ["restaurants.id"], ondelete="RESTRICT"
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "idx_orders_restaurant_id", "orders", ["restaurant_id"], unique=False
    )

    op.create_table(
        "porter_deliveries",
        sa.Column("id", sa.BigInteger(), sa.Identity(always=False), nullable=False),
        sa.Column("order_id", sa.String(length=50), nullable=False),
        sa.Column("porter_order_id", sa.String(length=100), nullable=False),
        sa.Column(
            "status",
            sa.String(length=50),
            server_default=sa.text("'created'"),
            nullable=False,
        ),
        sa.Column(
            "is_active", sa.Boolean(), server_default=sa.text("true"), nullable=False
        ),
        sa.Column("partner_name", sa.String(length=255), nullable=True),
        sa.Column("partner_phone_number", sa.String(length=30), nullable=True),
        sa.Column("vehicle_number", sa.String(length=30), nullable=True),
        sa.Column("tracking_url", sa.String(length=500), nullable=True),
        sa.Column("estimated_delivery_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("pickup_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("actual_delivery_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "porter_response", postgresql.JSONB(astext_type=sa.Text()), nullable=True
        ),
        *_timestamps(),
        sa.ForeignKeyConstraint(["order_id"], ["orders.id"], ondelete="RESTRICT"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("porter_order_id"),
    )
    op.create_index(
        "idx_porter_deliveries_order_id",
        "porter_deliveries",
        ["order_id"],
        unique=False,
    )
    op.create_index(
        "uq_porter_deliveries_active_order",
        "porter_deliveries",
        ["order_id"],
        unique=True,
        postgresql_where=sa.text("is_active"),
    )

    op.create_table(
        "refunds",
        sa.Column("id", sa.String(length=50), nullable=False),
        sa.Column("order_id", sa.String(length=50), nullable=False),
        sa.Column("amount", sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column("reason", sa.Text(), nullable=True),
        sa.Column(
            "status",
            sa.String(length=20),
            server_default=sa.text("'pending'"),
            nullable=False,
        ),
        sa.Column("admin_comment", sa.Text(), nullable=True),
        sa.Column("processed_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(with_updated_at=False),
        sa.CheckConstraint("amount > 0", name="positive_refund_amount"),
        sa.CheckConstraint(
            "status IN ('pending', 'approved', 'rejected', 'processed', 'failed')",
            name="valid_refund_status",
        ),
        sa.CheckConstraint(
            "(status = 'processed' AND processed_at IS NOT NULL) "
            "OR (status != 'processed')",
            name="processed_at_consistency",
        ),
        sa.ForeignKeyConstraint(["order_id"], ["orders.id"], ondelete="RESTRICT"),
        sa.PrimaryKeyConstraint("id"),
    )


def downgrade() -> None:
    op.drop_table("refunds")
    op.drop_index("uq_porter_deliveries_active_order", table_name="porter_deliveries")
    op.drop_index("idx_porter_deliveries_order_id", table_name="porter_deliveries")
    op.drop_table("porter_deliveries")
    op.drop_index("idx_orders_restaurant_id", table_name="orders")
    op.drop_table("orders")
    op.drop_index(
        "idx_time_group_items_product_id", table_name="time_range_product_group_items"
    )
    op.drop_table("time_range_product_group_items")
    op.drop_index(
        "idx_time_groups_restaurant_id", table_name="time_range_product_groups"
    )
    op.drop_table("time_range_product_groups")
    op.drop_index("idx_products_restaurant_id", table_name="products")
    op.drop_table("products")
    op.drop_index("idx_restaurants_auto_open_close", table_name="restaurants")
    op.drop_table("restaurants")

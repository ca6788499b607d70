"""Initial schema: account collections, menu, orders, deliveries, rides, inbox.

Revision ID: 001
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa


revision = "001"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps(*, updated: bool = False) -> list[sa.Column]:
    columns = [sa.Column("created_at", sa.DateTime(timezone=True), nullable=True)]
    if updated:
        columns.append(
            sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True)
        )
    return columns


def _account(name: str, *extra: sa.Column) -> None:
    op.create_table(
        name,
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("name", sa.String(120), nullable=False, server_default=""),
        *extra,
        *_timestamps(),
    )
    op.create_index(f"ix_{name}_email", name, ["email"])


def upgrade() -> None:
    # ── accounts ──────────────────────────────────────────────────────
    _account(
        "customers",
        sa.Column("phone", sa.String(40), nullable=True),
        sa.Column("address", sa.String(500), nullable=True),
        sa.Column("photo_url", sa.String(500), nullable=True),
    )
    _account(
        "drivers",
        sa.Column("phone", sa.String(40), nullable=True),
        sa.Column("vehicle", sa.String(120), nullable=True),
        sa.Column("rating", sa.Float, nullable=True),
        sa.Column("photo_url", sa.String(500), nullable=True),
    )
    _account(
        "partners",
        sa.Column("phone", sa.String(40), nullable=True),
        sa.Column("address", sa.String(500), nullable=False, server_default=""),
        sa.Column("category", sa.String(80), nullable=True),
        sa.Column("rating", sa.Float, nullable=True),
        sa.Column("logo_url", sa.String(500), nullable=True),
    )
    _account("admins")

    # ── menu_items ────────────────────────────────────────────────────
    op.create_table(
        "menu_items",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=False),
        sa.Column(
            "partner_id", sa.Integer, sa.ForeignKey("partners.id"), nullable=False
        ),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("price", sa.Float, nullable=False, server_default="0"),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("category", sa.String(80), nullable=True),
        *_timestamps(),
    )
    op.create_index("idx_menu_items_partner", "menu_items", ["partner_id"])

    # ── orders ────────────────────────────────────────────────────────
    op.create_table(
        "orders",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=False),
        sa.Column(
            "customer_id", sa.Integer, sa.ForeignKey("customers.id"), nullable=False
        ),
        sa.Column(
            "partner_id", sa.Integer, sa.ForeignKey("partners.id"), nullable=False
        ),
        sa.Column("items", sa.JSON, nullable=False),
        sa.Column("total", sa.Float, nullable=False, server_default="0"),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("delivery_address", sa.String(500), nullable=True),
        sa.Column("payment_method", sa.String(40), nullable=True),
        sa.Column("reason", sa.Text, nullable=True),
        *_timestamps(updated=True),
    )
    op.create_index("idx_orders_customer", "orders", ["customer_id"])
    op.create_index("idx_orders_partner", "orders", ["partner_id"])
    op.create_index("idx_orders_status", "orders", ["status"])

    # ── deliveries ────────────────────────────────────────────────────
    op.create_table(
        "deliveries",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=False),
        sa.Column(
            "order_id",
            sa.Integer,
            sa.ForeignKey("orders.id"),
            nullable=False,
            unique=True,
        ),
        sa.Column("status", sa.String(20), nullable=False, server_default="ready"),
        sa.Column("pickup_address", sa.String(500), nullable=False, server_default=""),
        sa.Column("drop_address", sa.String(500), nullable=True),
        sa.Column(
            "driver_id", sa.Integer, sa.ForeignKey("drivers.id"), nullable=True
        ),
        sa.Column("reason", sa.Text, nullable=True),
        sa.Column("collected_amount", sa.Float, nullable=True),
        *_timestamps(updated=True),
    )
    op.create_index("idx_deliveries_status", "deliveries", ["status"])
    op.create_index("idx_deliveries_driver", "deliveries", ["driver_id"])

    # ── rides ─────────────────────────────────────────────────────────
    op.create_table(
        "rides",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=False),
        sa.Column(
            "customer_id", sa.Integer, sa.ForeignKey("customers.id"), nullable=False
        ),
        sa.Column("pickup_location", sa.JSON, nullable=False),
        sa.Column("drop_location", sa.JSON, nullable=False),
        sa.Column("vehicle_type", sa.String(40), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column(
            "driver_id", sa.Integer, sa.ForeignKey("drivers.id"), nullable=True
        ),
        sa.Column("reason", sa.Text, nullable=True),
        sa.Column("fare_collected", sa.Float, nullable=True),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(updated=True),
    )
    op.create_index("idx_rides_status", "rides", ["status"])
    op.create_index("idx_rides_customer", "rides", ["customer_id"])
    op.create_index("idx_rides_driver", "rides", ["driver_id"])

    # ── notifications ─────────────────────────────────────────────────
    op.create_table(
        "notifications",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=False),
        sa.Column("user_id", sa.Integer, nullable=False),
        sa.Column("user_role", sa.String(20), nullable=False),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("message", sa.Text, nullable=True),
        sa.Column("read", sa.Boolean, nullable=False, server_default=sa.false()),
        *_timestamps(),
    )
    op.create_index(
        "idx_notifications_user", "notifications", ["user_id", "user_role"]
    )


def downgrade() -> None:
    op.drop_table("notifications")
    op.drop_table("rides")
    op.drop_table("deliveries")
    op.drop_table("orders")
    op.drop_table("menu_items")
    for name in ("admins", "partners", "drivers", "customers"):
        op.drop_table(name)

"""
SQLAlchemy ORM models -- one table per collection.

Tables
------
* ``customers`` / ``drivers`` / ``partners`` / ``admins`` -- four disjoint
  account collections with overlapping id spaces
* ``menu_items``    -- partner-owned catalogue
* ``orders``        -- merchant purchases; ``items`` is a JSON snapshot
* ``deliveries``    -- courier legs, one per order
* ``rides``         -- point-to-point transport requests
* ``notifications`` -- per-account inbox, owned by ``(user_id, user_role)``

Ids are assigned by the repositories as ``max(id) + 1``, so no column uses
database autoincrement.

Indexes
-------
* **B-Tree** on ``status`` and owner columns used by pool and inbox listings.
"""

from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)

from .database import Base
from src.domain.enums import DeliveryStatus, OrderStatus, RideStatus, Role


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _status(enum_cls):
    return Enum(
        enum_cls,
        native_enum=False,
        length=20,
        values_callable=lambda members: [m.value for m in members],
    )


# ── Accounts ──────────────────────────────────────────────────────────


class CustomerModel(Base):
    __tablename__ = "customers"

    id = Column(Integer, primary_key=True, autoincrement=False)
    email = Column(String(255), nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    name = Column(String(120), nullable=False, default="")
    phone = Column(String(40), nullable=True)
    address = Column(String(500), nullable=True)
    photo_url = Column(String(500), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)


class DriverModel(Base):
    __tablename__ = "drivers"

    id = Column(Integer, primary_key=True, autoincrement=False)
    email = Column(String(255), nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    name = Column(String(120), nullable=False, default="")
    phone = Column(String(40), nullable=True)
    vehicle = Column(String(120), nullable=True)
    rating = Column(Float, default=5.0)
    photo_url = Column(String(500), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)


class PartnerModel(Base):
    __tablename__ = "partners"

    id = Column(Integer, primary_key=True, autoincrement=False)
    email = Column(String(255), nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    name = Column(String(120), nullable=False, default="")
    phone = Column(String(40), nullable=True)
    address = Column(String(500), nullable=False, default="")
    category = Column(String(80), nullable=True)
    rating = Column(Float, default=5.0)
    logo_url = Column(String(500), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)


class AdminModel(Base):
    __tablename__ = "admins"

    id = Column(Integer, primary_key=True, autoincrement=False)
    email = Column(String(255), nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    name = Column(String(120), nullable=False, default="")
    created_at = Column(DateTime(timezone=True), default=utcnow)


ACCOUNT_MODELS = {
    Role.CUSTOMER: CustomerModel,
    Role.DRIVER: DriverModel,
    Role.PARTNER: PartnerModel,
    Role.ADMIN: AdminModel,
}


# ── Resources ─────────────────────────────────────────────────────────


class MenuItemModel(Base):
    __tablename__ = "menu_items"

    id = Column(Integer, primary_key=True, autoincrement=False)
    partner_id = Column(Integer, ForeignKey("partners.id"), nullable=False)
    name = Column(String(200), nullable=False)
    price = Column(Float, nullable=False, default=0.0)
    description = Column(Text, nullable=True)
    category = Column(String(80), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)

    __table_args__ = (Index("idx_menu_items_partner", "partner_id"),)


class OrderModel(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, autoincrement=False)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False)
    partner_id = Column(Integer, ForeignKey("partners.id"), nullable=False)

    # Denormalized snapshot: [{menuId, name, price, quantity}, ...]
    items = Column(JSON, nullable=False, default=list)
    total = Column(Float, nullable=False, default=0.0)
    status = Column(_status(OrderStatus), default=OrderStatus.PENDING, nullable=False)
    delivery_address = Column(String(500), nullable=True)
    payment_method = Column(String(40), nullable=True)
    reason = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )

    __table_args__ = (
        Index("idx_orders_customer", "customer_id"),
        Index("idx_orders_partner", "partner_id"),
        Index("idx_orders_status", "status"),
    )


class DeliveryModel(Base):
    __tablename__ = "deliveries"

    id = Column(Integer, primary_key=True, autoincrement=False)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, unique=True)
    status = Column(
        _status(DeliveryStatus), default=DeliveryStatus.READY, nullable=False
    )
    # Frozen copy of the partner's address at order time
    pickup_address = Column(String(500), nullable=False, default="")
    drop_address = Column(String(500), nullable=True)
    driver_id = Column(Integer, ForeignKey("drivers.id"), nullable=True)
    reason = Column(Text, nullable=True)
    collected_amount = Column(Float, nullable=True)

    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )

    __table_args__ = (
        Index("idx_deliveries_status", "status"),
        Index("idx_deliveries_driver", "driver_id"),
    )


class RideModel(Base):
    __tablename__ = "rides"

    id = Column(Integer, primary_key=True, autoincrement=False)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False)

    # Location objects: {address, lat, lng}
    pickup_location = Column(JSON, nullable=False)
    drop_location = Column(JSON, nullable=False)
    vehicle_type = Column(String(40), nullable=False)

    status = Column(_status(RideStatus), default=RideStatus.PENDING, nullable=False)
    driver_id = Column(Integer, ForeignKey("drivers.id"), nullable=True)
    reason = Column(Text, nullable=True)
    fare_collected = Column(Float, nullable=True)
    started_at = Column(DateTime(timezone=True), nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )

    __table_args__ = (
        Index("idx_rides_status", "status"),
        Index("idx_rides_customer", "customer_id"),
        Index("idx_rides_driver", "driver_id"),
    )


class NotificationModel(Base):
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, autoincrement=False)
    user_id = Column(Integer, nullable=False)
    user_role = Column(_status(Role), nullable=False)
    title = Column(String(200), nullable=False)
    message = Column(Text, nullable=True)
    read = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow)

    __table_args__ = (Index("idx_notifications_user", "user_id", "user_role"),)

"""Domain enumerations and state-transition rules."""

import enum


class Role(str, enum.Enum):
    CUSTOMER = "customer"
    DRIVER = "driver"
    PARTNER = "partner"
    ADMIN = "admin"

    @property
    def collection(self) -> str:
        return f"{self.value}s"

    @classmethod
    def from_collection(cls, collection: str) -> "Role":
        for role in cls:
            if role.collection == collection:
                return role
        raise ValueError(f"Unknown account collection: {collection}")


class OrderStatus(str, enum.Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    READY = "ready"
    PICKED_UP = "picked_up"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    REJECTED = "rejected"


class DeliveryStatus(str, enum.Enum):
    READY = "ready"
    ACCEPTED = "accepted"
    ONGOING = "ongoing"
    COMPLETED = "completed"
    REJECTED = "rejected"


class RideStatus(str, enum.Enum):
    PENDING = "pending"
    ONGOING = "ongoing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    REJECTED = "rejected"


# State machines: map current status -> set of valid next statuses

ORDER_TRANSITIONS: dict[OrderStatus, set[OrderStatus]] = {
    OrderStatus.PENDING: {
        OrderStatus.ACCEPTED,
        OrderStatus.REJECTED,
        OrderStatus.CANCELLED,
        OrderStatus.PICKED_UP,
    },
    OrderStatus.ACCEPTED: {
        OrderStatus.READY,
        OrderStatus.CANCELLED,
        OrderStatus.PICKED_UP,
    },
    OrderStatus.READY: {OrderStatus.CANCELLED, OrderStatus.PICKED_UP},
    OrderStatus.PICKED_UP: {OrderStatus.DELIVERED},
    OrderStatus.DELIVERED: set(),
    OrderStatus.CANCELLED: set(),
    OrderStatus.REJECTED: set(),
}

DELIVERY_TRANSITIONS: dict[DeliveryStatus, set[DeliveryStatus]] = {
    DeliveryStatus.READY: {DeliveryStatus.ACCEPTED, DeliveryStatus.REJECTED},
    DeliveryStatus.ACCEPTED: {DeliveryStatus.ONGOING},
    DeliveryStatus.ONGOING: {DeliveryStatus.COMPLETED},
    DeliveryStatus.COMPLETED: set(),
    DeliveryStatus.REJECTED: set(),
}

# Starting a ride keeps it ONGOING and stamps ``started_at``.
RIDE_TRANSITIONS: dict[RideStatus, set[RideStatus]] = {
    RideStatus.PENDING: {
        RideStatus.ONGOING,
        RideStatus.REJECTED,
        RideStatus.CANCELLED,
    },
    RideStatus.ONGOING: {
        RideStatus.ONGOING,
        RideStatus.COMPLETED,
        RideStatus.CANCELLED,
    },
    RideStatus.COMPLETED: set(),
    RideStatus.CANCELLED: set(),
    RideStatus.REJECTED: set(),
}

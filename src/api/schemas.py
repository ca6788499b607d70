"""Pydantic request / response schemas for the REST API.

All payloads use camelCase on the wire (``partnerId``, ``deliveryAddress``)
and accept snake_case field names as well.  Update payloads forbid unknown
fields so that ``id``, ``role``, ``email`` and ownership columns cannot be
smuggled into a record.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel

from src.domain.entities import Location
from src.domain.enums import DeliveryStatus, OrderStatus, RideStatus


class ApiModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )


class UpdateModel(ApiModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
    )


# ── Auth ──────────────────────────────────────────────────────────────


class LoginRequest(ApiModel):
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=128)


class TokenResponse(ApiModel):
    token: str
    token_type: str = "bearer"
    expires_in: int  # seconds


class RegisterBase(UpdateModel):
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)
    name: str = Field(..., min_length=1, max_length=120)
    phone: Optional[str] = Field(None, max_length=40)


class CustomerRegister(RegisterBase):
    address: Optional[str] = None


class DriverRegister(RegisterBase):
    vehicle: Optional[str] = None


class PartnerRegister(RegisterBase):
    address: str = Field(..., min_length=1, max_length=500)
    category: Optional[str] = None


# ── Profiles / accounts ───────────────────────────────────────────────


# Absent fields are left unchanged; `null` is only accepted where the column
# is nullable.
class CustomerProfileUpdate(UpdateModel):
    name: str = Field(None, min_length=1, max_length=120)
    phone: Optional[str] = None
    address: Optional[str] = None
    photo_url: Optional[str] = None


class DriverProfileUpdate(UpdateModel):
    name: str = Field(None, min_length=1, max_length=120)
    phone: Optional[str] = None
    vehicle: Optional[str] = None
    photo_url: Optional[str] = None


class PartnerProfileUpdate(UpdateModel):
    name: str = Field(None, min_length=1, max_length=120)
    phone: Optional[str] = None
    address: str = Field(None, min_length=1, max_length=500)
    category: Optional[str] = None
    logo_url: Optional[str] = None


class AdminProfileUpdate(UpdateModel):
    name: str = Field(None, min_length=1, max_length=120)


class AccountResponse(ApiModel):
    id: int
    email: str
    name: str
    created_at: Optional[datetime] = None


class CustomerResponse(AccountResponse):
    phone: Optional[str] = None
    address: Optional[str] = None
    photo_url: Optional[str] = None


class DriverResponse(AccountResponse):
    phone: Optional[str] = None
    vehicle: Optional[str] = None
    rating: Optional[float] = None
    photo_url: Optional[str] = None


class PartnerResponse(AccountResponse):
    phone: Optional[str] = None
    address: Optional[str] = None
    category: Optional[str] = None
    rating: Optional[float] = None
    logo_url: Optional[str] = None


class PartnerListing(ApiModel):
    id: int
    name: str
    address: Optional[str] = None
    category: Optional[str] = None
    rating: Optional[float] = None
    logo_url: Optional[str] = None


class DashboardResponse(ApiModel):
    customers: int
    drivers: int
    partners: int
    orders: int
    rides: int
    deliveries: int
    orders_by_status: dict[str, int] = {}
    rides_by_status: dict[str, int] = {}


# ── Menu ──────────────────────────────────────────────────────────────


class MenuItemCreate(ApiModel):
    name: Optional[str] = None
    price: Any = 0  # coerced leniently, malformed -> 0
    description: Optional[str] = None
    category: Optional[str] = None


class MenuItemUpdate(UpdateModel):
    name: Optional[str] = None
    price: Any = None
    description: Optional[str] = None
    category: Optional[str] = None


class MenuItemResponse(ApiModel):
    id: int
    partner_id: int
    name: str
    price: float
    description: Optional[str] = None
    category: Optional[str] = None


# ── Orders ────────────────────────────────────────────────────────────


class OrderItemIn(ApiModel):
    menu_id: Any = None
    quantity: Any = 1


class OrderCreateRequest(ApiModel):
    partner_id: Optional[int] = None
    items: list[OrderItemIn] = []
    delivery_address: Optional[str] = None
    payment_method: Optional[str] = None


class ReasonRequest(ApiModel):
    reason: Optional[str] = Field(None, max_length=500)


class OrderSummary(ApiModel):
    id: int
    partner_id: int
    total: float
    status: OrderStatus
    delivery_id: int
    created_at: Optional[datetime] = None


class CustomerOrderBrief(ApiModel):
    id: int
    partner_name: str
    total: float
    status: OrderStatus
    created_at: Optional[datetime] = None


class PartnerOrderBrief(ApiModel):
    id: int
    customer_id: int
    total: float
    status: OrderStatus
    created_at: Optional[datetime] = None


class OrderLine(ApiModel):
    menu_id: Optional[int] = None
    name: str
    price: float
    quantity: float


class OrderDetail(ApiModel):
    id: int
    customer_id: int
    partner_id: int
    items: list[OrderLine]
    total: float
    status: OrderStatus
    delivery_address: Optional[str] = None
    payment_method: Optional[str] = None
    reason: Optional[str] = None
    delivery_id: Optional[int] = None
    created_at: Optional[datetime] = None


class StatusMessage(ApiModel):
    id: int
    status: str
    message: str


# ── Deliveries ────────────────────────────────────────────────────────


class CompleteDeliveryRequest(ApiModel):
    collected_amount: Any = None


class DeliveryResponse(ApiModel):
    id: int
    order_id: int
    status: DeliveryStatus
    pickup_address: str
    drop_address: Optional[str] = None
    driver_id: Optional[int] = None
    reason: Optional[str] = None
    collected_amount: Optional[float] = None


# ── Rides ─────────────────────────────────────────────────────────────


class LocationIn(ApiModel):
    address: str = ""
    lat: Optional[float] = Field(None, ge=-90, le=90)
    lng: Optional[float] = Field(None, ge=-180, le=180)

    def to_location(self) -> Location:
        return Location(address=self.address.strip(), lat=self.lat, lng=self.lng)


class RideCreateRequest(ApiModel):
    pickup: Optional[LocationIn] = None
    drop: Optional[LocationIn] = None
    vehicle_type: Optional[str] = None


class CompleteRideRequest(ApiModel):
    fare_collected: Any = None


class RideSummary(ApiModel):
    """Reduced projection: addresses only, never the full location objects."""

    id: int
    pickup: str
    drop: str
    vehicle_type: str
    status: RideStatus
    created_at: Optional[datetime] = None

    @classmethod
    def from_ride(cls, ride) -> "RideSummary":
        return cls(
            id=ride.id,
            pickup=(ride.pickup_location or {}).get("address", ""),
            drop=(ride.drop_location or {}).get("address", ""),
            vehicle_type=ride.vehicle_type,
            status=ride.status,
            created_at=ride.created_at,
        )


class LocationOut(ApiModel):
    address: str
    lat: Optional[float] = None
    lng: Optional[float] = None


class DriverInfo(ApiModel):
    id: int
    name: str
    phone: Optional[str] = None
    vehicle: Optional[str] = None


class RideDetail(ApiModel):
    id: int
    customer_id: int
    pickup: LocationOut
    drop: LocationOut
    vehicle_type: str
    status: RideStatus
    driver_id: Optional[int] = None
    driver: Optional[DriverInfo] = None
    reason: Optional[str] = None
    fare_collected: Optional[float] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None


# ── Notifications ─────────────────────────────────────────────────────


class NotificationResponse(ApiModel):
    id: int
    title: str
    message: Optional[str] = None
    read: bool
    created_at: Optional[datetime] = None


# ── Misc ──────────────────────────────────────────────────────────────


class HealthResponse(BaseModel):
    status: str = "ok"


class ErrorResponse(BaseModel):
    detail: Any

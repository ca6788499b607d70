"""
Domain value objects and lifecycle helpers.

Patterns used
-------------
- **State Pattern** via ``ensure_transition``: every lifecycle service
  validates a status change against its transition table before writing.
- ``Identity`` is the resolved caller, produced by credential verification
  and consumed by the authorization guard.
- ``LineItem`` is the denormalized order line frozen at creation time.
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from typing import Any, Mapping, Optional

from .enums import Role
from .errors import InvalidStateTransition


# ── Value Objects ─────────────────────────────────────────────────────


@dataclass(frozen=True)
class Identity:
    subject_id: int
    role: Role
    email: str


@dataclass(frozen=True)
class Location:
    address: str
    lat: Optional[float] = None
    lng: Optional[float] = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class LineItem:
    menu_id: Optional[int]
    name: str
    price: float
    quantity: float

    @property
    def subtotal(self) -> float:
        return self.price * self.quantity

    def to_dict(self) -> dict[str, Any]:
        return {
            "menuId": self.menu_id,
            "name": self.name,
            "price": self.price,
            "quantity": self.quantity,
        }


UNKNOWN_ITEM_NAME = "Unknown"


# ── Helpers ───────────────────────────────────────────────────────────


def coerce_number(value: Any, default: float = 0.0) -> float:
    """Lenient numeric parsing: anything unparseable becomes *default*."""
    if value is None or isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if math.isnan(number) or math.isinf(number):
        return default
    return number


def ensure_transition(
    transitions: Mapping[Any, set[Any]], current: Any, new_status: Any
) -> None:
    """Raise if *current* -> *new_status* is not in *transitions*."""
    allowed = transitions.get(current, set())
    if new_status not in allowed:
        raise InvalidStateTransition(
            f"Cannot transition from {_label(current)} to {_label(new_status)}"
        )


def _label(status: Any) -> str:
    return status.value if hasattr(status, "value") else str(status)

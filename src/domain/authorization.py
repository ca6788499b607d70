"""
Authorization guard.

Two checks, always in this order:

1. **Role** -- the caller's role must be one of the roles the operation
   declares.  There is no hierarchy and admins get no override.
2. **Ownership** -- for resource-scoped operations, after the resource has
   been loaded (so a missing id is ``NotFound`` first), the owner field that
   applies to the caller's role must equal the caller's subject id.

Orders are owned twice (``customer_id`` for customers, ``partner_id`` for
partners), so ownership is described per endpoint as a role -> field map.
"""

from __future__ import annotations

from typing import Any, Mapping

from .entities import Identity
from .enums import Role
from .errors import Forbidden

OwnerFields = Mapping[Role, str]

ORDER_OWNERS: OwnerFields = {
    Role.CUSTOMER: "customer_id",
    Role.PARTNER: "partner_id",
}
RIDE_OWNERS: OwnerFields = {
    Role.CUSTOMER: "customer_id",
    Role.DRIVER: "driver_id",
}
DELIVERY_OWNERS: OwnerFields = {Role.DRIVER: "driver_id"}
MENU_OWNERS: OwnerFields = {Role.PARTNER: "partner_id"}


def require_role(identity: Identity, *roles: Role) -> Identity:
    if identity.role not in roles:
        raise Forbidden(
            f"Role '{identity.role.value}' may not perform this operation"
        )
    return identity


def is_owner(identity: Identity, resource: Any, owners: OwnerFields) -> bool:
    field = owners.get(identity.role)
    if field is None:
        return False
    return getattr(resource, field) == identity.subject_id


def ensure_owner(identity: Identity, resource: Any, owners: OwnerFields) -> None:
    if not is_owner(identity, resource, owners):
        raise Forbidden("You do not own this resource")

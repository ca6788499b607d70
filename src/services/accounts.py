"""Own-profile access and admin aggregates."""

from __future__ import annotations

from typing import Any

from src.domain.entities import Identity
from src.domain.enums import Role
from src.domain.errors import BadRequest, NotFound
from src.infrastructure.repositories import Store

# Columns a profile update may touch, per role.  Anything else (id, email,
# password_hash) has no update path.
PROFILE_FIELDS: dict[Role, tuple[str, ...]] = {
    Role.CUSTOMER: ("name", "phone", "address", "photo_url"),
    Role.DRIVER: ("name", "phone", "vehicle", "photo_url"),
    Role.PARTNER: ("name", "phone", "address", "category", "logo_url"),
    Role.ADMIN: ("name",),
}

# Profile columns that are NOT NULL in storage.
REQUIRED_PROFILE_FIELDS: dict[Role, tuple[str, ...]] = {
    Role.CUSTOMER: ("name",),
    Role.DRIVER: ("name",),
    Role.PARTNER: ("name", "address"),
    Role.ADMIN: ("name",),
}


class AccountService:
    def __init__(self, store: Store):
        self.store = store

    async def profile(self, identity: Identity):
        account = await self.store.accounts(identity.role).get(identity.subject_id)
        if account is None:
            raise NotFound("Account not found")
        return account

    async def update_profile(self, identity: Identity, changes: dict[str, Any]):
        account = await self.profile(identity)
        allowed = PROFILE_FIELDS[identity.role]
        values = {k: v for k, v in changes.items() if k in allowed}
        for field in REQUIRED_PROFILE_FIELDS[identity.role]:
            if field in values and not (values[field] or "").strip():
                raise BadRequest(f"{field} cannot be empty")
        return await self.store.accounts(identity.role).update(account, **values)

    async def list_accounts(self, role: Role):
        return await self.store.accounts(role).find()

    async def dashboard(self) -> dict[str, Any]:
        return {
            "customers": await self.store.customers.count(),
            "drivers": await self.store.drivers.count(),
            "partners": await self.store.partners.count(),
            "orders": await self.store.orders.count(),
            "rides": await self.store.rides.count(),
            "deliveries": await self.store.deliveries.count(),
            "orders_by_status": await self.store.orders.count_by_status(),
            "rides_by_status": await self.store.rides.count_by_status(),
        }

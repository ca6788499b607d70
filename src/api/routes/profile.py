"""
Profile endpoints
=================

GET   /api/v1/profile -- the caller's own account (no password hash)
PATCH /api/v1/profile -- allow-listed update; unknown fields -> 400
"""

from typing import Any

from fastapi import APIRouter, Body, Depends, Request
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError

from src.api.dependencies import get_identity, get_store
from src.api.middleware import RATE_LIMIT, limiter
from src.api.schemas import (
    AccountResponse,
    AdminProfileUpdate,
    CustomerProfileUpdate,
    CustomerResponse,
    DriverProfileUpdate,
    DriverResponse,
    PartnerProfileUpdate,
    PartnerResponse,
)
from src.domain.entities import Identity
from src.domain.enums import Role
from src.infrastructure.repositories import Store
from src.services.accounts import AccountService

router = APIRouter(prefix="/profile", tags=["profile"])

UPDATE_SCHEMAS = {
    Role.CUSTOMER: CustomerProfileUpdate,
    Role.DRIVER: DriverProfileUpdate,
    Role.PARTNER: PartnerProfileUpdate,
    Role.ADMIN: AdminProfileUpdate,
}

RESPONSE_SCHEMAS = {
    Role.CUSTOMER: CustomerResponse,
    Role.DRIVER: DriverResponse,
    Role.PARTNER: PartnerResponse,
    Role.ADMIN: AccountResponse,
}


def _project(role: Role, account) -> dict[str, Any]:
    return RESPONSE_SCHEMAS[role].model_validate(account).model_dump(
        by_alias=True, mode="json"
    )


@router.get("", summary="Get own profile")
@limiter.limit(RATE_LIMIT)
async def get_profile(
    request: Request,
    identity: Identity = Depends(get_identity),
    store: Store = Depends(get_store),
):
    account = await AccountService(store).profile(identity)
    return _project(identity.role, account)


@router.patch("", summary="Update own profile")
@limiter.limit(RATE_LIMIT)
async def update_profile(
    request: Request,
    payload: dict[str, Any] = Body(...),
    identity: Identity = Depends(get_identity),
    store: Store = Depends(get_store),
):
    try:
        changes = UPDATE_SCHEMAS[identity.role].model_validate(payload)
    except ValidationError as exc:
        raise RequestValidationError(exc.errors()) from exc

    account = await AccountService(store).update_profile(
        identity, changes.model_dump(exclude_unset=True)
    )
    return _project(identity.role, account)

"""
Auth endpoints
==============

POST /api/v1/auth/{collection}/register -- create a customer / driver / partner
POST /api/v1/auth/{collection}/login    -- exchange email + password for a token
POST /api/v1/auth/refresh               -- re-sign the caller's token
"""

from typing import Any

from fastapi import APIRouter, Body, Depends, Request
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError

from src.api.dependencies import get_identity, get_store
from src.api.middleware import RATE_LIMIT, limiter
from src.api.schemas import (
    CustomerRegister,
    DriverRegister,
    LoginRequest,
    PartnerRegister,
    TokenResponse,
)
from src.domain.entities import Identity
from src.domain.enums import Role
from src.domain.errors import Forbidden
from src.infrastructure.repositories import Store
from src.services.identity import (
    Credential,
    IdentityService,
    issue_credential,
    resolve_collection,
)

router = APIRouter(prefix="/auth", tags=["auth"])

REGISTER_SCHEMAS = {
    Role.CUSTOMER: CustomerRegister,
    Role.DRIVER: DriverRegister,
    Role.PARTNER: PartnerRegister,
}


def _token(credential: Credential) -> TokenResponse:
    return TokenResponse(token=credential.token, expires_in=credential.expires_in)


@router.post(
    "/{collection}/register",
    status_code=201,
    response_model=TokenResponse,
    summary="Register an account and receive a token",
)
@limiter.limit(RATE_LIMIT)
async def register(
    request: Request,
    collection: str,
    payload: dict[str, Any] = Body(...),
    store: Store = Depends(get_store),
):
    role = resolve_collection(collection)
    schema = REGISTER_SCHEMAS.get(role)
    service = IdentityService(store)
    if schema is None:
        raise Forbidden(f"Accounts in '{collection}' cannot self-register")
    try:
        body = schema.model_validate(payload)
    except ValidationError as exc:
        raise RequestValidationError(exc.errors()) from exc

    account = await service.register(collection, body.model_dump(exclude_none=True))
    return _token(
        issue_credential(
            Identity(subject_id=account.id, role=role, email=account.email)
        )
    )


@router.post(
    "/{collection}/login",
    response_model=TokenResponse,
    summary="Log in to one account collection",
)
@limiter.limit(RATE_LIMIT)
async def login(
    request: Request,
    collection: str,
    body: LoginRequest,
    store: Store = Depends(get_store),
):
    credential = await IdentityService(store).authenticate(
        collection, body.email, body.password
    )
    return _token(credential)


@router.post("/refresh", response_model=TokenResponse, summary="Refresh a token")
@limiter.limit(RATE_LIMIT)
async def refresh(request: Request, identity: Identity = Depends(get_identity)):
    return _token(IdentityService.refresh(identity))

"""
Admin / observability endpoints
===============================

GET /api/v1/admin/dashboard  -- aggregate counts
GET /api/v1/admin/customers  -- projected account lists (no password hashes)
GET /api/v1/admin/drivers
GET /api/v1/admin/partners
GET /api/v1/admin/health     -- simple health check
"""

from fastapi import APIRouter, Depends, Request

from src.api.dependencies import get_store, require_admin
from src.api.middleware import RATE_LIMIT, limiter
from src.api.schemas import (
    CustomerResponse,
    DashboardResponse,
    DriverResponse,
    HealthResponse,
    PartnerResponse,
)
from src.domain.entities import Identity
from src.domain.enums import Role
from src.infrastructure.repositories import Store
from src.services.accounts import AccountService

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get(
    "/dashboard", response_model=DashboardResponse, summary="Aggregate counts"
)
@limiter.limit(RATE_LIMIT)
async def dashboard(
    request: Request,
    admin: Identity = Depends(require_admin),
    store: Store = Depends(get_store),
):
    return DashboardResponse(**await AccountService(store).dashboard())


@router.get(
    "/customers", response_model=list[CustomerResponse], summary="List customers"
)
@limiter.limit(RATE_LIMIT)
async def list_customers(
    request: Request,
    admin: Identity = Depends(require_admin),
    store: Store = Depends(get_store),
):
    accounts = await AccountService(store).list_accounts(Role.CUSTOMER)
    return [CustomerResponse.model_validate(a) for a in accounts]


@router.get("/drivers", response_model=list[DriverResponse], summary="List drivers")
@limiter.limit(RATE_LIMIT)
async def list_drivers(
    request: Request,
    admin: Identity = Depends(require_admin),
    store: Store = Depends(get_store),
):
    accounts = await AccountService(store).list_accounts(Role.DRIVER)
    return [DriverResponse.model_validate(a) for a in accounts]


@router.get(
    "/partners", response_model=list[PartnerResponse], summary="List partners"
)
@limiter.limit(RATE_LIMIT)
async def list_partners(
    request: Request,
    admin: Identity = Depends(require_admin),
    store: Store = Depends(get_store),
):
    accounts = await AccountService(store).list_accounts(Role.PARTNER)
    return [PartnerResponse.model_validate(a) for a in accounts]


@router.get("/health", response_model=HealthResponse, summary="Health check")
async def health():
    return HealthResponse()

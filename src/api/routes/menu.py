"""
Menu endpoints
==============

Partner (owner):
  GET    /api/v1/menu            -- own items
  POST   /api/v1/menu            -- add an item
  PATCH  /api/v1/menu/{menu_id}  -- edit name / price / description / category
  DELETE /api/v1/menu/{menu_id}  -- remove an item

Customer:
  GET /api/v1/partners                  -- browse partners
  GET /api/v1/partners/{partner_id}/menu -- one partner's menu
"""

from fastapi import APIRouter, Depends, Request

from src.api.dependencies import get_store, require_customer, require_partner
from src.api.middleware import RATE_LIMIT, limiter
from src.api.schemas import (
    MenuItemCreate,
    MenuItemResponse,
    MenuItemUpdate,
    PartnerListing,
    StatusMessage,
)
from src.domain.entities import Identity
from src.infrastructure.repositories import Store
from src.services.menu import MenuService

router = APIRouter(tags=["menu"])


@router.get("/menu", response_model=list[MenuItemResponse], summary="List own menu")
@limiter.limit(RATE_LIMIT)
async def list_menu(
    request: Request,
    partner: Identity = Depends(require_partner),
    store: Store = Depends(get_store),
):
    items = await MenuService(store).list_own(partner)
    return [MenuItemResponse.model_validate(i) for i in items]


@router.post(
    "/menu",
    status_code=201,
    response_model=MenuItemResponse,
    summary="Add a menu item",
)
@limiter.limit(RATE_LIMIT)
async def create_menu_item(
    request: Request,
    body: MenuItemCreate,
    partner: Identity = Depends(require_partner),
    store: Store = Depends(get_store),
):
    item = await MenuService(store).create(partner, body.model_dump())
    return MenuItemResponse.model_validate(item)


@router.patch(
    "/menu/{menu_id}", response_model=MenuItemResponse, summary="Edit a menu item"
)
@limiter.limit(RATE_LIMIT)
async def update_menu_item(
    request: Request,
    menu_id: int,
    body: MenuItemUpdate,
    partner: Identity = Depends(require_partner),
    store: Store = Depends(get_store),
):
    item = await MenuService(store).update(
        partner, menu_id, body.model_dump(exclude_unset=True)
    )
    return MenuItemResponse.model_validate(item)


@router.delete(
    "/menu/{menu_id}", response_model=StatusMessage, summary="Delete a menu item"
)
@limiter.limit(RATE_LIMIT)
async def delete_menu_item(
    request: Request,
    menu_id: int,
    partner: Identity = Depends(require_partner),
    store: Store = Depends(get_store),
):
    await MenuService(store).delete(partner, menu_id)
    return StatusMessage(id=menu_id, status="deleted", message="Menu item deleted")


@router.get(
    "/partners", response_model=list[PartnerListing], summary="Browse partners"
)
@limiter.limit(RATE_LIMIT)
async def list_partners(
    request: Request,
    customer: Identity = Depends(require_customer),
    store: Store = Depends(get_store),
):
    partners = await MenuService(store).list_partners()
    return [PartnerListing.model_validate(p) for p in partners]


@router.get(
    "/partners/{partner_id}/menu",
    response_model=list[MenuItemResponse],
    summary="Browse a partner's menu",
)
@limiter.limit(RATE_LIMIT)
async def partner_menu(
    request: Request,
    partner_id: int,
    customer: Identity = Depends(require_customer),
    store: Store = Depends(get_store),
):
    items = await MenuService(store).partner_menu(partner_id)
    return [MenuItemResponse.model_validate(i) for i in items]

"""
Order endpoints
===============

Customer:
  POST /api/v1/orders                   -- place an order (spawns a delivery)
  GET  /api/v1/orders                   -- own orders (brief)
  GET  /api/v1/orders/{order_id}        -- full detail (customer or partner owner)
  POST /api/v1/orders/{order_id}/cancel -- cancel

Partner:
  GET  /api/v1/partner/orders                    -- incoming orders (brief)
  POST /api/v1/partner/orders/{order_id}/accept  -- accept
  POST /api/v1/partner/orders/{order_id}/reject  -- reject with optional reason
  POST /api/v1/partner/orders/{order_id}/ready   -- mark ready for pickup
"""

from typing import Optional

from fastapi import APIRouter, Depends, Request

from src.api.dependencies import (
    get_store,
    require_customer,
    require_partner,
    require_role,
)
from src.api.middleware import RATE_LIMIT, limiter
from src.api.schemas import (
    CustomerOrderBrief,
    OrderCreateRequest,
    OrderDetail,
    OrderSummary,
    PartnerOrderBrief,
    ReasonRequest,
    StatusMessage,
)
from src.domain.entities import Identity
from src.domain.enums import Role
from src.infrastructure.repositories import Store
from src.services.orders import OrderService

router = APIRouter(tags=["orders"])


def _message(order, message: str) -> StatusMessage:
    return StatusMessage(id=order.id, status=order.status.value, message=message)


# ── Customer ──────────────────────────────────────────────────────────


@router.post(
    "/orders",
    status_code=201,
    response_model=OrderSummary,
    summary="Place an order",
)
@limiter.limit(RATE_LIMIT)
async def create_order(
    request: Request,
    body: OrderCreateRequest,
    customer: Identity = Depends(require_customer),
    store: Store = Depends(get_store),
):
    order, delivery = await OrderService(store).create(
        customer,
        partner_id=body.partner_id,
        items=[item.model_dump() for item in body.items],
        delivery_address=body.delivery_address,
        payment_method=body.payment_method,
    )
    return OrderSummary(
        id=order.id,
        partner_id=order.partner_id,
        total=order.total,
        status=order.status,
        delivery_id=delivery.id,
        created_at=order.created_at,
    )


@router.get(
    "/orders", response_model=list[CustomerOrderBrief], summary="List own orders"
)
@limiter.limit(RATE_LIMIT)
async def list_orders(
    request: Request,
    customer: Identity = Depends(require_customer),
    store: Store = Depends(get_store),
):
    briefs = await OrderService(store).list_for_customer(customer)
    return [CustomerOrderBrief(**b) for b in briefs]


@router.get(
    "/orders/{order_id}", response_model=OrderDetail, summary="Order detail"
)
@limiter.limit(RATE_LIMIT)
async def get_order(
    request: Request,
    order_id: int,
    identity: Identity = Depends(require_role(Role.CUSTOMER, Role.PARTNER)),
    store: Store = Depends(get_store),
):
    order, delivery = await OrderService(store).get_detail(identity, order_id)
    detail = OrderDetail.model_validate(order)
    detail.delivery_id = delivery.id if delivery else None
    return detail


@router.post(
    "/orders/{order_id}/cancel",
    response_model=StatusMessage,
    summary="Cancel an order",
)
@limiter.limit(RATE_LIMIT)
async def cancel_order(
    request: Request,
    order_id: int,
    customer: Identity = Depends(require_customer),
    store: Store = Depends(get_store),
):
    order = await OrderService(store).cancel(customer, order_id)
    return _message(order, "Order cancelled")


# ── Partner ───────────────────────────────────────────────────────────


@router.get(
    "/partner/orders",
    response_model=list[PartnerOrderBrief],
    summary="List incoming orders",
)
@limiter.limit(RATE_LIMIT)
async def list_partner_orders(
    request: Request,
    partner: Identity = Depends(require_partner),
    store: Store = Depends(get_store),
):
    orders = await OrderService(store).list_for_partner(partner)
    return [PartnerOrderBrief.model_validate(o) for o in orders]


@router.post(
    "/partner/orders/{order_id}/accept",
    response_model=StatusMessage,
    summary="Accept an order",
)
@limiter.limit(RATE_LIMIT)
async def accept_order(
    request: Request,
    order_id: int,
    partner: Identity = Depends(require_partner),
    store: Store = Depends(get_store),
):
    order = await OrderService(store).accept(partner, order_id)
    return _message(order, "Order accepted")


@router.post(
    "/partner/orders/{order_id}/reject",
    response_model=StatusMessage,
    summary="Reject an order",
)
@limiter.limit(RATE_LIMIT)
async def reject_order(
    request: Request,
    order_id: int,
    body: Optional[ReasonRequest] = None,
    partner: Identity = Depends(require_partner),
    store: Store = Depends(get_store),
):
    reason = body.reason if body else None
    order = await OrderService(store).reject(partner, order_id, reason)
    return _message(order, "Order rejected")


@router.post(
    "/partner/orders/{order_id}/ready",
    response_model=StatusMessage,
    summary="Mark an order ready for pickup",
)
@limiter.limit(RATE_LIMIT)
async def mark_order_ready(
    request: Request,
    order_id: int,
    partner: Identity = Depends(require_partner),
    store: Store = Depends(get_store),
):
    order = await OrderService(store).mark_ready(partner, order_id)
    return _message(order, "Order ready for pickup")

"""
Delivery endpoints (driver only)
================================

GET  /api/v1/deliveries                         -- open pool + own deliveries
GET  /api/v1/deliveries/{delivery_id}           -- detail
POST /api/v1/deliveries/{delivery_id}/accept    -- claim (409 if already taken)
POST /api/v1/deliveries/{delivery_id}/reject    -- reject with optional reason
POST /api/v1/deliveries/{delivery_id}/start     -- picked up (bound driver)
POST /api/v1/deliveries/{delivery_id}/complete  -- delivered (bound driver)
"""

from typing import Optional

from fastapi import APIRouter, Depends, Request

from src.api.dependencies import get_store, require_driver
from src.api.middleware import RATE_LIMIT, limiter
from src.api.schemas import (
    CompleteDeliveryRequest,
    DeliveryResponse,
    ReasonRequest,
    StatusMessage,
)
from src.domain.entities import Identity
from src.infrastructure.repositories import Store
from src.services.deliveries import DeliveryService

router = APIRouter(prefix="/deliveries", tags=["deliveries"])


def _message(delivery, message: str) -> StatusMessage:
    return StatusMessage(id=delivery.id, status=delivery.status.value, message=message)


@router.get("", response_model=list[DeliveryResponse], summary="List deliveries")
@limiter.limit(RATE_LIMIT)
async def list_deliveries(
    request: Request,
    driver: Identity = Depends(require_driver),
    store: Store = Depends(get_store),
):
    deliveries = await DeliveryService(store).list_for_driver(driver)
    return [DeliveryResponse.model_validate(d) for d in deliveries]


@router.get(
    "/{delivery_id}", response_model=DeliveryResponse, summary="Delivery detail"
)
@limiter.limit(RATE_LIMIT)
async def get_delivery(
    request: Request,
    delivery_id: int,
    driver: Identity = Depends(require_driver),
    store: Store = Depends(get_store),
):
    delivery = await DeliveryService(store).get_for_driver(driver, delivery_id)
    return DeliveryResponse.model_validate(delivery)


@router.post(
    "/{delivery_id}/accept",
    response_model=DeliveryResponse,
    summary="Accept a delivery",
    responses={409: {"description": "Already taken by another driver"}},
)
@limiter.limit(RATE_LIMIT)
async def accept_delivery(
    request: Request,
    delivery_id: int,
    driver: Identity = Depends(require_driver),
    store: Store = Depends(get_store),
):
    delivery = await DeliveryService(store).accept(driver, delivery_id)
    return DeliveryResponse.model_validate(delivery)


@router.post(
    "/{delivery_id}/reject",
    response_model=StatusMessage,
    summary="Reject a delivery",
)
@limiter.limit(RATE_LIMIT)
async def reject_delivery(
    request: Request,
    delivery_id: int,
    body: Optional[ReasonRequest] = None,
    driver: Identity = Depends(require_driver),
    store: Store = Depends(get_store),
):
    reason = body.reason if body else None
    delivery = await DeliveryService(store).reject(driver, delivery_id, reason)
    return _message(delivery, "Delivery rejected")


@router.post(
    "/{delivery_id}/start",
    response_model=StatusMessage,
    summary="Start a delivery",
)
@limiter.limit(RATE_LIMIT)
async def start_delivery(
    request: Request,
    delivery_id: int,
    driver: Identity = Depends(require_driver),
    store: Store = Depends(get_store),
):
    delivery = await DeliveryService(store).start(driver, delivery_id)
    return _message(delivery, "Delivery started")


@router.post(
    "/{delivery_id}/complete",
    response_model=StatusMessage,
    summary="Complete a delivery",
)
@limiter.limit(RATE_LIMIT)
async def complete_delivery(
    request: Request,
    delivery_id: int,
    body: Optional[CompleteDeliveryRequest] = None,
    driver: Identity = Depends(require_driver),
    store: Store = Depends(get_store),
):
    amount = body.collected_amount if body else None
    delivery = await DeliveryService(store).complete(driver, delivery_id, amount)
    return _message(delivery, "Delivery completed")

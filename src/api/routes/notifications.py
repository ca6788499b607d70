"""
Notification endpoints (any authenticated account)
==================================================

GET  /api/v1/notifications?unread=true         -- own inbox
POST /api/v1/notifications/{notification_id}/read -- mark read (idempotent)
"""

from fastapi import APIRouter, Depends, Request

from src.api.dependencies import get_identity, get_store
from src.api.middleware import RATE_LIMIT, limiter
from src.api.schemas import NotificationResponse
from src.domain.entities import Identity
from src.infrastructure.repositories import Store
from src.services.notifications import NotificationService

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get(
    "", response_model=list[NotificationResponse], summary="List own notifications"
)
@limiter.limit(RATE_LIMIT)
async def list_notifications(
    request: Request,
    unread: bool = False,
    identity: Identity = Depends(get_identity),
    store: Store = Depends(get_store),
):
    items = await NotificationService(store).list_for(identity, unread_only=unread)
    return [NotificationResponse.model_validate(n) for n in items]


@router.post(
    "/{notification_id}/read",
    response_model=NotificationResponse,
    summary="Mark a notification read",
)
@limiter.limit(RATE_LIMIT)
async def mark_read(
    request: Request,
    notification_id: int,
    identity: Identity = Depends(get_identity),
    store: Store = Depends(get_store),
):
    notification = await NotificationService(store).mark_read(identity, notification_id)
    return NotificationResponse.model_validate(notification)

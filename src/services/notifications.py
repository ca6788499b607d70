"""Per-account notification inbox."""

from __future__ import annotations

from src.domain.entities import Identity
from src.domain.enums import Role
from src.domain.errors import Forbidden, NotFound
from src.infrastructure.models import NotificationModel
from src.infrastructure.repositories import Store


class NotificationService:
    def __init__(self, store: Store):
        self.store = store

    async def notify(
        self, user_id: int, role: Role, title: str, message: str = ""
    ) -> NotificationModel:
        return await self.store.notifications.insert(
            user_id=user_id, user_role=role, title=title, message=message, read=False
        )

    async def list_for(
        self, identity: Identity, unread_only: bool = False
    ) -> list[NotificationModel]:
        return await self.store.notifications.for_user(
            identity.subject_id, identity.role, unread_only=unread_only
        )

    async def mark_read(self, identity: Identity, notification_id: int) -> NotificationModel:
        """Idempotent: marking an already-read notification is a no-op."""
        notification = await self.store.notifications.get(notification_id)
        if notification is None:
            raise NotFound("Notification not found")
        if (
            notification.user_id != identity.subject_id
            or notification.user_role != identity.role
        ):
            raise Forbidden("You do not own this notification")
        if not notification.read:
            await self.store.notifications.update(notification, read=True)
        return notification

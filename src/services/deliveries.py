"""
Delivery Lifecycle
==================

::

    ready -> accepted -> ongoing -> completed
      |
      +--> rejected (optional reason)

Concurrency
-----------
Accept is a compare-and-set on the status column: the row is only
claimed if it is still ``ready``.  When two drivers race, the first write
wins and the second gets ``Conflict``; ``driver_id`` is never reassigned.

Start / complete are restricted to the driver bound by accept, and feed
``picked_up`` / ``delivered`` back into the owning order.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from src.config import settings
from src.domain.authorization import DELIVERY_OWNERS, ensure_owner, is_owner
from src.domain.entities import Identity, coerce_number, ensure_transition
from src.domain.enums import (
    DELIVERY_TRANSITIONS,
    DeliveryStatus,
    OrderStatus,
    Role,
)
from src.domain.errors import Conflict, Forbidden, InvalidStateTransition, NotFound
from src.infrastructure.models import DeliveryModel
from src.infrastructure.repositories import Store
from src.services.notifications import NotificationService
from src.services.orders import OrderService

logger = logging.getLogger(__name__)

WITHDRAWN_ORDER_STATES = {OrderStatus.CANCELLED, OrderStatus.REJECTED}


class DeliveryService:
    def __init__(self, store: Store, enforce_transitions: bool | None = None):
        self.store = store
        self.enforce_transitions = (
            settings.enforce_transitions
            if enforce_transitions is None
            else enforce_transitions
        )
        self.orders = OrderService(store, self.enforce_transitions)
        self.notifications = NotificationService(store)

    # ── Reads ─────────────────────────────────────────────────────

    async def list_for_driver(self, driver: Identity) -> list[DeliveryModel]:
        return await self.store.deliveries.visible_to_driver(driver.subject_id)

    async def get_for_driver(self, driver: Identity, delivery_id: int) -> DeliveryModel:
        delivery = await self._load(delivery_id)
        if delivery.status != DeliveryStatus.READY and not is_owner(
            driver, delivery, DELIVERY_OWNERS
        ):
            raise Forbidden("Delivery is assigned to another driver")
        return delivery

    # ── Transitions ───────────────────────────────────────────────

    async def accept(self, driver: Identity, delivery_id: int) -> DeliveryModel:
        delivery = await self._load(delivery_id)
        if not self.enforce_transitions:
            # Last writer wins.
            return await self.store.deliveries.update(
                delivery, status=DeliveryStatus.ACCEPTED, driver_id=driver.subject_id
            )

        ensure_transition(DELIVERY_TRANSITIONS, delivery.status, DeliveryStatus.ACCEPTED)
        claimed = await self.store.deliveries.compare_and_set(
            delivery_id,
            [DeliveryStatus.READY],
            status=DeliveryStatus.ACCEPTED,
            driver_id=driver.subject_id,
        )
        if claimed is None:
            logger.info(
                "Driver #%d lost the race for delivery #%d",
                driver.subject_id, delivery_id,
            )
            raise Conflict("Delivery was already taken by another driver")

        logger.info("Delivery #%d accepted by driver #%d", delivery_id, driver.subject_id)
        return claimed

    async def reject(
        self, driver: Identity, delivery_id: int, reason: Optional[str] = None
    ) -> DeliveryModel:
        delivery = await self._load(delivery_id)
        if self.enforce_transitions:
            ensure_transition(
                DELIVERY_TRANSITIONS, delivery.status, DeliveryStatus.REJECTED
            )
        logger.info("Delivery #%d rejected by driver #%d", delivery_id, driver.subject_id)
        return await self.store.deliveries.update(
            delivery, status=DeliveryStatus.REJECTED, reason=reason
        )

    async def start(self, driver: Identity, delivery_id: int) -> DeliveryModel:
        delivery = await self._load_bound(driver, delivery_id)
        if self.enforce_transitions:
            ensure_transition(
                DELIVERY_TRANSITIONS, delivery.status, DeliveryStatus.ONGOING
            )
            order = await self.store.orders.get(delivery.order_id)
            if order is not None and order.status in WITHDRAWN_ORDER_STATES:
                raise InvalidStateTransition(
                    f"Order #{order.id} was {order.status.value}"
                )

        await self.store.deliveries.update(delivery, status=DeliveryStatus.ONGOING)
        await self.orders.advance_from_delivery(delivery.order_id, OrderStatus.PICKED_UP)
        logger.info("Delivery #%d started", delivery_id)
        return delivery

    async def complete(
        self, driver: Identity, delivery_id: int, collected_amount: Any = None
    ) -> DeliveryModel:
        delivery = await self._load_bound(driver, delivery_id)
        if self.enforce_transitions:
            ensure_transition(
                DELIVERY_TRANSITIONS, delivery.status, DeliveryStatus.COMPLETED
            )

        await self.store.deliveries.update(
            delivery,
            status=DeliveryStatus.COMPLETED,
            collected_amount=coerce_number(collected_amount),
        )
        order = await self.orders.advance_from_delivery(
            delivery.order_id, OrderStatus.DELIVERED
        )
        if order is not None:
            await self.notifications.notify(
                order.customer_id, Role.CUSTOMER, "Order delivered",
                f"Order #{order.id} has been delivered",
            )
        logger.info("Delivery #%d completed", delivery_id)
        return delivery

    # ── Internals ─────────────────────────────────────────────────

    async def _load(self, delivery_id: int) -> DeliveryModel:
        delivery = await self.store.deliveries.get(delivery_id)
        if delivery is None:
            raise NotFound("Delivery not found")
        return delivery

    async def _load_bound(self, driver: Identity, delivery_id: int) -> DeliveryModel:
        delivery = await self._load(delivery_id)
        ensure_owner(driver, delivery, DELIVERY_OWNERS)
        return delivery

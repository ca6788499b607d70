"""
Order Lifecycle
===============

::

    pending -> accepted -> ready -> picked_up -> delivered
       |          |          |
       |          +----------+--> cancelled   (customer)
       +--> rejected                          (partner, optional reason)

``picked_up`` / ``delivered`` are driven by the order's Delivery.  Cancel
and reject withdraw that Delivery while it is ``ready`` or ``accepted``.

Creating an order snapshots the line items (name + price at order time)
and spawns exactly one Delivery in ``ready`` whose pickup address is a
frozen copy of the partner's address.

When ``enforce_transitions`` is off, partner and customer transitions are
unconditional status overwrites.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Optional

from src.config import settings
from src.domain.authorization import ORDER_OWNERS, ensure_owner
from src.domain.entities import (
    UNKNOWN_ITEM_NAME,
    Identity,
    LineItem,
    coerce_number,
    ensure_transition,
)
from src.domain.enums import DeliveryStatus, ORDER_TRANSITIONS, OrderStatus, Role
from src.domain.errors import BadRequest, NotFound
from src.infrastructure.models import DeliveryModel, OrderModel
from src.infrastructure.repositories import Store
from src.services.notifications import NotificationService

logger = logging.getLogger(__name__)

# Deliveries an order withdrawal may still pull back (nobody has set off yet).
WITHDRAWABLE_DELIVERY_STATES = [DeliveryStatus.READY, DeliveryStatus.ACCEPTED]


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


class OrderService:
    def __init__(self, store: Store, enforce_transitions: bool | None = None):
        self.store = store
        self.notifications = NotificationService(store)
        self.enforce_transitions = (
            settings.enforce_transitions
            if enforce_transitions is None
            else enforce_transitions
        )

    # ── Create ────────────────────────────────────────────────────

    async def create(
        self,
        customer: Identity,
        *,
        partner_id: Optional[int],
        items: Iterable[dict[str, Any]] | None,
        delivery_address: Optional[str] = None,
        payment_method: Optional[str] = None,
    ) -> tuple[OrderModel, DeliveryModel]:
        items = list(items or [])
        if partner_id is None:
            raise BadRequest("partnerId is required")
        if not items:
            raise BadRequest("items must not be empty")

        partner = await self.store.partners.get(partner_id)
        if partner is None:
            raise NotFound("Partner not found")

        lines = [await self._resolve_line(partner_id, item) for item in items]
        total = sum(line.subtotal for line in lines)

        order = await self.store.orders.insert(
            customer_id=customer.subject_id,
            partner_id=partner_id,
            items=[line.to_dict() for line in lines],
            total=total,
            status=OrderStatus.PENDING,
            delivery_address=delivery_address,
            payment_method=payment_method,
        )
        delivery = await self.store.deliveries.insert(
            order_id=order.id,
            status=DeliveryStatus.READY,
            pickup_address=partner.address or "",
            drop_address=delivery_address,
        )
        await self.notifications.notify(
            partner_id,
            Role.PARTNER,
            "New order",
            f"Order #{order.id} received (total {total:.2f})",
        )
        logger.info(
            "Order #%d created by customer #%d for partner #%d (delivery #%d)",
            order.id, customer.subject_id, partner_id, delivery.id,
        )
        return order, delivery

    async def _resolve_line(self, partner_id: int, item: dict[str, Any]) -> LineItem:
        menu_id = _as_int(item.get("menu_id"))
        quantity = coerce_number(item.get("quantity", 1))
        menu_item = (
            await self.store.menu_items.get_for_partner(menu_id, partner_id)
            if menu_id is not None
            else None
        )
        if menu_item is None:
            return LineItem(
                menu_id=menu_id, name=UNKNOWN_ITEM_NAME, price=0.0, quantity=quantity
            )
        return LineItem(
            menu_id=menu_id,
            name=menu_item.name,
            price=coerce_number(menu_item.price),
            quantity=quantity,
        )

    # ── Reads ─────────────────────────────────────────────────────

    async def list_for_customer(self, customer: Identity) -> list[dict[str, Any]]:
        orders = await self.store.orders.for_customer(customer.subject_id)
        names: dict[int, str] = {}
        for partner_id in {o.partner_id for o in orders}:
            partner = await self.store.partners.get(partner_id)
            names[partner_id] = partner.name if partner else UNKNOWN_ITEM_NAME
        return [
            {
                "id": o.id,
                "partner_name": names[o.partner_id],
                "total": o.total,
                "status": o.status,
                "created_at": o.created_at,
            }
            for o in orders
        ]

    async def list_for_partner(self, partner: Identity) -> list[OrderModel]:
        return await self.store.orders.for_partner(partner.subject_id)

    async def get_detail(
        self, identity: Identity, order_id: int
    ) -> tuple[OrderModel, Optional[DeliveryModel]]:
        order = await self._load(order_id)
        ensure_owner(identity, order, ORDER_OWNERS)
        return order, await self.store.deliveries.get_by_order(order.id)

    # ── Transitions ───────────────────────────────────────────────

    async def accept(self, partner: Identity, order_id: int) -> OrderModel:
        return await self._partner_transition(partner, order_id, OrderStatus.ACCEPTED)

    async def reject(
        self, partner: Identity, order_id: int, reason: Optional[str] = None
    ) -> OrderModel:
        order = await self._partner_transition(
            partner, order_id, OrderStatus.REJECTED, reason
        )
        await self._withdraw_delivery(order, "Order rejected by partner")
        return order

    async def mark_ready(self, partner: Identity, order_id: int) -> OrderModel:
        return await self._partner_transition(partner, order_id, OrderStatus.READY)

    async def cancel(self, customer: Identity, order_id: int) -> OrderModel:
        order = await self._load(order_id)
        ensure_owner(customer, order, ORDER_OWNERS)
        await self._apply(order, OrderStatus.CANCELLED)
        await self._withdraw_delivery(order, "Order cancelled by customer")
        await self.notifications.notify(
            order.partner_id, Role.PARTNER, "Order cancelled",
            f"Order #{order.id} was cancelled by the customer",
        )
        return order

    async def advance_from_delivery(
        self, order_id: int, new_status: OrderStatus
    ) -> Optional[OrderModel]:
        """Mirror delivery progress onto the order (``picked_up`` / ``delivered``)."""
        order = await self.store.orders.get(order_id)
        if order is None:
            return None
        if (
            self.enforce_transitions
            and new_status not in ORDER_TRANSITIONS.get(order.status, set())
        ):
            logger.warning(
                "Order #%d stays %s; delivery progress %s ignored",
                order.id, order.status.value, new_status.value,
            )
            return order
        await self.store.orders.update(order, status=new_status)
        return order

    # ── Internals ─────────────────────────────────────────────────

    async def _load(self, order_id: int) -> OrderModel:
        order = await self.store.orders.get(order_id)
        if order is None:
            raise NotFound("Order not found")
        return order

    async def _partner_transition(
        self,
        partner: Identity,
        order_id: int,
        new_status: OrderStatus,
        reason: Optional[str] = None,
    ) -> OrderModel:
        order = await self._load(order_id)
        ensure_owner(partner, order, ORDER_OWNERS)
        await self._apply(order, new_status, reason)
        await self.notifications.notify(
            order.customer_id, Role.CUSTOMER, f"Order {new_status.value}",
            reason or f"Order #{order.id} is now {new_status.value}",
        )
        return order

    async def _apply(
        self, order: OrderModel, new_status: OrderStatus, reason: Optional[str] = None
    ) -> None:
        if self.enforce_transitions:
            ensure_transition(ORDER_TRANSITIONS, order.status, new_status)
        values: dict[str, Any] = {"status": new_status}
        if reason is not None:
            values["reason"] = reason
        await self.store.orders.update(order, **values)
        logger.info("Order #%d -> %s", order.id, new_status.value)

    async def _withdraw_delivery(self, order: OrderModel, reason: str) -> None:
        """Withdraw the sibling delivery unless the driver already set off.

        A ``ready`` delivery leaves the open pool; an ``accepted`` one is
        released and its driver is told the run is off.
        """
        delivery = await self.store.deliveries.get_by_order(order.id)
        if delivery is None:
            return
        bound_driver = (
            delivery.driver_id if delivery.status == DeliveryStatus.ACCEPTED else None
        )
        withdrawn = await self.store.deliveries.compare_and_set(
            delivery.id,
            WITHDRAWABLE_DELIVERY_STATES,
            status=DeliveryStatus.REJECTED,
            reason=reason,
        )
        if withdrawn is None:
            logger.warning(
                "Delivery #%d for order #%d already %s; left in place",
                delivery.id, order.id, delivery.status.value,
            )
            return
        if bound_driver is not None:
            await self.notifications.notify(
                bound_driver, Role.DRIVER, "Delivery withdrawn",
                f"Delivery #{delivery.id} was withdrawn: {reason}",
            )

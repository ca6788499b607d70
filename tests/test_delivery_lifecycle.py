"""Delivery pool, driver binding and feedback into the owning order."""

from __future__ import annotations

import pytest

from src.domain.enums import DeliveryStatus, OrderStatus, Role
from src.domain.errors import Forbidden, InvalidStateTransition, NotFound
from src.infrastructure.repositories import Store
from src.services.deliveries import DeliveryService
from src.services.orders import OrderService
from tests.conftest import identity_of, make_customer, make_driver, make_partner


async def _order_with_delivery(store: Store):
    customer = identity_of(await make_customer(store), Role.CUSTOMER)
    partner = await make_partner(store)
    item = await store.menu_items.insert(partner_id=partner.id, name="Pho Bo", price=12.5)
    order, delivery = await OrderService(store).create(
        customer,
        partner_id=partner.id,
        items=[{"menu_id": item.id, "quantity": 2}],
        delivery_address="1 Elm St",
    )
    return customer, order, delivery


async def _drivers(store: Store):
    first = identity_of(await make_driver(store), Role.DRIVER)
    second = identity_of(
        await make_driver(store, email="eve@example.com", name="Eve"), Role.DRIVER
    )
    return first, second


class TestVisibility:
    @pytest.mark.asyncio
    async def test_pool_shows_ready_and_own(self, store: Store):
        _, _, delivery = await _order_with_delivery(store)
        driver, other = await _drivers(store)
        service = DeliveryService(store)

        assert [d.id for d in await service.list_for_driver(other)] == [delivery.id]
        await service.accept(driver, delivery.id)
        assert [d.id for d in await service.list_for_driver(driver)] == [delivery.id]
        assert await service.list_for_driver(other) == []

    @pytest.mark.asyncio
    async def test_detail_of_foreign_delivery_is_forbidden(self, store: Store):
        _, _, delivery = await _order_with_delivery(store)
        driver, other = await _drivers(store)
        service = DeliveryService(store)
        assert (await service.get_for_driver(other, delivery.id)) is delivery

        await service.accept(driver, delivery.id)
        with pytest.raises(Forbidden):
            await service.get_for_driver(other, delivery.id)

    @pytest.mark.asyncio
    async def test_missing_delivery(self, store: Store):
        driver, _ = await _drivers(store)
        with pytest.raises(NotFound):
            await DeliveryService(store).get_for_driver(driver, 99)


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_full_run_advances_order(self, store: Store):
        customer, order, delivery = await _order_with_delivery(store)
        driver, _ = await _drivers(store)
        service = DeliveryService(store)

        accepted = await service.accept(driver, delivery.id)
        assert accepted.status == DeliveryStatus.ACCEPTED
        assert accepted.driver_id == driver.subject_id

        await service.start(driver, delivery.id)
        assert delivery.status == DeliveryStatus.ONGOING
        assert (await store.orders.get(order.id)).status == OrderStatus.PICKED_UP

        await service.complete(driver, delivery.id, "25")
        assert delivery.status == DeliveryStatus.COMPLETED
        assert delivery.collected_amount == 25.0
        assert (await store.orders.get(order.id)).status == OrderStatus.DELIVERED

        inbox = await store.notifications.for_user(customer.subject_id, Role.CUSTOMER)
        assert inbox[0].title == "Order delivered"

    @pytest.mark.asyncio
    async def test_collected_amount_is_lenient(self, store: Store):
        _, _, delivery = await _order_with_delivery(store)
        driver, _ = await _drivers(store)
        service = DeliveryService(store)
        await service.accept(driver, delivery.id)
        await service.start(driver, delivery.id)
        await service.complete(driver, delivery.id, "a lot")
        assert delivery.collected_amount == 0.0

    @pytest.mark.asyncio
    async def test_only_bound_driver_may_start(self, store: Store):
        _, _, delivery = await _order_with_delivery(store)
        driver, other = await _drivers(store)
        service = DeliveryService(store)
        await service.accept(driver, delivery.id)
        with pytest.raises(Forbidden):
            await service.start(other, delivery.id)
        assert delivery.status == DeliveryStatus.ACCEPTED

    @pytest.mark.asyncio
    async def test_bound_driver_check_holds_in_lax_mode(self, store: Store):
        _, _, delivery = await _order_with_delivery(store)
        driver, other = await _drivers(store)
        service = DeliveryService(store, enforce_transitions=False)
        await service.accept(driver, delivery.id)
        with pytest.raises(Forbidden):
            await service.complete(other, delivery.id, 10)

    @pytest.mark.asyncio
    async def test_cannot_complete_before_start(self, store: Store):
        _, _, delivery = await _order_with_delivery(store)
        driver, _ = await _drivers(store)
        service = DeliveryService(store)
        await service.accept(driver, delivery.id)
        with pytest.raises(InvalidStateTransition):
            await service.complete(driver, delivery.id, 10)

    @pytest.mark.asyncio
    async def test_reject_from_pool(self, store: Store):
        _, _, delivery = await _order_with_delivery(store)
        driver, _ = await _drivers(store)
        rejected = await DeliveryService(store).reject(driver, delivery.id, "Too far")
        assert rejected.status == DeliveryStatus.REJECTED
        assert rejected.reason == "Too far"

    @pytest.mark.asyncio
    async def test_cannot_reject_after_accept(self, store: Store):
        _, _, delivery = await _order_with_delivery(store)
        driver, _ = await _drivers(store)
        service = DeliveryService(store)
        await service.accept(driver, delivery.id)
        with pytest.raises(InvalidStateTransition):
            await service.reject(driver, delivery.id)

    @pytest.mark.asyncio
    async def test_cancelled_order_blocks_start(self, store: Store):
        customer, order, delivery = await _order_with_delivery(store)
        driver, _ = await _drivers(store)
        service = DeliveryService(store)
        await service.accept(driver, delivery.id)
        await OrderService(store).cancel(customer, order.id)

        with pytest.raises(InvalidStateTransition):
            await service.start(driver, delivery.id)
        assert delivery.status == DeliveryStatus.REJECTED

    @pytest.mark.asyncio
    async def test_withdrawn_delivery_cannot_be_accepted(self, store: Store):
        customer, order, delivery = await _order_with_delivery(store)
        driver, _ = await _drivers(store)
        await OrderService(store).cancel(customer, order.id)
        with pytest.raises(InvalidStateTransition):
            await DeliveryService(store).accept(driver, delivery.id)

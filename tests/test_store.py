"""Repository behaviour: id assignment, find helpers, compare-and-set."""

from __future__ import annotations

import pytest

from src.domain.enums import DeliveryStatus, Role
from src.infrastructure.repositories import Store
from tests.conftest import make_customer, make_driver, make_partner


class TestIdAssignment:
    @pytest.mark.asyncio
    async def test_first_id_is_one(self, store: Store):
        assert await store.menu_items.next_id() == 1

    @pytest.mark.asyncio
    async def test_ids_strictly_increase(self, store: Store):
        partner = await make_partner(store)
        items = [
            await store.menu_items.insert(partner_id=partner.id, name=f"Dish {n}", price=n)
            for n in range(5)
        ]
        assert [i.id for i in items] == [1, 2, 3, 4, 5]

    @pytest.mark.asyncio
    async def test_id_after_deleting_max_is_max_of_remaining_plus_one(
        self, store: Store
    ):
        partner = await make_partner(store)
        for n in range(3):
            await store.menu_items.insert(partner_id=partner.id, name=f"Dish {n}")
        await store.menu_items.delete(await store.menu_items.get(3))

        fresh = await store.menu_items.insert(partner_id=partner.id, name="New")
        assert fresh.id == 3

    @pytest.mark.asyncio
    async def test_id_after_deleting_middle_item_keeps_counting(self, store: Store):
        partner = await make_partner(store)
        for n in range(3):
            await store.menu_items.insert(partner_id=partner.id, name=f"Dish {n}")
        await store.menu_items.delete(await store.menu_items.get(2))

        fresh = await store.menu_items.insert(partner_id=partner.id, name="New")
        assert fresh.id == 4

    @pytest.mark.asyncio
    async def test_collections_count_independently(self, store: Store):
        customer = await make_customer(store)
        driver = await make_driver(store)
        assert customer.id == 1
        assert driver.id == 1


class TestAccounts:
    @pytest.mark.asyncio
    async def test_email_lookup_is_case_insensitive(self, store: Store):
        await make_customer(store, email="Ana@Example.com")
        found = await store.customers.get_by_email("ana@example.com")
        assert found is not None

    @pytest.mark.asyncio
    async def test_accounts_accessor_by_role(self, store: Store):
        assert store.accounts(Role.PARTNER) is store.partners


class TestCompareAndSet:
    async def _delivery(self, store: Store):
        customer = await make_customer(store)
        partner = await make_partner(store)
        order = await store.orders.insert(
            customer_id=customer.id, partner_id=partner.id, items=[], total=0
        )
        return await store.deliveries.insert(
            order_id=order.id, status=DeliveryStatus.READY, pickup_address="x"
        )

    @pytest.mark.asyncio
    async def test_applies_when_status_matches(self, store: Store):
        delivery = await self._delivery(store)
        updated = await store.deliveries.compare_and_set(
            delivery.id, [DeliveryStatus.READY],
            status=DeliveryStatus.ACCEPTED, driver_id=7,
        )
        assert updated is not None
        assert updated.status == DeliveryStatus.ACCEPTED
        assert updated.driver_id == 7

    @pytest.mark.asyncio
    async def test_noop_when_status_moved_on(self, store: Store):
        delivery = await self._delivery(store)
        await store.deliveries.compare_and_set(
            delivery.id, [DeliveryStatus.READY],
            status=DeliveryStatus.ACCEPTED, driver_id=7,
        )
        second = await store.deliveries.compare_and_set(
            delivery.id, [DeliveryStatus.READY],
            status=DeliveryStatus.ACCEPTED, driver_id=8,
        )
        assert second is None
        assert (await store.deliveries.get(delivery.id)).driver_id == 7

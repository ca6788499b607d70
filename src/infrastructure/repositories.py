"""
Repository Pattern -- abstracts DB access so domain logic stays DB-agnostic.

Each repository receives an ``AsyncSession`` (unit-of-work) and exposes the
role-agnostic ``get / find / insert / update / delete`` operations over one
collection, plus the domain-relevant queries for that collection.

``Store`` bundles one repository per collection and is what the lifecycle
services receive.

Id allocation
-------------
``insert`` assigns ``max(id) + 1``.  Reading the max and writing the row
must not interleave with another writer, so the first insert into a table
takes that table's allocation lock and holds it until the session's
transaction commits or rolls back:

* an ``asyncio.Lock`` per (engine, table) serialises writers in this process
* on PostgreSQL, ``pg_advisory_xact_lock`` extends that across workers
"""

from __future__ import annotations

import asyncio
import weakref
from typing import Any, Generic, Iterable, Optional, TypeVar

from sqlalchemy import event, func, or_, select, text, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from .models import (
    ACCOUNT_MODELS,
    DeliveryModel,
    MenuItemModel,
    NotificationModel,
    OrderModel,
    RideModel,
    utcnow,
)
from src.domain.enums import DeliveryStatus, RideStatus, Role

ModelT = TypeVar("ModelT")

_HELD_ID_LOCKS = "held_id_locks"
_id_locks: "weakref.WeakKeyDictionary[Any, dict[str, asyncio.Lock]]" = (
    weakref.WeakKeyDictionary()
)


@event.listens_for(Session, "after_transaction_end")
def _release_id_locks(session: Session, transaction: Any) -> None:
    if transaction.parent is not None:
        return
    for lock in session.info.pop(_HELD_ID_LOCKS, {}).values():
        lock.release()


class CollectionRepository(Generic[ModelT]):
    model: type[ModelT]

    def __init__(self, session: AsyncSession, model: type[ModelT] | None = None):
        self.session = session
        if model is not None:
            self.model = model

    async def next_id(self) -> int:
        """``max(id) + 1``, or 1 for an empty collection."""
        result = await self.session.execute(select(func.max(self.model.id)))
        return (result.scalar() or 0) + 1

    async def lock_ids(self) -> None:
        """Hold this table's id allocation until the transaction ends."""
        sync_session = self.session.sync_session
        held = sync_session.info.setdefault(_HELD_ID_LOCKS, {})
        table = self.model.__tablename__
        if table in held:
            return
        if not sync_session.in_transaction():
            sync_session.begin()
        bind = sync_session.get_bind()
        lock = _id_locks.setdefault(bind, {}).setdefault(table, asyncio.Lock())
        await lock.acquire()
        held[table] = lock
        if bind.dialect.name == "postgresql":
            await self.session.execute(
                text("SELECT pg_advisory_xact_lock(hashtext(:table))"),
                {"table": table},
            )

    async def get(self, record_id: int) -> Optional[ModelT]:
        return await self.session.get(self.model, record_id)

    async def find(self, *criteria: Any, order_by: Any = None) -> list[ModelT]:
        query = select(self.model).where(*criteria)
        query = query.order_by(order_by if order_by is not None else self.model.id)
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def find_one(self, *criteria: Any) -> Optional[ModelT]:
        result = await self.session.execute(
            select(self.model).where(*criteria).limit(1)
        )
        return result.scalars().first()

    async def insert(self, **values: Any) -> ModelT:
        await self.lock_ids()
        record = self.model(id=await self.next_id(), **values)
        self.session.add(record)
        await self.session.flush()
        return record

    async def update(self, record: ModelT, **values: Any) -> ModelT:
        for key, value in values.items():
            setattr(record, key, value)
        await self.session.flush()
        return record

    async def compare_and_set(
        self, record_id: int, expected: Iterable[Any], **values: Any
    ) -> Optional[ModelT]:
        """Atomically apply *values* only if ``status`` is in *expected*.

        Returns the refreshed record, or ``None`` when the row's status had
        already moved on (another writer won).
        """
        values.setdefault("updated_at", utcnow())
        result = await self.session.execute(
            update(self.model)
            .where(self.model.id == record_id, self.model.status.in_(list(expected)))
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            return None
        return await self.session.get(self.model, record_id, populate_existing=True)

    async def delete(self, record: ModelT) -> None:
        await self.session.delete(record)
        await self.session.flush()

    async def count(self, *criteria: Any) -> int:
        result = await self.session.execute(
            select(func.count()).select_from(self.model).where(*criteria)
        )
        return result.scalar() or 0

    async def count_by_status(self) -> dict[str, int]:
        result = await self.session.execute(
            select(self.model.status, func.count()).group_by(self.model.status)
        )
        return {
            (status.value if hasattr(status, "value") else status): total
            for status, total in result.all()
        }


class AccountRepository(CollectionRepository):
    def __init__(self, session: AsyncSession, role: Role):
        super().__init__(session, ACCOUNT_MODELS[role])
        self.role = role

    async def get_by_email(self, email: str):
        return await self.find_one(func.lower(self.model.email) == email.lower())


class MenuItemRepository(CollectionRepository[MenuItemModel]):
    model = MenuItemModel

    async def for_partner(self, partner_id: int) -> list[MenuItemModel]:
        return await self.find(MenuItemModel.partner_id == partner_id)

    async def get_for_partner(
        self, menu_id: int, partner_id: int
    ) -> Optional[MenuItemModel]:
        return await self.find_one(
            MenuItemModel.id == menu_id, MenuItemModel.partner_id == partner_id
        )


class OrderRepository(CollectionRepository[OrderModel]):
    model = OrderModel

    async def for_customer(self, customer_id: int) -> list[OrderModel]:
        return await self.find(
            OrderModel.customer_id == customer_id, order_by=OrderModel.id.desc()
        )

    async def for_partner(self, partner_id: int) -> list[OrderModel]:
        return await self.find(
            OrderModel.partner_id == partner_id, order_by=OrderModel.id.desc()
        )


class DeliveryRepository(CollectionRepository[DeliveryModel]):
    model = DeliveryModel

    async def get_by_order(self, order_id: int) -> Optional[DeliveryModel]:
        return await self.find_one(DeliveryModel.order_id == order_id)

    async def visible_to_driver(self, driver_id: int) -> list[DeliveryModel]:
        """Open pool (``ready``) plus everything already bound to *driver_id*."""
        return await self.find(
            or_(
                DeliveryModel.status == DeliveryStatus.READY,
                DeliveryModel.driver_id == driver_id,
            )
        )


class RideRepository(CollectionRepository[RideModel]):
    model = RideModel

    async def get_pending(self) -> list[RideModel]:
        return await self.find(
            RideModel.status == RideStatus.PENDING, order_by=RideModel.created_at
        )

    async def for_customer(self, customer_id: int) -> list[RideModel]:
        return await self.find(
            RideModel.customer_id == customer_id, order_by=RideModel.id.desc()
        )

    async def for_driver(self, driver_id: int) -> list[RideModel]:
        return await self.find(
            RideModel.driver_id == driver_id, order_by=RideModel.id.desc()
        )


class NotificationRepository(CollectionRepository[NotificationModel]):
    model = NotificationModel

    async def for_user(
        self, user_id: int, role: Role, unread_only: bool = False
    ) -> list[NotificationModel]:
        criteria = [
            NotificationModel.user_id == user_id,
            NotificationModel.user_role == role,
        ]
        if unread_only:
            criteria.append(NotificationModel.read.is_(False))
        return await self.find(*criteria, order_by=NotificationModel.id.desc())


class Store:
    """One repository per collection, all sharing a single session."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.customers = AccountRepository(session, Role.CUSTOMER)
        self.drivers = AccountRepository(session, Role.DRIVER)
        self.partners = AccountRepository(session, Role.PARTNER)
        self.admins = AccountRepository(session, Role.ADMIN)
        self.menu_items = MenuItemRepository(session)
        self.orders = OrderRepository(session)
        self.deliveries = DeliveryRepository(session)
        self.rides = RideRepository(session)
        self.notifications = NotificationRepository(session)

    def accounts(self, role: Role) -> AccountRepository:
        return getattr(self, role.collection)

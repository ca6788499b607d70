"""
Ride Lifecycle
==============

::

    pending -> ongoing (accept, binds driver) -> ongoing + started_at (start)
       |          |                                  -> completed (complete)
       |          +--> cancelled (customer)
       +--> rejected (driver) / cancelled (customer)

Accept is a compare-and-set on ``pending`` so that only one driver can
claim a ride; the loser gets ``Conflict``.  Only the bound driver may
start or complete it.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from src.config import settings
from src.domain.authorization import RIDE_OWNERS, ensure_owner
from src.domain.entities import Identity, Location, coerce_number, ensure_transition
from src.domain.enums import RIDE_TRANSITIONS, RideStatus, Role
from src.domain.errors import BadRequest, Conflict, InvalidStateTransition, NotFound
from src.infrastructure.models import DriverModel, RideModel, utcnow
from src.infrastructure.repositories import Store
from src.services.notifications import NotificationService

logger = logging.getLogger(__name__)


class RideService:
    def __init__(self, store: Store, enforce_transitions: bool | None = None):
        self.store = store
        self.notifications = NotificationService(store)
        self.enforce_transitions = (
            settings.enforce_transitions
            if enforce_transitions is None
            else enforce_transitions
        )

    # ── Customer side ─────────────────────────────────────────────

    async def create(
        self,
        customer: Identity,
        *,
        pickup: Optional[Location],
        drop: Optional[Location],
        vehicle_type: Optional[str],
    ) -> RideModel:
        if pickup is None or not pickup.address:
            raise BadRequest("pickup.address is required")
        if drop is None or not drop.address:
            raise BadRequest("drop.address is required")
        if not vehicle_type:
            raise BadRequest("vehicleType is required")

        ride = await self.store.rides.insert(
            customer_id=customer.subject_id,
            pickup_location=pickup.to_dict(),
            drop_location=drop.to_dict(),
            vehicle_type=vehicle_type,
            status=RideStatus.PENDING,
        )
        logger.info("Ride #%d requested by customer #%d", ride.id, customer.subject_id)
        return ride

    async def list_for_customer(self, customer: Identity) -> list[RideModel]:
        return await self.store.rides.for_customer(customer.subject_id)

    async def get_for_customer(
        self, customer: Identity, ride_id: int
    ) -> tuple[RideModel, Optional[DriverModel]]:
        ride = await self._load(ride_id)
        ensure_owner(customer, ride, RIDE_OWNERS)
        driver = (
            await self.store.drivers.get(ride.driver_id)
            if ride.driver_id is not None
            else None
        )
        return ride, driver

    async def cancel(self, customer: Identity, ride_id: int) -> RideModel:
        ride = await self._load(ride_id)
        ensure_owner(customer, ride, RIDE_OWNERS)
        self._check(ride, RideStatus.CANCELLED)
        await self.store.rides.update(ride, status=RideStatus.CANCELLED)
        if ride.driver_id is not None:
            await self.notifications.notify(
                ride.driver_id, Role.DRIVER, "Ride cancelled",
                f"Ride #{ride.id} was cancelled by the customer",
            )
        logger.info("Ride #%d cancelled", ride.id)
        return ride

    # ── Driver side ───────────────────────────────────────────────

    async def open_pool(self) -> list[RideModel]:
        return await self.store.rides.get_pending()

    async def list_for_driver(self, driver: Identity) -> list[RideModel]:
        return await self.store.rides.for_driver(driver.subject_id)

    async def get_for_driver(self, driver: Identity, ride_id: int) -> RideModel:
        """Pending rides are open to every driver; otherwise only the bound one."""
        ride = await self._load(ride_id)
        if ride.status != RideStatus.PENDING:
            ensure_owner(driver, ride, RIDE_OWNERS)
        return ride

    async def accept(self, driver: Identity, ride_id: int) -> RideModel:
        ride = await self._load(ride_id)
        if self.enforce_transitions:
            ensure_transition(RIDE_TRANSITIONS, ride.status, RideStatus.ONGOING)
            claimed = await self.store.rides.compare_and_set(
                ride_id,
                [RideStatus.PENDING],
                status=RideStatus.ONGOING,
                driver_id=driver.subject_id,
            )
            if claimed is None:
                logger.info(
                    "Driver #%d lost the race for ride #%d", driver.subject_id, ride_id
                )
                raise Conflict("Ride was already taken by another driver")
            ride = claimed
        else:
            await self.store.rides.update(
                ride, status=RideStatus.ONGOING, driver_id=driver.subject_id
            )

        await self.notifications.notify(
            ride.customer_id, Role.CUSTOMER, "Ride accepted",
            f"A driver accepted ride #{ride.id}",
        )
        logger.info("Ride #%d accepted by driver #%d", ride_id, driver.subject_id)
        return ride

    async def reject(
        self, driver: Identity, ride_id: int, reason: Optional[str] = None
    ) -> RideModel:
        ride = await self._load(ride_id)
        self._check(ride, RideStatus.REJECTED)
        await self.store.rides.update(ride, status=RideStatus.REJECTED, reason=reason)
        await self.notifications.notify(
            ride.customer_id, Role.CUSTOMER, "Ride rejected",
            reason or f"Ride #{ride.id} was rejected",
        )
        logger.info("Ride #%d rejected by driver #%d", ride_id, driver.subject_id)
        return ride

    async def start(self, driver: Identity, ride_id: int) -> RideModel:
        ride = await self._load_bound(driver, ride_id)
        if self.enforce_transitions:
            ensure_transition(RIDE_TRANSITIONS, ride.status, RideStatus.ONGOING)
            if ride.started_at is not None:
                raise InvalidStateTransition(f"Ride #{ride.id} has already started")
        await self.store.rides.update(
            ride, status=RideStatus.ONGOING, started_at=utcnow()
        )
        logger.info("Ride #%d started", ride_id)
        return ride

    async def complete(
        self, driver: Identity, ride_id: int, fare_collected: Any = None
    ) -> RideModel:
        ride = await self._load_bound(driver, ride_id)
        if self.enforce_transitions:
            ensure_transition(RIDE_TRANSITIONS, ride.status, RideStatus.COMPLETED)
            if ride.started_at is None:
                raise InvalidStateTransition(f"Ride #{ride.id} has not started")
        await self.store.rides.update(
            ride,
            status=RideStatus.COMPLETED,
            fare_collected=coerce_number(fare_collected),
            completed_at=utcnow(),
        )
        logger.info("Ride #%d completed", ride_id)
        return ride

    # ── Internals ─────────────────────────────────────────────────

    def _check(self, ride: RideModel, new_status: RideStatus) -> None:
        if self.enforce_transitions:
            ensure_transition(RIDE_TRANSITIONS, ride.status, new_status)

    async def _load(self, ride_id: int) -> RideModel:
        ride = await self.store.rides.get(ride_id)
        if ride is None:
            raise NotFound("Ride not found")
        return ride

    async def _load_bound(self, driver: Identity, ride_id: int) -> RideModel:
        ride = await self._load(ride_id)
        ensure_owner(driver, ride, RIDE_OWNERS)
        return ride

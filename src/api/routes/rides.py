"""
Ride endpoints
==============

Customer:
  POST /api/v1/rides                  -- request a ride
  GET  /api/v1/rides                  -- own rides
  GET  /api/v1/rides/{ride_id}        -- detail, with driver once bound
  POST /api/v1/rides/{ride_id}/cancel -- cancel

Driver:
  GET  /api/v1/driver/rides                     -- open pool (pending only)
  GET  /api/v1/driver/rides/mine                -- rides bound to the caller
  GET  /api/v1/driver/rides/{ride_id}           -- detail (pending, or bound to the caller)
  POST /api/v1/driver/rides/{ride_id}/accept    -- claim (409 if already taken)
  POST /api/v1/driver/rides/{ride_id}/reject    -- reject with optional reason
  POST /api/v1/driver/rides/{ride_id}/start     -- passenger on board
  POST /api/v1/driver/rides/{ride_id}/complete  -- finish with fare collected
"""

from typing import Optional

from fastapi import APIRouter, Depends, Request

from src.api.dependencies import get_store, require_customer, require_driver
from src.api.middleware import RATE_LIMIT, limiter
from src.api.schemas import (
    CompleteRideRequest,
    DriverInfo,
    LocationOut,
    ReasonRequest,
    RideCreateRequest,
    RideDetail,
    RideSummary,
    StatusMessage,
)
from src.domain.entities import Identity
from src.infrastructure.repositories import Store
from src.services.rides import RideService

router = APIRouter(tags=["rides"])


def _message(ride, message: str) -> StatusMessage:
    return StatusMessage(id=ride.id, status=ride.status.value, message=message)


def _detail(ride, driver=None) -> RideDetail:
    return RideDetail(
        id=ride.id,
        customer_id=ride.customer_id,
        pickup=LocationOut(**ride.pickup_location),
        drop=LocationOut(**ride.drop_location),
        vehicle_type=ride.vehicle_type,
        status=ride.status,
        driver_id=ride.driver_id,
        driver=DriverInfo.model_validate(driver) if driver else None,
        reason=ride.reason,
        fare_collected=ride.fare_collected,
        started_at=ride.started_at,
        completed_at=ride.completed_at,
        created_at=ride.created_at,
    )


# ── Customer ──────────────────────────────────────────────────────────


@router.post(
    "/rides",
    status_code=201,
    response_model=RideSummary,
    summary="Request a ride",
)
@limiter.limit(RATE_LIMIT)
async def create_ride(
    request: Request,
    body: RideCreateRequest,
    customer: Identity = Depends(require_customer),
    store: Store = Depends(get_store),
):
    ride = await RideService(store).create(
        customer,
        pickup=body.pickup.to_location() if body.pickup else None,
        drop=body.drop.to_location() if body.drop else None,
        vehicle_type=body.vehicle_type,
    )
    return RideSummary.from_ride(ride)


@router.get("/rides", response_model=list[RideSummary], summary="List own rides")
@limiter.limit(RATE_LIMIT)
async def list_rides(
    request: Request,
    customer: Identity = Depends(require_customer),
    store: Store = Depends(get_store),
):
    rides = await RideService(store).list_for_customer(customer)
    return [RideSummary.from_ride(r) for r in rides]


@router.get("/rides/{ride_id}", response_model=RideDetail, summary="Ride detail")
@limiter.limit(RATE_LIMIT)
async def get_ride(
    request: Request,
    ride_id: int,
    customer: Identity = Depends(require_customer),
    store: Store = Depends(get_store),
):
    ride, driver = await RideService(store).get_for_customer(customer, ride_id)
    return _detail(ride, driver)


@router.post(
    "/rides/{ride_id}/cancel", response_model=StatusMessage, summary="Cancel a ride"
)
@limiter.limit(RATE_LIMIT)
async def cancel_ride(
    request: Request,
    ride_id: int,
    customer: Identity = Depends(require_customer),
    store: Store = Depends(get_store),
):
    ride = await RideService(store).cancel(customer, ride_id)
    return _message(ride, "Ride cancelled")


# ── Driver ────────────────────────────────────────────────────────────


@router.get(
    "/driver/rides", response_model=list[RideSummary], summary="Open ride requests"
)
@limiter.limit(RATE_LIMIT)
async def ride_pool(
    request: Request,
    driver: Identity = Depends(require_driver),
    store: Store = Depends(get_store),
):
    rides = await RideService(store).open_pool()
    return [RideSummary.from_ride(r) for r in rides]


@router.get(
    "/driver/rides/mine", response_model=list[RideSummary], summary="Own rides"
)
@limiter.limit(RATE_LIMIT)
async def driver_rides(
    request: Request,
    driver: Identity = Depends(require_driver),
    store: Store = Depends(get_store),
):
    rides = await RideService(store).list_for_driver(driver)
    return [RideSummary.from_ride(r) for r in rides]


@router.get(
    "/driver/rides/{ride_id}", response_model=RideDetail, summary="Ride detail (driver)"
)
@limiter.limit(RATE_LIMIT)
async def driver_ride(
    request: Request,
    ride_id: int,
    driver: Identity = Depends(require_driver),
    store: Store = Depends(get_store),
):
    ride = await RideService(store).get_for_driver(driver, ride_id)
    return _detail(ride)


@router.post(
    "/driver/rides/{ride_id}/accept",
    response_model=StatusMessage,
    summary="Accept a ride",
    responses={409: {"description": "Already taken by another driver"}},
)
@limiter.limit(RATE_LIMIT)
async def accept_ride(
    request: Request,
    ride_id: int,
    driver: Identity = Depends(require_driver),
    store: Store = Depends(get_store),
):
    ride = await RideService(store).accept(driver, ride_id)
    return _message(ride, "Ride accepted")


@router.post(
    "/driver/rides/{ride_id}/reject",
    response_model=StatusMessage,
    summary="Reject a ride",
)
@limiter.limit(RATE_LIMIT)
async def reject_ride(
    request: Request,
    ride_id: int,
    body: Optional[ReasonRequest] = None,
    driver: Identity = Depends(require_driver),
    store: Store = Depends(get_store),
):
    reason = body.reason if body else None
    ride = await RideService(store).reject(driver, ride_id, reason)
    return _message(ride, "Ride rejected")


@router.post(
    "/driver/rides/{ride_id}/start",
    response_model=StatusMessage,
    summary="Start a ride",
)
@limiter.limit(RATE_LIMIT)
async def start_ride(
    request: Request,
    ride_id: int,
    driver: Identity = Depends(require_driver),
    store: Store = Depends(get_store),
):
    ride = await RideService(store).start(driver, ride_id)
    return _message(ride, "Ride started")


@router.post(
    "/driver/rides/{ride_id}/complete",
    response_model=StatusMessage,
    summary="Complete a ride",
)
@limiter.limit(RATE_LIMIT)
async def complete_ride(
    request: Request,
    ride_id: int,
    body: Optional[CompleteRideRequest] = None,
    driver: Identity = Depends(require_driver),
    store: Store = Depends(get_store),
):
    fare = body.fare_collected if body else None
    ride = await RideService(store).complete(driver, ride_id, fare)
    return _message(ride, "Ride completed")

"""Unit tests for lifecycle transition tables and lenient number parsing."""

import pytest

from src.domain.entities import coerce_number, ensure_transition
from src.domain.enums import (
    DELIVERY_TRANSITIONS,
    ORDER_TRANSITIONS,
    RIDE_TRANSITIONS,
    DeliveryStatus,
    OrderStatus,
    RideStatus,
)
from src.domain.errors import Conflict, InvalidStateTransition


class TestOrderStateMachine:
    # ── Valid transitions ─────────────────────────────────────────

    @pytest.mark.parametrize(
        "current,new",
        [
            (OrderStatus.PENDING, OrderStatus.ACCEPTED),
            (OrderStatus.PENDING, OrderStatus.REJECTED),
            (OrderStatus.ACCEPTED, OrderStatus.READY),
            (OrderStatus.READY, OrderStatus.CANCELLED),
            (OrderStatus.READY, OrderStatus.PICKED_UP),
            (OrderStatus.PICKED_UP, OrderStatus.DELIVERED),
        ],
    )
    def test_legal(self, current, new):
        ensure_transition(ORDER_TRANSITIONS, current, new)

    # ── Invalid transitions ───────────────────────────────────────

    def test_reject_only_from_pending(self):
        with pytest.raises(InvalidStateTransition):
            ensure_transition(
                ORDER_TRANSITIONS, OrderStatus.ACCEPTED, OrderStatus.REJECTED
            )

    def test_ready_requires_accepted(self):
        with pytest.raises(InvalidStateTransition):
            ensure_transition(ORDER_TRANSITIONS, OrderStatus.PENDING, OrderStatus.READY)

    def test_cannot_cancel_after_pickup(self):
        with pytest.raises(InvalidStateTransition):
            ensure_transition(
                ORDER_TRANSITIONS, OrderStatus.PICKED_UP, OrderStatus.CANCELLED
            )

    def test_terminal_states_are_final(self):
        for terminal in (
            OrderStatus.CANCELLED,
            OrderStatus.REJECTED,
            OrderStatus.DELIVERED,
        ):
            assert ORDER_TRANSITIONS[terminal] == set()


class TestDeliveryStateMachine:
    def test_happy_path(self):
        path = [
            DeliveryStatus.READY,
            DeliveryStatus.ACCEPTED,
            DeliveryStatus.ONGOING,
            DeliveryStatus.COMPLETED,
        ]
        for current, new in zip(path, path[1:]):
            ensure_transition(DELIVERY_TRANSITIONS, current, new)

    def test_reject_only_from_ready(self):
        with pytest.raises(InvalidStateTransition):
            ensure_transition(
                DELIVERY_TRANSITIONS, DeliveryStatus.ACCEPTED, DeliveryStatus.REJECTED
            )

    def test_cannot_skip_start(self):
        with pytest.raises(InvalidStateTransition):
            ensure_transition(
                DELIVERY_TRANSITIONS, DeliveryStatus.ACCEPTED, DeliveryStatus.COMPLETED
            )


class TestRideStateMachine:
    def test_pending_to_ongoing(self):
        ensure_transition(RIDE_TRANSITIONS, RideStatus.PENDING, RideStatus.ONGOING)

    def test_ongoing_to_cancelled(self):
        ensure_transition(RIDE_TRANSITIONS, RideStatus.ONGOING, RideStatus.CANCELLED)

    def test_pending_to_completed_fails(self):
        with pytest.raises(InvalidStateTransition):
            ensure_transition(
                RIDE_TRANSITIONS, RideStatus.PENDING, RideStatus.COMPLETED
            )

    def test_completed_to_anything_fails(self):
        with pytest.raises(InvalidStateTransition):
            ensure_transition(
                RIDE_TRANSITIONS, RideStatus.COMPLETED, RideStatus.PENDING
            )

    def test_reject_after_accept_fails(self):
        with pytest.raises(InvalidStateTransition):
            ensure_transition(RIDE_TRANSITIONS, RideStatus.ONGOING, RideStatus.REJECTED)

    def test_invalid_transition_is_a_conflict(self):
        with pytest.raises(Conflict) as info:
            ensure_transition(
                RIDE_TRANSITIONS, RideStatus.CANCELLED, RideStatus.ONGOING
            )
        assert info.value.status_code == 409
        assert "cancelled" in info.value.detail


class TestCoerceNumber:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            (10, 10.0),
            ("12.5", 12.5),
            ("abc", 0.0),
            (None, 0.0),
            ("", 0.0),
            ([1], 0.0),
            (True, 0.0),
            ("nan", 0.0),
        ],
    )
    def test_lenient(self, raw, expected):
        assert coerce_number(raw) == expected

    def test_custom_default(self):
        assert coerce_number("x", default=1.0) == 1.0

"""Tests for the Delivery state machine — valid, skipped and terminal transitions."""

from datetime import UTC, date, datetime

import pytest
from fulfillment.delivery.delivery import (
    _VALID_TRANSITIONS,
    TERMINAL_STATUSES,
    Delivery,
    DeliveryStatus,
)
from fulfillment.shared.errors import ConflictError, InvalidTransitionError

_FORWARD_PATH = [
    DeliveryStatus.PICKED_UP,
    DeliveryStatus.IN_TRANSIT,
    DeliveryStatus.NEAR_DESTINATION,
    DeliveryStatus.DELIVERED,
]


def _make_delivery():
    return Delivery.schedule("ord-001", date(2026, 3, 2), "Lunch")


def _assigned():
    delivery = _make_delivery()
    delivery.assign_driver("drv-001")
    return delivery


def _advance_to(target: DeliveryStatus):
    delivery = _assigned()
    for status in _FORWARD_PATH[: _FORWARD_PATH.index(target) + 1]:
        delivery.advance(status.value)
    return delivery


class TestTransitionTable:
    def test_every_status_has_an_entry(self):
        assert set(_VALID_TRANSITIONS) == set(DeliveryStatus)

    def test_terminal_states_have_no_exits(self):
        for status in TERMINAL_STATUSES:
            assert _VALID_TRANSITIONS[status] == set()

    def test_every_non_terminal_state_can_fail_or_cancel(self):
        for status, targets in _VALID_TRANSITIONS.items():
            if status not in TERMINAL_STATUSES:
                assert DeliveryStatus.FAILED in targets
                assert DeliveryStatus.CANCELLED in targets


class TestScheduling:
    def test_new_delivery_is_pending_without_driver(self):
        delivery = _make_delivery()
        assert delivery.status == DeliveryStatus.PENDING.value
        assert delivery.driver_id is None
        assert delivery.completed_at is None
        assert delivery.date == date(2026, 3, 2)

    def test_schedule_raises_event(self):
        delivery = _make_delivery()
        assert delivery._events[-1].__class__.__name__ == "DeliveryScheduled"
        assert delivery._events[-1].delivery_date == "2026-03-02"


class TestAssignDriver:
    def test_pending_to_assigned(self):
        delivery = _assigned()
        assert delivery.status == DeliveryStatus.ASSIGNED.value
        assert delivery.driver_id == "drv-001"
        assert delivery.assigned_at is not None

    def test_cannot_reassign_an_assigned_delivery(self):
        delivery = _assigned()
        with pytest.raises(ConflictError):
            delivery.assign_driver("drv-002")
        assert delivery.driver_id == "drv-001"

    def test_cannot_assign_a_terminal_delivery(self):
        delivery = _make_delivery()
        delivery.advance("Cancelled")
        with pytest.raises(ConflictError):
            delivery.assign_driver("drv-001")


class TestForwardPath:
    def test_walks_one_step_at_a_time_to_delivered(self):
        delivery = _assigned()
        for status in _FORWARD_PATH:
            delivery.advance(status.value)
            assert delivery.status == status.value

    def test_picked_up_stamps_started_at(self):
        delivery = _advance_to(DeliveryStatus.PICKED_UP)
        assert delivery.started_at is not None
        assert delivery.completed_at is None

    def test_delivered_stamps_completed_at(self):
        delivery = _advance_to(DeliveryStatus.DELIVERED)
        assert delivery.completed_at is not None
        assert delivery.is_terminal

    def test_notes_are_stored_verbatim(self):
        delivery = _assigned()
        delivery.advance("PickedUp", notes="  Left at gate #4  ")
        assert delivery.notes == "  Left at gate #4  "

    def test_missing_notes_keep_previous_value(self):
        delivery = _assigned()
        delivery.advance("PickedUp", notes="Collected")
        delivery.advance("InTransit")
        assert delivery.notes == "Collected"


class TestSkipsAreRejected:
    def test_assigned_to_delivered_is_rejected(self):
        delivery = _assigned()
        with pytest.raises(InvalidTransitionError) as exc:
            delivery.advance("Delivered")
        assert "Cannot transition from Assigned to Delivered" in str(exc.value)
        assert delivery.status == DeliveryStatus.ASSIGNED.value

    def test_pending_to_picked_up_is_rejected(self):
        delivery = _make_delivery()
        with pytest.raises(InvalidTransitionError):
            delivery.advance("PickedUp")

    def test_backwards_move_is_rejected(self):
        delivery = _advance_to(DeliveryStatus.IN_TRANSIT)
        with pytest.raises(InvalidTransitionError):
            delivery.advance("PickedUp")

    def test_assigned_only_through_driver_assignment(self):
        delivery = _make_delivery()
        with pytest.raises(InvalidTransitionError) as exc:
            delivery.advance("Assigned")
        assert "driver assignment" in str(exc.value)

    def test_unknown_status_is_rejected(self):
        delivery = _assigned()
        with pytest.raises(InvalidTransitionError) as exc:
            delivery.advance("Teleported")
        assert "Unknown delivery status" in str(exc.value)


class TestAbortPaths:
    @pytest.mark.parametrize(
        "start",
        [DeliveryStatus.PICKED_UP, DeliveryStatus.IN_TRANSIT, DeliveryStatus.NEAR_DESTINATION],
    )
    def test_in_flight_delivery_can_fail(self, start):
        delivery = _advance_to(start)
        delivery.advance("Failed", notes="Customer unreachable")
        assert delivery.status == DeliveryStatus.FAILED.value
        assert delivery.completed_at is not None

    def test_pending_delivery_can_be_cancelled_without_driver(self):
        delivery = _make_delivery()
        delivery.advance("Cancelled")
        assert delivery.status == DeliveryStatus.CANCELLED.value
        assert delivery.driver_id is None
        assert delivery.completed_at is not None


class TestTerminalStates:
    @pytest.mark.parametrize("terminal", ["Delivered", "Failed", "Cancelled"])
    def test_no_transition_out_of_terminal(self, terminal):
        delivery = _advance_to(DeliveryStatus.NEAR_DESTINATION)
        delivery.advance(terminal)
        with pytest.raises(InvalidTransitionError) as exc:
            delivery.advance("Failed")
        assert "already" in str(exc.value)


class TestAutoComplete:
    def test_pending_delivery_auto_completes(self):
        delivery = _make_delivery()
        at = datetime(2026, 3, 2, 11, 30, 5, tzinfo=UTC)
        delivery.auto_complete(at, "Auto-delivered at 15:30:05 (Lunch cutover)")
        assert delivery.status == DeliveryStatus.DELIVERED.value
        assert delivery.completed_at == at
        assert delivery.notes == "Auto-delivered at 15:30:05 (Lunch cutover)"

    def test_in_transit_delivery_auto_completes(self):
        delivery = _advance_to(DeliveryStatus.IN_TRANSIT)
        delivery.auto_complete(datetime.now(UTC), "Auto-delivered")
        assert delivery.status == DeliveryStatus.DELIVERED.value

    def test_auto_complete_event_is_flagged_automatic(self):
        delivery = _assigned()
        delivery.auto_complete(datetime.now(UTC), "Auto-delivered")
        event = delivery._events[-1]
        assert event.__class__.__name__ == "DeliveryCompleted"
        assert event.automatic is True
        assert event.outcome == "Delivered"

    def test_terminal_delivery_cannot_auto_complete(self):
        delivery = _make_delivery()
        delivery.advance("Failed")
        with pytest.raises(InvalidTransitionError):
            delivery.auto_complete(datetime.now(UTC), "Auto-delivered")

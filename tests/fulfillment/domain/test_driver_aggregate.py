"""Tests for the Driver aggregate — dispatch, release and availability."""

import pytest
from fulfillment.driver.driver import Driver, DriverStatus
from fulfillment.shared.errors import ConflictError
from protean.exceptions import ValidationError


def _make_driver(**overrides):
    defaults = {"name": "Rashid", "phone": "+971500000001", "vehicle_type": "bike"}
    defaults.update(overrides)
    return Driver.register(**defaults)


class TestRegistration:
    def test_new_driver_is_available(self):
        driver = _make_driver()
        assert driver.status == DriverStatus.AVAILABLE.value
        assert driver.capacity == 1
        assert driver.last_updated is not None

    def test_registration_raises_event(self):
        driver = _make_driver()
        event = driver._events[0]
        assert event.__class__.__name__ == "DriverRegistered"
        assert event.name == "Rashid"

    def test_phone_is_required(self):
        with pytest.raises(ValidationError):
            Driver.register(name="No Phone", phone=None)


class TestDispatchAndRelease:
    def test_dispatch_takes_driver_off_the_pool(self):
        driver = _make_driver()
        driver.dispatch("dlv-001")
        assert driver.status == DriverStatus.ON_DELIVERY.value
        assert not driver.is_available

    def test_busy_driver_cannot_be_dispatched_again(self):
        driver = _make_driver()
        driver.dispatch("dlv-001")
        with pytest.raises(ConflictError) as exc:
            driver.dispatch("dlv-002")
        assert "not available" in str(exc.value)

    def test_offline_driver_cannot_be_dispatched(self):
        driver = _make_driver()
        driver.change_availability("offline")
        with pytest.raises(ConflictError):
            driver.dispatch("dlv-001")

    def test_release_makes_driver_available_and_clears_location(self):
        driver = _make_driver()
        driver.dispatch("dlv-001")
        driver.update_location("25.2048,55.2708")
        driver.release("dlv-001")
        assert driver.status == DriverStatus.AVAILABLE.value
        assert driver.current_location is None
        assert driver._events[-1].__class__.__name__ == "DriverReleased"


class TestAvailability:
    def test_go_offline_and_back(self):
        driver = _make_driver()
        driver.change_availability("offline")
        assert driver.status == DriverStatus.OFFLINE.value
        driver.change_availability("available")
        assert driver.status == DriverStatus.AVAILABLE.value

    def test_driver_on_delivery_cannot_go_offline(self):
        driver = _make_driver()
        driver.dispatch("dlv-001")
        with pytest.raises(ConflictError):
            driver.change_availability("offline")

    def test_on_delivery_cannot_be_set_by_hand(self):
        driver = _make_driver()
        with pytest.raises(ValidationError):
            driver.change_availability("on_delivery")

    def test_unknown_status_is_rejected(self):
        driver = _make_driver()
        with pytest.raises(ValidationError):
            driver.change_availability("sleeping")

    def test_same_status_is_a_no_op(self):
        driver = _make_driver()
        event_count = len(driver._events)
        driver.change_availability("available")
        assert len(driver._events) == event_count

"""Shared BDD fixtures and step definitions for the Fulfillment domain."""

import json
from datetime import date

import pytest
from fulfillment.delivery.delivery import Delivery
from fulfillment.delivery.events import (
    DeliveryCompleted,
    DeliveryScheduled,
    DeliveryStatusChanged,
    DriverAssigned,
    RouteAssigned,
)
from fulfillment.driver.driver import Driver
from fulfillment.driver.management import RegisterDriver
from fulfillment.order.placement import PlaceOrder
from fulfillment.shared.errors import FulfillmentError
from protean import current_domain
from pytest_bdd import given, parsers, then

_DELIVERY_EVENT_CLASSES = {
    "DeliveryScheduled": DeliveryScheduled,
    "DriverAssigned": DriverAssigned,
    "RouteAssigned": RouteAssigned,
    "DeliveryStatusChanged": DeliveryStatusChanged,
    "DeliveryCompleted": DeliveryCompleted,
}

SERVICE_DATE = date(2026, 3, 2)


@pytest.fixture()
def error():
    """Container for captured fulfillment errors."""
    return {"exc": None}


@pytest.fixture()
def fleet():
    """Persisted drivers and deliveries, keyed by the names used in scenarios."""
    return {"drivers": {}, "deliveries": {}}


# ---------------------------------------------------------------------------
# Given steps: in-memory aggregates
# ---------------------------------------------------------------------------
@given("a pending delivery", target_fixture="delivery")
def pending_delivery():
    delivery = Delivery.schedule("ord-bdd-001", SERVICE_DATE, "Lunch")
    delivery._events.clear()
    return delivery


@given("an assigned delivery", target_fixture="delivery")
def assigned_delivery():
    delivery = Delivery.schedule("ord-bdd-002", SERVICE_DATE, "Lunch")
    delivery.assign_driver("drv-bdd-001")
    delivery._events.clear()
    return delivery


@given("an in-transit delivery", target_fixture="delivery")
def in_transit_delivery():
    delivery = Delivery.schedule("ord-bdd-003", SERVICE_DATE, "Lunch")
    delivery.assign_driver("drv-bdd-001")
    delivery.advance("PickedUp")
    delivery.advance("InTransit")
    delivery._events.clear()
    return delivery


@given("a cancelled delivery", target_fixture="delivery")
def cancelled_delivery():
    delivery = Delivery.schedule("ord-bdd-004", SERVICE_DATE, "Lunch")
    delivery.advance("Cancelled")
    delivery._events.clear()
    return delivery


# ---------------------------------------------------------------------------
# Given steps: persisted through commands
# ---------------------------------------------------------------------------
@given(parsers.cfparse('driver "{name}" is available'))
def available_driver(fleet, name):
    fleet["drivers"][name] = current_domain.process(
        RegisterDriver(name=name, phone="+971500000099"),
        asynchronous=False,
    )


@given(parsers.cfparse('a pending {slot} delivery "{label}" for {day}'))
def scheduled_delivery(fleet, slot, label, day):
    order_id = current_domain.process(
        PlaceOrder(
            items=json.dumps([{"product_id": "meal-bdd", "quantity": 1, "price": 20.0}]),
            slot=slot,
            start_date=date.fromisoformat(day),
        ),
        asynchronous=False,
    )
    delivery = current_domain.repository_for(Delivery).for_order(order_id)[0]
    fleet["deliveries"][label] = str(delivery.id)


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the delivery status is "{status}"'))
def delivery_status_is(delivery, status):
    assert delivery.status == status


@then(parsers.cfparse("a {event_type} event is raised"))
def delivery_event_raised(delivery, event_type):
    event_cls = _DELIVERY_EVENT_CLASSES[event_type]
    assert any(
        isinstance(e, event_cls) for e in delivery._events
    ), f"No {event_type} event found. Events: {[type(e).__name__ for e in delivery._events]}"


@then(parsers.cfparse('the action is rejected with a "{error_type}"'))
def action_rejected(error, error_type):
    assert error["exc"] is not None, "Expected the action to be rejected"
    assert isinstance(error["exc"], FulfillmentError)
    assert type(error["exc"]).__name__ == error_type


@then(parsers.cfparse('delivery "{label}" is "{status}"'))
def stored_delivery_status_is(fleet, label, status):
    delivery = current_domain.repository_for(Delivery).get(fleet["deliveries"][label])
    assert delivery.status == status


@then(parsers.cfparse('driver "{name}" is "{status}"'))
def stored_driver_status_is(fleet, name, status):
    driver = current_domain.repository_for(Driver).get(fleet["drivers"][name])
    assert driver.status == status

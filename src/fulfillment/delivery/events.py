"""Delivery domain events — immutable facts about delivery state changes.

Events carry the delivery date (ISO string) and slot so slot-level views can
be maintained without reloading the aggregate.
"""

from protean.fields import Boolean, DateTime, Identifier, String, Text

from fulfillment.domain import fulfillment


@fulfillment.event(part_of="Delivery")
class DeliveryScheduled:
    """A delivery occurrence was scheduled for an order."""

    __version__ = 1

    delivery_id = Identifier(required=True)
    order_id = Identifier(required=True)
    delivery_date = String(required=True)
    slot = String(required=True)
    scheduled_at = DateTime(required=True)


@fulfillment.event(part_of="Delivery")
class DriverAssigned:
    """A driver was bound to a pending delivery."""

    __version__ = 1

    delivery_id = Identifier(required=True)
    driver_id = Identifier(required=True)
    delivery_date = String(required=True)
    slot = String(required=True)
    assigned_at = DateTime(required=True)


@fulfillment.event(part_of="Delivery")
class RouteAssigned:
    """A delivery was placed on a route."""

    __version__ = 1

    delivery_id = Identifier(required=True)
    route_id = Identifier(required=True)
    delivery_date = String(required=True)
    assigned_at = DateTime(required=True)


@fulfillment.event(part_of="Delivery")
class DeliveryStatusChanged:
    """A delivery moved one step forward through physical handling."""

    __version__ = 1

    delivery_id = Identifier(required=True)
    from_status = String(required=True)
    to_status = String(required=True)
    notes = Text()
    changed_at = DateTime(required=True)


@fulfillment.event(part_of="Delivery")
class DeliveryCompleted:
    """A delivery reached a terminal outcome (Delivered, Failed or Cancelled)."""

    __version__ = 1

    delivery_id = Identifier(required=True)
    order_id = Identifier(required=True)
    driver_id = Identifier()
    delivery_date = String(required=True)
    slot = String(required=True)
    outcome = String(required=True)
    automatic = Boolean(default=False)
    notes = Text()
    completed_at = DateTime(required=True)

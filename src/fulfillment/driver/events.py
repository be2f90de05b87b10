"""Driver domain events."""

from protean.fields import DateTime, Identifier, String

from fulfillment.domain import fulfillment


@fulfillment.event(part_of="Driver")
class DriverRegistered:
    """A driver joined the fleet."""

    __version__ = 1

    driver_id = Identifier(required=True)
    name = String(required=True)
    vehicle_type = String()
    registered_at = DateTime(required=True)


@fulfillment.event(part_of="Driver")
class DriverDispatched:
    """A driver was bound to a delivery and is no longer available."""

    __version__ = 1

    driver_id = Identifier(required=True)
    delivery_id = Identifier(required=True)
    dispatched_at = DateTime(required=True)


@fulfillment.event(part_of="Driver")
class DriverReleased:
    """A driver's delivery ended and the driver is available again."""

    __version__ = 1

    driver_id = Identifier(required=True)
    delivery_id = Identifier()
    released_at = DateTime(required=True)


@fulfillment.event(part_of="Driver")
class DriverAvailabilityChanged:
    __version__ = 1

    driver_id = Identifier(required=True)
    from_status = String(required=True)
    to_status = String(required=True)
    changed_at = DateTime(required=True)


@fulfillment.event(part_of="Driver")
class DriverRemoved:
    __version__ = 1

    driver_id = Identifier(required=True)
    removed_at = DateTime(required=True)

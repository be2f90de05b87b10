"""Delivery network events — zones and routes."""

from protean.fields import DateTime, Identifier, Integer, String

from fulfillment.domain import fulfillment


@fulfillment.event(part_of="Zone")
class ZoneCreated:
    __version__ = 1

    zone_id = Identifier(required=True)
    name = String(required=True)
    created_at = DateTime(required=True)


@fulfillment.event(part_of="Route")
class RouteCreated:
    __version__ = 1

    route_id = Identifier(required=True)
    zone_id = Identifier(required=True)
    name = String(required=True)
    max_deliveries = Integer(required=True)
    created_at = DateTime(required=True)


@fulfillment.event(part_of="Route")
class RouteRemoved:
    __version__ = 1

    route_id = Identifier(required=True)
    zone_id = Identifier(required=True)
    removed_at = DateTime(required=True)

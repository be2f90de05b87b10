"""Delivery network management — zones and routes."""

import json

from protean import handle
from protean.fields import Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from fulfillment.delivery.delivery import Delivery
from fulfillment.domain import fulfillment
from fulfillment.network.route import Route
from fulfillment.network.zone import Zone
from fulfillment.shared.errors import ConflictError, load


@fulfillment.command(part_of="Zone")
class CreateZone:
    name = String(required=True, max_length=100)
    description = Text()


@fulfillment.command(part_of="Route")
class CreateRoute:
    zone_id = Identifier(required=True)
    name = String(required=True, max_length=100)
    max_deliveries = Integer(required=True, min_value=1)
    areas = Text()  # JSON list of area names
    estimated_time = Integer(min_value=0)
    start_location = String(max_length=255)
    end_location = String(max_length=255)


@fulfillment.command(part_of="Route")
class RemoveRoute:
    route_id = Identifier(required=True)


@fulfillment.command_handler(part_of=Zone)
class ZoneManagementHandler:
    @handle(CreateZone)
    def create_zone(self, command):
        zone = Zone.create(name=command.name, description=command.description)
        current_domain.repository_for(Zone).add(zone)
        return str(zone.id)


@fulfillment.command_handler(part_of=Route)
class RouteManagementHandler:
    @handle(CreateRoute)
    def create_route(self, command):
        load(Zone, command.zone_id)

        areas = json.loads(command.areas) if isinstance(command.areas, str) else command.areas
        route = Route.create(
            zone_id=command.zone_id,
            name=command.name,
            max_deliveries=command.max_deliveries,
            areas=areas,
            estimated_time=command.estimated_time,
            start_location=command.start_location,
            end_location=command.end_location,
        )
        current_domain.repository_for(Route).add(route)
        return str(route.id)

    @handle(RemoveRoute)
    def remove_route(self, command):
        route = load(Route, command.route_id)

        delivery_repo = current_domain.repository_for(Delivery)
        referencing = delivery_repo.for_route(str(route.id))
        active = [d for d in referencing if not d.is_terminal]
        if active:
            raise ConflictError(
                {"route_id": [f"Route `{route.id}` still carries {len(active)} active deliveries"]}
            )

        for delivery in referencing:
            delivery.detach_route()
            delivery_repo.add(delivery)

        repo = current_domain.repository_for(Route)
        route.mark_removed()
        repo.add(route)
        repo._dao.delete(route)

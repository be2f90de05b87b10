"""Route aggregate — an ordered path through a zone with a daily delivery ceiling."""

import json
from datetime import UTC, datetime

from protean.fields import Identifier, Integer, String, Text

from fulfillment.domain import fulfillment
from fulfillment.network.events import RouteCreated, RouteRemoved
from fulfillment.shared.errors import CapacityExceededError


@fulfillment.aggregate
class Route:
    zone_id = Identifier(required=True)
    name = String(required=True, max_length=100)
    areas = Text()  # JSON array of area names
    estimated_time = Integer(min_value=0)  # minutes
    max_deliveries = Integer(required=True, min_value=1)
    start_location = String(max_length=255)
    end_location = String(max_length=255)

    @classmethod
    def create(
        cls,
        zone_id: str,
        name: str,
        max_deliveries: int,
        areas: list[str] | None = None,
        estimated_time: int | None = None,
        start_location: str | None = None,
        end_location: str | None = None,
    ):
        route = cls(
            zone_id=zone_id,
            name=name,
            areas=json.dumps(areas or []),
            estimated_time=estimated_time,
            max_deliveries=max_deliveries,
            start_location=start_location,
            end_location=end_location,
        )
        route.raise_(
            RouteCreated(
                route_id=str(route.id),
                zone_id=str(zone_id),
                name=name,
                max_deliveries=max_deliveries,
                created_at=datetime.now(UTC),
            )
        )
        return route

    @property
    def area_list(self) -> list[str]:
        return json.loads(self.areas) if self.areas else []

    def ensure_capacity(self, active_count: int) -> None:
        """Reject a delivery that would take the route past its daily ceiling.

        ``active_count`` includes the delivery being placed.
        """
        if active_count > self.max_deliveries:
            raise CapacityExceededError(
                {
                    "route_id": [
                        f"Route `{self.id}` allows {self.max_deliveries} active deliveries per day"
                    ]
                }
            )

    def mark_removed(self) -> None:
        self.raise_(
            RouteRemoved(
                route_id=str(self.id),
                zone_id=str(self.zone_id),
                removed_at=datetime.now(UTC),
            )
        )

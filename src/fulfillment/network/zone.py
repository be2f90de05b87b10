"""Zone aggregate — a service area grouping delivery routes."""

from datetime import UTC, datetime

from protean.fields import Boolean, String, Text

from fulfillment.domain import fulfillment
from fulfillment.network.events import ZoneCreated


@fulfillment.aggregate
class Zone:
    name = String(required=True, max_length=100)
    description = Text()
    active = Boolean(default=True)

    @classmethod
    def create(cls, name: str, description: str | None = None):
        zone = cls(name=name, description=description, active=True)
        zone.raise_(
            ZoneCreated(
                zone_id=str(zone.id),
                name=name,
                created_at=datetime.now(UTC),
            )
        )
        return zone

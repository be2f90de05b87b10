"""Driver aggregate — a courier who carries at most one active delivery.

Status:
    available ⇄ offline        (driver's own choice)
    available → on_delivery    (only through driver assignment)
    on_delivery → available    (when the delivery reaches a terminal state)
"""

from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import DateTime, Integer, String

from fulfillment.domain import fulfillment
from fulfillment.driver.events import (
    DriverAvailabilityChanged,
    DriverDispatched,
    DriverRegistered,
    DriverReleased,
    DriverRemoved,
)
from fulfillment.shared.errors import ConflictError


class DriverStatus(Enum):
    AVAILABLE = "available"
    ON_DELIVERY = "on_delivery"
    OFFLINE = "offline"


@fulfillment.aggregate
class Driver:
    name = String(required=True, max_length=100)
    phone = String(required=True, max_length=30)
    vehicle_type = String(max_length=50)
    vehicle_number = String(max_length=30)
    capacity = Integer(default=1, min_value=1)
    status = String(
        max_length=20,
        choices=DriverStatus,
        default=DriverStatus.AVAILABLE.value,
    )
    current_location = String(max_length=255)
    last_updated = DateTime()

    @classmethod
    def register(
        cls,
        name: str,
        phone: str,
        vehicle_type: str | None = None,
        vehicle_number: str | None = None,
        capacity: int | None = None,
    ):
        now = datetime.now(UTC)
        driver = cls(
            name=name,
            phone=phone,
            vehicle_type=vehicle_type,
            vehicle_number=vehicle_number,
            capacity=capacity or 1,
            status=DriverStatus.AVAILABLE.value,
            last_updated=now,
        )
        driver.raise_(
            DriverRegistered(
                driver_id=str(driver.id),
                name=name,
                vehicle_type=vehicle_type,
                registered_at=now,
            )
        )
        return driver

    @property
    def is_available(self) -> bool:
        return self.status == DriverStatus.AVAILABLE.value

    def dispatch(self, delivery_id: str) -> None:
        """Take the driver off the available pool for one delivery."""
        if not self.is_available:
            raise ConflictError({"driver_id": [f"Driver `{self.id}` is {self.status}, not available"]})

        now = datetime.now(UTC)
        self.status = DriverStatus.ON_DELIVERY.value
        self.last_updated = now
        self.raise_(
            DriverDispatched(
                driver_id=str(self.id),
                delivery_id=str(delivery_id),
                dispatched_at=now,
            )
        )

    def release(self, delivery_id: str | None = None) -> None:
        """Return the driver to the available pool and forget the last position."""
        now = datetime.now(UTC)
        self.status = DriverStatus.AVAILABLE.value
        self.current_location = None
        self.last_updated = now
        self.raise_(
            DriverReleased(
                driver_id=str(self.id),
                delivery_id=str(delivery_id) if delivery_id else None,
                released_at=now,
            )
        )

    def change_availability(self, target_status: str) -> None:
        try:
            target = DriverStatus(target_status)
        except ValueError:
            raise ValidationError({"status": [f"Unknown driver status `{target_status}`"]}) from None

        if target == DriverStatus.ON_DELIVERY:
            raise ValidationError({"status": ["Drivers go on delivery only through assignment"]})
        if self.status == DriverStatus.ON_DELIVERY.value:
            raise ConflictError({"status": ["A driver on delivery cannot change availability"]})
        if self.status == target.value:
            return

        now = datetime.now(UTC)
        previous = self.status
        self.status = target.value
        self.last_updated = now
        self.raise_(
            DriverAvailabilityChanged(
                driver_id=str(self.id),
                from_status=previous,
                to_status=target.value,
                changed_at=now,
            )
        )

    def update_location(self, location: str) -> None:
        self.current_location = location
        self.last_updated = datetime.now(UTC)

    def mark_removed(self) -> None:
        self.raise_(DriverRemoved(driver_id=str(self.id), removed_at=datetime.now(UTC)))

"""Delivery aggregate — the core of the fulfillment engine.

A Delivery is one scheduled drop-off of an order in a meal slot. Every status
change goes through this aggregate so there is exactly one definition of a
legal transition, whether it comes from a dispatcher or from the cutover
scheduler.

State Machine:
    Pending → Assigned → PickedUp → InTransit → NearDestination → Delivered
    {any non-terminal} → Failed | Cancelled
    {any non-terminal} → Delivered   (cutover auto-completion only)

Assigned is entered only through driver assignment. Delivered, Failed and
Cancelled are terminal.
"""

from datetime import UTC, datetime
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import Date, DateTime, Identifier, String, Text

from fulfillment.delivery.events import (
    DeliveryCompleted,
    DeliveryScheduled,
    DeliveryStatusChanged,
    DriverAssigned,
    RouteAssigned,
)
from fulfillment.domain import fulfillment
from fulfillment.shared.errors import ConflictError, InvalidTransitionError


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class DeliveryStatus(Enum):
    PENDING = "Pending"
    ASSIGNED = "Assigned"
    PICKED_UP = "PickedUp"
    IN_TRANSIT = "InTransit"
    NEAR_DESTINATION = "NearDestination"
    DELIVERED = "Delivered"
    FAILED = "Failed"
    CANCELLED = "Cancelled"


class Slot(Enum):
    LUNCH = "Lunch"
    DINNER = "Dinner"


TERMINAL_STATUSES = frozenset(
    {
        DeliveryStatus.DELIVERED,
        DeliveryStatus.FAILED,
        DeliveryStatus.CANCELLED,
    }
)

# Statuses on the physical handling path; a driver must be attached
_HANDLING_STATUSES = frozenset(
    {
        DeliveryStatus.ASSIGNED,
        DeliveryStatus.PICKED_UP,
        DeliveryStatus.IN_TRANSIT,
        DeliveryStatus.NEAR_DESTINATION,
    }
)

_ABORT = {DeliveryStatus.FAILED, DeliveryStatus.CANCELLED}

_VALID_TRANSITIONS = {
    DeliveryStatus.PENDING: {DeliveryStatus.ASSIGNED} | _ABORT,
    DeliveryStatus.ASSIGNED: {DeliveryStatus.PICKED_UP} | _ABORT,
    DeliveryStatus.PICKED_UP: {DeliveryStatus.IN_TRANSIT} | _ABORT,
    DeliveryStatus.IN_TRANSIT: {DeliveryStatus.NEAR_DESTINATION} | _ABORT,
    DeliveryStatus.NEAR_DESTINATION: {DeliveryStatus.DELIVERED} | _ABORT,
    DeliveryStatus.DELIVERED: set(),  # terminal
    DeliveryStatus.FAILED: set(),  # terminal
    DeliveryStatus.CANCELLED: set(),  # terminal
}


def parse_status(value) -> DeliveryStatus:
    """Resolve a status value, rejecting anything outside the state machine."""
    try:
        return DeliveryStatus(value)
    except ValueError:
        raise InvalidTransitionError({"status": [f"Unknown delivery status `{value}`"]}) from None


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@fulfillment.aggregate
class Delivery:
    order_id = Identifier(required=True)
    route_id = Identifier()
    driver_id = Identifier()
    date = Date(required=True)
    slot = String(required=True, max_length=20, choices=Slot)
    status = String(
        max_length=20,
        choices=DeliveryStatus,
        default=DeliveryStatus.PENDING.value,
    )
    notes = Text()
    assigned_at = DateTime()
    started_at = DateTime()
    completed_at = DateTime()
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def pending_delivery_has_no_driver(self):
        if self.status == DeliveryStatus.PENDING.value and self.driver_id:
            raise ValidationError({"driver_id": ["A pending delivery cannot have a driver"]})

    @invariant.post
    def handling_requires_driver(self):
        if DeliveryStatus(self.status) in _HANDLING_STATUSES and not self.driver_id:
            raise ValidationError({"driver_id": [f"A {self.status} delivery must have a driver"]})

    @invariant.post
    def completed_at_marks_terminal_states(self):
        terminal = DeliveryStatus(self.status) in TERMINAL_STATUSES
        if terminal and self.completed_at is None:
            raise ValidationError({"completed_at": ["Terminal deliveries must record completion time"]})
        if not terminal and self.completed_at is not None:
            raise ValidationError({"completed_at": ["Only terminal deliveries have a completion time"]})

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def schedule(cls, order_id: str, delivery_date, slot: str):
        """Schedule a pending delivery occurrence for an order."""
        now = datetime.now(UTC)
        delivery = cls(
            order_id=order_id,
            date=delivery_date,
            slot=slot,
            status=DeliveryStatus.PENDING.value,
            created_at=now,
            updated_at=now,
        )
        delivery.raise_(
            DeliveryScheduled(
                delivery_id=str(delivery.id),
                order_id=str(order_id),
                delivery_date=delivery.date.isoformat(),
                slot=delivery.slot,
                scheduled_at=now,
            )
        )
        return delivery

    @property
    def is_terminal(self) -> bool:
        return DeliveryStatus(self.status) in TERMINAL_STATUSES

    # -------------------------------------------------------------------
    # Assignment
    # -------------------------------------------------------------------
    def assign_driver(self, driver_id: str) -> None:
        """Bind a driver to this delivery and move it to Assigned."""
        current = DeliveryStatus(self.status)
        if current != DeliveryStatus.PENDING:
            raise ConflictError(
                {"status": [f"Delivery is {current.value}; only Pending deliveries can be assigned a driver"]}
            )

        now = datetime.now(UTC)
        with atomic_change(self):
            self.driver_id = driver_id
            self.status = DeliveryStatus.ASSIGNED.value
            self.assigned_at = now
            self.updated_at = now
        self.raise_(
            DriverAssigned(
                delivery_id=str(self.id),
                driver_id=str(driver_id),
                delivery_date=self.date.isoformat(),
                slot=self.slot,
                assigned_at=now,
            )
        )

    def assign_route(self, route_id: str) -> None:
        """Place the delivery on a route. Driver availability is unaffected."""
        if self.is_terminal:
            raise ConflictError({"status": [f"Cannot change the route of a {self.status} delivery"]})

        now = datetime.now(UTC)
        self.route_id = route_id
        self.updated_at = now
        self.raise_(
            RouteAssigned(
                delivery_id=str(self.id),
                route_id=str(route_id),
                delivery_date=self.date.isoformat(),
                assigned_at=now,
            )
        )

    def detach_route(self) -> None:
        self.route_id = None
        self.updated_at = datetime.now(UTC)

    # -------------------------------------------------------------------
    # Status transitions
    # -------------------------------------------------------------------
    def advance(self, target_status, notes: str | None = None) -> None:
        """Apply a manual status change, one step at a time."""
        target = parse_status(target_status)
        current = DeliveryStatus(self.status)
        if current in TERMINAL_STATUSES:
            raise InvalidTransitionError({"status": [f"Delivery is already {current.value}"]})
        if target == DeliveryStatus.ASSIGNED:
            raise InvalidTransitionError({"status": ["Deliveries become Assigned only through driver assignment"]})
        if target not in _VALID_TRANSITIONS[current]:
            raise InvalidTransitionError({"status": [f"Cannot transition from {current.value} to {target.value}"]})

        self._move_to(target, notes, datetime.now(UTC), automatic=False)

    def auto_complete(self, completed_at: datetime, notes: str) -> None:
        """Close the delivery out as Delivered because its slot cutover has passed."""
        current = DeliveryStatus(self.status)
        if current in TERMINAL_STATUSES:
            raise InvalidTransitionError({"status": [f"Delivery is already {current.value}"]})

        self._move_to(DeliveryStatus.DELIVERED, notes, completed_at, automatic=True)

    def _move_to(self, target: DeliveryStatus, notes: str | None, at: datetime, automatic: bool) -> None:
        previous = DeliveryStatus(self.status)
        with atomic_change(self):
            self.status = target.value
            if notes is not None:
                self.notes = notes
            if target == DeliveryStatus.PICKED_UP:
                self.started_at = at
            if target in TERMINAL_STATUSES:
                self.completed_at = at
            self.updated_at = at

        if target in TERMINAL_STATUSES:
            self.raise_(
                DeliveryCompleted(
                    delivery_id=str(self.id),
                    order_id=str(self.order_id),
                    driver_id=str(self.driver_id) if self.driver_id else None,
                    delivery_date=self.date.isoformat(),
                    slot=self.slot,
                    outcome=target.value,
                    automatic=automatic,
                    notes=self.notes,
                    completed_at=at,
                )
            )
        else:
            self.raise_(
                DeliveryStatusChanged(
                    delivery_id=str(self.id),
                    from_status=previous.value,
                    to_status=target.value,
                    notes=notes,
                    changed_at=at,
                )
            )

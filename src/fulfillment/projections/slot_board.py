"""Slot board — per date and meal slot delivery counts for dispatchers."""

from datetime import datetime

from protean.core.projector import on
from protean.exceptions import ObjectNotFoundError
from protean.fields import DateTime, Identifier, Integer, String
from protean.utils.globals import current_domain

from fulfillment.delivery.delivery import Delivery, DeliveryStatus
from fulfillment.delivery.events import DeliveryCompleted, DeliveryScheduled, DriverAssigned
from fulfillment.domain import fulfillment


@fulfillment.projection
class SlotBoardView:
    """Delivery counts for one slot on one day."""

    id = Identifier(identifier=True)  # "<YYYY-MM-DD>:<Slot>"
    date = String(required=True)
    slot = String(required=True)
    scheduled = Integer(default=0)
    assigned = Integer(default=0)
    delivered = Integer(default=0)
    failed = Integer(default=0)
    cancelled = Integer(default=0)
    auto_completed = Integer(default=0)
    updated_at = DateTime()


def board_key(date_str: str, slot: str) -> str:
    return f"{date_str}:{slot}"


def _get_or_create(date_str: str, slot: str, timestamp: datetime):
    repo = current_domain.repository_for(SlotBoardView)
    try:
        return repo.get(board_key(date_str, slot))
    except ObjectNotFoundError:
        return SlotBoardView(
            id=board_key(date_str, slot),
            date=date_str,
            slot=slot,
            scheduled=0,
            assigned=0,
            delivered=0,
            failed=0,
            cancelled=0,
            auto_completed=0,
            updated_at=timestamp,
        )


_OUTCOME_COUNTERS = {
    DeliveryStatus.DELIVERED.value: "delivered",
    DeliveryStatus.FAILED.value: "failed",
    DeliveryStatus.CANCELLED.value: "cancelled",
}


@fulfillment.projector(projector_for=SlotBoardView, aggregates=[Delivery])
class SlotBoardProjector:
    @on(DeliveryScheduled)
    def on_delivery_scheduled(self, event):
        view = _get_or_create(event.delivery_date, event.slot, event.scheduled_at)
        view.scheduled = (view.scheduled or 0) + 1
        view.updated_at = event.scheduled_at
        current_domain.repository_for(SlotBoardView).add(view)

    @on(DriverAssigned)
    def on_driver_assigned(self, event):
        view = _get_or_create(event.delivery_date, event.slot, event.assigned_at)
        view.assigned = (view.assigned or 0) + 1
        view.updated_at = event.assigned_at
        current_domain.repository_for(SlotBoardView).add(view)

    @on(DeliveryCompleted)
    def on_delivery_completed(self, event):
        view = _get_or_create(event.delivery_date, event.slot, event.completed_at)
        counter = _OUTCOME_COUNTERS[event.outcome]
        setattr(view, counter, (getattr(view, counter) or 0) + 1)
        if event.automatic:
            view.auto_completed = (view.auto_completed or 0) + 1
        view.updated_at = event.completed_at
        current_domain.repository_for(SlotBoardView).add(view)

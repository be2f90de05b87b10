"""Query methods for the Delivery aggregate.

Slot, date, route and status filters run in the store, so the scheduler's
per-tick lookup only touches the open deliveries of one slot on one day.
"""

from datetime import date

from fulfillment.delivery.delivery import TERMINAL_STATUSES, Delivery
from fulfillment.domain import fulfillment
from fulfillment.shared.paging import fetch_all

_TERMINAL_VALUES = [status.value for status in TERMINAL_STATUSES]


def _as_date(value) -> date:
    return value if isinstance(value, date) else date.fromisoformat(str(value))


@fulfillment.repository(part_of=Delivery)
class DeliveryRepository:
    def _fetch(self, open_only: bool = False, **filters) -> list[Delivery]:
        query = self._dao.query
        if filters:
            query = query.filter(**filters)
        if open_only:
            query = query.exclude(status__in=_TERMINAL_VALUES)
        return fetch_all(query)

    def listing(
        self,
        on_date: date | None = None,
        slot: str | None = None,
        status: str | None = None,
    ) -> list[Delivery]:
        """Deliveries matching every given filter, ordered by date then creation."""
        filters = {}
        if on_date is not None:
            filters["date"] = on_date
        if slot:
            filters["slot"] = slot
        if status:
            filters["status"] = status
        deliveries = self._fetch(**filters)
        return sorted(deliveries, key=lambda d: (_as_date(d.date), d.created_at))

    def open_for_slot(self, on_date: date, slot: str) -> list[Delivery]:
        """Non-terminal deliveries scheduled for the slot on the given date."""
        return self._fetch(open_only=True, slot=slot, date=on_date)

    def active_on_route(self, route_id: str, on_date: date) -> list[Delivery]:
        return self._fetch(open_only=True, route_id=str(route_id), date=on_date)

    def for_order(self, order_id: str) -> list[Delivery]:
        return self._fetch(order_id=str(order_id))

    def for_route(self, route_id: str) -> list[Delivery]:
        return self._fetch(route_id=str(route_id))

    def for_driver(self, driver_id: str) -> list[Delivery]:
        return self._fetch(driver_id=str(driver_id))

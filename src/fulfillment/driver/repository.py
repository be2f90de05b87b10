"""Query methods for the Driver aggregate."""

from fulfillment.domain import fulfillment
from fulfillment.driver.driver import Driver
from fulfillment.shared.paging import fetch_all


@fulfillment.repository(part_of=Driver)
class DriverRepository:
    def listing(self, status: str | None = None) -> list[Driver]:
        """Every driver, optionally narrowed to one availability status, by name."""
        query = self._dao.query
        if status:
            query = query.filter(status=status)
        return sorted(fetch_all(query), key=lambda d: (d.name, str(d.id)))

"""Cutover scheduler — close out each meal slot once its cutover has passed.

Called on a timer by the scheduler runner (``src/server.py``) or on demand via
the maintenance API endpoint. A slot counts as crossed when the local time of
``as_of`` is at or after its cutover on the same local date; every
non-terminal delivery of that slot and date is then auto-completed, one
command per delivery.

Once a slot-date is closed out nothing non-terminal remains, so later ticks
on the same day find nothing to do. A tick that runs late (process down at the
cutover minute) still closes the day out.
"""

from datetime import UTC, datetime

import structlog
from protean.utils.globals import current_domain

from fulfillment.delivery.delivery import Delivery, Slot
from fulfillment.delivery.transitions import AutoCompleteDelivery
from fulfillment.settings import SchedulerSettings, get_settings

logger = structlog.get_logger(__name__)


def _localize(as_of: datetime, settings: SchedulerSettings) -> datetime:
    # Naive timestamps are taken as UTC
    if as_of.tzinfo is None:
        as_of = as_of.replace(tzinfo=UTC)
    return as_of.astimezone(settings.tz)


def crossed_slots(as_of: datetime, settings: SchedulerSettings) -> list[Slot]:
    """Slots whose cutover on the local date of ``as_of`` has been reached."""
    local_time = _localize(as_of, settings).time().replace(tzinfo=None)
    return [slot for slot in Slot if local_time >= settings.cutover_for(slot)]


def run_scheduler_tick(
    as_of: datetime | None = None,
    settings: SchedulerSettings | None = None,
) -> list[dict]:
    """Auto-complete open deliveries of every crossed slot.

    Returns one ``{slot, date, processed_count, failed_count}`` entry per slot
    that had open deliveries; an empty list means the tick changed nothing.
    """
    settings = settings or get_settings()
    as_of = as_of or datetime.now(UTC)
    local = _localize(as_of, settings)
    completed_at = local.astimezone(UTC)

    repo = current_domain.repository_for(Delivery)
    results = []
    for slot in crossed_slots(as_of, settings):
        open_deliveries = repo.open_for_slot(local.date(), slot.value)
        if not open_deliveries:
            continue

        notes = f"Auto-delivered at {local.strftime('%H:%M:%S')} ({slot.value} cutover)"
        processed_count = 0
        failed_count = 0
        for delivery in open_deliveries:
            try:
                current_domain.process(
                    AutoCompleteDelivery(
                        delivery_id=str(delivery.id),
                        completed_at=completed_at,
                        notes=notes,
                    ),
                    asynchronous=False,
                )
                processed_count += 1
            except Exception as exc:
                # Left open; the next tick picks it up again
                failed_count += 1
                logger.error(
                    "Auto-completion failed",
                    delivery_id=str(delivery.id),
                    slot=slot.value,
                    error=str(exc),
                )

        logger.info(
            "Slot cutover processed",
            slot=slot.value,
            date=local.date().isoformat(),
            processed_count=processed_count,
            failed_count=failed_count,
        )
        results.append(
            {
                "slot": slot.value,
                "date": local.date().isoformat(),
                "processed_count": processed_count,
                "failed_count": failed_count,
            }
        )

    return results

"""Cutover scheduler runner for the fulfillment domain.

Runs ``run_scheduler_tick`` on a fixed interval so every meal slot is closed
out once its cutover passes. A failing tick is logged and the loop carries on;
the next tick retries whatever was left open.

Usage:
    python src/server.py                # Tick every FULFILLMENT_TICK_INTERVAL_SECONDS
    python src/server.py --interval 30  # Override the tick interval
    python src/server.py --once         # Single tick, for cron / K8s CronJob use
"""

import argparse
import asyncio
from datetime import UTC, datetime

from fulfillment.utils.logging import bind_context, clear_context, get_logger

logger = get_logger(__name__)


def _get_domain():
    """Import and initialize the fulfillment domain."""
    from fulfillment.domain import fulfillment

    fulfillment.init()
    return fulfillment


def tick(domain, as_of: datetime | None = None) -> list[dict]:
    """Run one scheduler tick inside the domain context, never raising."""
    from fulfillment.delivery.scheduler import run_scheduler_tick

    as_of = as_of or datetime.now(UTC)
    bind_context(tick_at=as_of.isoformat())
    try:
        with domain.domain_context():
            results = run_scheduler_tick(as_of=as_of)
        if results:
            logger.info("Scheduler tick closed out slots", slots=[r["slot"] for r in results])
        return results
    except Exception:
        logger.exception("Scheduler tick failed")
        return []
    finally:
        clear_context()


async def run(interval: int, once: bool = False) -> None:
    domain = _get_domain()
    logger.info("Scheduler runner started", interval_seconds=interval, once=once)
    while True:
        tick(domain)
        if once:
            return
        await asyncio.sleep(interval)


def main():
    from fulfillment.settings import get_settings

    parser = argparse.ArgumentParser(description="MealStream cutover scheduler")
    parser.add_argument(
        "--interval",
        type=int,
        help="Seconds between ticks (default: FULFILLMENT_TICK_INTERVAL_SECONDS)",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Run a single tick and exit",
    )
    args = parser.parse_args()

    interval = args.interval or get_settings().tick_interval_seconds

    try:
        asyncio.run(run(interval, once=args.once))
    except KeyboardInterrupt:
        logger.info("Scheduler runner stopped")


if __name__ == "__main__":
    main()

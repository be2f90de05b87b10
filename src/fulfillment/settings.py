"""Scheduler settings — slot cutover times, timezone and tick interval.

Values come from the environment so the API process and the scheduler runner
share one source::

    FULFILLMENT_LUNCH_CUTOVER=15:30
    FULFILLMENT_DINNER_CUTOVER=22:00
    FULFILLMENT_TIMEZONE=Asia/Dubai
    FULFILLMENT_TICK_INTERVAL_SECONDS=60
"""

import os
from datetime import time
from functools import lru_cache
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, Field, field_validator

from fulfillment.delivery.delivery import Slot

_ENV_PREFIX = "FULFILLMENT_"


class SchedulerSettings(BaseModel):
    lunch_cutover: time = time(15, 30)
    dinner_cutover: time = time(22, 0)
    timezone: str = "Asia/Dubai"
    tick_interval_seconds: int = Field(default=60, gt=0)

    @field_validator("timezone")
    @classmethod
    def _known_timezone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"Unknown timezone: {value}") from exc
        return value

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)

    def cutover_for(self, slot: Slot) -> time:
        return self.lunch_cutover if slot == Slot.LUNCH else self.dinner_cutover

    @classmethod
    def from_env(cls) -> "SchedulerSettings":
        overrides = {}
        for field_name in cls.model_fields:
            value = os.getenv(f"{_ENV_PREFIX}{field_name.upper()}")
            if value:
                overrides[field_name] = value
        return cls(**overrides)


@lru_cache
def get_settings() -> SchedulerSettings:
    return SchedulerSettings.from_env()

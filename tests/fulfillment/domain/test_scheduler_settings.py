"""Tests for scheduler settings and cutover crossing."""

from datetime import UTC, datetime, time

import pytest
from fulfillment.delivery.delivery import Slot
from fulfillment.delivery.scheduler import crossed_slots
from fulfillment.settings import SchedulerSettings
from pydantic import ValidationError as PydanticValidationError


class TestSchedulerSettings:
    def test_defaults(self):
        settings = SchedulerSettings()
        assert settings.lunch_cutover == time(15, 30)
        assert settings.dinner_cutover == time(22, 0)
        assert settings.timezone == "Asia/Dubai"
        assert settings.tick_interval_seconds == 60

    def test_cutover_for_slot(self):
        settings = SchedulerSettings()
        assert settings.cutover_for(Slot.LUNCH) == time(15, 30)
        assert settings.cutover_for(Slot.DINNER) == time(22, 0)

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("FULFILLMENT_LUNCH_CUTOVER", "14:00")
        monkeypatch.setenv("FULFILLMENT_TIMEZONE", "Europe/London")
        monkeypatch.setenv("FULFILLMENT_TICK_INTERVAL_SECONDS", "30")
        settings = SchedulerSettings.from_env()
        assert settings.lunch_cutover == time(14, 0)
        assert settings.dinner_cutover == time(22, 0)
        assert settings.timezone == "Europe/London"
        assert settings.tick_interval_seconds == 30

    def test_unknown_timezone_is_rejected(self):
        with pytest.raises(PydanticValidationError):
            SchedulerSettings(timezone="Mars/Olympus_Mons")

    def test_interval_must_be_positive(self):
        with pytest.raises(PydanticValidationError):
            SchedulerSettings(tick_interval_seconds=0)


class TestCrossedSlots:
    # Asia/Dubai is UTC+4 all year
    settings = SchedulerSettings()

    def test_before_lunch_cutover_nothing_crossed(self):
        as_of = datetime(2026, 3, 2, 11, 29, 59, tzinfo=UTC)  # 15:29:59 local
        assert crossed_slots(as_of, self.settings) == []

    def test_exactly_at_lunch_cutover(self):
        as_of = datetime(2026, 3, 2, 11, 30, tzinfo=UTC)  # 15:30 local
        assert crossed_slots(as_of, self.settings) == [Slot.LUNCH]

    def test_late_tick_still_crosses_lunch(self):
        as_of = datetime(2026, 3, 2, 13, 5, tzinfo=UTC)  # 17:05 local
        assert crossed_slots(as_of, self.settings) == [Slot.LUNCH]

    def test_after_dinner_cutover_both_crossed(self):
        as_of = datetime(2026, 3, 2, 18, 0, tzinfo=UTC)  # 22:00 local
        assert crossed_slots(as_of, self.settings) == [Slot.LUNCH, Slot.DINNER]

    def test_local_midnight_resets(self):
        as_of = datetime(2026, 3, 2, 20, 30, tzinfo=UTC)  # 00:30 next local day
        assert crossed_slots(as_of, self.settings) == []

    def test_naive_timestamp_is_treated_as_utc(self):
        as_of = datetime(2026, 3, 2, 11, 30)
        assert crossed_slots(as_of, self.settings) == [Slot.LUNCH]

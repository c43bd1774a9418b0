"""Tests for AlarmTag identity and the APScheduler-backed alarm sink."""
from datetime import datetime
from unittest.mock import AsyncMock

import pytest
from apscheduler.schedulers.asyncio import AsyncIOScheduler

from hydromate.reminders.alarms import (
    EXACT_MISFIRE_GRACE_SECONDS,
    AlarmKind,
    AlarmPermissionDenied,
    AlarmTag,
    APSchedulerAlarmSink,
)

WHEN = datetime(2030, 1, 15, 16, 0)


@pytest.fixture(name="aps")
def aps_fixture() -> AsyncIOScheduler:
    # Not started: jobs stay pending, which is enough to inspect them
    return AsyncIOScheduler(timezone="UTC")


class TestAlarmTag:
    def test_identities(self):
        assert AlarmTag.smart(3).identity == "smart-3"
        assert AlarmTag.custom(0).identity == "custom-0"
        assert AlarmTag.snooze().identity == "snooze"

    def test_payload_is_not_part_of_identity(self):
        assert AlarmTag.custom(1, "a", "Morning") == AlarmTag.custom(1, "b", "Evening")
        assert AlarmTag.custom(1, "a") != AlarmTag.custom(2, "a")

    def test_kinds_do_not_collide(self):
        assert AlarmTag.smart(0) != AlarmTag.custom(0)
        assert AlarmTag.smart(0).kind is AlarmKind.SMART


class TestAPSchedulerAlarmSink:
    def test_schedule_adds_date_job(self, aps):
        sink = APSchedulerAlarmSink(aps)
        sink.schedule_at(WHEN, AlarmTag.smart(2))

        job = aps.get_job("smart-2")
        assert job is not None
        assert job.trigger.__class__.__name__ == "DateTrigger"
        assert sink.scheduled_time(AlarmTag.smart(2)) == WHEN

    def test_exact_has_grace_time(self, aps):
        sink = APSchedulerAlarmSink(aps)
        sink.schedule_at(WHEN, AlarmTag.smart(0))
        assert aps.get_job("smart-0").misfire_grace_time == EXACT_MISFIRE_GRACE_SECONDS

    def test_inexact_never_misfires(self, aps):
        sink = APSchedulerAlarmSink(aps)
        sink.schedule_at(WHEN, AlarmTag.smart(0), exact=False)
        assert aps.get_job("smart-0").misfire_grace_time is None

    def test_same_tag_replaces(self, aps):
        sink = APSchedulerAlarmSink(aps)
        sink.schedule_at(WHEN, AlarmTag.snooze())
        later = WHEN.replace(hour=17)
        sink.schedule_at(later, AlarmTag.snooze())

        assert len(aps.get_jobs()) == 1
        assert sink.scheduled_time(AlarmTag.snooze()) == later

    def test_cancel_by_rebuilt_tag(self, aps):
        sink = APSchedulerAlarmSink(aps)
        sink.schedule_at(WHEN, AlarmTag.custom(1, "x", "Label"))
        sink.cancel(AlarmTag.custom(1))
        assert aps.get_job("custom-1") is None

    def test_cancel_unknown_is_ignored(self, aps):
        APSchedulerAlarmSink(aps).cancel(AlarmTag.smart(7))

    def test_exact_denied_when_not_allowed(self, aps):
        sink = APSchedulerAlarmSink(aps, exact_allowed=False)
        with pytest.raises(AlarmPermissionDenied):
            sink.schedule_at(WHEN, AlarmTag.smart(0))
        assert aps.get_job("smart-0") is None

    def test_inexact_allowed_when_exact_is_not(self, aps):
        sink = APSchedulerAlarmSink(aps, exact_allowed=False)
        sink.schedule_at(WHEN, AlarmTag.smart(0), exact=False)
        assert aps.get_job("smart-0") is not None

    def test_scheduled_time_missing(self, aps):
        assert APSchedulerAlarmSink(aps).scheduled_time(AlarmTag.smart(0)) is None

    @pytest.mark.asyncio
    async def test_dispatch_calls_handler(self, aps):
        on_fire = AsyncMock()
        sink = APSchedulerAlarmSink(aps, on_fire=on_fire)
        tag = AlarmTag.custom(0, "x", "Label")

        await sink._dispatch(tag)

        on_fire.assert_awaited_once_with(tag)

    @pytest.mark.asyncio
    async def test_dispatch_without_handler_warns(self, aps, caplog):
        await APSchedulerAlarmSink(aps)._dispatch(AlarmTag.smart(0))
        assert "no handler attached" in caplog.text

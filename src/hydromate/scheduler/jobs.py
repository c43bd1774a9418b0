"""
APScheduler wiring for reminder alarms.

Reminder alarms are one-shot date jobs added by APSchedulerAlarmSink on
the same scheduler. Two jobs rerun the memoized scheduling pass:

  - a daily cron job shortly after midnight, so a new day always gets its
    alarms even if the chain went idle;
  - a short interval job, so settings saved by another process (the API)
    replace the pending alarms within minutes.

The pass is a no-op while neither the settings nor the day changed.

The scheduler runs inside the same process as the bot (wired in __main__.py).
"""
import logging
from datetime import datetime

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from hydromate.config import get_settings
from hydromate.reminders.alarms import APSchedulerAlarmSink
from hydromate.reminders.scheduler import ReminderScheduler
from hydromate.reminders.store import SqlKeyValueStore
from hydromate.tracking.repository import SettingsRepository

logger = logging.getLogger(__name__)

DAILY_RESCHEDULE_JOB_ID = "daily_reschedule"
SETTINGS_SYNC_JOB_ID = "settings_sync"


def build_reminder_scheduler(scheduler: AsyncIOScheduler, engine) -> ReminderScheduler:
    """
    ReminderScheduler whose alarms live on the given APScheduler.

    Args:
        scheduler: APScheduler the alarm jobs are added to.
        engine: SQLAlchemy engine backing the scheduler state.
    """
    settings = get_settings()
    sink = APSchedulerAlarmSink(scheduler, exact_allowed=settings.exact_alarms_allowed)
    return ReminderScheduler(
        alarms=sink,
        store=SqlKeyValueStore(engine),
        lookahead_days=settings.lookahead_days,
        max_smart_reminders=settings.max_smart_reminders,
        max_custom_reminders=settings.max_custom_reminders,
    )


def build_scheduler(engine, reminders: ReminderScheduler = None) -> AsyncIOScheduler:
    """
    Create and configure the APScheduler.

    Args:
        engine: SQLAlchemy engine to load the settings from.
        reminders: scheduler to rerun. Its alarm sink's APScheduler is
            reused; a new APScheduler and ReminderScheduler are built if None.

    Returns:
        Configured AsyncIOScheduler (not yet started).
    """
    settings = get_settings()
    if reminders is None:
        scheduler = AsyncIOScheduler()
        reminders = build_reminder_scheduler(scheduler, engine)
    else:
        scheduler = reminders.alarms.scheduler

    scheduler.add_job(
        _refresh_reminders,
        trigger="cron",
        hour=settings.daily_reschedule_hour,
        minute=settings.daily_reschedule_minute,
        id=DAILY_RESCHEDULE_JOB_ID,
        replace_existing=True,
        kwargs={"engine": engine, "reminders": reminders},
    )
    scheduler.add_job(
        _refresh_reminders,
        trigger="interval",
        minutes=settings.settings_sync_minutes,
        id=SETTINGS_SYNC_JOB_ID,
        replace_existing=True,
        coalesce=True,
        kwargs={"engine": engine, "reminders": reminders},
    )

    return scheduler


async def _refresh_reminders(engine, reminders: ReminderScheduler) -> None:
    """
    Make sure the pending alarms match today's saved settings.

    Idempotent: a no-op when today's schedule is already in place.
    """
    logger.debug("Reminder refresh at %s", datetime.now().isoformat())

    try:
        settings = SettingsRepository(engine, user_id=get_settings().user_id).get()
        if reminders.schedule_notifications(settings):
            logger.info("Reminders rescheduled")
    except Exception as exc:
        logger.error("Reminder refresh failed: %s", exc)

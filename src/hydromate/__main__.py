"""
Main entrypoint: starts Telegram bot + APScheduler in one process.

FastAPI runs separately under uvicorn.

Usage:
    python -m hydromate seed        # default drinks + settings
    python -m hydromate             # starts bot + reminder scheduler
    uvicorn hydromate.api.main:app --host 0.0.0.0 --port 8000  # starts API
"""
import asyncio
import logging
import sys

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(name)s %(levelname)s %(message)s",
)
logger = logging.getLogger(__name__)


def _run_seed() -> None:
    from hydromate.scripts.seed import run_seed
    run_seed()


async def _run_bot() -> None:
    from apscheduler.schedulers.asyncio import AsyncIOScheduler

    from hydromate.bot.app import build_bot_app
    from hydromate.config import get_settings
    from hydromate.db.engine import get_engine
    from hydromate.hydration.service import daily_hydration
    from hydromate.notifications.telegram import TelegramNotifier
    from hydromate.reminders.handler import ReminderHandler
    from hydromate.scheduler.jobs import build_reminder_scheduler, build_scheduler
    from hydromate.tracking.repository import SettingsRepository

    settings = get_settings()
    engine = get_engine()

    if not settings.telegram_bot_token:
        logger.error("TELEGRAM_BOT_TOKEN not set.")
        sys.exit(1)
    if settings.telegram_chat_id is None:
        logger.warning("TELEGRAM_CHAT_ID not set — reminders will not be delivered.")

    user_settings = SettingsRepository(engine, user_id=settings.user_id)

    # Bot
    app = build_bot_app(
        token=settings.telegram_bot_token,
        engine=engine,
        owner_chat_id=settings.telegram_chat_id,
    )

    # Scheduler; reminder alarms are date jobs on the same APScheduler
    reminders = build_reminder_scheduler(AsyncIOScheduler(), engine)
    scheduler = build_scheduler(engine, reminders=reminders)
    app.bot_data["reminders"] = reminders

    handler = ReminderHandler(
        settings_provider=user_settings.get,
        progress_provider=lambda s: daily_hydration(
            engine, s, reminders.now().date(), user_id=settings.user_id
        ).progress,
        scheduler=reminders,
        notifier=TelegramNotifier(app.bot, settings.telegram_chat_id),
        store=reminders.store,
    )
    reminders.alarms.on_fire = handler.handle

    logger.info("Starting Telegram bot...")
    async with app:
        await app.start()
        await app.updater.start_polling(drop_pending_updates=True)

        # Alarms do not survive a restart
        restored = reminders.restore_after_reboot(user_settings.get())
        if restored:
            logger.info("Pending snooze restored for %s", restored)
        scheduler.start()
        logger.info(
            "Scheduler started (daily reschedule at %02d:%02d, settings sync every %d min)",
            settings.daily_reschedule_hour,
            settings.daily_reschedule_minute,
            settings.settings_sync_minutes,
        )
        logger.info("Bot is running. Press Ctrl+C to stop.")

        try:
            await asyncio.Event().wait()
        except (KeyboardInterrupt, SystemExit):
            logger.info("Shutting down...")
        finally:
            await app.updater.stop()
            await app.stop()
            scheduler.shutdown()
            logger.info("Goodbye.")


if __name__ == "__main__":
    # Dispatch on first argument: `python -m hydromate seed` or just `python -m hydromate`
    if len(sys.argv) > 1 and sys.argv[1] == "seed":
        _run_seed()
    else:
        asyncio.run(_run_bot())

"""
Telegram bot command and callback handlers.

All handlers receive (update, context) from python-telegram-bot.
Bot data keys (set in build_bot_app):
  context.bot_data["engine"]         — SQLAlchemy engine
  context.bot_data["reminders"]      — ReminderScheduler (None disables snoozing)
  context.bot_data["owner_chat_id"]  — chat that receives error reports
"""
import logging
import traceback
from datetime import datetime

from telegram import Update
from telegram.ext import ContextTypes

from hydromate.config import get_settings
from hydromate.hydration.service import daily_hydration
from hydromate.notifications.messages import SNOOZE_CALLBACK_PREFIX, progress_bar, snooze_confirmation
from hydromate.tracking.repository import DrinkRepository, EntryRepository, SettingsRepository

logger = logging.getLogger(__name__)

_LOG_USAGE = "Usage: /log <ml> [drink], e.g. /log 250 coffee"


def _today_text(engine) -> str:
    user_id = get_settings().user_id
    settings = SettingsRepository(engine, user_id=user_id).get()
    result = daily_hydration(engine, settings, datetime.now().date(), user_id=user_id)
    totals, progress = result.totals, result.progress

    lines = [
        f"💧 Today: {int(totals.net_hydration)}ml of {int(progress.goal)}ml",
        f"{progress_bar(int(progress.percentage))} {int(progress.percentage)}%",
        f"{result.entry_count} drinks, {int(totals.total_actual)}ml logged",
    ]
    if totals.total_dehydration > 0:
        lines.append(f"Caffeine/alcohol penalty: -{int(totals.total_dehydration)}ml")
    if progress.is_goal_reached:
        lines.append("🎉 Goal reached!")
    else:
        lines.append(f"{int(progress.remaining)}ml to go")
    return "\n".join(lines)


async def handle_log(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """
    /log <ml> [drink] — log a drink (water by default) and show progress.
    """
    engine = context.bot_data["engine"]
    parts = (update.message.text or "").strip().split()

    try:
        amount_ml = int(parts[1])
    except (IndexError, ValueError):
        await update.message.reply_text(_LOG_USAGE)
        return
    if amount_ml <= 0:
        await update.message.reply_text("Amount must be a positive number of ml.")
        return

    drinks = DrinkRepository(engine)
    drink_name = " ".join(parts[2:]) or "Water"
    drink = drinks.find_by_name(drink_name)
    if drink is None:
        await update.message.reply_text(f"Unknown drink: {drink_name}")
        return

    EntryRepository(engine, user_id=get_settings().user_id).add(amount_ml, drink_id=drink.id)
    logger.info("Logged %dml of %s", amount_ml, drink.name)

    await update.message.reply_text(f"Logged {amount_ml}ml of {drink.name}.\n\n{_today_text(engine)}")


async def handle_today(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """
    /today — today's net hydration and goal progress.
    """
    await update.message.reply_text(_today_text(context.bot_data["engine"]))


async def handle_snooze(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """
    Inline "Snooze N min" button under a reminder.
    """
    query = update.callback_query
    await query.answer()

    reminders = context.bot_data.get("reminders")
    if reminders is None:
        await query.edit_message_reply_markup(reply_markup=None)
        return

    try:
        minutes = int(query.data[len(SNOOZE_CALLBACK_PREFIX):])
    except ValueError:
        logger.warning("Malformed snooze callback: %r", query.data)
        return

    settings = SettingsRepository(context.bot_data["engine"], user_id=get_settings().user_id).get()
    when = reminders.schedule_snooze(settings, minutes)

    await query.edit_message_reply_markup(reply_markup=None)
    if when is None:
        await query.message.reply_text("Snooze is turned off.")
    else:
        await query.message.reply_text(snooze_confirmation(minutes))


async def error_handler(update: object, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Global PTB error handler — logs the exception and notifies the owner."""
    logger.exception("Unhandled exception", exc_info=context.error)

    chat_id = context.bot_data.get("owner_chat_id")
    if not chat_id:
        return

    tb = "".join(traceback.format_exception(type(context.error), context.error, context.error.__traceback__))
    # Telegram message limit is 4096 chars
    short_tb = tb[-3000:] if len(tb) > 3000 else tb
    await context.bot.send_message(
        chat_id=chat_id,
        text=f"⚠️ Unhandled error:\n<pre>{short_tb}</pre>",
        parse_mode="HTML",
    )

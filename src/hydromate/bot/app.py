"""
Telegram bot application factory.

Builds and configures the python-telegram-bot Application with all
handlers registered.
"""
from typing import Optional

from telegram.ext import Application, CallbackQueryHandler, CommandHandler

from hydromate.bot.handlers import error_handler, handle_log, handle_snooze, handle_today
from hydromate.notifications.messages import SNOOZE_CALLBACK_PREFIX
from hydromate.reminders.scheduler import ReminderScheduler


def build_bot_app(
    token: str,
    engine,
    reminders: Optional[ReminderScheduler] = None,
    owner_chat_id: Optional[int] = None,
) -> Application:
    """
    Build and return the PTB Application.

    Args:
        token: Telegram bot token.
        engine: SQLAlchemy engine (SQLModel).
        reminders: ReminderScheduler used by the snooze button.
        owner_chat_id: Telegram chat ID to send error notifications to.

    Returns:
        Configured Application (not yet started).
    """
    app = Application.builder().token(token).build()

    # Store shared resources in bot_data so handlers can access them
    app.bot_data["engine"] = engine
    app.bot_data["reminders"] = reminders
    app.bot_data["owner_chat_id"] = owner_chat_id

    app.add_handler(CommandHandler("log", handle_log))
    app.add_handler(CommandHandler("today", handle_today))
    app.add_handler(CallbackQueryHandler(handle_snooze, pattern=f"^{SNOOZE_CALLBACK_PREFIX}"))

    # Global error handler: sends tracebacks to owner via Telegram
    app.add_error_handler(error_handler)

    return app

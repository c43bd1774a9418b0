"""Delivers reminder messages to the owner's Telegram chat."""
import logging
from typing import Optional

from telegram import Bot, InlineKeyboardButton, InlineKeyboardMarkup

from hydromate.notifications.messages import SNOOZE_CALLBACK_PREFIX, ReminderMessage

logger = logging.getLogger(__name__)


def snooze_keyboard(minutes: int) -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup([[
        InlineKeyboardButton(
            f"Snooze {minutes} min",
            callback_data=f"{SNOOZE_CALLBACK_PREFIX}{minutes}",
        )
    ]])


class TelegramNotifier:
    """Sends ReminderMessages with python-telegram-bot."""

    def __init__(self, bot: Bot, chat_id: Optional[int]):
        """
        Args:
            bot: telegram.Bot (app.bot of the running Application).
            chat_id: owner chat; messages are dropped with a warning if None.
        """
        self.bot = bot
        self.chat_id = chat_id

    async def send(self, message: ReminderMessage) -> None:
        if self.chat_id is None:
            logger.warning("TELEGRAM_CHAT_ID not set, dropping reminder %r", message.title)
            return

        markup = snooze_keyboard(message.snooze_minutes) if message.snooze_minutes else None
        await self.bot.send_message(
            chat_id=self.chat_id,
            text=message.render(),
            reply_markup=markup,
        )

"""Telegram reminder delivery adapter."""

import logging
from datetime import datetime

import telegramify_markdown
from telegram import Bot

from careercal.core.reminders import DueReminder, format_reminder_message

logger = logging.getLogger(__name__)

MAX_MESSAGE_LENGTH = 4000


async def send_markdown(bot: Bot, chat_id: int, text: str) -> None:
    """Send markdown text to one chat, converted to MarkdownV2 and split if too long."""
    converted = telegramify_markdown.markdownify(text)
    for i in range(0, len(converted), MAX_MESSAGE_LENGTH):
        await bot.send_message(
            chat_id=chat_id,
            text=converted[i : i + MAX_MESSAGE_LENGTH],
            parse_mode="MarkdownV2",
        )


class TelegramNotifier:
    """
    Sends due reminders to a fixed set of Telegram chats.

    Implements ReminderNotifier protocol. A failure for one chat is logged
    and does not stop delivery to the others.
    """

    def __init__(self, bot: Bot, chat_ids: list[int]):
        self.bot = bot
        self.chat_ids = chat_ids

    @classmethod
    def from_token(cls, token: str, chat_ids: list[int]) -> "TelegramNotifier":
        if not token:
            raise ValueError(
                "TELEGRAM_BOT_TOKEN not configured. "
                "Get a token from @BotFather on Telegram and add it to careercal.conf"
            )
        return cls(Bot(token), chat_ids)

    async def send(self, due: DueReminder, now: datetime) -> bool:
        """Deliver one reminder. Returns True if at least one chat got it."""
        text = format_reminder_message(due, now)
        delivered = False
        for chat_id in self.chat_ids:
            try:
                await send_markdown(self.bot, chat_id, text)
                delivered = True
            except Exception as e:
                logger.error(f"Failed to send reminder for {due.event.id} to chat {chat_id}: {e}")
        if delivered:
            logger.info(f"Sent reminder {due.reminder.id} for {due.event.summary}")
        return delivered

"""Tests for Telegram reminder delivery and the reminder daemon."""

import asyncio
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from careercal.adapters.telegram_notifier import MAX_MESSAGE_LENGTH, TelegramNotifier, send_markdown
from careercal.config import Config
from careercal.core.models import CalendarEvent, Reminder
from careercal.core.reminders import DueReminder
from careercal.reminder_daemon import run_daemon, run_reminder_pass, setup_scheduler

NOW = datetime(2025, 1, 15, 8, 0, tzinfo=timezone.utc)


@pytest.fixture
def due():
    start = NOW + timedelta(minutes=30)
    event = CalendarEvent(id="evt", summary="Mock interview", start=start, end=start + timedelta(hours=1))
    return DueReminder(event=event, reminder=Reminder(id="1", minutes_before=30))


class TestSendMarkdown:
    def test_uses_markdown_v2(self):
        bot = MagicMock()
        bot.send_message = AsyncMock()

        asyncio.run(send_markdown(bot, 42, "**hello**"))

        bot.send_message.assert_awaited_once()
        kwargs = bot.send_message.call_args.kwargs
        assert kwargs["chat_id"] == 42
        assert kwargs["parse_mode"] == "MarkdownV2"

    def test_splits_long_messages(self):
        bot = MagicMock()
        bot.send_message = AsyncMock()

        asyncio.run(send_markdown(bot, 42, "word " * 2000))

        assert bot.send_message.await_count >= 2
        for call in bot.send_message.call_args_list:
            assert len(call.kwargs["text"]) <= MAX_MESSAGE_LENGTH


class TestTelegramNotifier:
    def test_sends_to_every_chat(self, due):
        bot = MagicMock()
        bot.send_message = AsyncMock()

        delivered = asyncio.run(TelegramNotifier(bot, [1, 2]).send(due, NOW))

        assert delivered is True
        assert [c.kwargs["chat_id"] for c in bot.send_message.call_args_list] == [1, 2]
        assert "Mock interview" in bot.send_message.call_args.kwargs["text"]

    def test_one_failing_chat_does_not_stop_others(self, due, caplog):
        bot = MagicMock()
        bot.send_message = AsyncMock(side_effect=[RuntimeError("chat not found"), None])

        delivered = asyncio.run(TelegramNotifier(bot, [1, 2]).send(due, NOW))

        assert delivered is True
        assert bot.send_message.await_count == 2
        assert "chat not found" in caplog.text

    def test_all_chats_failing(self, due):
        bot = MagicMock()
        bot.send_message = AsyncMock(side_effect=RuntimeError("network down"))
        assert asyncio.run(TelegramNotifier(bot, [1]).send(due, NOW)) is False

    def test_requires_token(self):
        with pytest.raises(ValueError, match="TELEGRAM_BOT_TOKEN"):
            TelegramNotifier.from_token("", [1])


class TestReminderDaemon:
    def test_scheduler_job(self):
        config = Config(reminder_check_minutes=10)

        scheduler = setup_scheduler(MagicMock(), MagicMock(), config)

        [job] = scheduler.get_jobs()
        assert job.id == "event_reminders"
        assert job.trigger.interval == timedelta(minutes=10)

    @patch("careercal.reminder_daemon.deliver_due_reminders", new_callable=AsyncMock)
    def test_pass_returns_count(self, mock_deliver):
        mock_deliver.return_value = 3
        config = Config(reminder_window_minutes=15)

        count = asyncio.run(run_reminder_pass(MagicMock(), MagicMock(), config))

        assert count == 3
        assert mock_deliver.await_args.args[3] == timedelta(minutes=15)

    @patch("careercal.reminder_daemon.deliver_due_reminders", new_callable=AsyncMock)
    def test_pass_survives_errors(self, mock_deliver, caplog):
        mock_deliver.side_effect = OSError("disk full")

        assert asyncio.run(run_reminder_pass(MagicMock(), MagicMock(), Config())) == 0
        assert "disk full" in caplog.text

    def test_daemon_needs_chat_ids(self):
        with pytest.raises(ValueError, match="TELEGRAM_CHAT_IDS"):
            run_daemon(Config(telegram_bot_token="123:abc"))

    @patch("careercal.reminder_daemon.setup_scheduler")
    @patch("careercal.reminder_daemon.run_reminder_pass", new_callable=AsyncMock)
    @patch("careercal.reminder_daemon.TelegramNotifier.from_token")
    def test_daemon_opens_and_closes_bot(self, mock_from_token, mock_pass, mock_setup, tmp_path):
        notifier = MagicMock()
        mock_from_token.return_value = notifier
        mock_pass.side_effect = RuntimeError("stop")
        config = Config(telegram_bot_token="123:abc", telegram_chat_ids=[1], events_file=str(tmp_path / "e.json"))

        with pytest.raises(RuntimeError, match="stop"):
            run_daemon(config)

        notifier.bot.__aenter__.assert_awaited_once()
        notifier.bot.__aexit__.assert_awaited_once()
        mock_setup.return_value.shutdown.assert_called_once_with(wait=False)

"""Periodic reminder delivery over Telegram."""

import asyncio
import logging
from datetime import timedelta

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from .adapters.telegram_notifier import TelegramNotifier
from .config import Config, load_config
from .ports.event_repo import EventRepository
from .ports.notifier import ReminderNotifier
from .workflows import deliver_due_reminders, get_store, now_in

logger = logging.getLogger(__name__)


async def run_reminder_pass(store: EventRepository, notifier: ReminderNotifier, config: Config) -> int:
    """One delivery pass. Errors are logged so the schedule keeps running."""
    try:
        count = await deliver_due_reminders(
            store,
            notifier,
            now_in(config),
            timedelta(minutes=config.reminder_window_minutes),
        )
    except Exception as e:
        logger.error(f"Reminder pass failed: {e}")
        return 0
    if count:
        logger.info(f"Delivered {count} reminder(s)")
    return count


def setup_scheduler(store: EventRepository, notifier: ReminderNotifier, config: Config) -> AsyncIOScheduler:
    """Schedule reminder passes every reminder_check_minutes."""
    scheduler = AsyncIOScheduler(timezone=config.timezone)
    scheduler.add_job(
        run_reminder_pass,
        IntervalTrigger(minutes=config.reminder_check_minutes),
        args=[store, notifier, config],
        id="event_reminders",
        max_instances=1,
        coalesce=True,
    )
    logger.info(f"Scheduled reminder checks every {config.reminder_check_minutes} minutes")
    return scheduler


def run_daemon(config: Config | None = None) -> None:
    """Run the reminder daemon until interrupted."""
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=logging.INFO,
    )

    config = config or load_config()
    if not config.telegram_chat_ids:
        raise ValueError("TELEGRAM_CHAT_IDS not configured - nobody to remind")
    notifier = TelegramNotifier.from_token(config.telegram_bot_token, config.telegram_chat_ids)
    store = get_store(config)

    async def main() -> None:
        async with notifier.bot:
            scheduler = setup_scheduler(store, notifier, config)
            scheduler.start()
            logger.info("Reminder daemon started")
            try:
                await run_reminder_pass(store, notifier, config)
                await asyncio.Event().wait()
            finally:
                scheduler.shutdown(wait=False)

    asyncio.run(main())

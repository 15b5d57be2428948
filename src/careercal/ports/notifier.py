"""Reminder delivery interface."""

from datetime import datetime
from typing import Protocol

from careercal.core.reminders import DueReminder


class ReminderNotifier(Protocol):
    """Interface for delivering due reminders over any channel."""

    async def send(self, due: DueReminder, now: datetime) -> bool:
        """Deliver one reminder. Returns True if at least one recipient got it."""
        ...

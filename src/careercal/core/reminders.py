"""Reminder bookkeeping - which reminders are due, and marking them sent."""

from dataclasses import dataclass, replace
from datetime import datetime, timedelta

from .models import CalendarEvent, Category, Reminder, ensure_comparable

DEFAULT_WINDOW = timedelta(minutes=5)

_DEFAULT_MINUTES: dict[Category, tuple[int, ...]] = {
    Category.INTERVIEW: (60, 5),
    Category.DEADLINE: (1440, 60, 5),  # 1 day, 1 hour, 5 min
    Category.NETWORKING: (30, 5),
    Category.PERSONAL: (15,),
}


def default_reminders(category: Category) -> list[Reminder]:
    """Default push reminders for a new event of this category."""
    minutes = _DEFAULT_MINUTES.get(category, (5,))
    return [Reminder(id=str(i), minutes_before=m) for i, m in enumerate(minutes, start=1)]


@dataclass(frozen=True)
class DueReminder:
    """A reminder ready for delivery, with the event it belongs to."""

    event: CalendarEvent
    reminder: Reminder

    @property
    def fire_at(self) -> datetime:
        return self.event.start - timedelta(minutes=self.reminder.minutes_before)

    def minutes_until_start(self, now: datetime) -> int:
        return max(0, round((self.event.start - now).total_seconds() / 60))


def due_reminders(
    events: list[CalendarEvent],
    now: datetime,
    window: timedelta = DEFAULT_WINDOW,
) -> list[DueReminder]:
    """
    Unsent reminders whose fire time falls at or before now + window.

    Only events that have not started yet and are neither cancelled nor
    completed qualify. Sorted by fire time.
    """
    horizon = now + window
    due = []
    for event in events:
        ensure_comparable(event.start, now)
        if event.is_cancelled or event.completed or event.start <= now:
            continue
        for reminder in event.reminders:
            item = DueReminder(event=event, reminder=reminder)
            if not reminder.sent and item.fire_at <= horizon:
                due.append(item)
    return sorted(due, key=lambda d: d.fire_at)


def mark_sent(event: CalendarEvent, reminder_id: str, now: datetime) -> CalendarEvent:
    """Copy of event with one reminder flagged as sent."""
    if not any(r.id == reminder_id for r in event.reminders):
        raise KeyError(f"Event {event.id} has no reminder {reminder_id}")
    reminders = [
        replace(r, sent=True, sent_at=now) if r.id == reminder_id else r for r in event.reminders
    ]
    return replace(event, reminders=reminders, updated_at=now)


def format_reminder_message(due: DueReminder, now: datetime) -> str:
    """Markdown notification text for a due reminder."""
    minutes = due.minutes_until_start(now)
    text = f"📅 **Upcoming: {due.event.summary}**\n\nStarting in {minutes} minute{'s' if minutes != 1 else ''}"
    if due.event.description:
        text += f": {due.event.description}"
    if due.event.location:
        text += f"\n📍 {due.event.location}"
    return text

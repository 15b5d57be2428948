"""Calendar analytics - completion, streaks and productivity. No I/O dependencies."""

import math
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta

from .models import CalendarEvent, Category, Priority, ensure_comparable

STREAK_WINDOW_DAYS = 90
CADENCE_WINDOW_DAYS = 30


@dataclass
class CalendarStats:
    """Aggregate metrics for an event set at a point in time."""

    total_events: int = 0
    completed_events: int = 0
    upcoming_events: int = 0
    overdue_events: int = 0
    today_events: int = 0
    this_week_events: int = 0
    current_streak: int = 0
    longest_streak: int = 0
    productivity_score: int = 0
    events_by_category: dict[Category, int] = field(default_factory=dict)
    events_by_priority: dict[Priority, int] = field(default_factory=dict)
    completion_rate: int = 0
    average_events_per_day: float = 0.0


def round_half_up(value: float, digits: int = 0) -> float:
    """Round .5 away from zero for positive values, unlike round()'s banker's rounding."""
    scale = 10**digits
    return math.floor(value * scale + 0.5) / scale


def _local(dt: datetime, now: datetime) -> datetime:
    """Express dt in now's timezone so calendar dates line up."""
    if now.tzinfo is None:
        return dt
    return dt.astimezone(now.tzinfo)


def _day_start(now: datetime) -> datetime:
    return now.replace(hour=0, minute=0, second=0, microsecond=0)


def calculate_streaks(event_days: set[date], today: date) -> tuple[int, int]:
    """
    Current and longest streak of days with events.

    Scans the STREAK_WINDOW_DAYS days ending today. The current streak is
    the run ending today, so it is 0 when today has no event.
    """
    current = 0
    for offset in range(STREAK_WINDOW_DAYS):
        if today - timedelta(days=offset) not in event_days:
            break
        current += 1

    longest = run = 0
    for offset in range(STREAK_WINDOW_DAYS):
        if today - timedelta(days=offset) in event_days:
            run += 1
            longest = max(longest, run)
        else:
            run = 0

    return current, longest


def productivity_score(
    completion_rate: float,
    current_streak: int,
    upcoming_events: int,
    average_events_per_day: float,
) -> int:
    """
    Weighted 0-100 score.

    40% completion rate, up to 20 points each for the streak, planned
    upcoming events and daily cadence.
    """
    score = (
        completion_rate * 0.4
        + min(current_streak * 5, 20)
        + min(upcoming_events / 10 * 20, 20)
        + min(average_events_per_day / 3 * 20, 20)
    )
    return max(0, min(100, int(round_half_up(score))))


def calculate_stats(events: list[CalendarEvent], now: datetime) -> CalendarStats:
    """
    Compute calendar statistics as of now.

    now is injected so results are deterministic. Raises ValueError when
    event timestamps and now mix naive and timezone-aware values.
    """
    for e in events:
        ensure_comparable(e.start, now)

    today_start = _day_start(now)
    tomorrow_start = today_start + timedelta(days=1)
    # Sunday-to-Sunday week containing now
    week_start = today_start - timedelta(days=(now.weekday() + 1) % 7)
    week_end = week_start + timedelta(days=7)
    cadence_start = now - timedelta(days=CADENCE_WINDOW_DAYS)

    active = [e for e in events if not e.is_cancelled]
    completed = [e for e in events if e.completed]
    completable = [e for e in active if e.end < now]
    upcoming = [e for e in active if e.start > now]
    overdue = [e for e in completable if not e.completed]

    completion_rate = 0
    if completable:
        # Only events that are already over count, which keeps the rate within 0-100
        done = sum(1 for e in completable if e.completed)
        completion_rate = int(round_half_up(done / len(completable) * 100))

    event_days = {_local(e.start, now).date() for e in events}
    current_streak, longest_streak = calculate_streaks(event_days, now.date())

    recent = [e for e in events if cadence_start <= e.start <= now]
    average = round_half_up(len(recent) / CADENCE_WINDOW_DAYS, 1)

    by_category = {c: 0 for c in Category}
    by_priority = {p: 0 for p in Priority}
    for e in events:
        by_category[e.category] += 1
        by_priority[e.priority] += 1

    return CalendarStats(
        total_events=len(events),
        completed_events=len(completed),
        upcoming_events=len(upcoming),
        overdue_events=len(overdue),
        today_events=sum(1 for e in events if today_start <= e.start < tomorrow_start),
        this_week_events=sum(1 for e in events if week_start <= e.start < week_end),
        current_streak=current_streak,
        longest_streak=longest_streak,
        productivity_score=productivity_score(completion_rate, current_streak, len(upcoming), average),
        events_by_category=by_category,
        events_by_priority=by_priority,
        completion_rate=completion_rate,
        average_events_per_day=average,
    )


def events_on_date(events: list[CalendarEvent], target: date, now: datetime | None = None) -> list[CalendarEvent]:
    """Events starting on a calendar date (in now's timezone when given)."""
    if now is None:
        return [e for e in events if e.start.date() == target]
    return [e for e in events if _local(e.start, now).date() == target]


def upcoming_events(events: list[CalendarEvent], now: datetime, days: int = 7) -> list[CalendarEvent]:
    """Non-cancelled events starting within the next N days, sorted by start."""
    horizon = now + timedelta(days=days)
    return sorted(
        (e for e in events if not e.is_cancelled and now < e.start <= horizon),
        key=lambda e: e.start,
    )

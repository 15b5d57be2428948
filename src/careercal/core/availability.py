"""Free time and scheduling habits - pure functions over events, no I/O."""

from collections import Counter
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta, tzinfo

from .conflicts import TimeSlot
from .models import CalendarEvent, Category
from .recurrence import day_index
from .stats import round_half_up

DEFAULT_PEAK_HOURS = [9, 10, 14, 15]


def _blocking(events: list[CalendarEvent]) -> list[CalendarEvent]:
    """Timed, non-cancelled events sorted by start."""
    return sorted((e for e in events if not e.all_day and not e.is_cancelled), key=lambda e: e.start)


def free_slots_on(
    events: list[CalendarEvent],
    day: date,
    tz: tzinfo | None = None,
    min_minutes: int = 30,
    work_hours: tuple[int, int] = (9, 17),
) -> list[TimeSlot]:
    """
    Gaps of at least min_minutes between events during one day's work hours.

    Events are clamped to the work window; anything entirely outside it is
    ignored. Slots are returned in time order.
    """
    work_start, work_end = work_hours
    day_start = datetime.combine(day, time(work_start, 0), tzinfo=tz)
    day_end = datetime.combine(day, time(0, 0), tzinfo=tz) + timedelta(hours=work_end)

    slots = []
    current = day_start
    for event in _blocking(events):
        # Skip events outside work hours
        if event.end <= day_start or event.start >= day_end:
            continue
        if event.start > current:
            gap = TimeSlot(current, event.start)
            if gap.duration_minutes() >= min_minutes:
                slots.append(gap)
        current = max(current, min(event.end, day_end))

    if current < day_end:
        gap = TimeSlot(current, day_end)
        if gap.duration_minutes() >= min_minutes:
            slots.append(gap)
    return slots


def find_free_slots(
    events: list[CalendarEvent],
    start: date,
    end: date,
    min_minutes: int = 30,
    work_hours: tuple[int, int] = (9, 17),
    tz: tzinfo | None = None,
) -> list[TimeSlot]:
    """
    Free work-hour slots on every weekday from start to end inclusive.

    Saturdays and Sundays are skipped. tz is the zone the work hours are in;
    pass None only when the events are naive.
    """
    if end < start:
        raise ValueError(f"Range end {end.isoformat()} is before start {start.isoformat()}")
    work_start, work_end = work_hours
    if not 0 <= work_start < work_end <= 24:
        raise ValueError(f"Work hours must satisfy 0 <= start < end <= 24, got {work_hours}")

    slots = []
    day = start
    while day <= end:
        if day.weekday() < 5:
            slots.extend(free_slots_on(events, day, tz, min_minutes, work_hours))
        day += timedelta(days=1)
    return slots


@dataclass
class HabitProfile:
    """When and how the user tends to schedule things."""

    preferred_start_time: str = "09:00"
    preferred_end_time: str = "17:00"
    peak_productivity_hours: list[int] = field(default_factory=lambda: list(DEFAULT_PEAK_HOURS))
    common_categories: list[Category] = field(default_factory=list)
    average_session_duration: int = 60
    # Category -> weekday indexes (0 = Sunday) it has been scheduled on
    preferred_days_for_category: dict[Category, list[int]] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "preferred_start_time": self.preferred_start_time,
            "preferred_end_time": self.preferred_end_time,
            "peak_productivity_hours": self.peak_productivity_hours,
            "common_categories": [c.value for c in self.common_categories],
            "average_session_duration": self.average_session_duration,
            "preferred_days_for_category": {c.value: d for c, d in self.preferred_days_for_category.items()},
        }


def analyze_habits(events: list[CalendarEvent], tz: tzinfo | None = None) -> HabitProfile:
    """
    Summarize scheduling habits from past events.

    Hours and weekdays are read in tz when given (aware events only).
    Cancelled events are not habits and are left out. With nothing to go
    on the profile falls back to a 9-to-5 day with hour-long sessions.
    """
    events = [e for e in events if not e.is_cancelled]
    if not events:
        return HabitProfile()

    def local(dt: datetime) -> datetime:
        return dt.astimezone(tz) if tz is not None and dt.tzinfo is not None else dt

    start_hours = []
    end_hours = []
    durations = []
    hour_counts: Counter[int] = Counter()
    category_counts: Counter[Category] = Counter()
    category_days: dict[Category, set[int]] = {}

    for event in events:
        start, end = local(event.start), local(event.end)
        start_hours.append(start.hour)
        end_hours.append(end.hour)
        durations.append(event.duration.total_seconds() / 60)
        hour_counts[start.hour] += 1
        category_counts[event.category] += 1
        category_days.setdefault(event.category, set()).add(day_index(start))

    avg_start = int(round_half_up(sum(start_hours) / len(start_hours)))
    avg_end = int(round_half_up(sum(end_hours) / len(end_hours)))

    # Busiest four start hours; ties go to the earlier hour
    peak = sorted(hour_counts, key=lambda h: (-hour_counts[h], h))[:4]

    return HabitProfile(
        preferred_start_time=f"{avg_start:02d}:00",
        preferred_end_time=f"{avg_end:02d}:00",
        peak_productivity_hours=sorted(peak),
        common_categories=[c for c, _ in category_counts.most_common(3)],
        average_session_duration=int(round_half_up(sum(durations) / len(durations))),
        preferred_days_for_category={c: sorted(days) for c, days in category_days.items()},
    )

"""Recurring event expansion - pure calendar arithmetic, no I/O."""

from dataclasses import replace
from datetime import datetime, timedelta
from enum import Enum
from typing import Iterator

from dateutil.relativedelta import relativedelta

from .models import CalendarEvent, Frequency, RecurrencePattern, ensure_comparable

DEFAULT_MAX_INSTANCES = 52  # one year of weekly events


class RecurrenceError(ValueError):
    """Raised when a pattern cannot be expanded into instances."""


class SeriesScope(Enum):
    """Which members of a recurring series an edit applies to."""

    THIS = "this"
    FOLLOWING = "following"
    ALL = "all"


def day_index(dt: datetime) -> int:
    """Weekday index with 0 = Sunday .. 6 = Saturday."""
    return (dt.weekday() + 1) % 7


def last_day_of_month(dt: datetime) -> int:
    return (dt + relativedelta(day=31)).day


def next_date(
    cursor: datetime,
    pattern: RecurrencePattern,
    anchor: datetime | None = None,
) -> datetime | None:
    """
    Next candidate date after cursor.

    anchor is the series start; monthly and yearly patterns use its day so a
    clamped month (Feb 28) does not drag later instances off the 31st.

    Returns None when the pattern cannot advance (frequency none or a date
    past the end of the calendar).
    """
    anchor = anchor or cursor
    interval = pattern.interval

    try:
        match pattern.frequency:
            case Frequency.DAILY:
                return cursor + timedelta(days=interval)
            case Frequency.WEEKLY:
                if not pattern.days_of_week:
                    return cursor + timedelta(weeks=interval)
                current = day_index(cursor)
                # Next selected day later in the same week
                for day in pattern.days_of_week:
                    if day > current:
                        return cursor + timedelta(days=day - current)
                # Otherwise first selected day, interval weeks on
                first = pattern.days_of_week[0]
                return cursor + timedelta(days=(7 - current) + first + 7 * (interval - 1))
            case Frequency.MONTHLY:
                # relativedelta clamps the day: Jan 31 + 1 month is Feb 28
                months = (cursor.year - anchor.year) * 12 + cursor.month - anchor.month + interval
                return anchor + relativedelta(months=months, day=pattern.day_of_month or anchor.day)
            case Frequency.YEARLY:
                years = cursor.year - anchor.year + interval
                return anchor + relativedelta(years=years)
            case _:
                return None
    except (OverflowError, ValueError):
        return None


def matches_pattern(dt: datetime, pattern: RecurrencePattern) -> bool:
    """Check whether a non-first cursor date satisfies the pattern's day rule."""
    if pattern.frequency is Frequency.WEEKLY and pattern.days_of_week:
        return day_index(dt) in pattern.days_of_week
    if pattern.frequency is Frequency.MONTHLY and pattern.day_of_month:
        return dt.day == min(pattern.day_of_month, last_day_of_month(dt))
    return True


def iter_instances(
    base: CalendarEvent,
    pattern: RecurrencePattern,
    max_instances: int = DEFAULT_MAX_INSTANCES,
) -> Iterator[CalendarEvent]:
    """
    Lazily expand a template event into concrete instances.

    Pure generator: the same inputs always produce the same sequence, and it
    never yields more than max_instances events. Instances are in strictly
    ascending start order and keep the template's duration.
    """
    if max_instances < 1:
        raise RecurrenceError(f"max_instances must be >= 1, got {max_instances}")

    if not pattern.is_recurring:
        yield base
        return

    if pattern.end_date is not None:
        try:
            ensure_comparable(base.start, pattern.end_date)
        except ValueError as e:
            raise RecurrenceError(str(e)) from e

    duration = base.duration
    cursor = base.start
    count = 0

    while True:
        if pattern.occurrences is not None and count >= pattern.occurrences:
            return
        if pattern.end_date is not None and cursor > pattern.end_date:
            return
        if count >= max_instances:
            return

        if count == 0 or matches_pattern(cursor, pattern):
            yield replace(
                base,
                id=f"{base.id}-instance-{count}",
                parent_event_id=base.id,
                start=cursor,
                end=cursor + duration,
            )
            count += 1

        following = next_date(cursor, pattern, anchor=base.start)
        if following is None or following <= cursor:
            raise RecurrenceError(
                f"Cannot advance {pattern.frequency.value} pattern past {cursor.isoformat()}"
            )
        cursor = following


def generate_instances(
    base: CalendarEvent,
    pattern: RecurrencePattern,
    max_instances: int = DEFAULT_MAX_INSTANCES,
) -> list[CalendarEvent]:
    """Expand a template event into a list of instances."""
    return list(iter_instances(base, pattern, max_instances))


def expand_event(event: CalendarEvent, max_instances: int = DEFAULT_MAX_INSTANCES) -> list[CalendarEvent]:
    """Expand an event using its own recurrence pattern."""
    if not event.is_recurring:
        return [event]
    return generate_instances(event, event.recurrence, max_instances)


# ============== Series edits ==============


def _in_series(event: CalendarEvent, series_id: str) -> bool:
    return event.id == series_id or event.parent_event_id == series_id


def _scope_filter(events: list[CalendarEvent], series_id: str, scope: SeriesScope, anchor_id: str | None):
    """Build a predicate selecting the series members covered by scope."""
    scope = SeriesScope(scope)
    anchor = None
    if scope is not SeriesScope.ALL:
        anchor_id = anchor_id or series_id
        anchor = next((e for e in events if e.id == anchor_id and _in_series(e, series_id)), None)
        if anchor is None:
            raise KeyError(f"Event {anchor_id} is not part of series {series_id}")

    def selected(event: CalendarEvent) -> bool:
        if not _in_series(event, series_id):
            return False
        match scope:
            case SeriesScope.THIS:
                return event.id == anchor.id
            case SeriesScope.FOLLOWING:
                return event.start >= anchor.start
            case SeriesScope.ALL:
                return True

    return selected


def update_series(
    events: list[CalendarEvent],
    series_id: str,
    changes: dict,
    scope: SeriesScope = SeriesScope.ALL,
    anchor_id: str | None = None,
) -> list[CalendarEvent]:
    """
    Apply field changes to members of a recurring series.

    Members are the template (id == series_id) and its instances
    (parent_event_id == series_id). Events outside the series and outside
    the scope are returned unchanged.
    """
    protected = {"id", "parent_event_id"} & changes.keys()
    if protected:
        raise ValueError(f"Cannot change {', '.join(sorted(protected))} of a series member")
    selected = _scope_filter(events, series_id, scope, anchor_id)
    return [replace(e, **changes) if selected(e) else e for e in events]


def delete_series(
    events: list[CalendarEvent],
    series_id: str,
    scope: SeriesScope = SeriesScope.ALL,
    anchor_id: str | None = None,
) -> list[CalendarEvent]:
    """Remove members of a recurring series, keeping everything else."""
    selected = _scope_filter(events, series_id, scope, anchor_id)
    return [e for e in events if not selected(e)]

"""careercal CLI - recurring events and calendar analytics."""

import asyncio
import json
import logging
import sys
import uuid
from dataclasses import replace
from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

import click

from .config import Config, load_config
from .core.availability import analyze_habits, find_free_slots
from .core.conflicts import TimeSlot, find_overlapping_pairs
from .core.drafts import DraftError
from .core.filters import EventFilters, SortKey, filter_events, sort_events
from .core.models import CalendarEvent, Category, Priority, Status
from .core.recurrence import RecurrenceError, generate_instances
from .core.reminders import default_reminders
from .core.rrule import DAY_NAMES, RRuleError, format_recurrence_text, parse_rrule, to_rrule
from .core.stats import calculate_stats
from .workflows import (
    check_conflicts,
    create_from_text,
    deliver_due_reminders,
    expanded_events,
    get_parser,
    get_store,
    now_in,
)


def _fail(message: str) -> None:
    click.echo(f"Error: {message}", err=True)
    sys.exit(1)


def _parse_when(value: str, config: Config) -> datetime:
    """ISO timestamp; naive values are taken in the configured timezone."""
    try:
        dt = datetime.fromisoformat(value)
    except ValueError:
        raise click.BadParameter(f"Not an ISO timestamp: {value!r}")
    return dt if dt.tzinfo else dt.replace(tzinfo=ZoneInfo(config.timezone))


def _event_line(event: CalendarEvent) -> str:
    marker = "x" if event.completed else " "
    status = f" ({event.status.value})" if event.status is not Status.CONFIRMED else ""
    return (
        f"[{marker}] {event.start.strftime('%Y-%m-%d')} {event.format_time_range():20} "
        f"{event.summary} <{event.category.value}/{event.priority.value}>{status}  {event.id}"
    )


def _show_events(events: list[CalendarEvent], as_json: bool, empty_msg: str = "No events.") -> None:
    """Shared event display logic."""
    if as_json:
        click.echo(json.dumps([e.to_dict() for e in events], indent=2))
        return
    if not events:
        click.echo(empty_msg)
        return
    for event in events:
        click.echo(_event_line(event))


def _expanded(store, config: Config) -> list[CalendarEvent]:
    try:
        return expanded_events(store, config.max_instances)
    except RecurrenceError as e:
        _fail(f"Stored event cannot be expanded: {e}")


def _conflicts_with(store, slot: TimeSlot, config: Config) -> list[CalendarEvent]:
    try:
        return check_conflicts(store, slot, config.max_instances)
    except RecurrenceError as e:
        _fail(f"Stored event cannot be expanded: {e}")


@click.group()
@click.version_option()
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.pass_context
def main(ctx, debug: bool):
    """careercal - recurring events and calendar analytics."""
    if debug:
        logging.basicConfig(
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            level=logging.DEBUG,
        )
    ctx.obj = load_config()


@main.command()
@click.argument("summary")
@click.option("--start", "start_str", required=True, help="Start (ISO, e.g. 2025-01-15T09:00)")
@click.option("--end", "end_str", default=None, help="End (ISO); defaults to start + duration")
@click.option("--duration", default=60, show_default=True, help="Length in minutes when --end is omitted")
@click.option("--category", type=click.Choice([c.value for c in Category]), default="task", show_default=True)
@click.option("--priority", type=click.Choice([p.value for p in Priority]), default="medium", show_default=True)
@click.option("--description", default="")
@click.option("--location", default="")
@click.option("--rrule", "rrule_text", default=None, help="Recurrence, e.g. FREQ=WEEKLY;BYDAY=MO,WE")
@click.option("--force", is_flag=True, help="Create even if it conflicts with other events")
@click.pass_obj
def add(config: Config, summary, start_str, end_str, duration, category, priority, description, location, rrule_text, force):
    """Add an event."""
    start = _parse_when(start_str, config)
    end = _parse_when(end_str, config) if end_str else start + timedelta(minutes=duration)
    now = now_in(config)

    recurrence = None
    if rrule_text:
        try:
            recurrence = parse_rrule(rrule_text)
        except RRuleError as e:
            _fail(f"Invalid recurrence: {e}")
        # A floating or date-only UNTIL is read in the start's timezone
        if recurrence.end_date is not None and recurrence.end_date.tzinfo is None:
            recurrence = replace(recurrence, end_date=recurrence.end_date.replace(tzinfo=start.tzinfo))

    try:
        event = CalendarEvent(
            id=f"event-{uuid.uuid4().hex[:12]}",
            summary=summary,
            description=description,
            location=location,
            start=start,
            end=end,
            time_zone=config.timezone,
            category=category,
            priority=priority,
            recurrence=recurrence,
            reminders=default_reminders(Category(category)),
            created_by=config.user_id,
            created_at=now,
            updated_at=now,
        )
    except ValueError as e:
        _fail(str(e))

    store = get_store(config)
    conflicts = _conflicts_with(store, TimeSlot.of(event), config)
    if conflicts:
        click.echo("Conflicts with:", err=True)
        for other in conflicts:
            click.echo(f"  {_event_line(other)}", err=True)
        if not force:
            _fail("event overlaps existing events (use --force to add anyway)")

    store.create(event)
    click.echo(f"Created {event.id}")
    if recurrence:
        click.echo(f"  Repeats: {format_recurrence_text(recurrence)}")


@main.command("list")
@click.option("--category", "categories", multiple=True, type=click.Choice([c.value for c in Category]))
@click.option("--priority", "priorities", multiple=True, type=click.Choice([p.value for p in Priority]))
@click.option("--status", "statuses", multiple=True, type=click.Choice([s.value for s in Status]))
@click.option("--from", "from_str", default=None, help="Only events starting at or after (ISO)")
@click.option("--to", "to_str", default=None, help="Only events starting at or before (ISO)")
@click.option("--search", default="", help="Case-insensitive text search")
@click.option("--hide-completed", is_flag=True)
@click.option("--hide-cancelled", is_flag=True)
@click.option("--ai-only", is_flag=True, help="Only AI-suggested events")
@click.option("--sort", "sort_key", type=click.Choice([k.value for k in SortKey]), default="start-asc", show_default=True)
@click.option("--expand/--no-expand", default=True, help="Expand recurring events into instances")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_obj
def list_events(config: Config, categories, priorities, statuses, from_str, to_str, search, hide_completed, hide_cancelled, ai_only, sort_key, expand, as_json):
    """List events."""
    store = get_store(config)
    events = _expanded(store, config) if expand else store.list_all()

    date_range = None
    if from_str or to_str:
        date_range = (
            _parse_when(from_str, config) if from_str else datetime.min.replace(tzinfo=ZoneInfo("UTC")),
            _parse_when(to_str, config) if to_str else datetime.max.replace(tzinfo=ZoneInfo("UTC")),
        )

    filters = EventFilters(
        categories=[Category(c) for c in categories] or None,
        priorities=[Priority(p) for p in priorities] or None,
        statuses=[Status(s) for s in statuses] or None,
        date_range=date_range,
        search_query=search,
        show_completed=not hide_completed,
        show_cancelled=not hide_cancelled,
        ai_suggested_only=ai_only,
    )
    _show_events(sort_events(filter_events(events, filters), sort_key), as_json)


@main.command()
@click.argument("event_id")
@click.pass_obj
def show(config: Config, event_id: str):
    """Show one event."""
    event = get_store(config).get(event_id)
    if event is None:
        _fail(f"No event {event_id}")

    click.echo(f"{event.summary}  ({event.id})")
    click.echo(f"  When:     {event.start.strftime('%A, %B %d %Y')} {event.format_time_range()} [{event.time_zone}]")
    click.echo(f"  Category: {event.category.value}   Priority: {event.priority.value}   Status: {event.status.value}")
    if event.location:
        click.echo(f"  Where:    {event.location}")
    if event.description:
        click.echo(f"  Details:  {event.description}")
    if event.recurrence:
        click.echo(f"  Repeats:  {format_recurrence_text(event.recurrence)}  [{to_rrule(event.recurrence)}]")
    for reminder in event.reminders:
        sent = "sent" if reminder.sent else "pending"
        click.echo(f"  Reminder: {reminder.minutes_before} min before ({reminder.type.value}, {sent})")


@main.command()
@click.argument("event_id")
@click.option("--max", "max_instances", type=int, default=None, help="Instance cap (default from config)")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_obj
def expand(config: Config, event_id: str, max_instances: int | None, as_json: bool):
    """Show the instances of a recurring event."""
    event = get_store(config).get(event_id)
    if event is None:
        _fail(f"No event {event_id}")
    if not event.is_recurring:
        _fail(f"Event {event_id} does not repeat")

    try:
        instances = generate_instances(event, event.recurrence, max_instances or config.max_instances)
    except RecurrenceError as e:
        _fail(str(e))
    _show_events(instances, as_json)


@main.command()
@click.option("--start", "start_str", required=True, help="Start (ISO)")
@click.option("--end", "end_str", default=None, help="End (ISO); omit to list all overlapping pairs")
@click.pass_obj
def conflicts(config: Config, start_str: str, end_str: str | None):
    """Find events overlapping a time range."""
    store = get_store(config)
    start = _parse_when(start_str, config)

    if end_str is None:
        day_events = [
            e for e in _expanded(store, config) if e.start.date() == start.date()
        ]
        pairs = find_overlapping_pairs(day_events)
        if not pairs:
            click.echo("No overlapping events.")
        for first, second in pairs:
            click.echo(f"{first.summary} ({first.format_time_range()}) <-> {second.summary} ({second.format_time_range()})")
        return

    try:
        slot = TimeSlot(start, _parse_when(end_str, config))
    except ValueError as e:
        _fail(str(e))
    found = _conflicts_with(store, slot, config)
    _show_events(found, False, "No conflicts.")


@main.command()
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_obj
def stats(config: Config, as_json: bool):
    """Completion, streak and productivity statistics."""
    events = _expanded(get_store(config), config)
    result = calculate_stats(events, now_in(config))

    if as_json:
        data = {
            **result.__dict__,
            "events_by_category": {c.value: n for c, n in result.events_by_category.items()},
            "events_by_priority": {p.value: n for p, n in result.events_by_priority.items()},
        }
        click.echo(json.dumps(data, indent=2))
        return

    click.echo(f"Events:        {result.total_events} total, {result.completed_events} completed")
    click.echo(f"Upcoming:      {result.upcoming_events}   Overdue: {result.overdue_events}")
    click.echo(f"Today:         {result.today_events}   This week: {result.this_week_events}")
    click.echo(f"Streak:        {result.current_streak} days (longest {result.longest_streak})")
    click.echo(f"Completion:    {result.completion_rate}%")
    click.echo(f"Per day:       {result.average_events_per_day}")
    click.echo(f"Productivity:  {result.productivity_score}/100")
    busy = [f"{c.value} {n}" for c, n in result.events_by_category.items() if n]
    if busy:
        click.echo(f"By category:   {', '.join(busy)}")


@main.command()
@click.option("--from", "from_str", default=None, help="First day (YYYY-MM-DD); defaults to today")
@click.option("--to", "to_str", default=None, help="Last day (YYYY-MM-DD); defaults to a week from --from")
@click.option("--min", "min_minutes", default=30, show_default=True, help="Shortest slot worth listing, in minutes")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_obj
def free(config: Config, from_str: str | None, to_str: str | None, min_minutes: int, as_json: bool):
    """Find free time during work hours on weekdays."""
    try:
        first = date.fromisoformat(from_str) if from_str else now_in(config).date()
        last = date.fromisoformat(to_str) if to_str else first + timedelta(days=6)
    except ValueError as e:
        raise click.BadParameter(str(e))

    events = _expanded(get_store(config), config)
    try:
        slots = find_free_slots(
            events, first, last, min_minutes, config.work_hour_range, tz=ZoneInfo(config.timezone)
        )
    except ValueError as e:
        _fail(str(e))

    if as_json:
        data = [
            {"start": s.start.isoformat(), "end": s.end.isoformat(), "duration_minutes": s.duration_minutes()}
            for s in slots
        ]
        click.echo(json.dumps(data, indent=2))
        return
    if not slots:
        click.echo("No free time.")
        return
    day = None
    for slot in slots:
        if slot.start.date() != day:
            day = slot.start.date()
            click.echo(day.strftime("%A, %B %d"))
        click.echo(f"  {slot.format()}")


@main.command()
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_obj
def habits(config: Config, as_json: bool):
    """When you usually schedule things."""
    profile = analyze_habits(_expanded(get_store(config), config), tz=ZoneInfo(config.timezone))

    if as_json:
        click.echo(json.dumps(profile.to_dict(), indent=2))
        return

    click.echo(f"Typical day:   {profile.preferred_start_time}-{profile.preferred_end_time}")
    click.echo(f"Peak hours:    {', '.join(f'{h:02d}:00' for h in profile.peak_productivity_hours)}")
    click.echo(f"Session:       {profile.average_session_duration} min")
    if profile.common_categories:
        click.echo(f"Most common:   {', '.join(c.value for c in profile.common_categories)}")
    for category, days in profile.preferred_days_for_category.items():
        names = ", ".join(DAY_NAMES[d] for d in days)
        click.echo(f"  {category.value}: {names}")


@main.command()
@click.argument("event_id")
@click.pass_obj
def complete(config: Config, event_id: str):
    """Mark an event as completed."""
    store = get_store(config)
    event = store.get(event_id)
    if event is None:
        _fail(f"No event {event_id}")

    now = now_in(config)
    store.update(replace(event, completed=True, completed_at=now, updated_at=now))
    click.echo(f"Completed {event.summary}")


@main.command()
@click.argument("event_id")
@click.pass_obj
def delete(config: Config, event_id: str):
    """Delete an event."""
    if not get_store(config).delete(event_id):
        _fail(f"No event {event_id}")
    click.echo(f"Deleted {event_id}")


@main.group()
def rrule():
    """Work with RRULE recurrence strings."""
    pass


@rrule.command("parse")
@click.argument("text")
def rrule_parse(text: str):
    """Parse an RRULE and show it as JSON."""
    try:
        pattern = parse_rrule(text)
    except RRuleError as e:
        _fail(str(e))
    click.echo(json.dumps(pattern.to_dict(), indent=2))


@rrule.command("describe")
@click.argument("text")
def rrule_describe(text: str):
    """Describe an RRULE in plain words."""
    try:
        pattern = parse_rrule(text)
    except RRuleError as e:
        _fail(str(e))
    click.echo(format_recurrence_text(pattern))


@main.command()
@click.argument("text")
@click.pass_obj
def parse(config: Config, text: str):
    """Create an event from a plain-language description."""
    now = now_in(config)
    try:
        result = create_from_text(text, config, get_store(config), get_parser(config), now)
    except (DraftError, RuntimeError) as e:
        _fail(str(e))

    if result.event is None:
        click.echo(f"Could not create an event (confidence {result.confidence}).")
        for item in result.ambiguities:
            click.echo(f"  ? {item}")
        sys.exit(1)

    event = result.event
    click.echo(f"Created {event.id}: {event.summary}")
    click.echo(f"  {event.start.strftime('%A, %B %d')} {event.format_time_range()}")
    if event.recurrence:
        click.echo(f"  Repeats: {format_recurrence_text(event.recurrence)}")
    for item in result.ambiguities:
        click.echo(f"  ? {item}")


@main.command()
@click.pass_obj
def remind(config: Config):
    """Deliver due reminders once."""
    from .adapters.telegram_notifier import TelegramNotifier

    try:
        notifier = TelegramNotifier.from_token(config.telegram_bot_token, config.telegram_chat_ids)
    except ValueError as e:
        _fail(str(e))

    async def _remind() -> int:
        # Initializes the bot's HTTP session and closes it when the pass ends
        async with notifier.bot:
            return await deliver_due_reminders(
                get_store(config),
                notifier,
                now_in(config),
                timedelta(minutes=config.reminder_window_minutes),
            )

    count = asyncio.run(_remind())
    click.echo(f"Delivered {count} reminder(s).")


@main.command()
@click.pass_obj
def daemon(config: Config):
    """Run the reminder daemon."""
    from .reminder_daemon import run_daemon

    click.echo("Starting careercal reminder daemon...")
    click.echo("Press Ctrl+C to stop")
    try:
        run_daemon(config)
    except ValueError as e:
        click.echo(f"Configuration error: {e}", err=True)
        sys.exit(1)
    except KeyboardInterrupt:
        click.echo("\nDaemon stopped.")


if __name__ == "__main__":
    main()

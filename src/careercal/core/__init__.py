"""Functional core - pure calendar logic with no I/O."""

from .models import (
    CalendarEvent,
    Category,
    Frequency,
    InvalidPatternError,
    Priority,
    RecurrencePattern,
    Reminder,
    ReminderType,
    Status,
)
from .recurrence import (
    RecurrenceError,
    SeriesScope,
    delete_series,
    expand_event,
    generate_instances,
    iter_instances,
    update_series,
)
from .rrule import RRuleError, format_recurrence_text, parse_rrule, to_rrule
from .conflicts import TimeSlot, find_conflicts, find_overlapping_pairs
from .stats import CalendarStats, calculate_stats, upcoming_events
from .filters import EventFilters, SortKey, filter_events, sort_events
from .reminders import DueReminder, default_reminders, due_reminders, mark_sent
from .drafts import DraftError, DraftResult, EventDraft, event_from_draft
from .availability import HabitProfile, analyze_habits, find_free_slots

__all__ = [
    # Models
    "CalendarEvent",
    "Category",
    "Frequency",
    "InvalidPatternError",
    "Priority",
    "RecurrencePattern",
    "Reminder",
    "ReminderType",
    "Status",
    # Recurrence
    "RecurrenceError",
    "SeriesScope",
    "delete_series",
    "expand_event",
    "generate_instances",
    "iter_instances",
    "update_series",
    # RRULE
    "RRuleError",
    "format_recurrence_text",
    "parse_rrule",
    "to_rrule",
    # Conflicts
    "TimeSlot",
    "find_conflicts",
    "find_overlapping_pairs",
    # Stats
    "CalendarStats",
    "calculate_stats",
    "upcoming_events",
    # Filters
    "EventFilters",
    "SortKey",
    "filter_events",
    "sort_events",
    # Reminders
    "DueReminder",
    "default_reminders",
    "due_reminders",
    "mark_sent",
    # Drafts
    "DraftError",
    "DraftResult",
    "EventDraft",
    "event_from_draft",
    # Availability
    "HabitProfile",
    "analyze_habits",
    "find_free_slots",
]

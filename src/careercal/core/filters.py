"""Declarative event filtering and ordering - no I/O dependencies."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from .models import CalendarEvent, Category, Priority, Status


class SortKey(Enum):
    START_ASC = "start-asc"
    START_DESC = "start-desc"
    PRIORITY = "priority"
    CATEGORY = "category"
    CREATED = "created"


@dataclass
class EventFilters:
    """
    Filter criteria. Every set criterion must hold (AND).

    Empty or None collections mean "no restriction".
    """

    categories: list[Category] | None = None
    priorities: list[Priority] | None = None
    statuses: list[Status] | None = None
    date_range: tuple[datetime, datetime] | None = None
    search_query: str = ""
    show_completed: bool = True
    show_cancelled: bool = True
    ai_suggested_only: bool = False


def _matches(event: CalendarEvent, filters: EventFilters) -> bool:
    if filters.categories and event.category not in filters.categories:
        return False
    if filters.priorities and event.priority not in filters.priorities:
        return False
    if filters.statuses and event.status not in filters.statuses:
        return False

    if filters.date_range:
        range_start, range_end = filters.date_range
        if not range_start <= event.start <= range_end:
            return False

    query = filters.search_query.strip().lower()
    if query:
        searchable = " ".join(p for p in (event.summary, event.description, event.location) if p)
        if query not in searchable.lower():
            return False

    if not filters.show_completed and event.completed:
        return False
    if not filters.show_cancelled and event.is_cancelled:
        return False
    if filters.ai_suggested_only and not event.ai_suggested:
        return False

    return True


def filter_events(events: list[CalendarEvent], filters: EventFilters) -> list[CalendarEvent]:
    """Keep events matching every criterion, preserving order."""
    return [e for e in events if _matches(e, filters)]


def sort_events(events: list[CalendarEvent], key: SortKey | str) -> list[CalendarEvent]:
    """
    Sort events by a SortKey. Stable: equal keys keep their input order.

    priority is high > medium > low, category is alphabetical and created is
    newest first (events without created_at last).
    """
    match SortKey(key):
        case SortKey.START_ASC:
            return sorted(events, key=lambda e: e.start)
        case SortKey.START_DESC:
            return sorted(events, key=lambda e: e.start, reverse=True)
        case SortKey.PRIORITY:
            return sorted(events, key=lambda e: -e.priority.rank)
        case SortKey.CATEGORY:
            return sorted(events, key=lambda e: e.category.value)
        case SortKey.CREATED:
            return sorted(
                events,
                key=lambda e: (e.created_at is not None, e.created_at.timestamp() if e.created_at else 0.0),
                reverse=True,
            )

"""Turning natural-language parser drafts into concrete events - no I/O dependencies."""

import uuid
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .models import (
    CalendarEvent,
    Category,
    InvalidPatternError,
    Priority,
    RecurrencePattern,
    Status,
)
from .reminders import default_reminders

DEFAULT_MIN_CONFIDENCE = 50
DEFAULT_DURATION_MINUTES = 60


class DraftError(ValueError):
    """Raised when parser output is not a usable draft."""


@dataclass
class EventDraft:
    """Structured guess at an event, as returned by the natural-language parser."""

    summary: str
    confidence: int
    start: datetime | None = None
    duration_minutes: int | None = None
    description: str = ""
    category: Category | None = None
    priority: Priority | None = None
    location: str = ""
    recurrence: dict | None = None
    ambiguities: list[str] = field(default_factory=list)
    attendees: list[str] = field(default_factory=list)
    source_text: str = ""

    @classmethod
    def from_dict(cls, data: dict, source_text: str = "") -> "EventDraft":
        """
        Validate parser JSON output.

        Accepts either "start" (ISO datetime) or "startDate" + "startTime"
        ("2025-01-15", "14:00"). Raises DraftError on anything malformed.
        """
        if not isinstance(data, dict):
            raise DraftError(f"Expected a JSON object, got {type(data).__name__}")

        summary = data.get("summary")
        if not isinstance(summary, str) or not summary.strip():
            raise DraftError("Draft is missing a summary")

        confidence = data.get("confidence")
        if isinstance(confidence, bool) or not isinstance(confidence, (int, float)) or not 0 <= confidence <= 100:
            raise DraftError(f"Confidence must be a number between 0 and 100, got {confidence!r}")

        duration = data.get("duration")
        if duration is not None and (isinstance(duration, bool) or not isinstance(duration, (int, float)) or duration < 0):
            raise DraftError(f"Duration must be a non-negative number of minutes, got {duration!r}")

        try:
            category = Category(data["category"]) if data.get("category") else None
            priority = Priority(data["priority"]) if data.get("priority") else None
        except ValueError as e:
            raise DraftError(str(e)) from e

        recurrence = data.get("recurrence")
        if recurrence is not None and not isinstance(recurrence, dict):
            raise DraftError("Recurrence must be an object")

        return cls(
            summary=summary.strip(),
            confidence=int(confidence),
            start=_draft_start(data),
            duration_minutes=int(duration) if duration is not None else None,
            description=data.get("description") or "",
            category=category,
            priority=priority,
            location=data.get("location") or "",
            recurrence=recurrence,
            ambiguities=[str(a) for a in data.get("ambiguities") or []],
            attendees=[str(a) for a in data.get("attendees") or []],
            source_text=source_text,
        )


def _draft_start(data: dict) -> datetime | None:
    try:
        if data.get("start"):
            return datetime.fromisoformat(data["start"])
        if not data.get("startDate"):
            return None
        day = date.fromisoformat(data["startDate"])
        clock = time.fromisoformat(data["startTime"]) if data.get("startTime") else time(9, 0)
        return datetime.combine(day, clock)
    except (TypeError, ValueError) as e:
        raise DraftError(f"Unreadable start: {e}") from e


@dataclass
class DraftResult:
    """Outcome of converting a draft. event is None when the draft was rejected."""

    event: CalendarEvent | None
    ambiguities: list[str]
    confidence: int


def pattern_from_draft(raw: dict, tz: ZoneInfo | None = None) -> RecurrencePattern:
    """
    Build a RecurrencePattern from a draft's recurrence object.

    Raises InvalidPatternError with the reason when the draft is unusable.
    """
    try:
        end_date = datetime.fromisoformat(raw["endDate"]) if raw.get("endDate") else None
    except (TypeError, ValueError):
        raise InvalidPatternError(f"Unreadable recurrence end date: {raw.get('endDate')!r}") from None
    if end_date is not None and end_date.tzinfo is None and tz is not None:
        end_date = end_date.replace(tzinfo=tz)

    days = raw.get("daysOfWeek")
    return RecurrencePattern(
        frequency=raw.get("frequency", "none"),
        interval=raw.get("interval", 1),
        days_of_week=tuple(days) if days else None,
        day_of_month=raw.get("dayOfMonth"),
        end_date=end_date,
        occurrences=raw.get("occurrences"),
    )


def event_from_draft(
    draft: EventDraft,
    user_id: str,
    now: datetime,
    time_zone: str = "UTC",
    min_confidence: int = DEFAULT_MIN_CONFIDENCE,
    event_id: str | None = None,
) -> DraftResult:
    """
    Convert a parser draft into a concrete event.

    Rejects (event=None) drafts below min_confidence or without a start,
    rather than guessing. An unusable recurrence falls back to a one-off
    event and its reason is reported as an ambiguity.
    """
    if draft.confidence < min_confidence:
        return DraftResult(
            event=None,
            ambiguities=draft.ambiguities or ["Input too unclear to parse"],
            confidence=draft.confidence,
        )

    if draft.start is None:
        return DraftResult(
            event=None,
            ambiguities=[*draft.ambiguities, "Could not determine event date"],
            confidence=draft.confidence,
        )

    try:
        tz = ZoneInfo(time_zone)
    except (ZoneInfoNotFoundError, ValueError):
        raise DraftError(f"Unknown time zone: {time_zone!r}") from None

    start = draft.start if draft.start.tzinfo else draft.start.replace(tzinfo=tz)
    duration = draft.duration_minutes if draft.duration_minutes is not None else DEFAULT_DURATION_MINUTES
    ambiguities = list(draft.ambiguities)

    recurrence = None
    if draft.recurrence:
        try:
            recurrence = pattern_from_draft(draft.recurrence, tz)
        except InvalidPatternError as e:
            ambiguities.append(f"Ignored recurrence: {e}")
        else:
            if not recurrence.is_recurring:
                recurrence = None

    category = draft.category or Category.TASK
    reasoning = f'Created from natural language: "{draft.source_text}"' if draft.source_text else ""

    event = CalendarEvent(
        id=event_id or f"event-{uuid.uuid4().hex[:12]}",
        summary=draft.summary,
        description=draft.description,
        location=draft.location,
        start=start,
        end=start + timedelta(minutes=duration),
        time_zone=time_zone,
        category=category,
        priority=draft.priority or Priority.MEDIUM,
        status=Status.CONFIRMED,
        recurrence=recurrence,
        reminders=default_reminders(category),
        attendees=list(draft.attendees),
        ai_suggested=True,
        ai_reasoning=reasoning,
        created_by=user_id,
        created_at=now,
        updated_at=now,
    )
    return DraftResult(event=event, ambiguities=ambiguities, confidence=draft.confidence)

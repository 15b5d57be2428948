"""Calendar event value objects - no I/O dependencies."""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum


class Category(Enum):
    """What an event is for."""

    INTERVIEW = "interview"
    DEADLINE = "deadline"
    LEARNING = "learning"
    NETWORKING = "networking"
    MEETING = "meeting"
    TASK = "task"
    PERSONAL = "personal"
    CAREER = "career"
    PROJECT = "project"


class Priority(Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        """Numeric weight, higher is more important."""
        return {"high": 3, "medium": 2, "low": 1}[self.value]


class Status(Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    TENTATIVE = "tentative"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class Frequency(Enum):
    NONE = "none"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class ReminderType(Enum):
    PUSH = "push"
    EMAIL = "email"
    SMS = "sms"
    IN_APP = "in-app"


class InvalidPatternError(ValueError):
    """Raised when a recurrence pattern has an invalid field combination."""


def ensure_comparable(a: datetime, b: datetime) -> None:
    """Reject mixing naive and timezone-aware timestamps."""
    if (a.tzinfo is None) != (b.tzinfo is None):
        raise ValueError(f"Cannot compare naive and timezone-aware timestamps: {a!r}, {b!r}")


def _coerce(enum_cls, value):
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        raise ValueError(f"Unknown {enum_cls.__name__.lower()}: {value!r}") from None


def _parse_datetime(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


def _format_datetime(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


@dataclass(frozen=True)
class RecurrencePattern:
    """
    How a template event repeats.

    Field combinations are validated on construction so that an invalid
    pattern never reaches instance generation:

    - days_of_week (0 = Sunday .. 6 = Saturday) only for weekly patterns
    - day_of_month (1-31) only for monthly patterns
    - interval and occurrences are positive integers
    """

    frequency: Frequency
    interval: int = 1
    days_of_week: tuple[int, ...] | None = None
    day_of_month: int | None = None
    end_date: datetime | None = None
    occurrences: int | None = None

    def __post_init__(self):
        if not isinstance(self.frequency, Frequency):
            try:
                object.__setattr__(self, "frequency", Frequency(self.frequency))
            except ValueError:
                raise InvalidPatternError(f"Unknown frequency: {self.frequency!r}") from None

        if not _is_int(self.interval) or self.interval < 1:
            raise InvalidPatternError(f"Interval must be an integer >= 1, got {self.interval!r}")

        if self.days_of_week is not None:
            if any(not _is_int(d) or not 0 <= d <= 6 for d in self.days_of_week):
                raise InvalidPatternError(f"days_of_week values must be 0-6, got {self.days_of_week!r}")
            days = tuple(sorted(set(self.days_of_week))) or None
            if days and self.frequency is not Frequency.WEEKLY:
                raise InvalidPatternError("days_of_week is only valid for weekly patterns")
            object.__setattr__(self, "days_of_week", days)

        if self.day_of_month is not None:
            if self.frequency is not Frequency.MONTHLY:
                raise InvalidPatternError("day_of_month is only valid for monthly patterns")
            if not _is_int(self.day_of_month) or not 1 <= self.day_of_month <= 31:
                raise InvalidPatternError(f"day_of_month must be 1-31, got {self.day_of_month!r}")

        if self.occurrences is not None:
            if not _is_int(self.occurrences) or self.occurrences < 1:
                raise InvalidPatternError(f"occurrences must be an integer >= 1, got {self.occurrences!r}")

        if self.end_date is not None and not isinstance(self.end_date, datetime):
            raise InvalidPatternError(f"end_date must be a datetime, got {self.end_date!r}")

    @property
    def is_recurring(self) -> bool:
        return self.frequency is not Frequency.NONE

    def to_dict(self) -> dict:
        return {
            "frequency": self.frequency.value,
            "interval": self.interval,
            "days_of_week": list(self.days_of_week) if self.days_of_week else None,
            "day_of_month": self.day_of_month,
            "end_date": _format_datetime(self.end_date),
            "occurrences": self.occurrences,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "RecurrencePattern":
        days = data.get("days_of_week")
        return cls(
            frequency=data["frequency"],
            interval=data.get("interval", 1),
            days_of_week=tuple(days) if days else None,
            day_of_month=data.get("day_of_month"),
            end_date=_parse_datetime(data.get("end_date")),
            occurrences=data.get("occurrences"),
        )


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


@dataclass(frozen=True)
class Reminder:
    """A notification to deliver some minutes before an event starts."""

    id: str
    type: ReminderType = ReminderType.PUSH
    minutes_before: int = 5
    sent: bool = False
    sent_at: datetime | None = None

    def __post_init__(self):
        object.__setattr__(self, "type", _coerce(ReminderType, self.type))
        if not _is_int(self.minutes_before) or self.minutes_before < 0:
            raise ValueError(f"minutes_before must be an integer >= 0, got {self.minutes_before!r}")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "type": self.type.value,
            "minutes_before": self.minutes_before,
            "sent": self.sent,
            "sent_at": _format_datetime(self.sent_at),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Reminder":
        return cls(
            id=str(data["id"]),
            type=data.get("type", "push"),
            minutes_before=data.get("minutes_before", 5),
            sent=bool(data.get("sent", False)),
            sent_at=_parse_datetime(data.get("sent_at")),
        )


@dataclass
class CalendarEvent:
    """
    A calendar event.

    start/end are both naive or both timezone-aware; time_zone is the IANA
    name the event was created in and is carried along for display.
    """

    id: str
    summary: str
    start: datetime
    end: datetime
    category: Category = Category.TASK
    priority: Priority = Priority.MEDIUM
    status: Status = Status.CONFIRMED
    description: str = ""
    location: str = ""
    time_zone: str = "UTC"
    all_day: bool = False
    completed: bool = False
    completed_at: datetime | None = None
    recurrence: RecurrencePattern | None = None
    parent_event_id: str | None = None
    reminders: list[Reminder] = field(default_factory=list)
    attendees: list[str] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)
    ai_suggested: bool = False
    ai_reasoning: str = ""
    created_by: str = ""
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def __post_init__(self):
        if not isinstance(self.start, datetime) or not isinstance(self.end, datetime):
            raise ValueError(f"Event {self.id}: start and end must be datetimes")
        ensure_comparable(self.start, self.end)
        if self.end < self.start:
            raise ValueError(f"Event {self.id}: end {self.end.isoformat()} is before start {self.start.isoformat()}")
        self.category = _coerce(Category, self.category)
        self.priority = _coerce(Priority, self.priority)
        self.status = _coerce(Status, self.status)

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    def duration_minutes(self) -> int:
        return round(self.duration.total_seconds() / 60)

    @property
    def is_cancelled(self) -> bool:
        return self.status is Status.CANCELLED

    @property
    def is_recurring(self) -> bool:
        return self.recurrence is not None and self.recurrence.is_recurring

    def format_time_range(self) -> str:
        """Format the event time for display."""
        if self.all_day:
            return "All day"
        return f"{_clock(self.start)} - {_clock(self.end)}"

    def to_dict(self) -> dict:
        """JSON-compatible representation."""
        return {
            "id": self.id,
            "summary": self.summary,
            "description": self.description,
            "location": self.location,
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
            "time_zone": self.time_zone,
            "all_day": self.all_day,
            "category": self.category.value,
            "priority": self.priority.value,
            "status": self.status.value,
            "completed": self.completed,
            "completed_at": _format_datetime(self.completed_at),
            "recurrence": self.recurrence.to_dict() if self.recurrence else None,
            "parent_event_id": self.parent_event_id,
            "reminders": [r.to_dict() for r in self.reminders],
            "attendees": list(self.attendees),
            "tags": list(self.tags),
            "ai_suggested": self.ai_suggested,
            "ai_reasoning": self.ai_reasoning,
            "created_by": self.created_by,
            "created_at": _format_datetime(self.created_at),
            "updated_at": _format_datetime(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "CalendarEvent":
        """Build an event from its to_dict() representation."""
        recurrence = data.get("recurrence")
        return cls(
            id=data["id"],
            summary=data.get("summary", "Untitled"),
            description=data.get("description") or "",
            location=data.get("location") or "",
            start=datetime.fromisoformat(data["start"]),
            end=datetime.fromisoformat(data["end"]),
            time_zone=data.get("time_zone") or "UTC",
            all_day=bool(data.get("all_day", False)),
            category=data.get("category", "task"),
            priority=data.get("priority", "medium"),
            status=data.get("status", "confirmed"),
            completed=bool(data.get("completed", False)),
            completed_at=_parse_datetime(data.get("completed_at")),
            recurrence=RecurrencePattern.from_dict(recurrence) if recurrence else None,
            parent_event_id=data.get("parent_event_id"),
            reminders=[Reminder.from_dict(r) for r in data.get("reminders", [])],
            attendees=list(data.get("attendees", [])),
            tags=list(data.get("tags", [])),
            ai_suggested=bool(data.get("ai_suggested", False)),
            ai_reasoning=data.get("ai_reasoning") or "",
            created_by=data.get("created_by") or "",
            created_at=_parse_datetime(data.get("created_at")),
            updated_at=_parse_datetime(data.get("updated_at")),
        )


def _clock(dt: datetime) -> str:
    return dt.strftime("%I:%M %p").lstrip("0")

"""Time-overlap detection between events - no I/O dependencies."""

from dataclasses import dataclass
from datetime import datetime

from .models import CalendarEvent, ensure_comparable


@dataclass(frozen=True)
class TimeSlot:
    """A half-open time interval [start, end)."""

    start: datetime
    end: datetime

    def __post_init__(self):
        ensure_comparable(self.start, self.end)
        if self.end < self.start:
            raise ValueError(f"Slot end {self.end.isoformat()} is before start {self.start.isoformat()}")

    @classmethod
    def of(cls, item) -> "TimeSlot":
        """Slot covering anything with start and end attributes."""
        return cls(start=item.start, end=item.end)

    def duration_minutes(self) -> int:
        return int((self.end - self.start).total_seconds() / 60)

    def format(self) -> str:
        return f"{self.start.strftime('%H:%M')}-{self.end.strftime('%H:%M')} ({self.duration_minutes()} min)"

    def contains(self, dt: datetime) -> bool:
        """Check if a datetime falls within this slot."""
        return self.start <= dt < self.end

    def overlaps(self, other: "TimeSlot") -> bool:
        """Check if this slot shares any instant with another. Touching slots do not overlap."""
        return self.start < other.end and other.start < self.end


def find_conflicts(candidate, existing: list[CalendarEvent]) -> list[CalendarEvent]:
    """
    Find existing events that overlap a candidate time range.

    candidate is a TimeSlot or anything with start/end (e.g. another event).
    Cancelled events never conflict. Original order is preserved.
    """
    slot = candidate if isinstance(candidate, TimeSlot) else TimeSlot.of(candidate)

    conflicts = []
    for event in existing:
        ensure_comparable(slot.start, event.start)
        if event.is_cancelled:
            continue
        if slot.overlaps(TimeSlot.of(event)):
            conflicts.append(event)
    return conflicts


def find_overlapping_pairs(events: list[CalendarEvent]) -> list[tuple[CalendarEvent, CalendarEvent]]:
    """
    Find every pair of overlapping events in one set.

    Returns (earlier, later) tuples ordered by start. Cancelled events are skipped.
    """
    active = sorted((e for e in events if not e.is_cancelled), key=lambda e: e.start)

    pairs = []
    for i, e1 in enumerate(active):
        for e2 in active[i + 1 :]:
            # e2 starts after e1 ends - no more conflicts possible
            if e2.start >= e1.end:
                break
            pairs.append((e1, e2))
    return pairs

"""Event repository interface."""

from typing import Protocol

from careercal.core.models import CalendarEvent


class EventRepository(Protocol):
    """Interface for persisting calendar events in any backend."""

    def create(self, event: CalendarEvent) -> CalendarEvent:
        """Store a new event. Raises ValueError if the id is taken."""
        ...

    def get(self, event_id: str) -> CalendarEvent | None:
        """Read an event by id. Returns None if not found."""
        ...

    def update(self, event: CalendarEvent) -> CalendarEvent:
        """Replace a stored event. Raises KeyError if it does not exist."""
        ...

    def delete(self, event_id: str) -> bool:
        """Delete an event. Returns False if it did not exist."""
        ...

    def list_all(self) -> list[CalendarEvent]:
        """All stored events."""
        ...

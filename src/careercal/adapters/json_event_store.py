"""File-based event storage adapter."""

import json
import logging
from pathlib import Path

from careercal.core.models import CalendarEvent

logger = logging.getLogger(__name__)


class EventNotFoundError(KeyError):
    """Raised when updating an event that is not stored."""


class JsonEventStore:
    """
    JSON file event storage.

    Implements EventRepository protocol. All events live in a single file
    as {"events": [...]}; every write rewrites the file atomically.
    """

    def __init__(self, path: Path | str):
        self.path = Path(path).expanduser()

    def _load(self) -> dict[str, CalendarEvent]:
        if not self.path.exists():
            return {}
        data = json.loads(self.path.read_text() or "{}")
        events = {}
        for item in data.get("events", []):
            event = CalendarEvent.from_dict(item)
            events[event.id] = event
        return events

    def _save(self, events: dict[str, CalendarEvent]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps({"events": [e.to_dict() for e in events.values()]}, indent=2))
        tmp.replace(self.path)

    def create(self, event: CalendarEvent) -> CalendarEvent:
        """Store a new event. Raises ValueError if the id is taken."""
        events = self._load()
        if event.id in events:
            raise ValueError(f"Event {event.id} already exists")
        events[event.id] = event
        self._save(events)
        logger.debug(f"Created event {event.id}")
        return event

    def get(self, event_id: str) -> CalendarEvent | None:
        """Read an event by id. Returns None if not found."""
        return self._load().get(event_id)

    def update(self, event: CalendarEvent) -> CalendarEvent:
        """Replace a stored event."""
        events = self._load()
        if event.id not in events:
            raise EventNotFoundError(event.id)
        events[event.id] = event
        self._save(events)
        return event

    def delete(self, event_id: str) -> bool:
        """Delete an event. Returns False if it did not exist."""
        events = self._load()
        if events.pop(event_id, None) is None:
            return False
        self._save(events)
        logger.debug(f"Deleted event {event_id}")
        return True

    def list_all(self) -> list[CalendarEvent]:
        """All stored events, in insertion order."""
        return list(self._load().values())

"""Shared workflow layer between the CLI and the reminder daemon.

Each function wires core logic to the configured adapters.
"""

import logging
from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

from .adapters.claude_cli import ClaudeCLIService
from .adapters.claude_parser import ClaudeEventParser
from .adapters.json_event_store import JsonEventStore
from .config import Config
from .core.conflicts import TimeSlot, find_conflicts
from .core.drafts import DraftResult, event_from_draft
from .core.recurrence import expand_event
from .core.reminders import due_reminders, mark_sent
from .ports.event_parser import EventParser
from .ports.event_repo import EventRepository
from .ports.notifier import ReminderNotifier

logger = logging.getLogger(__name__)


def get_store(config: Config) -> JsonEventStore:
    """Resolve the event store from config."""
    return JsonEventStore(config.events_path)


def get_parser(config: Config) -> ClaudeEventParser:
    llm = ClaudeCLIService(binary=config.claude_binary, model=config.claude_model or None)
    return ClaudeEventParser(llm)


def now_in(config: Config) -> datetime:
    """Current time in the configured timezone."""
    return datetime.now(ZoneInfo(config.timezone))


def expanded_events(store: EventRepository, max_instances: int) -> list:
    """All stored events with recurring templates replaced by their instances."""
    events = []
    for event in store.list_all():
        events.extend(expand_event(event, max_instances))
    return events


def check_conflicts(store: EventRepository, slot: TimeSlot, max_instances: int, ignore_id: str | None = None) -> list:
    """Stored events (recurring instances included) overlapping a time slot."""
    events = [
        e
        for e in expanded_events(store, max_instances)
        if ignore_id is None or (e.id != ignore_id and e.parent_event_id != ignore_id)
    ]
    return find_conflicts(slot, events)


def create_from_text(
    text: str,
    config: Config,
    store: EventRepository,
    parser: EventParser,
    now: datetime,
) -> DraftResult:
    """Parse free text into an event and store it if the parser was confident enough."""
    draft = parser.parse(text, now, config.timezone)
    result = event_from_draft(
        draft,
        user_id=config.user_id,
        now=now,
        time_zone=config.timezone,
        min_confidence=config.min_confidence,
    )
    if result.event is not None:
        store.create(result.event)
        logger.info(f"Created event {result.event.id} from text (confidence {result.confidence})")
    else:
        logger.info(f"Rejected draft (confidence {result.confidence}): {result.ambiguities}")
    return result


async def deliver_due_reminders(
    store: EventRepository,
    notifier: ReminderNotifier,
    now: datetime,
    window: timedelta,
) -> int:
    """
    Send every due reminder for stored events and flag it as sent.

    A reminder stays unsent if delivery fails, so the next pass retries it.
    Returns the number of reminders delivered.
    """
    delivered = 0
    for due in due_reminders(store.list_all(), now, window):
        if not await notifier.send(due, now):
            continue
        current = store.get(due.event.id)
        if current is None:
            logger.warning(f"Event {due.event.id} disappeared before its reminder was recorded")
            continue
        store.update(mark_sent(current, due.reminder.id, now))
        delivered += 1
    return delivered

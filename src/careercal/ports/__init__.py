"""Ports - interfaces/protocols for external dependencies."""

from .event_repo import EventRepository
from .event_parser import EventParser
from .llm_service import LLMService
from .notifier import ReminderNotifier

__all__ = [
    "EventRepository",
    "EventParser",
    "LLMService",
    "ReminderNotifier",
]

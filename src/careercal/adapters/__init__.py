"""Adapters - I/O implementations of ports."""

from .json_event_store import JsonEventStore, EventNotFoundError
from .claude_cli import ClaudeCLIService
from .claude_parser import ClaudeEventParser
from .telegram_notifier import TelegramNotifier

__all__ = [
    "JsonEventStore",
    "EventNotFoundError",
    "ClaudeCLIService",
    "ClaudeEventParser",
    "TelegramNotifier",
]

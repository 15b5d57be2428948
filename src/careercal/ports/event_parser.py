"""Natural-language event parser interface."""

from datetime import datetime
from typing import Protocol

from careercal.core.drafts import EventDraft


class EventParser(Protocol):
    """Interface for turning free text into a structured event draft."""

    def parse(self, text: str, now: datetime, time_zone: str) -> EventDraft:
        """Parse text relative to now. Raises DraftError if the output is unusable."""
        ...

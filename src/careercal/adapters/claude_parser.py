"""Natural-language event parser backed by an LLM."""

import json
import logging
import re
from datetime import datetime

from careercal.core.drafts import DraftError, EventDraft
from careercal.core.models import Category
from careercal.ports.llm_service import LLMService

logger = logging.getLogger(__name__)

_JSON_OBJECT = re.compile(r"\{.*\}", re.DOTALL)

PROMPT_TEMPLATE = """You turn a short description of a calendar event into JSON.

Current date and time: {now}
User time zone: {time_zone}

Input: "{text}"

Reply with ONLY a JSON object with these keys:
- "summary": short event title (required)
- "description": optional details
- "startDate": "YYYY-MM-DD", resolved from relative phrases like "next Tuesday"
- "startTime": "HH:MM" in 24h format
- "duration": length in minutes
- "category": one of {categories}
- "priority": one of "high", "medium", "low"
- "location": optional
- "recurrence": optional object with "frequency" (daily/weekly/monthly/yearly),
  "interval", "daysOfWeek" (0=Sunday..6=Saturday, weekly only),
  "dayOfMonth" (1-31, monthly only), "endDate" (ISO date) or "occurrences"
- "attendees": optional list of email addresses
- "confidence": 0-100, how sure you are about the date and time
- "ambiguities": list of things that need clarification
"""


def extract_json(output: str) -> dict:
    """Pull the JSON object out of LLM output, tolerating code fences and chatter."""
    match = _JSON_OBJECT.search(output)
    if not match:
        raise DraftError("Parser returned no JSON object")
    try:
        return json.loads(match.group(0))
    except json.JSONDecodeError as e:
        raise DraftError(f"Parser returned invalid JSON: {e}") from e


class ClaudeEventParser:
    """
    Parses free text into an EventDraft via an LLM.

    Implements EventParser protocol.
    """

    def __init__(self, llm: LLMService):
        self.llm = llm

    def build_prompt(self, text: str, now: datetime, time_zone: str) -> str:
        categories = ", ".join(f'"{c.value}"' for c in Category)
        return PROMPT_TEMPLATE.format(
            now=now.isoformat(timespec="minutes"),
            time_zone=time_zone,
            text=text.replace('"', "'"),
            categories=categories,
        )

    def parse(self, text: str, now: datetime, time_zone: str) -> EventDraft:
        """Parse text relative to now. Raises DraftError if the output is unusable."""
        output = self.llm.generate(self.build_prompt(text, now, time_zone))
        logger.debug(f"Parser output: {output}")
        return EventDraft.from_dict(extract_json(output), source_text=text)

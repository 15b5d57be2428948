"""
Compact textual recurrence rules.

Supports a restricted subset of the iCalendar RRULE grammar:
FREQ, INTERVAL, UNTIL, COUNT, BYDAY and BYMONTHDAY.

Not supported (rejected with RRuleError rather than approximated):
BYHOUR, BYMINUTE, BYSECOND, BYSETPOS, BYWEEKNO, BYYEARDAY, BYMONTH,
ordinal BYDAY entries such as "1MO" or "-1FR", negative BYMONTHDAY,
and HOURLY / MINUTELY / SECONDLY frequencies.
Any other key (WKST, X-* extensions) is ignored.
"""

import logging
import re
from datetime import datetime, time, timezone

from .models import Frequency, InvalidPatternError, RecurrencePattern

logger = logging.getLogger(__name__)

DAY_CODES = ("SU", "MO", "TU", "WE", "TH", "FR", "SA")
DAY_NAMES = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")

SUPPORTED_KEYS = frozenset({"FREQ", "INTERVAL", "UNTIL", "COUNT", "BYDAY", "BYMONTHDAY"})
UNSUPPORTED_KEYS = frozenset(
    {"BYHOUR", "BYMINUTE", "BYSECOND", "BYSETPOS", "BYWEEKNO", "BYYEARDAY", "BYMONTH"}
)

_NUMBER = re.compile(r"^\d+$")
_ORDINAL_DAY = re.compile(r"^[+-]?\d+[A-Z]{2}$")
_UNIT = {
    Frequency.DAILY: "days",
    Frequency.WEEKLY: "weeks",
    Frequency.MONTHLY: "months",
    Frequency.YEARLY: "years",
}


class RRuleError(ValueError):
    """Raised when a recurrence rule cannot be parsed. The message is the reason."""


def _parse_number(key: str, value: str) -> int:
    if not _NUMBER.match(value):
        raise RRuleError(f"{key} must be a non-negative integer, got {value!r}")
    return int(value)


def _parse_until(value: str) -> datetime:
    """
    Parse an UNTIL value.

    "20251231T235959Z" is UTC, "20251231T235959" is floating (naive) and a
    bare date "20251231" covers that whole day.
    """
    try:
        if value.endswith("Z"):
            return datetime.strptime(value, "%Y%m%dT%H%M%SZ").replace(tzinfo=timezone.utc)
        if "T" in value:
            return datetime.strptime(value, "%Y%m%dT%H%M%S")
        day = datetime.strptime(value, "%Y%m%d").date()
        return datetime.combine(day, time(23, 59, 59))
    except ValueError:
        raise RRuleError(f"Malformed UNTIL date: {value!r}") from None


def _parse_byday(value: str) -> tuple[int, ...]:
    days = []
    for token in value.split(","):
        token = token.strip().upper()
        if _ORDINAL_DAY.match(token):
            raise RRuleError(f"Ordinal BYDAY entries are not supported: {token!r}")
        if token not in DAY_CODES:
            raise RRuleError(f"Unknown BYDAY entry: {token!r}")
        days.append(DAY_CODES.index(token))
    return tuple(days)


def parse_rrule(text: str) -> RecurrencePattern:
    """
    Parse an RRULE string into a RecurrencePattern.

    Example: "FREQ=WEEKLY;INTERVAL=2;BYDAY=MO,WE;UNTIL=20251231T235959Z"

    Raises RRuleError instead of returning a partially-populated pattern.
    """
    body = text.strip()
    if body.upper().startswith("RRULE:"):
        body = body[len("RRULE:"):]
    if not body:
        raise RRuleError("Empty recurrence rule")

    fields: dict[str, str] = {}
    for part in body.split(";"):
        part = part.strip()
        if not part:
            continue
        key, sep, value = part.partition("=")
        key = key.strip().upper()
        value = value.strip()
        if not sep or not key or not value:
            raise RRuleError(f"Malformed rule part: {part!r}")
        if key in UNSUPPORTED_KEYS:
            raise RRuleError(f"{key} is not supported")
        if key not in SUPPORTED_KEYS:
            logger.debug(f"Ignoring unknown RRULE key {key}")
            continue
        if key in fields:
            raise RRuleError(f"Duplicate {key}")
        fields[key] = value

    if "FREQ" not in fields:
        raise RRuleError("Missing FREQ")
    try:
        frequency = Frequency(fields["FREQ"].lower())
    except ValueError:
        frequency = None
    if frequency is None or frequency is Frequency.NONE:
        raise RRuleError(f"Unsupported FREQ: {fields['FREQ']!r}")

    if "COUNT" in fields and "UNTIL" in fields:
        raise RRuleError("COUNT and UNTIL cannot both be set")

    interval = _parse_number("INTERVAL", fields["INTERVAL"]) if "INTERVAL" in fields else 1
    occurrences = _parse_number("COUNT", fields["COUNT"]) if "COUNT" in fields else None
    day_of_month = _parse_number("BYMONTHDAY", fields["BYMONTHDAY"]) if "BYMONTHDAY" in fields else None
    end_date = _parse_until(fields["UNTIL"].upper()) if "UNTIL" in fields else None
    days_of_week = _parse_byday(fields["BYDAY"]) if "BYDAY" in fields else None

    try:
        return RecurrencePattern(
            frequency=frequency,
            interval=interval,
            days_of_week=days_of_week,
            day_of_month=day_of_month,
            end_date=end_date,
            occurrences=occurrences,
        )
    except InvalidPatternError as e:
        raise RRuleError(str(e)) from e


def _format_until(end_date: datetime) -> str:
    if end_date.tzinfo is None:
        return end_date.strftime("%Y%m%dT%H%M%S")
    return end_date.astimezone(timezone.utc).strftime("%Y%m%dT%H%M%SZ")


def to_rrule(pattern: RecurrencePattern) -> str:
    """Encode a pattern as an RRULE string (empty for non-recurring patterns)."""
    if not pattern.is_recurring:
        return ""

    parts = [f"FREQ={pattern.frequency.value.upper()}"]
    if pattern.interval > 1:
        parts.append(f"INTERVAL={pattern.interval}")
    if pattern.days_of_week:
        parts.append("BYDAY=" + ",".join(DAY_CODES[d] for d in pattern.days_of_week))
    if pattern.day_of_month:
        parts.append(f"BYMONTHDAY={pattern.day_of_month}")

    # UNTIL wins; RFC 5545 forbids emitting both
    if pattern.end_date:
        parts.append(f"UNTIL={_format_until(pattern.end_date)}")
    elif pattern.occurrences:
        parts.append(f"COUNT={pattern.occurrences}")

    return ";".join(parts)


def format_recurrence_text(pattern: RecurrencePattern) -> str:
    """
    Human-readable description of a pattern.

    e.g. "Every 2 weeks on Mon, Wed, until 12/31/2025" or "Monthly on day 15, 5 times".
    """
    if not pattern.is_recurring:
        return "Does not repeat"

    if pattern.interval == 1:
        text = pattern.frequency.value.capitalize()
    else:
        text = f"Every {pattern.interval} {_UNIT[pattern.frequency]}"

    if pattern.frequency is Frequency.WEEKLY and pattern.days_of_week:
        text += " on " + ", ".join(DAY_NAMES[d] for d in pattern.days_of_week)
    if pattern.frequency is Frequency.MONTHLY and pattern.day_of_month:
        text += f" on day {pattern.day_of_month}"

    if pattern.end_date:
        end = pattern.end_date
        text += f", until {end.month}/{end.day}/{end.year}"
    elif pattern.occurrences:
        text += f", {pattern.occurrences} time{'s' if pattern.occurrences != 1 else ''}"

    return text

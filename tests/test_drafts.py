"""Tests for converting parser drafts into events."""

from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

import pytest

from careercal.core.drafts import DraftError, EventDraft, event_from_draft, pattern_from_draft
from careercal.core.models import Category, Frequency, InvalidPatternError, Priority

NOW = datetime(2025, 1, 15, 10, 0, tzinfo=ZoneInfo("America/New_York"))


@pytest.fixture
def draft_data():
    return {
        "summary": "Mock interview with Sam",
        "startDate": "2025-01-17",
        "startTime": "14:00",
        "duration": 45,
        "category": "interview",
        "priority": "high",
        "location": "Zoom",
        "confidence": 90,
        "ambiguities": [],
    }


class TestEventDraftFromDict:
    def test_date_and_time(self, draft_data):
        draft = EventDraft.from_dict(draft_data, source_text="mock interview friday 2pm")

        assert draft.summary == "Mock interview with Sam"
        assert draft.start == datetime(2025, 1, 17, 14, 0)
        assert draft.duration_minutes == 45
        assert draft.category is Category.INTERVIEW
        assert draft.priority is Priority.HIGH
        assert draft.source_text == "mock interview friday 2pm"

    def test_iso_start(self):
        draft = EventDraft.from_dict({"summary": "Sync", "start": "2025-01-17T08:30:00", "confidence": 70})
        assert draft.start == datetime(2025, 1, 17, 8, 30)

    def test_date_without_time_defaults_to_morning(self):
        draft = EventDraft.from_dict({"summary": "Apply", "startDate": "2025-01-20", "confidence": 60})
        assert draft.start == datetime(2025, 1, 20, 9, 0)

    def test_missing_date(self):
        draft = EventDraft.from_dict({"summary": "Someday", "confidence": 80})
        assert draft.start is None

    @pytest.mark.parametrize(
        "data",
        [
            [],
            {"confidence": 80},
            {"summary": "  ", "confidence": 80},
            {"summary": "x", "confidence": 150},
            {"summary": "x", "confidence": "high"},
            {"summary": "x", "confidence": 80, "duration": -5},
            {"summary": "x", "confidence": 80, "category": "party"},
            {"summary": "x", "confidence": 80, "recurrence": "weekly"},
            {"summary": "x", "confidence": 80, "startDate": "next week"},
        ],
    )
    def test_rejects_malformed(self, data):
        with pytest.raises(DraftError):
            EventDraft.from_dict(data)


class TestPatternFromDraft:
    def test_weekly(self):
        pattern = pattern_from_draft({"frequency": "weekly", "interval": 2, "daysOfWeek": [3, 1]})
        assert pattern.frequency is Frequency.WEEKLY
        assert pattern.interval == 2
        assert pattern.days_of_week == (1, 3)

    def test_end_date_gets_timezone(self):
        tz = ZoneInfo("America/New_York")
        pattern = pattern_from_draft({"frequency": "daily", "endDate": "2025-02-01"}, tz)
        assert pattern.end_date == datetime(2025, 2, 1, tzinfo=tz)

    def test_invalid_combination(self):
        with pytest.raises(InvalidPatternError):
            pattern_from_draft({"frequency": "daily", "dayOfMonth": 3})

    def test_unreadable_end_date(self):
        with pytest.raises(InvalidPatternError):
            pattern_from_draft({"frequency": "daily", "endDate": "soon"})


class TestEventFromDraft:
    def test_builds_event(self, draft_data):
        draft = EventDraft.from_dict(draft_data, source_text="mock interview friday 2pm")

        result = event_from_draft(draft, "dana", NOW, time_zone="America/New_York", event_id="event-1")
        event = result.event

        assert event.id == "event-1"
        assert event.start == datetime(2025, 1, 17, 14, 0, tzinfo=ZoneInfo("America/New_York"))
        assert event.end - event.start == timedelta(minutes=45)
        assert event.time_zone == "America/New_York"
        assert event.ai_suggested
        assert event.created_by == "dana"
        assert event.created_at == NOW
        assert [r.minutes_before for r in event.reminders] == [60, 5]
        assert "mock interview friday 2pm" in event.ai_reasoning
        assert result.confidence == 90

    def test_defaults(self):
        draft = EventDraft(summary="Thing", confidence=80, start=datetime(2025, 1, 20, 9, 0))

        event = event_from_draft(draft, "dana", NOW).event

        assert event.category is Category.TASK
        assert event.priority is Priority.MEDIUM
        assert event.duration_minutes() == 60
        assert event.id.startswith("event-")

    def test_low_confidence_rejected(self):
        draft = EventDraft(summary="Thing", confidence=49, start=datetime(2025, 1, 20, 9, 0))

        result = event_from_draft(draft, "dana", NOW)

        assert result.event is None
        assert result.ambiguities == ["Input too unclear to parse"]

    def test_low_confidence_keeps_parser_ambiguities(self):
        draft = EventDraft(summary="Thing", confidence=20, ambiguities=["Which Friday?"])
        assert event_from_draft(draft, "dana", NOW).ambiguities == ["Which Friday?"]

    def test_threshold_is_inclusive(self):
        draft = EventDraft(summary="Thing", confidence=50, start=datetime(2025, 1, 20, 9, 0))
        assert event_from_draft(draft, "dana", NOW).event is not None

    def test_missing_start_rejected(self):
        draft = EventDraft(summary="Thing", confidence=90)

        result = event_from_draft(draft, "dana", NOW)

        assert result.event is None
        assert "Could not determine event date" in result.ambiguities

    def test_recurrence_applied(self):
        draft = EventDraft(
            summary="Leetcode",
            confidence=85,
            start=datetime(2025, 1, 20, 7, 0),
            recurrence={"frequency": "weekly", "daysOfWeek": [1, 3, 5], "occurrences": 12},
        )

        event = event_from_draft(draft, "dana", NOW).event

        assert event.is_recurring
        assert event.recurrence.occurrences == 12

    def test_bad_recurrence_falls_back_to_single_event(self):
        draft = EventDraft(
            summary="Leetcode",
            confidence=85,
            start=datetime(2025, 1, 20, 7, 0),
            recurrence={"frequency": "fortnightly"},
        )

        result = event_from_draft(draft, "dana", NOW)

        assert result.event is not None
        assert result.event.recurrence is None
        assert any(a.startswith("Ignored recurrence") for a in result.ambiguities)

    def test_non_repeating_recurrence_dropped(self):
        draft = EventDraft(
            summary="Once",
            confidence=85,
            start=datetime(2025, 1, 20, 7, 0),
            recurrence={"frequency": "none"},
        )
        assert event_from_draft(draft, "dana", NOW).event.recurrence is None

    def test_unknown_time_zone(self):
        draft = EventDraft(summary="Thing", confidence=90, start=datetime(2025, 1, 20, 9, 0))
        with pytest.raises(DraftError):
            event_from_draft(draft, "dana", NOW, time_zone="Mars/Olympus")

"""Tests for free-slot search and habit analysis."""

from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

import pytest

from careercal.core.availability import HabitProfile, analyze_habits, find_free_slots, free_slots_on
from careercal.core.models import CalendarEvent, Category, Status

TZ = ZoneInfo("America/New_York")
MONDAY = date(2030, 3, 4)


def make_event(event_id: str, day: date, hour: int, minute: int = 0, minutes: int = 60, **kwargs) -> CalendarEvent:
    start = datetime(day.year, day.month, day.day, hour, minute, tzinfo=TZ)
    return CalendarEvent(id=event_id, summary=event_id, start=start, end=start + timedelta(minutes=minutes), **kwargs)


def at(day: date, hour: int, minute: int = 0) -> datetime:
    return datetime(day.year, day.month, day.day, hour, minute, tzinfo=TZ)


class TestFreeSlotsOn:
    def test_empty_day_is_one_slot(self):
        [slot] = free_slots_on([], MONDAY, TZ)
        assert (slot.start, slot.end) == (at(MONDAY, 9), at(MONDAY, 17))

    def test_gaps_between_events(self):
        events = [make_event("a", MONDAY, 10), make_event("b", MONDAY, 13, minutes=90)]

        slots = free_slots_on(events, MONDAY, TZ)

        assert [(s.start, s.end) for s in slots] == [
            (at(MONDAY, 9), at(MONDAY, 10)),
            (at(MONDAY, 11), at(MONDAY, 13)),
            (at(MONDAY, 14, 30), at(MONDAY, 17)),
        ]

    def test_short_gaps_dropped(self):
        events = [make_event("a", MONDAY, 9, minutes=50), make_event("b", MONDAY, 10)]
        slots = free_slots_on(events, MONDAY, TZ)
        assert [s.start for s in slots] == [at(MONDAY, 11)]

    def test_min_minutes_is_inclusive(self):
        events = [make_event("a", MONDAY, 9, minutes=30), make_event("b", MONDAY, 10, minutes=420)]
        [slot] = free_slots_on(events, MONDAY, TZ, min_minutes=30)
        assert slot.duration_minutes() == 30

    def test_events_clamped_to_work_hours(self):
        events = [make_event("early", MONDAY, 7, minutes=150), make_event("late", MONDAY, 16, minutes=180)]

        [slot] = free_slots_on(events, MONDAY, TZ)

        assert (slot.start, slot.end) == (at(MONDAY, 9, 30), at(MONDAY, 16))

    def test_overlapping_events_merge(self):
        events = [make_event("a", MONDAY, 9, minutes=120), make_event("b", MONDAY, 10)]
        [slot] = free_slots_on(events, MONDAY, TZ)
        assert slot.start == at(MONDAY, 11)

    def test_cancelled_and_all_day_do_not_block(self):
        events = [
            make_event("off", MONDAY, 10, status=Status.CANCELLED),
            make_event("holiday", MONDAY, 0, minutes=24 * 60, all_day=True),
        ]
        [slot] = free_slots_on(events, MONDAY, TZ)
        assert slot.duration_minutes() == 8 * 60

    def test_custom_work_hours(self):
        [slot] = free_slots_on([], MONDAY, TZ, work_hours=(8, 12))
        assert (slot.start, slot.end) == (at(MONDAY, 8), at(MONDAY, 12))

    def test_event_in_other_timezone(self):
        start = datetime(2030, 3, 4, 15, 0, tzinfo=ZoneInfo("UTC"))  # 10:00 in New York
        event = CalendarEvent(id="call", summary="call", start=start, end=start + timedelta(hours=1))

        slots = free_slots_on([event], MONDAY, TZ)

        assert [s.end for s in slots][0] == at(MONDAY, 10)


class TestFindFreeSlots:
    def test_skips_weekend(self):
        # Friday through Monday
        slots = find_free_slots([], date(2030, 3, 1), MONDAY, tz=TZ)
        assert [s.start.date() for s in slots] == [date(2030, 3, 1), MONDAY]

    def test_single_day_range(self):
        slots = find_free_slots([make_event("a", MONDAY, 12)], MONDAY, MONDAY, tz=TZ)
        assert len(slots) == 2

    def test_in_time_order(self):
        events = [make_event("b", MONDAY + timedelta(days=1), 9), make_event("a", MONDAY, 9)]
        slots = find_free_slots(events, MONDAY, MONDAY + timedelta(days=1), tz=TZ)
        assert slots == sorted(slots, key=lambda s: s.start)

    def test_reversed_range(self):
        with pytest.raises(ValueError, match="before start"):
            find_free_slots([], MONDAY, MONDAY - timedelta(days=1), tz=TZ)

    def test_bad_work_hours(self):
        with pytest.raises(ValueError, match="Work hours"):
            find_free_slots([], MONDAY, MONDAY, work_hours=(17, 9), tz=TZ)


class TestAnalyzeHabits:
    def test_defaults_without_events(self):
        profile = analyze_habits([])
        assert profile == HabitProfile()
        assert profile.peak_productivity_hours == [9, 10, 14, 15]
        assert profile.average_session_duration == 60

    def test_cancelled_events_ignored(self):
        assert analyze_habits([make_event("x", MONDAY, 20, status=Status.CANCELLED)]) == HabitProfile()

    def test_profile(self):
        events = [
            make_event("a", MONDAY, 9, minutes=30, category=Category.INTERVIEW),
            make_event("b", MONDAY, 9, minutes=60, category=Category.INTERVIEW),
            make_event("c", MONDAY + timedelta(days=2), 14, minutes=90, category=Category.NETWORKING),
        ]

        profile = analyze_habits(events, TZ)

        # (9 + 9 + 14) / 3 = 10.67
        assert profile.preferred_start_time == "11:00"
        # (9 + 10 + 15) / 3 = 11.33
        assert profile.preferred_end_time == "11:00"
        assert profile.peak_productivity_hours == [9, 14]
        assert profile.common_categories == [Category.INTERVIEW, Category.NETWORKING]
        assert profile.average_session_duration == 60
        assert profile.preferred_days_for_category == {Category.INTERVIEW: [1], Category.NETWORKING: [3]}

    def test_half_hours_round_up(self):
        events = [make_event("a", MONDAY, 9, minutes=45), make_event("b", MONDAY, 10, minutes=46)]
        profile = analyze_habits(events, TZ)
        # Mean start hour 9.5 and mean duration 45.5
        assert profile.preferred_start_time == "10:00"
        assert profile.average_session_duration == 46

    def test_peak_hours_top_four_by_count(self):
        events = [make_event(f"e{h}{i}", MONDAY, h) for h in (8, 9, 10, 11, 12) for i in range(h % 3 + 1)]

        profile = analyze_habits(events, TZ)

        # Counts: 8 -> 3, 9 -> 1, 10 -> 2, 11 -> 3, 12 -> 1; the tie at one goes to 9
        assert profile.peak_productivity_hours == [8, 9, 10, 11]

    def test_common_categories_top_three(self):
        categories = [Category.TASK] * 3 + [Category.CAREER] * 2 + [Category.MEETING, Category.DEADLINE]
        events = [make_event(f"e{i}", MONDAY, 9, category=c) for i, c in enumerate(categories)]

        profile = analyze_habits(events, TZ)

        assert profile.common_categories == [Category.TASK, Category.CAREER, Category.MEETING]

    def test_hours_read_in_given_timezone(self):
        start = datetime(2030, 3, 4, 14, 0, tzinfo=ZoneInfo("UTC"))
        event = CalendarEvent(id="x", summary="x", start=start, end=start + timedelta(hours=1))
        assert analyze_habits([event], TZ).preferred_start_time == "09:00"

    def test_to_dict(self):
        data = analyze_habits([make_event("a", MONDAY, 9, category=Category.CAREER)], TZ).to_dict()
        assert data["common_categories"] == ["career"]
        assert data["preferred_days_for_category"] == {"career": [1]}

"""Shared fixtures for the feed pipeline tests."""

from datetime import date, timedelta
from itertools import count

import pytest

from eventfeed.models import EventRecord, Occurrence, RecurrencePattern, RecurrenceRule, UserProfile

# 2026-10-19 is a Monday
MONDAY = date(2026, 10, 19)


@pytest.fixture
def today():
    return MONDAY


@pytest.fixture
def make_event():
    """Factory for EventRecord with sensible defaults."""
    ids = count(1)

    def _make(
        title=None,
        day=MONDAY,
        time="18:00",
        location="Downtown",
        lat=None,
        lon=None,
        tags=(),
        attending=0,
        pattern=None,
        days_of_week=(),
        end_date=None,
        event_id=None,
    ):
        n = next(ids)
        recurrence = None
        if pattern is not None:
            recurrence = RecurrenceRule(
                pattern=RecurrencePattern(pattern),
                days_of_week=tuple(days_of_week),
                end_date=end_date,
            )
        return EventRecord(
            id=event_id or f"ev-{n}",
            title=title or f"Event {n}",
            date=day,
            time=time,
            location=location,
            latitude=lat,
            longitude=lon,
            tags=tuple(tags),
            attending_count=attending,
            recurrence=recurrence,
            raw_date=day.isoformat() if day else "",
        )

    return _make


@pytest.fixture
def occurrence_of():
    def _occ(event, day=None):
        return Occurrence(event=event, effective_date=day or event.date)

    return _occ


@pytest.fixture
def dated_pool(make_event, occurrence_of):
    """N single-day events on consecutive days starting Monday."""

    def _pool(n, **kwargs):
        return [
            occurrence_of(make_event(day=MONDAY + timedelta(days=i), **kwargs))
            for i in range(n)
        ]

    return _pool


@pytest.fixture
def profile():
    return UserProfile(id="user-1")

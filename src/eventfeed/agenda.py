"""
"My Events" agenda: the events a user organizes or attends, laid out by day.

Uses the same recurrence expansion and deduplication as the main feed but
none of the ranking or recommendation machinery.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from itertools import groupby
from typing import List, Optional, Sequence, Tuple

from .config import WINDOW_DAYS
from .dedup import deduplicate
from .models import EventRecord, Occurrence
from .recurrence import expand_all


@dataclass(frozen=True)
class AgendaDay:
    day: str
    occurrences: Tuple[Occurrence, ...]


@dataclass(frozen=True)
class Agenda:
    days: Tuple[AgendaDay, ...]
    selected_day: str

    def occurrences_on(self, day: str) -> Tuple[Occurrence, ...]:
        for entry in self.days:
            if entry.day == day:
                return entry.occurrences
        return ()


def merge_my_events(
    organized: Sequence[EventRecord], attending: Sequence[EventRecord]
) -> List[EventRecord]:
    """Organized events first, then attended events not already listed."""
    organized_ids = {ev.id for ev in organized}
    return list(organized) + [ev for ev in attending if ev.id not in organized_ids]


def _default_day(days: Sequence[str], today: date) -> str:
    today_text = today.isoformat()
    if today_text in days:
        return today_text
    upcoming = [d for d in days if d >= today_text]
    if upcoming:
        return upcoming[0]
    if days:
        return days[0]
    return today_text


def build_agenda(
    organized: Sequence[EventRecord],
    attending: Sequence[EventRecord],
    today: date,
    window_days: int = WINDOW_DAYS,
    selected_day: Optional[str] = None,
) -> Agenda:
    """
    Expand, deduplicate and group a user's events by day.

    ``selected_day`` is kept when it still has events; otherwise today is
    selected if it has events, then the first upcoming day, then the first
    day at all.
    """
    merged = merge_my_events(organized, attending)
    occurrences = deduplicate(expand_all(merged, today, window_days))
    occurrences.sort(key=lambda occ: (occ.day_text, occ.event.time or ""))

    days = tuple(
        AgendaDay(day=day, occurrences=tuple(group))
        for day, group in groupby(occurrences, key=lambda occ: occ.day_text)
    )
    day_names = [entry.day for entry in days]
    if selected_day not in day_names:
        selected_day = _default_day(day_names, today)
    return Agenda(days=days, selected_day=selected_day)

"""
Expansion of recurring events into dated occurrences.

Every generated occurrence falls inside ``[today, today + window_days]``
(intersected with the rule's own end date) and never before the event's own
start date. Anything that cannot be expanded degrades to the single base
appearance of the event.
"""

from __future__ import annotations

import calendar
import logging
from datetime import date, timedelta
from typing import Iterable, List, Optional, Sequence

from .config import WINDOW_DAYS
from .models import EventRecord, Occurrence, RecurrencePattern, RecurrenceRule

LOGGER = logging.getLogger(__name__)

WEEKDAY_NAMES = ("Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday")


def sunday_weekday(day: date) -> int:
    """Day of week with 0 = Sunday .. 6 = Saturday."""
    return (day.weekday() + 1) % 7


def week_start(day: date) -> date:
    return day - timedelta(days=sunday_weekday(day))


def add_months(anchor: date, months: int) -> date:
    """
    Move ``anchor`` forward by whole calendar months.

    The day of month is clamped to the length of the target month, so a
    series anchored on the 31st lands on the 28th/29th in February and goes
    back to the 31st in March.
    """
    month_index = anchor.month - 1 + months
    year = anchor.year + month_index // 12
    month = month_index % 12 + 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(anchor.day, last_day))


def _window_end(rule: RecurrenceRule, today: date, window_days: int) -> date:
    end = today + timedelta(days=window_days)
    if rule.end_date is not None and rule.end_date < end:
        return rule.end_date
    return end


def _valid_days(days: Sequence[int], start: date) -> List[int]:
    picked = []
    for value in days:
        if isinstance(value, bool) or not isinstance(value, int):
            continue
        if 0 <= value <= 6 and value not in picked:
            picked.append(value)
    return picked or [sunday_weekday(start)]


def _daily(start: date, today: date, end: date) -> List[date]:
    days = []
    current = max(start, today)
    while current <= end:
        days.append(current)
        current += timedelta(days=1)
    return days


def _weekly(start: date, rule: RecurrenceRule, today: date, end: date) -> List[date]:
    step_weeks = 1 if rule.pattern == RecurrencePattern.WEEKLY else 2
    days_of_week = _valid_days(rule.days_of_week, start)

    series_week = week_start(start)
    diff_weeks = (week_start(today) - series_week).days // 7
    if diff_weeks <= 0:
        offset_weeks = 0
    elif diff_weeks % step_weeks == 0:
        offset_weeks = diff_weeks
    else:
        offset_weeks = diff_weeks + (step_weeks - diff_weeks % step_weeks)

    lower = max(start, today)
    current_week = series_week + timedelta(weeks=offset_weeks)
    days = []
    while current_week <= end:
        for dow in days_of_week:
            candidate = current_week + timedelta(days=dow)
            if lower <= candidate <= end:
                days.append(candidate)
        current_week += timedelta(weeks=step_weeks)
    return days


def _monthly(start: date, today: date, end: date) -> List[date]:
    months = 0
    current = start
    while current < today:
        months += 1
        current = add_months(start, months)
    days = []
    while current <= end:
        days.append(current)
        months += 1
        current = add_months(start, months)
    return days


def expand_recurrence(
    event: EventRecord,
    today: date,
    window_days: int = WINDOW_DAYS,
) -> List[Occurrence]:
    """
    Expand one event into its concrete occurrences, ordered by date.

    Non-recurring events, events with an unparseable date or an unknown
    pattern, and recurring events with nothing inside the window all return
    their single base appearance.
    """
    base = [Occurrence(event=event, effective_date=event.date, generated=False)]
    rule = event.recurrence
    if rule is None or not rule.repeats:
        if rule is not None and rule.pattern == RecurrencePattern.UNKNOWN:
            LOGGER.debug("Event %s has an unsupported recurrence pattern", event.id)
        return base
    if event.date is None:
        LOGGER.warning("Recurring event %s has no usable start date (%r)", event.id, event.raw_date)
        return base

    end = _window_end(rule, today, window_days)
    if rule.pattern == RecurrencePattern.DAILY:
        days = _daily(event.date, today, end)
    elif rule.pattern in (RecurrencePattern.WEEKLY, RecurrencePattern.BIWEEKLY):
        days = _weekly(event.date, rule, today, end)
    else:
        days = _monthly(event.date, today, end)

    if not days:
        return base
    return [Occurrence(event=event, effective_date=day) for day in sorted(set(days))]


def expand_all(
    events: Iterable[EventRecord],
    today: date,
    window_days: int = WINDOW_DAYS,
) -> List[Occurrence]:
    occurrences: List[Occurrence] = []
    for event in events:
        occurrences.extend(expand_recurrence(event, today, window_days))
    return occurrences


def recurrence_label(rule: Optional[RecurrenceRule]) -> Optional[str]:
    """Short English label for a recurring event card."""
    if rule is None or not rule.repeats:
        return None
    if rule.pattern == RecurrencePattern.DAILY:
        return "Daily"
    if rule.pattern == RecurrencePattern.MONTHLY:
        return "Monthly"
    names = [WEEKDAY_NAMES[d] for d in rule.days_of_week if isinstance(d, int) and 0 <= d <= 6]
    if not names:
        return None
    return ", ".join(name if name.endswith("s") else f"{name}s" for name in names)

"""
Conversion of storage rows, CSV and JSON exports into pipeline records.

Parsing is fail-open: a malformed field falls back to a safe default so one
bad row never takes the whole feed down.
"""

from __future__ import annotations

import json
import logging
import math
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

import pandas as pd

from .models import EventRecord, EventStatus, RecurrencePattern, RecurrenceRule, UserProfile

LOGGER = logging.getLogger(__name__)


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    if isinstance(value, str) and value.strip() == "":
        return True
    return False


def _safe_json_loads(raw: Any) -> Any:
    if _is_missing(raw):
        return None
    if not isinstance(raw, str):
        return raw
    try:
        return json.loads(raw)
    except (TypeError, ValueError):
        return None


def parse_date(value: Any) -> Optional[date]:
    """Parse ``YYYY-MM-DD`` or an ISO timestamp into a calendar date."""
    if _is_missing(value):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        return None


def _clean_str(value: Any, default: str = "") -> str:
    if _is_missing(value):
        return default
    return str(value).strip()


def _clean_float(value: Any) -> Optional[float]:
    if _is_missing(value) or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def _truthy(value: Any) -> bool:
    if _is_missing(value):
        return False
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes", "t")
    return bool(value)


def _clean_int(value: Any, default: int = 0) -> int:
    number = _clean_float(value)
    return default if number is None else int(number)


def _as_list(value: Any) -> List[Any]:
    if _is_missing(value):
        return []
    if isinstance(value, (list, tuple, set)):
        return list(value)
    if isinstance(value, str):
        parsed = _safe_json_loads(value)
        if isinstance(parsed, list):
            return parsed
        return [part.strip() for part in value.split(",") if part.strip()]
    return [value]


def tags_from_row(row: Mapping[str, Any]) -> Tuple[str, ...]:
    """
    Tag names of an event row.

    Accepts a flat ``tags`` list (or comma separated string) as well as the
    nested ``event_tags -> tags -> name`` shape returned by the storage join.
    """
    names: List[str] = []
    for tag in _as_list(row.get("tags")):
        name = tag.get("name") if isinstance(tag, Mapping) else tag
        if not _is_missing(name):
            names.append(str(name).strip())
    for link in _as_list(row.get("event_tags")):
        if not isinstance(link, Mapping):
            continue
        tag = link.get("tags")
        if isinstance(tag, Mapping) and not _is_missing(tag.get("name")):
            names.append(str(tag["name"]).strip())
    seen = set()
    unique = []
    for name in names:
        if name not in seen:
            seen.add(name)
            unique.append(name)
    return tuple(unique)


def _attending_count(row: Mapping[str, Any]) -> int:
    if not _is_missing(row.get("attending_count")):
        return _clean_int(row.get("attending_count"))
    return len(_as_list(row.get("attendees")))


def _days_of_week(value: Any) -> Tuple[int, ...]:
    days = []
    for item in _as_list(value):
        number = _clean_float(item)
        if number is not None and number.is_integer() and 0 <= number <= 6:
            days.append(int(number))
    return tuple(days)


def recurrence_from_row(row: Mapping[str, Any]) -> Optional[RecurrenceRule]:
    nested = _safe_json_loads(row.get("recurrence"))
    if isinstance(nested, Mapping):
        pattern_raw = nested.get("pattern")
        days_raw = nested.get("days_of_week", nested.get("days"))
        end_raw = nested.get("end_date")
    else:
        if not _truthy(row.get("is_recurring")):
            return None
        pattern_raw = row.get("recurrence_pattern")
        days_raw = row.get("recurrence_days")
        end_raw = row.get("recurrence_end_date")

    if _is_missing(pattern_raw):
        return None
    try:
        pattern = RecurrencePattern(str(pattern_raw).strip().lower())
    except ValueError:
        LOGGER.debug("Unknown recurrence pattern %r", pattern_raw)
        pattern = RecurrencePattern.UNKNOWN
    return RecurrenceRule(
        pattern=pattern,
        days_of_week=_days_of_week(days_raw),
        end_date=parse_date(end_raw),
    )


def _status(value: Any) -> EventStatus:
    try:
        return EventStatus(_clean_str(value, "active").lower())
    except ValueError:
        return EventStatus.ACTIVE


def event_from_row(row: Mapping[str, Any]) -> EventRecord:
    raw_date = _clean_str(row.get("date"))
    parsed = parse_date(row.get("date"))
    if parsed is None and raw_date:
        LOGGER.warning("Event %s has an unparseable date %r", row.get("id"), raw_date)
    return EventRecord(
        id=_clean_str(row.get("id")),
        title=_clean_str(row.get("title")),
        date=parsed,
        time=_clean_str(row.get("time")),
        end_date=parse_date(row.get("end_date")),
        end_time=_clean_str(row.get("end_time")) or None,
        location=_clean_str(row.get("location")),
        latitude=_clean_float(row.get("latitude")),
        longitude=_clean_float(row.get("longitude")),
        is_online=_truthy(row.get("is_online")),
        price=_clean_float(row.get("price")) or 0.0,
        gender_filter=_clean_str(row.get("gender"), "all") or "all",
        tags=tags_from_row(row),
        attending_count=_attending_count(row),
        organizer_id=_clean_str(row.get("organizer_id")) or None,
        status=_status(row.get("status")),
        recurrence=recurrence_from_row(row),
        raw_date=raw_date,
    )


def events_from_rows(rows: Iterable[Mapping[str, Any]]) -> List[EventRecord]:
    return [event_from_row(row) for row in rows]


def _city_from_last_location(value: Any) -> Optional[str]:
    text = _clean_str(value)
    if not text:
        return None
    city = text.split(",")[0].strip()
    if not city or _clean_float(city) is not None:
        return None
    return city


def profile_from_row(row: Mapping[str, Any]) -> UserProfile:
    location = None
    lat = _clean_float(row.get("latitude"))
    lon = _clean_float(row.get("longitude"))
    coords = row.get("location")
    if lat is None or lon is None:
        if isinstance(coords, Mapping):
            lat, lon = _clean_float(coords.get("latitude")), _clean_float(coords.get("longitude"))
        elif isinstance(coords, Sequence) and not isinstance(coords, str) and len(coords) == 2:
            lat, lon = _clean_float(coords[0]), _clean_float(coords[1])
    if lat is not None and lon is not None:
        location = (lat, lon)
    city = _clean_str(row.get("city")) or _city_from_last_location(row.get("last_location"))
    interests = tuple(
        str(tag).strip() for tag in _as_list(row.get("interested_tags")) if not _is_missing(tag)
    )
    return UserProfile(
        id=_clean_str(row.get("id")),
        interested_tags=interests,
        city=city,
        location=location,
    )


def load_events_frame(path: Path) -> pd.DataFrame:
    """Read an events export (CSV or JSON) into a DataFrame."""
    if path.suffix.lower() == ".csv":
        return pd.read_csv(path)
    return pd.read_json(path, orient="records", dtype=False, convert_dates=False)


def events_from_frame(frame: pd.DataFrame) -> List[EventRecord]:
    if frame.empty:
        return []
    cleaned = frame.astype(object).where(pd.notna(frame), None)
    return events_from_rows(cleaned.to_dict(orient="records"))


def load_profile(path: Optional[Path], user_id: str = "anonymous") -> UserProfile:
    if path is None or not path.exists():
        return UserProfile(id=user_id)
    data: Dict[str, Any] = json.loads(path.read_text())
    data.setdefault("id", user_id)
    return profile_from_row(data)

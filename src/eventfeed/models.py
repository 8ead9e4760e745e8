"""
Data model shared by every stage of the feed pipeline.

All records are frozen dataclasses: the pipeline never mutates its inputs,
each stage returns new tuples/lists built from the ones it received.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Optional, Tuple, Union


class EventStatus(str, Enum):
    ACTIVE = "active"
    CANCELED = "canceled"
    ENDED = "ended"


class RecurrencePattern(str, Enum):
    NONE = "none"
    DAILY = "daily"
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"
    UNKNOWN = "unknown"


class CandidateType(str, Enum):
    POPULAR_CITY = "popular_city"
    INTEREST_BASED = "interest_based"
    NEARBY = "nearby"
    TRENDING = "trending"
    SUGGESTED = "suggested"


class FilterKind(str, Enum):
    ALL = "all"
    NEAR_ME = "near_me"
    TAG = "tag"


@dataclass(frozen=True)
class RecurrenceRule:
    """
    How an event repeats.

    ``days_of_week`` uses 0 = Sunday .. 6 = Saturday and only matters for
    weekly and biweekly rules.
    """

    pattern: RecurrencePattern = RecurrencePattern.NONE
    days_of_week: Tuple[int, ...] = ()
    end_date: Optional[date] = None

    @property
    def repeats(self) -> bool:
        return self.pattern not in (RecurrencePattern.NONE, RecurrencePattern.UNKNOWN)


@dataclass(frozen=True)
class EventRecord:
    id: str
    title: str
    date: Optional[date]
    time: str = ""
    end_date: Optional[date] = None
    end_time: Optional[str] = None
    location: str = ""
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    is_online: bool = False
    price: float = 0.0
    gender_filter: str = "all"
    tags: Tuple[str, ...] = ()
    attending_count: int = 0
    organizer_id: Optional[str] = None
    status: EventStatus = EventStatus.ACTIVE
    recurrence: Optional[RecurrenceRule] = None
    raw_date: str = ""

    @property
    def has_coordinates(self) -> bool:
        return self.latitude is not None and self.longitude is not None

    @property
    def coordinates(self) -> Optional[Tuple[float, float]]:
        if not self.has_coordinates:
            return None
        return (float(self.latitude), float(self.longitude))

    @property
    def tag_set(self) -> FrozenSet[str]:
        return frozenset(t.lower() for t in self.tags)


@dataclass(frozen=True)
class Occurrence:
    """One concrete calendar appearance of an event."""

    event: EventRecord
    effective_date: Optional[date]
    generated: bool = True

    @property
    def id(self) -> str:
        return self.event.id

    @property
    def day_text(self) -> str:
        if self.effective_date is not None:
            return self.effective_date.isoformat()
        return self.event.raw_date

    def to_dict(self) -> Dict[str, Any]:
        ev = self.event
        return {
            "id": ev.id,
            "title": ev.title,
            "date": self.day_text,
            "time": ev.time,
            "end_date": ev.end_date.isoformat() if ev.end_date else None,
            "end_time": ev.end_time,
            "location": ev.location,
            "latitude": ev.latitude,
            "longitude": ev.longitude,
            "is_online": ev.is_online,
            "price": ev.price,
            "gender": ev.gender_filter,
            "tags": list(ev.tags),
            "attending_count": ev.attending_count,
            "organizer_id": ev.organizer_id,
            "status": ev.status.value,
            "is_recurring": bool(ev.recurrence and ev.recurrence.repeats),
            "generated": self.generated,
        }


@dataclass(frozen=True)
class UserProfile:
    id: str
    interested_tags: Tuple[str, ...] = ()
    city: Optional[str] = None
    location: Optional[Tuple[float, float]] = None


@dataclass(frozen=True)
class Candidate:
    """A named, scored shelf of events sharing a theme."""

    type: CandidateType
    title: str
    events: Tuple[Occurrence, ...]
    score: float

    @property
    def event_ids(self) -> List[str]:
        return [occ.id for occ in self.events]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type.value,
            "title": self.title,
            "score": self.score,
            "events": [occ.to_dict() for occ in self.events],
        }


@dataclass(frozen=True)
class FeedFilter:
    kind: FilterKind = FilterKind.ALL
    tag: Optional[str] = None

    @classmethod
    def all(cls) -> "FeedFilter":
        return cls(FilterKind.ALL)

    @classmethod
    def near_me(cls) -> "FeedFilter":
        return cls(FilterKind.NEAR_ME)

    @classmethod
    def for_tag(cls, tag: str) -> "FeedFilter":
        return cls(FilterKind.TAG, tag)


@dataclass(frozen=True)
class EventItem:
    occurrence: Occurrence
    index: int
    kind: str = field(default="event", init=False)

    @property
    def key(self) -> str:
        return f"event-{self.occurrence.id}-{self.index}"

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.kind, "id": self.key, "data": self.occurrence.to_dict()}


@dataclass(frozen=True)
class RecommendationItem:
    candidate: Candidate
    index: int
    kind: str = field(default="recommendation", init=False)

    @property
    def key(self) -> str:
        return f"recommendation-{self.index}-{self.candidate.type.value}"

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.kind, "id": self.key, "data": self.candidate.to_dict()}


FeedItem = Union[EventItem, RecommendationItem]


@dataclass(frozen=True)
class Feed:
    items: Tuple[FeedItem, ...] = ()
    headline: Optional[Candidate] = None
    candidates: Tuple[Candidate, ...] = ()
    rotation_pool: Tuple[Candidate, ...] = ()

    @property
    def event_items(self) -> List[EventItem]:
        return [item for item in self.items if isinstance(item, EventItem)]

    @property
    def recommendation_items(self) -> List[RecommendationItem]:
        return [item for item in self.items if isinstance(item, RecommendationItem)]

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional


@dataclass
class FeedPaths:
    """Input/output paths used by the batch feed builder."""

    events_path: Path = Path("data/events.json")
    profile_path: Optional[Path] = None
    output_dir: Path = Path("output/feed")

    def feed_json(self) -> Path:
        return self.output_dir / "feed.json"

    def metadata_json(self) -> Path:
        return self.output_dir / "metadata.json"


WINDOW_DAYS = 60
EARTH_RADIUS_KM = 6371.0


@dataclass
class RecurrenceConfig:
    """Bounds applied when expanding recurring events."""

    window_days: int = WINDOW_DAYS


@dataclass
class RankingConfig:
    """Parameters of the primary-feed ordering."""

    near_me_radius_km: float = 50.0
    interest_bonus: float = -200.0
    missing_distance_penalty_km: float = 1000.0


@dataclass(frozen=True)
class ShelfRule:
    min_events: int
    base_score: float
    per_event: float

    def score(self, count: int) -> float:
        return self.base_score + self.per_event * count


DEFAULT_SHELF_RULES: Dict[str, ShelfRule] = {
    "popular_city": ShelfRule(min_events=3, base_score=100.0, per_event=5.0),
    "interest_based": ShelfRule(min_events=2, base_score=90.0, per_event=8.0),
    "nearby": ShelfRule(min_events=3, base_score=85.0, per_event=6.0),
    "trending": ShelfRule(min_events=3, base_score=70.0, per_event=4.0),
    "suggested": ShelfRule(min_events=3, base_score=50.0, per_event=2.0),
}


@dataclass
class CandidateConfig:
    """Quality gates and limits for recommendation shelves."""

    shelf_size: int = 5
    nearby_radius_km: float = 20.0
    trending_min_attending: int = 5
    rules: Dict[str, ShelfRule] = field(default_factory=lambda: dict(DEFAULT_SHELF_RULES))


@dataclass
class MixerConfig:
    insert_interval: int = 10
    rotation_pool_size: int = 4


@dataclass
class FeedConfig:
    recurrence: RecurrenceConfig = field(default_factory=RecurrenceConfig)
    ranking: RankingConfig = field(default_factory=RankingConfig)
    candidates: CandidateConfig = field(default_factory=CandidateConfig)
    mixer: MixerConfig = field(default_factory=MixerConfig)

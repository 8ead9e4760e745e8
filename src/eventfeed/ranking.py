"""
Ordering of the primary feed.

The default order pushes events matching the user's interests ahead of
everything else by a fixed offset, then orders by distance. Sorting is
stable throughout, so ties keep the upstream (date ascending) order.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

import numpy as np

from .config import RankingConfig
from .geo import distances_km
from .models import FeedFilter, FilterKind, Occurrence, UserProfile

LOGGER = logging.getLogger(__name__)


def _interest_set(profile: UserProfile) -> set[str]:
    return {t.strip().lower() for t in profile.interested_tags if t and t.strip()}


def personalization_scores(
    pool: Sequence[Occurrence],
    profile: UserProfile,
    personalized: bool = True,
    config: Optional[RankingConfig] = None,
) -> Optional[np.ndarray]:
    """
    Per-occurrence score for the default order, lower is better.

    Returns ``None`` when there is nothing to personalize on: no location and
    either no interests or personalization turned off.
    """
    config = config or RankingConfig()
    interests = _interest_set(profile) if personalized else set()
    if not interests and profile.location is None:
        return None

    scores = np.zeros(len(pool), dtype=np.float64)
    if interests:
        matches = np.array([bool(occ.event.tag_set & interests) for occ in pool], dtype=bool)
        scores += np.where(matches, config.interest_bonus, 0.0)
    if profile.location is not None:
        scores += distances_km(
            profile.location,
            [occ.event for occ in pool],
            missing=config.missing_distance_penalty_km,
        )
    return scores


def _stable_order(pool: Sequence[Occurrence], keys: np.ndarray) -> List[Occurrence]:
    order = np.argsort(keys, kind="stable")
    return [pool[i] for i in order]


def default_order(
    pool: Sequence[Occurrence],
    profile: UserProfile,
    personalized: bool = True,
    config: Optional[RankingConfig] = None,
) -> List[Occurrence]:
    scores = personalization_scores(pool, profile, personalized, config)
    if scores is None:
        return list(pool)
    return _stable_order(pool, scores)


def near_me(
    pool: Sequence[Occurrence],
    profile: UserProfile,
    config: Optional[RankingConfig] = None,
) -> List[Occurrence]:
    config = config or RankingConfig()
    if profile.location is None:
        LOGGER.info("Near-me filter requested for user %s without a location", profile.id)
        return []
    distances = distances_km(profile.location, [occ.event for occ in pool])
    inside = distances < config.near_me_radius_km
    kept = [occ for occ, ok in zip(pool, inside) if ok]
    return _stable_order(kept, distances[inside])


def with_tag(pool: Sequence[Occurrence], tag: Optional[str]) -> List[Occurrence]:
    wanted = (tag or "").strip().lower()
    return [occ for occ in pool if wanted in occ.event.tag_set]


def rank_events(
    pool: Sequence[Occurrence],
    profile: UserProfile,
    feed_filter: Optional[FeedFilter] = None,
    personalized: bool = True,
    config: Optional[RankingConfig] = None,
) -> List[Occurrence]:
    """
    Build the primary feed from a deduplicated pool.

    Args:
        pool: Deduplicated occurrences in upstream order
        profile: The requesting user
        feed_filter: Active filter, "All" when omitted
        personalized: Whether interest matching may reorder the feed
        config: Thresholds and offsets

    Returns:
        Ordered occurrences for the primary feed
    """
    feed_filter = feed_filter or FeedFilter.all()
    ordered = default_order(pool, profile, personalized, config)
    if feed_filter.kind == FilterKind.NEAR_ME:
        return near_me(ordered, profile, config)
    if feed_filter.kind == FilterKind.TAG:
        return with_tag(ordered, feed_filter.tag)
    return ordered

"""
Recommendation shelves built from the full event pool.

Each shelf has a quality gate (minimum population) and a score; shelves
that fail the gate are left out entirely. Nothing already placed in the
primary feed is ever put on a shelf.
"""

from __future__ import annotations

import logging
from typing import Callable, Collection, Dict, List, Optional, Sequence, Tuple

import numpy as np

from .config import CandidateConfig
from .geo import distances_km
from .models import Candidate, CandidateType, Occurrence, UserProfile

LOGGER = logging.getLogger(__name__)

SHELF_TITLES: Dict[CandidateType, str] = {
    CandidateType.POPULAR_CITY: "Popular in",
    CandidateType.INTEREST_BASED: "Because you like",
    CandidateType.NEARBY: "Happening nearby",
    CandidateType.TRENDING: "Trending now",
    CandidateType.SUGGESTED: "Suggested for you",
}


def _shelf(
    kind: CandidateType,
    events: Sequence[Occurrence],
    config: CandidateConfig,
    suffix: Optional[str] = None,
) -> Optional[Candidate]:
    picked = tuple(events[: config.shelf_size])
    rule = config.rules[kind.value]
    if len(picked) < rule.min_events:
        LOGGER.debug("Shelf %s skipped: %d events < %d", kind.value, len(picked), rule.min_events)
        return None
    title = SHELF_TITLES[kind] if suffix is None else f"{SHELF_TITLES[kind]} {suffix}"
    return Candidate(type=kind, title=title, events=picked, score=rule.score(len(picked)))


def popular_in_city(
    pool: Sequence[Occurrence], profile: UserProfile, config: CandidateConfig
) -> Optional[Candidate]:
    city = (profile.city or "").strip()
    if not city:
        return None
    needle = city.lower()
    events = [occ for occ in pool if needle in (occ.event.location or "").lower()]
    return _shelf(CandidateType.POPULAR_CITY, events, config, suffix=city)


def interest_based(
    pool: Sequence[Occurrence], profile: UserProfile, config: CandidateConfig
) -> Optional[Candidate]:
    best: Optional[Tuple[str, List[Occurrence]]] = None
    for interest in profile.interested_tags:
        wanted = interest.strip().lower()
        if not wanted:
            continue
        matching = [occ for occ in pool if wanted in occ.event.tag_set]
        if matching and (best is None or len(matching) > len(best[1])):
            best = (interest, matching)
    if best is None:
        return None
    return _shelf(CandidateType.INTEREST_BASED, best[1], config, suffix=best[0])


def nearby(
    pool: Sequence[Occurrence], profile: UserProfile, config: CandidateConfig
) -> Optional[Candidate]:
    if profile.location is None or not pool:
        return None
    distances = distances_km(profile.location, [occ.event for occ in pool])
    inside = np.flatnonzero(distances < config.nearby_radius_km)
    order = inside[np.argsort(distances[inside], kind="stable")]
    return _shelf(CandidateType.NEARBY, [pool[i] for i in order], config)


def trending(
    pool: Sequence[Occurrence], profile: UserProfile, config: CandidateConfig
) -> Optional[Candidate]:
    popular = [occ for occ in pool if occ.event.attending_count >= config.trending_min_attending]
    popular.sort(key=lambda occ: occ.event.attending_count, reverse=True)
    return _shelf(CandidateType.TRENDING, popular, config)


def suggested(
    pool: Sequence[Occurrence], profile: UserProfile, config: CandidateConfig
) -> Optional[Candidate]:
    return _shelf(CandidateType.SUGGESTED, list(pool), config)


SHELF_BUILDERS: Tuple[Callable[[Sequence[Occurrence], UserProfile, CandidateConfig], Optional[Candidate]], ...] = (
    popular_in_city,
    interest_based,
    nearby,
    trending,
    suggested,
)


def build_candidates(
    pool: Sequence[Occurrence],
    profile: UserProfile,
    primary_ids: Collection[str],
    config: Optional[CandidateConfig] = None,
) -> List[Candidate]:
    """
    Build every qualifying shelf, in a fixed order.

    Args:
        pool: Full deduplicated occurrence pool (not only the primary feed)
        profile: The requesting user
        primary_ids: Event ids already placed in the primary feed
        config: Shelf sizes, radii and scoring rules

    Returns:
        Qualifying candidates in build order (popular_city, interest_based,
        nearby, trending, suggested)
    """
    config = config or CandidateConfig()
    placed = set(primary_ids)
    remaining = [occ for occ in pool if occ.id not in placed]

    candidates = []
    for builder in SHELF_BUILDERS:
        candidate = builder(remaining, profile, config)
        if candidate is not None:
            candidates.append(candidate)
    LOGGER.debug(
        "Built %d shelves for user %s: %s",
        len(candidates),
        profile.id,
        [c.type.value for c in candidates],
    )
    return candidates

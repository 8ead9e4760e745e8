from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from .config import MixerConfig
from .models import Candidate, EventItem, Feed, FeedItem, Occurrence, RecommendationItem

LOGGER = logging.getLogger(__name__)


def rotation_pool(candidates: Sequence[Candidate], size: int = 4) -> List[Candidate]:
    ranked = sorted(candidates, key=lambda c: c.score, reverse=True)
    return ranked[: min(size, len(ranked))]


def select_headline(
    candidates: Sequence[Candidate], rotation_counter: int, size: int = 4
) -> Optional[Candidate]:
    """
    Pick the shelf headlined on this refresh.

    The caller bumps ``rotation_counter`` on every user-initiated refresh, so
    consecutive refreshes walk through the best-scoring shelves in turn.
    """
    if rotation_counter < 0:
        raise ValueError(f"rotation_counter must be >= 0, got {rotation_counter}")
    pool = rotation_pool(candidates, size)
    if not pool:
        return None
    return pool[rotation_counter % len(pool)]


def mix_feed(
    primary: Sequence[Occurrence],
    candidates: Sequence[Candidate],
    rotation_counter: int,
    config: Optional[MixerConfig] = None,
) -> Feed:
    """
    Interleave shelves into the primary list.

    A recommendation follows every ``insert_interval``-th event. The shelf
    used at each insertion point cycles through all candidates in build
    order. No shelf is inserted when there are no candidates.
    """
    config = config or MixerConfig()
    headline = select_headline(candidates, rotation_counter, config.rotation_pool_size)
    pool = tuple(rotation_pool(candidates, config.rotation_pool_size))
    if not primary:
        return Feed(items=(), headline=headline, candidates=tuple(candidates), rotation_pool=pool)

    items: List[FeedItem] = []
    interval = config.insert_interval
    for index, occ in enumerate(primary):
        items.append(EventItem(occurrence=occ, index=index))
        if headline is None or (index + 1) % interval != 0:
            continue
        recommendation = candidates[(index // interval) % len(candidates)]
        items.append(RecommendationItem(candidate=recommendation, index=index))

    LOGGER.debug(
        "Mixed feed: %d events, %d shelves inserted, headline=%s",
        len(primary),
        len(items) - len(primary),
        headline.type.value if headline else None,
    )
    return Feed(items=tuple(items), headline=headline, candidates=tuple(candidates), rotation_pool=pool)

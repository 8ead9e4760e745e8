from __future__ import annotations

import logging
from typing import Callable, Hashable, Iterable, List, Set, Tuple

from .models import Occurrence

LOGGER = logging.getLogger(__name__)


def identity_key(occ: Occurrence) -> Tuple[str, str, str]:
    return (occ.id, occ.day_text, occ.event.time or "")


def content_key(occ: Occurrence) -> Tuple[str, str, str, str]:
    return (
        (occ.event.title or "").lower(),
        occ.day_text,
        occ.event.time or "",
        (occ.event.location or "").lower(),
    )


def _first_seen(items: Iterable[Occurrence], key: Callable[[Occurrence], Hashable]) -> List[Occurrence]:
    seen: Set[Hashable] = set()
    kept = []
    for occ in items:
        k = key(occ)
        if k in seen:
            continue
        seen.add(k)
        kept.append(occ)
    return kept


def deduplicate(occurrences: Iterable[Occurrence]) -> List[Occurrence]:
    """
    Drop repeated appearances, keeping the first one seen.

    The identity pass catches the same row fetched twice (e.g. once as
    organized and once as attended); the content pass catches separate rows
    describing the same title, day, time and place.
    """
    pool = list(occurrences)
    unique = _first_seen(_first_seen(pool, identity_key), content_key)
    if len(unique) != len(pool):
        LOGGER.debug("Dropped %d duplicate occurrences", len(pool) - len(unique))
    return unique

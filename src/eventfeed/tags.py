from __future__ import annotations

from typing import Iterable, List, Sequence

import numpy as np

INTEREST_PICK_PROBABILITY = 0.7


def normalize_tag(tag: str) -> str:
    return " ".join(str(tag).split()).lower()


def _shuffled(items: Sequence[str], rng: np.random.Generator) -> List[str]:
    return [items[i] for i in rng.permutation(len(items))]


def build_tag_bar(
    tags: Sequence[str],
    interests: Iterable[str],
    rng: np.random.Generator,
    limit: int = 10,
    pinned: int = 2,
) -> List[str]:
    """
    Pick the tags shown in the filter bar.

    The first ``pinned`` tags always lead. The remaining slots mix the user's
    interests (picked with probability 0.7 while any are left) with the other
    tags, both shuffled with ``rng`` so a fixed seed gives a fixed bar.
    """
    head = [t for t in tags[:pinned] if t]
    rest = [t for t in tags[pinned:] if t]
    slots = max(0, limit - len(head))

    wanted = {normalize_tag(t) for t in interests if t}
    if not wanted:
        return head + _shuffled(rest, rng)[:slots]

    interest_pool = _shuffled([t for t in rest if normalize_tag(t) in wanted], rng)
    other_pool = _shuffled([t for t in rest if normalize_tag(t) not in wanted], rng)
    picked: List[str] = []
    i = o = 0
    while len(picked) < slots and (i < len(interest_pool) or o < len(other_pool)):
        use_interest = i < len(interest_pool) and (
            o >= len(other_pool) or rng.random() < INTEREST_PICK_PROBABILITY
        )
        if use_interest:
            picked.append(interest_pool[i])
            i += 1
        else:
            picked.append(other_pool[o])
            o += 1
    return head + picked

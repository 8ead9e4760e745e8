"""
Feed assembly for the event discovery app.

The package provides utilities for:
    * expanding recurring events into dated occurrences,
    * collapsing duplicate appearances of the same event,
    * ranking events by interest match and proximity,
    * building scored recommendation shelves and rotating among them,
    * interleaving shelves into the primary feed.

The core is pure: callers pass the records, the profile, the reference day
and the rotation counter; nothing here reads the clock or touches storage.
"""

from __future__ import annotations

from typing import Any

__version__ = "0.1.0"

__all__ = ["build_feed", "expand_recurrence"]


def build_feed(*args: Any, **kwargs: Any):
    """Lazy wrapper so importing eventfeed doesn't pull numpy/pandas immediately."""

    from .pipeline import build_feed as _build_feed

    return _build_feed(*args, **kwargs)


def expand_recurrence(*args: Any, **kwargs: Any):
    from .recurrence import expand_recurrence as _expand_recurrence

    return _expand_recurrence(*args, **kwargs)

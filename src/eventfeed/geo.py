"""
Great-circle distances between user and event coordinates.
"""

from __future__ import annotations

import math
from typing import Optional, Sequence, Tuple

import numpy as np

from .config import EARTH_RADIUS_KM
from .models import EventRecord


def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    Calculate the great circle distance between two points on Earth.

    Args:
        lat1, lon1: First point coordinates
        lat2, lon2: Second point coordinates

    Returns:
        Distance in kilometers
    """
    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    delta_lat = math.radians(lat2 - lat1)
    delta_lon = math.radians(lon2 - lon1)

    a = (math.sin(delta_lat / 2) ** 2 +
         math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(delta_lon / 2) ** 2)
    c = 2 * math.asin(math.sqrt(a))

    return c * EARTH_RADIUS_KM


def distances_km(
    origin: Tuple[float, float],
    events: Sequence[EventRecord],
    missing: float = float("inf"),
) -> np.ndarray:
    """
    Vectorized distance from ``origin`` to every event.

    Events without coordinates get ``missing`` instead of a distance.
    """
    if not events:
        return np.zeros(0, dtype=np.float64)

    lats = np.array(
        [ev.latitude if ev.has_coordinates else np.nan for ev in events], dtype=np.float64
    )
    lons = np.array(
        [ev.longitude if ev.has_coordinates else np.nan for ev in events], dtype=np.float64
    )

    lat1_rad = np.radians(origin[0])
    lats_rad = np.radians(lats)
    dlat = lats_rad - lat1_rad
    dlon = np.radians(lons) - np.radians(origin[1])

    a = np.sin(dlat / 2) ** 2 + np.cos(lat1_rad) * np.cos(lats_rad) * np.sin(dlon / 2) ** 2
    dist = 2 * np.arcsin(np.sqrt(a)) * EARTH_RADIUS_KM

    return np.where(np.isnan(dist), missing, dist)


def event_distance(
    origin: Optional[Tuple[float, float]],
    event: EventRecord,
    missing: float = float("inf"),
) -> float:
    if origin is None or not event.has_coordinates:
        return missing
    return haversine_distance(origin[0], origin[1], float(event.latitude), float(event.longitude))

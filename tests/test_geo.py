"""
Tests for distance helpers.
"""

import math

import numpy as np
import pytest

from eventfeed.geo import distances_km, event_distance, haversine_distance


class TestHaversine:
    def test_zero_distance(self):
        assert haversine_distance(30.0, 31.0, 30.0, 31.0) == 0.0

    def test_one_degree_of_latitude(self):
        """One degree of latitude is roughly 111 km."""
        assert haversine_distance(0.0, 0.0, 1.0, 0.0) == pytest.approx(111.19, abs=0.1)

    def test_symmetric(self):
        a = haversine_distance(30.04, 31.24, 31.2, 29.92)
        b = haversine_distance(31.2, 29.92, 30.04, 31.24)
        assert a == pytest.approx(b)


class TestVectorizedDistances:
    def test_matches_scalar_formula(self, make_event):
        events = [make_event(lat=30.1, lon=31.3), make_event(lat=31.2, lon=29.9)]
        dist = distances_km((30.0, 31.0), events)
        expected = [haversine_distance(30.0, 31.0, ev.latitude, ev.longitude) for ev in events]
        np.testing.assert_allclose(dist, expected, rtol=1e-9)

    def test_missing_coordinates_use_fallback(self, make_event):
        events = [make_event(lat=30.0, lon=31.0), make_event(), make_event(lat=30.0)]
        dist = distances_km((30.0, 31.0), events, missing=1000.0)
        assert dist[0] == pytest.approx(0.0)
        assert dist[1] == 1000.0
        assert dist[2] == 1000.0

    def test_default_missing_is_infinite(self, make_event):
        dist = distances_km((0.0, 0.0), [make_event()])
        assert math.isinf(dist[0])

    def test_empty_input(self):
        assert distances_km((0.0, 0.0), []).shape == (0,)


class TestEventDistance:
    def test_without_origin(self, make_event):
        assert math.isinf(event_distance(None, make_event(lat=1.0, lon=1.0)))

    def test_with_origin(self, make_event):
        assert event_distance((0.0, 0.0), make_event(lat=1.0, lon=0.0)) == pytest.approx(111.19, abs=0.1)

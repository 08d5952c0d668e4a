"""
Pytest configuration for Breathable Routes tests.

Registers custom markers and provides shared fixtures.
"""

from datetime import datetime
from typing import Iterable, List

import pytest

from breathroute.aqi_sample import AQISample, Coordinate
from breathroute.config import Settings
from breathroute.route_geometry import RouteGeometry, RouteLeg, RouteStep


def pytest_configure(config):
    """Register custom pytest markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )


FIXED_NOW = datetime(2024, 3, 15, 8, 30, 0)


def make_samples(values: Iterable[int], source: str = "WAQI") -> List[AQISample]:
    """Builds samples along a line of longitude, one per AQI value."""
    return [
        AQISample(location=Coordinate(28.6 + i * 0.01, 77.2), aqi=v, timestamp=FIXED_NOW, source=source)
        for i, v in enumerate(values)
    ]


class FakeAirQualityService:
    """
    Air-quality collaborator returning scripted AQI values.

    Values registered for a route are returned whenever exactly that route's
    sampled coordinates are requested; anything else cycles `default_values`.
    """

    def __init__(self, default_values=(80,), source="WAQI"):
        self.default_values = list(default_values)
        self.source = source
        self.by_route = {}
        self.calls = 0

    def register(self, route, values):
        self.by_route[tuple(route.sample_coordinates())] = list(values)

    def get_route_air_quality(self, coordinates):
        self.calls += 1
        values = self.by_route.get(tuple(coordinates), self.default_values)
        return [
            AQISample(location=coord, aqi=values[i % len(values)], timestamp=FIXED_NOW, source=self.source)
            for i, coord in enumerate(coordinates)
        ]


def make_route(summary, lat_offset=0.0, duration_s=1800, num_steps=4, route_id=None):
    """Builds a straight north-south route of `num_steps` steps."""
    steps = []
    for i in range(num_steps):
        start = Coordinate(28.60 + lat_offset + i * 0.01, 77.20)
        end = Coordinate(28.60 + lat_offset + (i + 1) * 0.01, 77.20)
        steps.append(RouteStep(start_location=start, end_location=end, distance_m=1000, duration_s=duration_s // num_steps))
    leg = RouteLeg(
        distance_m=1000 * num_steps,
        duration_s=duration_s,
        start_location=steps[0].start_location,
        end_location=steps[-1].end_location,
        steps=tuple(steps),
    )
    return RouteGeometry(summary=summary, legs=(leg,), route_id=route_id)


@pytest.fixture
def fixed_clock():
    """Clock returning a fixed morning-rush timestamp."""
    return lambda: FIXED_NOW


@pytest.fixture
def settings(tmp_path):
    """Settings isolated from the environment, journaling under tmp_path."""
    return Settings(fallback_seed=42, request_interval=0.0, log_dir=tmp_path / "logs")

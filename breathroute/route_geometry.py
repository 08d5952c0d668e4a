"""
Route geometry module for the Breathable Routes engine.

Route geometry comes from an external directions provider. This module turns
the provider's loosely-shaped route dictionaries into typed RouteGeometry
records, extracts the coordinates at which air quality is sampled, and
provides a mock directions generator for offline development and demos.
"""

import hashlib
import math
from dataclasses import dataclass, field
from typing import Any, Optional

import numpy as np

from .aqi_sample import Coordinate
from .errors import InputDataError
from .formatting import format_duration, haversine_distance


def route_hash(origin: Coordinate, destination: Coordinate, summary: str) -> str:
    """
    Stable identity for a route between two points, used as a cache key.

    Returns:
        First 16 hex characters of the SHA-256 of "lat,lng-lat,lng-summary"
    """
    route_string = f"{origin.lat},{origin.lng}-{destination.lat},{destination.lng}-{summary}"
    return hashlib.sha256(route_string.encode("utf-8")).hexdigest()[:16]


@dataclass(frozen=True)
class RouteStep:
    """One maneuver of a route leg."""

    start_location: Coordinate
    end_location: Coordinate
    distance_m: int = 0
    duration_s: int = 0
    instructions: str = ""


@dataclass(frozen=True)
class RouteLeg:
    """
    A leg of a route between two waypoints.

    Attributes:
        distance_m: Leg length in meters
        duration_s: Expected travel time in seconds
        start_location: Leg start
        end_location: Leg end
        steps: Ordered maneuvers
    """

    distance_m: int
    duration_s: int
    start_location: Coordinate
    end_location: Coordinate
    steps: tuple[RouteStep, ...] = ()


@dataclass(frozen=True)
class RouteGeometry:
    """
    A candidate route supplied by the directions provider.

    Attributes:
        summary: Human-readable route name (e.g. "NH48")
        legs: Ordered legs; the engine reads distance/duration from the first
        route_id: Provider-assigned id, if any (see `identity`)
        raw: The original provider dictionary, kept for the caller
    """

    summary: str
    legs: tuple[RouteLeg, ...]
    route_id: Optional[str] = None
    raw: dict = field(default_factory=dict, compare=False, repr=False)

    @property
    def start_location(self) -> Coordinate:
        return self.legs[0].start_location

    @property
    def end_location(self) -> Coordinate:
        return self.legs[-1].end_location

    @property
    def distance_m(self) -> int:
        return self.legs[0].distance_m

    @property
    def duration_s(self) -> int:
        return self.legs[0].duration_s

    @property
    def identity(self) -> str:
        """The provider route id, or a hash of the endpoints and summary."""
        if self.route_id:
            return self.route_id
        return route_hash(self.start_location, self.end_location, self.summary)

    def sample_coordinates(self, max_points: int = 10) -> list[Coordinate]:
        """
        Extracts the coordinates at which air quality is sampled.

        The candidate points are every step's start followed by the final
        step's end. When there are more than `max_points` of them, evenly
        spaced indices are kept; the exact start and end are always included.

        Args:
            max_points: Upper bound on the number of coordinates (>= 2)

        Returns:
            Ordered list of at most `max_points` coordinates

        Raises:
            InputDataError: If the route has no steps to sample
            ValueError: If max_points < 2
        """
        if max_points < 2:
            raise ValueError("max_points must be >= 2")

        steps = [step for leg in self.legs for step in leg.steps]
        if not steps:
            raise InputDataError("Unable to extract route coordinates: route has no steps")

        points = [step.start_location for step in steps]
        points.append(steps[-1].end_location)

        if len(points) <= max_points:
            return points

        indices = np.linspace(0, len(points) - 1, max_points).round().astype(int)
        return [points[i] for i in np.unique(indices)]

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RouteGeometry":
        """
        Parses a directions-provider route dictionary.

        Expects `legs[]` with `distance.value` (meters), `duration.value`
        (seconds), `start_location`/`end_location` and `steps[]`.

        Raises:
            InputDataError: If legs or steps are missing or malformed
        """
        if not isinstance(data, dict):
            raise InputDataError("Route data must be a mapping")

        raw_legs = data.get("legs") or []
        if not raw_legs:
            raise InputDataError("Route has no legs")

        try:
            legs = tuple(cls._parse_leg(leg) for leg in raw_legs)
        except (KeyError, TypeError, ValueError) as e:
            raise InputDataError(f"Malformed route leg: {e}") from e

        if not legs[0].steps:
            raise InputDataError("Route has no steps")

        return cls(
            summary=data.get("summary", ""),
            legs=legs,
            route_id=data.get("routeId"),
            raw=data,
        )

    @staticmethod
    def _parse_leg(leg: dict[str, Any]) -> RouteLeg:
        steps = tuple(
            RouteStep(
                start_location=Coordinate.from_dict(step["start_location"]),
                end_location=Coordinate.from_dict(step["end_location"]),
                distance_m=int((step.get("distance") or {}).get("value", 0)),
                duration_s=int((step.get("duration") or {}).get("value", 0)),
                instructions=step.get("html_instructions", ""),
            )
            for step in leg.get("steps") or []
        )

        start = leg.get("start_location") or (steps[0].start_location.to_dict() if steps else None)
        end = leg.get("end_location") or (steps[-1].end_location.to_dict() if steps else None)
        if start is None or end is None:
            raise ValueError("leg has no start/end location")

        return RouteLeg(
            distance_m=int((leg.get("distance") or {}).get("value", 0)),
            duration_s=int((leg.get("duration") or {}).get("value", 0)),
            start_location=Coordinate.from_dict(start),
            end_location=Coordinate.from_dict(end),
            steps=steps,
        )


def _mock_route_dict(
    origin: Coordinate,
    destination: Coordinate,
    summary: str,
    distance_km: float,
    duration_s: float,
    num_steps: int = 8
) -> dict[str, Any]:
    """Builds a provider-shaped route dict along the straight line origin -> destination."""
    d_lat = destination.lat - origin.lat
    d_lng = destination.lng - origin.lng

    steps = []
    for i in range(num_steps):
        start = {"lat": origin.lat + d_lat * i / num_steps, "lng": origin.lng + d_lng * i / num_steps}
        end = {"lat": origin.lat + d_lat * (i + 1) / num_steps, "lng": origin.lng + d_lng * (i + 1) / num_steps}

        if i == 0:
            instructions = "Head towards destination"
        elif i == num_steps - 1:
            instructions = "Arrive at destination"
        else:
            instructions = "Continue straight"

        steps.append({
            "distance": {"text": f"{distance_km / num_steps:.1f} km", "value": math.floor(distance_km * 1000 / num_steps)},
            "duration": {"text": format_duration(duration_s / num_steps), "value": math.floor(duration_s / num_steps)},
            "start_location": start,
            "end_location": end,
            "html_instructions": instructions,
            "travel_mode": "DRIVING",
        })

    return {
        "routeId": route_hash(origin, destination, summary),
        "summary": summary,
        "legs": [{
            "distance": {"text": f"{distance_km:.1f} km", "value": math.floor(distance_km * 1000)},
            "duration": {"text": format_duration(duration_s), "value": math.floor(duration_s)},
            "start_location": origin.to_dict(),
            "end_location": destination.to_dict(),
            "start_address": "Starting Point",
            "end_address": "Destination",
            "steps": steps,
        }],
        "warnings": [],
        "waypoint_order": [],
    }


def generate_mock_routes(
    origin: Coordinate,
    destination: Coordinate,
    alternatives: bool = True
) -> list[RouteGeometry]:
    """
    Generates plausible routes without a directions provider.

    The primary "Fastest Route" follows the straight line at 2 minutes per
    km; the "Healthiest Route" alternative is 15% longer and takes 20% more
    time.

    Args:
        origin: Start point
        destination: End point
        alternatives: Include the healthiest alternative

    Returns:
        One or two RouteGeometry instances
    """
    distance_km = haversine_distance(origin.lat, origin.lng, destination.lat, destination.lng) / 1000
    base_minutes = math.floor(distance_km * 2)

    routes = [_mock_route_dict(origin, destination, "Fastest Route", distance_km, base_minutes * 60)]
    if alternatives:
        routes.append(_mock_route_dict(
            origin, destination, "Healthiest Route", distance_km * 1.15, base_minutes * 60 * 1.2
        ))

    return [RouteGeometry.from_dict(route) for route in routes]


class MockRouteProvider:
    """Route-geometry collaborator backed by `generate_mock_routes`."""

    def get_directions(
        self,
        origin: Coordinate,
        destination: Coordinate,
        alternatives: bool = True,
        **options: Any
    ) -> list[RouteGeometry]:
        return generate_mock_routes(origin, destination, alternatives=alternatives)

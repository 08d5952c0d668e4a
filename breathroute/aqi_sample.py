"""
Air-quality sample module for the Breathable Routes engine.

This module defines the Coordinate and AQISample dataclasses. An AQISample is
a single pollutant reading taken at a point along a route; it is produced by
the air-quality collaborator (live provider or synthetic fallback) and then
consumed read-only by the scoring components.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional


POLLUTANTS = ("pm25", "pm10", "o3", "no2", "so2", "co")


@dataclass(frozen=True)
class Coordinate:
    """
    A WGS84 point.

    Attributes:
        lat: Latitude in degrees
        lng: Longitude in degrees
    """

    lat: float
    lng: float

    def is_valid(self) -> bool:
        """Returns True if latitude and longitude are inside their WGS84 ranges."""
        return -90 <= self.lat <= 90 and -180 <= self.lng <= 180

    def to_dict(self) -> dict[str, float]:
        return {"lat": self.lat, "lng": self.lng}

    @classmethod
    def from_dict(cls, data: Any) -> "Coordinate":
        """
        Builds a Coordinate from a {"lat", "lng"} mapping or a (lat, lng) pair.

        Raises:
            ValueError: If the value cannot be read as a coordinate
        """
        if isinstance(data, Coordinate):
            return data
        if isinstance(data, dict):
            try:
                return cls(float(data["lat"]), float(data["lng"]))
            except (KeyError, TypeError, ValueError) as e:
                raise ValueError(f"Invalid coordinate: {data!r}") from e
        if isinstance(data, (tuple, list)) and len(data) == 2:
            return cls(float(data[0]), float(data[1]))
        raise ValueError(f"Invalid coordinate: {data!r}")


@dataclass(frozen=True)
class AQISample:
    """
    A single air-quality reading at a point in time and space.

    The pollutant breakdown is carried through for display but is not used
    by any of the scoring components, which only look at `aqi`.

    Attributes:
        location: Where the reading applies
        aqi: Air Quality Index (conventionally 0-500, may exceed 500)
        timestamp: When the reading was taken, if known
        pm25, pm10, o3, no2, so2, co: Optional pollutant concentrations
        station: Name of the measuring station, if the provider reports one
        source: Provenance of the reading ("WAQI", "OpenWeather", "Synthetic")
    """

    location: Coordinate
    aqi: int
    timestamp: Optional[datetime] = None
    pm25: Optional[float] = None
    pm10: Optional[float] = None
    o3: Optional[float] = None
    no2: Optional[float] = None
    so2: Optional[float] = None
    co: Optional[float] = None
    station: Optional[str] = None
    source: str = "Unknown"

    @property
    def is_fallback(self) -> bool:
        """True if the reading was synthesized rather than measured."""
        return self.source == "Synthetic"

    def validate(self) -> tuple[bool, Optional[str]]:
        """
        Validates the reading without raising.

        Checks:
        - location is a valid WGS84 coordinate
        - aqi is non-negative

        Returns:
            A tuple containing:
            - bool: True if all validations pass, False otherwise
            - Optional[str]: None if valid, or a descriptive error message if invalid
        """
        if not self.location.is_valid():
            return (False, "location must be a valid lat/lng coordinate")

        if self.aqi < 0:
            return (False, "aqi must be >= 0")

        return (True, None)

    def to_dict(self) -> dict[str, object]:
        """Converts the sample to a JSON-serializable dictionary."""
        data: dict[str, object] = {
            "location": self.location.to_dict(),
            "aqi": self.aqi,
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
        }
        for name in POLLUTANTS:
            data[name] = getattr(self, name)
        data["station"] = self.station
        data["source"] = self.source
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AQISample":
        """
        Builds a sample from the provider-shaped dictionary.

        Accepts `timestamp` either as a datetime or an ISO-8601 string.
        """
        timestamp = data.get("timestamp")
        if isinstance(timestamp, str):
            timestamp = datetime.fromisoformat(timestamp.replace("Z", "+00:00"))

        pollutants = {}
        for name in POLLUTANTS:
            value = data.get(name)
            pollutants[name] = float(value) if value is not None else None

        return cls(
            location=Coordinate.from_dict(data["location"]),
            aqi=int(data["aqi"]),
            timestamp=timestamp,
            station=data.get("station"),
            source=data.get("source", "Unknown"),
            **pollutants,
        )

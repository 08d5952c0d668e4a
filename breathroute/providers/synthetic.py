"""
Synthetic reading generator.

Backs the air-quality service's fallback path: when no live provider can
answer for a coordinate, a plausible reading is synthesized from regional
pollution levels and the time-of-day traffic pattern. Readings are
pseudo-random but deterministic for a given (seed, coordinate, hour), so
tests can pin the seed while production runs get a fresh one per generator.
"""

import math
import zlib
from datetime import datetime
from typing import Optional

import numpy as np

from ..aqi_sample import AQISample, Coordinate


class SyntheticReadingGenerator:
    """
    Generates deterministic, realistic-looking AQI readings.

    Regional base ranges are (lat_min, lat_max, lng_min, lng_max, low, high)
    with `low` inclusive and `high` exclusive.
    """

    name = "Synthetic"

    REGIONS = [
        (28.4, 28.8, 77.0, 77.4, 100, 220),  # Delhi
        (18.9, 19.3, 72.7, 73.0, 90, 170),   # Mumbai
        (12.8, 13.1, 77.4, 77.8, 60, 130),   # Bangalore
    ]
    DEFAULT_RANGE = (40, 120)

    MIN_AQI = 10
    MAX_AQI = 500

    def __init__(self, seed: Optional[int] = None) -> None:
        if seed is None:
            seed = int(np.random.SeedSequence().entropy)
        if seed < 0:
            raise ValueError("seed must be >= 0")
        self.seed = seed

    def base_range(self, coord: Coordinate) -> tuple[int, int]:
        """Returns the (low, high) base AQI range for the region containing `coord`."""
        for lat_min, lat_max, lng_min, lng_max, low, high in self.REGIONS:
            if lat_min < coord.lat < lat_max and lng_min < coord.lng < lng_max:
                return (low, high)
        return self.DEFAULT_RANGE

    def time_multiplier(self, hour: int) -> float:
        if 7 <= hour <= 10:
            return 1.3  # Morning rush
        if 17 <= hour <= 20:
            return 1.4  # Evening rush
        if hour >= 22 or hour <= 5:
            return 0.7  # Night
        return 1.0

    def rng_for(self, coord: Coordinate, hour: int, stream: int = 0) -> np.random.Generator:
        """Random generator seeded by (seed, coordinate, hour, stream)."""
        coord_key = zlib.crc32(f"{coord.lat:.4f},{coord.lng:.4f}".encode("utf-8"))
        return np.random.default_rng([self.seed, coord_key, hour, stream])

    def reading(self, coord: Coordinate, when: Optional[datetime] = None) -> AQISample:
        """
        Synthesizes a reading for a coordinate at a point in time.

        Args:
            coord: Where the reading applies
            when: Reading time (defaults to now); only its hour affects the AQI

        Returns:
            An AQISample with source "Synthetic"
        """
        when = when or datetime.now()
        rng = self.rng_for(coord, when.hour)

        low, high = self.base_range(coord)
        base_aqi = int(rng.integers(low, high))
        aqi = min(self.MAX_AQI, max(self.MIN_AQI, math.floor(base_aqi * self.time_multiplier(when.hour))))

        return AQISample(
            location=coord,
            aqi=aqi,
            timestamp=when,
            pm25=float(math.floor(aqi * 0.6)),
            pm10=float(math.floor(aqi * 0.8)),
            o3=float(rng.integers(20, 70)),
            no2=float(rng.integers(10, 50)),
            so2=float(rng.integers(5, 25)),
            co=float(rng.integers(50, 150)),
            station="Synthetic Station",
            source=self.name,
        )

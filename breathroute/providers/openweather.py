"""
OpenWeatherMap air-pollution provider.

OpenWeatherMap reports pollutant concentrations and its own 1-5 index, so the
US AQI is derived from PM2.5 with a simplified EPA breakpoint table.
"""

import threading
from datetime import datetime
from typing import Optional

import requests

from ..aqi_sample import AQISample, Coordinate
from ..errors import AirQualityProviderError


# (concentration low, concentration high, index low, index high)
PM25_BREAKPOINTS = [
    (0.0, 12.0, 0, 50),
    (12.1, 35.4, 51, 100),
    (35.5, 55.4, 101, 150),
    (55.5, 150.4, 151, 200),
    (150.5, 250.4, 201, 300),
    (250.5, 500.4, 301, 500),
]


def aqi_from_pm25(pm25: float) -> int:
    """
    Converts a PM2.5 concentration (ug/m3) to a US AQI value.

    Linear interpolation inside the matching breakpoint; concentrations that
    fall in the gaps between breakpoints use the next band up. Clamped to
    [0, 500].
    """
    if pm25 <= 0:
        return 0

    for c_low, c_high, i_low, i_high in PM25_BREAKPOINTS:
        if pm25 <= c_high:
            if c_low == 0.0:
                aqi = round((i_high / c_high) * pm25)
            else:
                aqi = round((i_high - i_low) / (c_high - c_low) * (pm25 - c_low) + i_low)
            return min(500, max(0, aqi))

    return 500


class OpenWeatherProvider:
    """Fetches readings from the OpenWeatherMap air_pollution endpoint."""

    name = "OpenWeather"
    BASE_URL = "https://api.openweathermap.org/data/2.5"

    def __init__(self, api_key: str, timeout: float = 8.0, session: Optional[requests.Session] = None) -> None:
        if not api_key:
            raise ValueError("OpenWeather API key is required")
        self.api_key = api_key
        self.timeout = timeout
        self._session = session
        self._local = threading.local()

    @property
    def session(self) -> requests.Session:
        """The injected session, or one Session per worker thread."""
        if self._session is not None:
            return self._session
        session = getattr(self._local, "session", None)
        if session is None:
            session = self._local.session = requests.Session()
        return session

    def fetch(self, coord: Coordinate) -> AQISample:
        """
        Fetches the current reading for a coordinate.

        Raises:
            AirQualityProviderError: On HTTP errors, timeouts or an empty payload
        """
        try:
            response = self.session.get(
                f"{self.BASE_URL}/air_pollution",
                params={"lat": coord.lat, "lon": coord.lng, "appid": self.api_key},
                timeout=self.timeout,
            )
            response.raise_for_status()
            payload = response.json()
        except (requests.RequestException, ValueError) as e:
            raise AirQualityProviderError(f"OpenWeather request failed for {coord.lat},{coord.lng}: {e}") from e

        entries = payload.get("list") if isinstance(payload, dict) else None
        if not entries:
            raise AirQualityProviderError(f"Invalid OpenWeather response for {coord.lat},{coord.lng}")

        entry = entries[0]
        components = entry.get("components") or {}
        pm25 = float(components.get("pm2_5") or 0)

        timestamp = datetime.fromtimestamp(entry["dt"]) if entry.get("dt") else datetime.now()

        return AQISample(
            location=coord,
            aqi=aqi_from_pm25(pm25),
            timestamp=timestamp,
            pm25=pm25,
            pm10=float(components.get("pm10") or 0),
            o3=float(components.get("o3") or 0),
            no2=float(components.get("no2") or 0),
            so2=float(components.get("so2") or 0),
            co=float(components.get("co") or 0),
            station="OpenWeather",
            source=self.name,
        )

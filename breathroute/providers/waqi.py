"""
WAQI (World Air Quality Index project) provider.

Reads the nearest station feed for a coordinate from
https://api.waqi.info/feed/geo:{lat};{lng}/ .
"""

import logging
import threading
from datetime import datetime
from typing import Optional

import requests

from ..aqi_sample import AQISample, Coordinate
from ..errors import AirQualityProviderError

logger = logging.getLogger(__name__)


class WAQIProvider:
    """
    Fetches AQI readings from the WAQI geo feed.

    Attributes:
        name: Provenance label stamped on every sample
    """

    name = "WAQI"
    BASE_URL = "https://api.waqi.info"

    def __init__(self, token: str, timeout: float = 8.0, session: Optional[requests.Session] = None) -> None:
        if not token:
            raise ValueError("WAQI token is required")
        self.token = token
        self.timeout = timeout
        self._session = session
        self._local = threading.local()
        if session is not None:
            session.headers.update({'Accept': 'application/json'})

    @property
    def session(self) -> requests.Session:
        """The injected session, or one Session per worker thread."""
        if self._session is not None:
            return self._session
        session = getattr(self._local, "session", None)
        if session is None:
            session = requests.Session()
            session.headers.update({'Accept': 'application/json'})
            self._local.session = session
        return session

    def fetch(self, coord: Coordinate) -> AQISample:
        """
        Fetches the current reading for a coordinate.

        Raises:
            AirQualityProviderError: On HTTP errors, timeouts or a non-"ok" payload
        """
        url = f"{self.BASE_URL}/feed/geo:{coord.lat};{coord.lng}/"
        try:
            response = self.session.get(url, params={"token": self.token}, timeout=self.timeout)
            response.raise_for_status()
            payload = response.json()
        except (requests.RequestException, ValueError) as e:
            raise AirQualityProviderError(f"WAQI request failed for {coord.lat},{coord.lng}: {e}") from e

        if payload.get("status") != "ok" or not isinstance(payload.get("data"), dict):
            raise AirQualityProviderError(f"Invalid WAQI response for {coord.lat},{coord.lng}")

        data = payload["data"]
        try:
            aqi = int(data.get("aqi") or 0)
        except (TypeError, ValueError) as e:
            # WAQI reports "-" when a station has no current value
            raise AirQualityProviderError(f"WAQI returned no AQI for {coord.lat},{coord.lng}") from e

        iaqi = data.get("iaqi") or {}

        def component(name: str) -> float:
            return float((iaqi.get(name) or {}).get("v") or 0)

        timestamp = datetime.now()
        reported = (data.get("time") or {}).get("iso")
        if reported:
            try:
                timestamp = datetime.fromisoformat(reported)
            except ValueError:
                logger.debug("Unparsable WAQI timestamp %r", reported)

        return AQISample(
            location=coord,
            aqi=aqi,
            timestamp=timestamp,
            pm25=component("pm25"),
            pm10=component("pm10"),
            o3=component("o3"),
            no2=component("no2"),
            so2=component("so2"),
            co=component("co"),
            station=(data.get("city") or {}).get("name", "Unknown"),
            source=self.name,
        )

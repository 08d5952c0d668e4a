"""
Air-quality service module for the Breathable Routes engine.

This module contains the AirQualityService class, the engine's air-quality
collaborator. It supports two modes:
- "mock": Synthetic readings only (offline, always available)
- "live": WAQI first, then OpenWeatherMap, with synthetic fallback

A failing provider never fails a route analysis: each coordinate falls
through the provider chain and, as a last resort, gets a synthetic reading.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Optional, Sequence

from .aqi_sample import AQISample, Coordinate
from .config import Settings, load_settings
from .errors import AirQualityUnavailableError
from .providers import OpenWeatherProvider, SyntheticReadingGenerator, WAQIProvider
from .throttle import RequestThrottle

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ForecastPoint:
    """Projected AQI for one future hour."""

    timestamp: datetime
    aqi: int
    confidence: int

    def to_dict(self) -> dict[str, object]:
        return {"timestamp": self.timestamp.isoformat(), "aqi": self.aqi, "confidence": self.confidence}


class AirQualityService:
    """
    Per-coordinate air-quality readings with provider fallback.

    Mode is selected via the constructor, else the BREATHROUTE_AQ_MODE
    setting, else "mock". If "live" is requested but no provider has
    credentials, the service falls back to mock mode.

    Explicit `providers` override the mode: any objects with a `name`
    attribute and a `fetch(coord) -> AQISample` method, tried in order.
    """

    def __init__(
        self,
        mode: Optional[str] = None,
        providers: Optional[Sequence[object]] = None,
        fallback: Optional[SyntheticReadingGenerator] = None,
        use_fallback: bool = True,
        settings: Optional[Settings] = None,
        throttle_factory: Optional[Callable[[], RequestThrottle]] = None,
        clock: Callable[[], datetime] = datetime.now
    ) -> None:
        self.settings = settings or load_settings()
        self.clock = clock
        self.throttle_factory = throttle_factory or (lambda: RequestThrottle(self.settings.request_interval))

        if use_fallback:
            self.fallback = fallback or SyntheticReadingGenerator(self.settings.fallback_seed)
        else:
            self.fallback = None

        if providers is not None:
            self.providers = list(providers)
            self.mode = "live" if self.providers else "mock"
            return

        requested = (mode or self.settings.aq_mode or "mock").lower()
        self.mode = requested if requested in ("mock", "live") else "mock"

        self.providers = []
        if self.mode == "live":
            self.providers = self._init_live_providers()
            if not self.providers:
                self.mode = "mock"
                logger.warning("AirQualityService: live mode requested but no provider is configured, using mock mode")

    def _init_live_providers(self) -> list[object]:
        providers: list[object] = []
        if self.settings.waqi_token:
            providers.append(WAQIProvider(self.settings.waqi_token, timeout=self.settings.request_timeout))
        else:
            logger.info("AirQualityService: WAQI_API_TOKEN not set, skipping WAQI")
        if self.settings.openweather_api_key:
            providers.append(OpenWeatherProvider(self.settings.openweather_api_key, timeout=self.settings.request_timeout))
        else:
            logger.info("AirQualityService: OPENWEATHER_API_KEY not set, skipping OpenWeather")
        return providers

    def get_air_quality(self, coord: Coordinate, when: Optional[datetime] = None) -> AQISample:
        """
        Gets a reading for one coordinate.

        Providers are tried in order; the synthetic fallback is used if all of
        them fail.

        Args:
            coord: Coordinate to read
            when: Time for synthetic readings (defaults to the service clock)

        Returns:
            An AQISample for `coord`

        Raises:
            AirQualityUnavailableError: If every provider failed and the
                                        fallback is disabled
        """
        for provider in self.providers:
            try:
                return provider.fetch(coord)
            except Exception as e:
                # Any provider failure degrades to the next source
                logger.warning("%s failed for %s,%s: %s", getattr(provider, "name", provider), coord.lat, coord.lng, e)

        if self.fallback is None:
            raise AirQualityUnavailableError(f"No air-quality reading available for {coord.lat},{coord.lng}")

        if self.providers:
            logger.info("Using synthetic air quality data for %s,%s", coord.lat, coord.lng)
        return self.fallback.reading(coord, when or self.clock())

    def get_route_air_quality(self, coordinates: Sequence[Coordinate]) -> list[AQISample]:
        """
        Gets readings for every coordinate of a route, in order.

        Calls are spaced by a fresh RequestThrottle so provider rate limits
        are respected; each call gets its own throttle, so several routes can
        be fetched concurrently without sharing state. Mock mode makes no
        remote calls and is not throttled.

        Args:
            coordinates: Ordered coordinates along the route

        Returns:
            One sample per coordinate, in the same order
        """
        throttle = self.throttle_factory() if self.providers else None
        when = self.clock()

        samples = []
        for coord in coordinates:
            if throttle is not None:
                throttle.wait()
            samples.append(self.get_air_quality(coord, when))
        return samples

    def forecast(self, coord: Coordinate, hours: int = 24) -> list[ForecastPoint]:
        """
        Projects the AQI at a coordinate for the coming hours.

        The current reading is varied by up to +/-15 points per hour; the
        confidence starts at 100 and drops 2 points per hour, never below 60.

        Args:
            coord: Coordinate to forecast
            hours: Number of hourly points

        Returns:
            List of ForecastPoint, one per hour starting now
        """
        now = self.clock()
        base = self.get_air_quality(coord, now)
        generator = self.fallback or SyntheticReadingGenerator(self.settings.fallback_seed)

        forecast = []
        for i in range(hours):
            rng = generator.rng_for(coord, now.hour, stream=i + 1)
            variation = (rng.random() - 0.5) * 30
            forecast.append(ForecastPoint(
                timestamp=now + timedelta(hours=i),
                aqi=int(max(10, min(500, base.aqi + variation))),
                confidence=max(60, 100 - i * 2),
            ))
        return forecast

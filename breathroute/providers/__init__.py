"""
Air-quality providers for the Breathable Routes engine.

Live providers (WAQI, OpenWeatherMap) fetch a reading for one coordinate and
raise AirQualityProviderError on any failure; the synthetic generator always
produces a reading and backs the service's fallback path.
"""

from .waqi import WAQIProvider
from .openweather import OpenWeatherProvider, aqi_from_pm25
from .synthetic import SyntheticReadingGenerator

__all__ = ['WAQIProvider', 'OpenWeatherProvider', 'SyntheticReadingGenerator', 'aqi_from_pm25']

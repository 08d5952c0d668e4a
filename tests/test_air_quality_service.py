"""
Tests for the air-quality providers and AirQualityService.

Tests cover:
- WAQI and OpenWeather parsing with mocked HTTP sessions
- Provider failures: HTTP errors, timeouts, bad payloads
- Service fallback chain and mode selection
- Synthetic generator determinism and regional ranges
- Forecast shape
"""

from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from unittest.mock import Mock

import pytest
import requests
from breathroute.air_quality_service import AirQualityService
from breathroute.aqi_sample import AQISample, Coordinate
from breathroute.config import Settings
from breathroute.errors import AirQualityProviderError, AirQualityUnavailableError
from breathroute.providers import OpenWeatherProvider, SyntheticReadingGenerator, WAQIProvider, aqi_from_pm25

from conftest import FIXED_NOW


DELHI = Coordinate(28.6139, 77.2090)
LONDON = Coordinate(51.5074, -0.1278)


def mock_session(payload=None, exc=None, status_error=None):
    """Builds a Mock requests.Session whose get() returns `payload` or raises."""
    session = Mock(spec=requests.Session)
    session.headers = {}
    if exc is not None:
        session.get.side_effect = exc
        return session
    response = Mock()
    response.json.return_value = payload
    if status_error is not None:
        response.raise_for_status.side_effect = status_error
    session.get.return_value = response
    return session


WAQI_OK = {
    "status": "ok",
    "data": {
        "aqi": 153,
        "city": {"name": "Anand Vihar, Delhi"},
        "iaqi": {"pm25": {"v": 153}, "pm10": {"v": 98}, "no2": {"v": 21.4}},
        "time": {"iso": "2024-03-15T08:00:00+05:30"},
    },
}

OPENWEATHER_OK = {
    "list": [{
        "dt": 1710470400,
        "main": {"aqi": 4},
        "components": {"pm2_5": 35.4, "pm10": 60.1, "o3": 40.0, "no2": 18.0, "so2": 5.0, "co": 300.0},
    }],
}


class RecordingProvider:
    """Provider stub returning fixed readings or raising."""

    def __init__(self, name, aqi=None, error=None):
        self.name = name
        self.aqi = aqi
        self.error = error
        self.calls = 0

    def fetch(self, coord):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return AQISample(location=coord, aqi=self.aqi, timestamp=FIXED_NOW, source=self.name)


class TestWAQIProvider:
    """Test suite for WAQIProvider."""

    def test_parses_station_feed(self):
        session = mock_session(WAQI_OK)
        sample = WAQIProvider("token", session=session).fetch(DELHI)

        assert sample.aqi == 153
        assert sample.pm25 == 153.0
        assert sample.no2 == 21.4
        assert sample.so2 == 0.0
        assert sample.station == "Anand Vihar, Delhi"
        assert sample.source == "WAQI"
        assert sample.location == DELHI

    def test_requests_geo_feed_with_token(self):
        session = mock_session(WAQI_OK)
        WAQIProvider("secret", timeout=3.0, session=session).fetch(DELHI)

        args, kwargs = session.get.call_args
        assert args[0] == f"https://api.waqi.info/feed/geo:{DELHI.lat};{DELHI.lng}/"
        assert kwargs["params"] == {"token": "secret"}
        assert kwargs["timeout"] == 3.0

    def test_error_status_raises(self):
        session = mock_session({"status": "error", "data": "Invalid key"})
        with pytest.raises(AirQualityProviderError):
            WAQIProvider("token", session=session).fetch(DELHI)

    def test_missing_station_value_raises(self):
        payload = {"status": "ok", "data": {"aqi": "-", "iaqi": {}}}
        with pytest.raises(AirQualityProviderError):
            WAQIProvider("token", session=mock_session(payload)).fetch(DELHI)

    def test_timeout_raises_provider_error(self):
        session = mock_session(exc=requests.Timeout("timed out"))
        with pytest.raises(AirQualityProviderError):
            WAQIProvider("token", session=session).fetch(DELHI)

    def test_http_error_raises_provider_error(self):
        session = mock_session({}, status_error=requests.HTTPError("503"))
        with pytest.raises(AirQualityProviderError):
            WAQIProvider("token", session=session).fetch(DELHI)

    def test_token_required(self):
        with pytest.raises(ValueError):
            WAQIProvider("")

    def test_injected_session_is_shared(self):
        session = mock_session(WAQI_OK)
        provider = WAQIProvider("token", session=session)
        with ThreadPoolExecutor(max_workers=2) as executor:
            sessions = list(executor.map(lambda _: provider.session, range(2)))
        assert sessions == [session, session]

    def test_each_worker_thread_gets_its_own_session(self):
        """Concurrent route fetches never share one requests.Session."""
        provider = WAQIProvider("token")
        main_session = provider.session

        assert provider.session is main_session
        assert main_session.headers["Accept"] == "application/json"
        with ThreadPoolExecutor(max_workers=1) as executor:
            worker_session = executor.submit(lambda: provider.session).result()
        assert isinstance(worker_session, requests.Session)
        assert worker_session is not main_session


class TestOpenWeatherProvider:
    """Test suite for OpenWeatherProvider."""

    def test_derives_aqi_from_pm25(self):
        sample = OpenWeatherProvider("key", session=mock_session(OPENWEATHER_OK)).fetch(DELHI)

        assert sample.aqi == 100
        assert sample.pm25 == 35.4
        assert sample.co == 300.0
        assert sample.source == "OpenWeather"

    def test_requests_lat_lon(self):
        session = mock_session(OPENWEATHER_OK)
        OpenWeatherProvider("key", session=session).fetch(DELHI)

        args, kwargs = session.get.call_args
        assert args[0].endswith("/air_pollution")
        assert kwargs["params"] == {"lat": DELHI.lat, "lon": DELHI.lng, "appid": "key"}

    def test_empty_list_raises(self):
        with pytest.raises(AirQualityProviderError):
            OpenWeatherProvider("key", session=mock_session({"list": []})).fetch(DELHI)

    def test_connection_error_raises(self):
        session = mock_session(exc=requests.ConnectionError("down"))
        with pytest.raises(AirQualityProviderError):
            OpenWeatherProvider("key", session=session).fetch(DELHI)

    def test_each_worker_thread_gets_its_own_session(self):
        provider = OpenWeatherProvider("key")
        with ThreadPoolExecutor(max_workers=1) as executor:
            worker_session = executor.submit(lambda: provider.session).result()
        assert worker_session is not provider.session


class TestAqiFromPm25:
    """Boundary values of the PM2.5 to AQI conversion."""

    @pytest.mark.parametrize("pm25,aqi", [
        (-1, 0), (0, 0), (6.0, 25), (12.0, 50), (12.1, 51), (35.4, 100),
        (35.5, 101), (55.4, 150), (150.4, 200), (250.4, 300), (500.4, 500), (800, 500),
    ])
    def test_breakpoints(self, pm25, aqi):
        assert aqi_from_pm25(pm25) == aqi


class TestSyntheticReadingGenerator:
    """Test suite for SyntheticReadingGenerator."""

    def test_same_seed_same_reading(self):
        first = SyntheticReadingGenerator(seed=7).reading(DELHI, FIXED_NOW)
        second = SyntheticReadingGenerator(seed=7).reading(DELHI, FIXED_NOW)
        assert first == second

    def test_reading_is_marked_synthetic(self):
        sample = SyntheticReadingGenerator(seed=7).reading(LONDON, FIXED_NOW)
        assert sample.source == "Synthetic"
        assert sample.is_fallback
        assert sample.station == "Synthetic Station"

    @pytest.mark.parametrize("hour", [3, 8, 13, 18])
    def test_delhi_range_with_time_pattern(self, hour):
        """Delhi readings stay within the regional range scaled by the hour."""
        generator = SyntheticReadingGenerator(seed=1)
        when = datetime(2024, 3, 15, hour)
        multiplier = generator.time_multiplier(hour)
        for seed_lat in (28.50, 28.55, 28.60, 28.65, 28.70):
            aqi = generator.reading(Coordinate(seed_lat, 77.2), when).aqi
            assert int(100 * multiplier) - 1 <= aqi <= int(220 * multiplier)

    def test_default_range_outside_known_regions(self):
        generator = SyntheticReadingGenerator(seed=3)
        assert generator.base_range(LONDON) == (40, 120)
        aqi = generator.reading(LONDON, datetime(2024, 3, 15, 13)).aqi
        assert 40 <= aqi < 120

    def test_aqi_clamped(self):
        generator = SyntheticReadingGenerator(seed=5)
        for hour in range(24):
            aqi = generator.reading(DELHI, datetime(2024, 3, 15, hour)).aqi
            assert 10 <= aqi <= 500

    def test_negative_seed_rejected(self):
        with pytest.raises(ValueError):
            SyntheticReadingGenerator(seed=-1)


class TestAirQualityService:
    """Test suite for AirQualityService."""

    @pytest.fixture
    def fallback(self):
        return SyntheticReadingGenerator(seed=11)

    # ==================== Mode Selection ====================

    def test_mock_mode_by_default(self, settings):
        service = AirQualityService(settings=settings)
        assert service.mode == "mock"
        assert service.providers == []

    def test_live_without_credentials_falls_back_to_mock(self, settings):
        service = AirQualityService(mode="live", settings=settings)
        assert service.mode == "mock"

    def test_live_with_credentials_builds_providers(self, tmp_path):
        settings = Settings(waqi_token="t", openweather_api_key="k", log_dir=tmp_path)
        service = AirQualityService(mode="live", settings=settings)

        assert service.mode == "live"
        assert [p.name for p in service.providers] == ["WAQI", "OpenWeather"]

    def test_mode_from_settings(self, tmp_path):
        settings = Settings(aq_mode="live", waqi_token="t", log_dir=tmp_path)
        assert AirQualityService(settings=settings).mode == "live"

    def test_explicit_argument_wins_over_settings(self, tmp_path):
        settings = Settings(aq_mode="live", waqi_token="t", log_dir=tmp_path)
        assert AirQualityService(mode="mock", settings=settings).mode == "mock"

    # ==================== Fallback Chain ====================

    def test_first_provider_answers(self, settings, fallback):
        primary = RecordingProvider("WAQI", aqi=90)
        secondary = RecordingProvider("OpenWeather", aqi=120)
        service = AirQualityService(providers=[primary, secondary], fallback=fallback, settings=settings)

        sample = service.get_air_quality(DELHI)

        assert sample.aqi == 90
        assert secondary.calls == 0

    def test_second_provider_after_failure(self, settings, fallback):
        primary = RecordingProvider("WAQI", error=AirQualityProviderError("down"))
        secondary = RecordingProvider("OpenWeather", aqi=120)
        service = AirQualityService(providers=[primary, secondary], fallback=fallback, settings=settings)

        assert service.get_air_quality(DELHI).source == "OpenWeather"

    def test_synthetic_after_all_fail(self, settings, fallback):
        broken = RecordingProvider("WAQI", error=RuntimeError("boom"))
        service = AirQualityService(providers=[broken], fallback=fallback, settings=settings, clock=lambda: FIXED_NOW)

        sample = service.get_air_quality(DELHI)

        assert sample.is_fallback
        assert sample == fallback.reading(DELHI, FIXED_NOW)

    def test_no_fallback_raises(self, settings):
        broken = RecordingProvider("WAQI", error=AirQualityProviderError("down"))
        service = AirQualityService(providers=[broken], use_fallback=False, settings=settings)

        with pytest.raises(AirQualityUnavailableError):
            service.get_air_quality(DELHI)

    def test_partial_failure_keeps_route_complete(self, settings, fallback):
        """One failing coordinate is substituted; the others keep live data."""

        class FlakyProvider(RecordingProvider):
            def fetch(self, coord):
                if coord == LONDON:
                    raise AirQualityProviderError("no station")
                return super().fetch(coord)

        service = AirQualityService(providers=[FlakyProvider("WAQI", aqi=70)], fallback=fallback, settings=settings)
        samples = service.get_route_air_quality([DELHI, LONDON, DELHI])

        assert [s.source for s in samples] == ["WAQI", "Synthetic", "WAQI"]

    # ==================== Route Readings ====================

    def test_route_readings_in_order(self, settings, fallback):
        coords = [Coordinate(28.6 + i * 0.01, 77.2) for i in range(5)]
        service = AirQualityService(fallback=fallback, settings=settings, clock=lambda: FIXED_NOW)

        samples = service.get_route_air_quality(coords)

        assert [s.location for s in samples] == coords

    def test_live_readings_are_throttled(self, settings):
        throttle = Mock()
        provider = RecordingProvider("WAQI", aqi=60)
        service = AirQualityService(providers=[provider], settings=settings, throttle_factory=lambda: throttle)

        service.get_route_air_quality([DELHI, LONDON, DELHI])

        assert throttle.wait.call_count == 3

    def test_mock_readings_are_not_throttled(self, settings):
        factory = Mock()
        service = AirQualityService(settings=settings, throttle_factory=factory)

        service.get_route_air_quality([DELHI, LONDON])

        factory.assert_not_called()

    def test_seeded_service_is_reproducible(self, tmp_path):
        settings = Settings(fallback_seed=99, log_dir=tmp_path)
        coords = [DELHI, LONDON]
        first = AirQualityService(settings=settings, clock=lambda: FIXED_NOW).get_route_air_quality(coords)
        second = AirQualityService(settings=settings, clock=lambda: FIXED_NOW).get_route_air_quality(coords)
        assert first == second

    # ==================== Forecast ====================

    def test_forecast_shape(self, settings, fallback):
        service = AirQualityService(fallback=fallback, settings=settings, clock=lambda: FIXED_NOW)
        forecast = service.forecast(DELHI, hours=24)
        base = fallback.reading(DELHI, FIXED_NOW).aqi

        assert len(forecast) == 24
        assert forecast[0].timestamp == FIXED_NOW
        assert forecast[0].confidence == 100
        assert forecast[5].confidence == 90
        assert forecast[23].confidence == 60
        assert all(abs(point.aqi - base) <= 15 for point in forecast)

    def test_forecast_to_dict(self, settings, fallback):
        service = AirQualityService(fallback=fallback, settings=settings, clock=lambda: FIXED_NOW)
        data = service.forecast(DELHI, hours=1)[0].to_dict()
        assert data["timestamp"] == FIXED_NOW.isoformat()
        assert set(data) == {"timestamp", "aqi", "confidence"}

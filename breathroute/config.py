"""
Configuration module for the Breathable Routes engine.

Settings are read from environment variables, after loading a `.env` file
from the working directory if one exists. Explicit constructor arguments on
the services always win over these settings.
"""

import logging
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)


AQ_MODES = ("mock", "live")

# Lower bounds checked after parsing; out-of-range values fall back to defaults
RANGE_CHECKS = (
    ("request_timeout", lambda v: v > 0),
    ("request_interval", lambda v: v >= 0),
    ("max_sample_points", lambda v: v >= 2),
    ("max_workers", lambda v: v >= 1),
)


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("Ignoring invalid %s=%r, using %s", name, raw, default)
        return default


def _env_int(name: str, default: Optional[int]) -> Optional[int]:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("Ignoring invalid %s=%r, using %s", name, raw, default)
        return default


@dataclass
class Settings:
    """
    Runtime configuration.

    Attributes:
        aq_mode: "mock" (synthetic readings only) or "live" (WAQI/OpenWeather
                 with synthetic fallback)
        waqi_token: WAQI API token, if any
        openweather_api_key: OpenWeatherMap API key, if any
        request_timeout: Per-request timeout for air-quality providers (seconds)
        request_interval: Minimum gap between successive provider calls (seconds)
        max_sample_points: Maximum number of coordinates sampled per route
        max_workers: Number of routes analysed concurrently
        fallback_seed: Seed for the synthetic reading generator (None = random)
        log_dir: Directory for the persistent comparison journal
    """

    aq_mode: str = "mock"
    waqi_token: Optional[str] = None
    openweather_api_key: Optional[str] = None
    request_timeout: float = 8.0
    request_interval: float = 0.2
    max_sample_points: int = 10
    max_workers: int = 4
    fallback_seed: Optional[int] = None
    log_dir: Path = Path("logs")

    def validate(self) -> tuple[bool, Optional[str]]:
        """
        Validates the settings without raising.

        Returns:
            (True, None) if valid, otherwise (False, reason)
        """
        if self.aq_mode not in AQ_MODES:
            return (False, f"aq_mode must be one of {', '.join(AQ_MODES)}")
        if self.request_timeout <= 0:
            return (False, "request_timeout must be > 0")
        if self.request_interval < 0:
            return (False, "request_interval must be >= 0")
        # Start and end points are always sampled
        if self.max_sample_points < 2:
            return (False, "max_sample_points must be >= 2")
        if self.max_workers < 1:
            return (False, "max_workers must be >= 1")
        return (True, None)


def load_settings(env_file: Optional[Path] = None) -> Settings:
    """
    Builds Settings from the environment.

    Variables already set in the process environment win over the `.env`
    file. Unknown modes fall back to "mock"; unparsable or out-of-range
    numbers fall back to the defaults, so the result always validates.

    Args:
        env_file: Path of the .env file (defaults to ./.env)
    """
    load_dotenv(dotenv_path=env_file or Path.cwd() / ".env")

    mode = os.getenv("BREATHROUTE_AQ_MODE", "").lower()
    if mode not in AQ_MODES:
        mode = "mock"

    defaults = Settings()
    settings = Settings(
        aq_mode=mode,
        waqi_token=os.getenv("WAQI_API_TOKEN") or None,
        openweather_api_key=os.getenv("OPENWEATHER_API_KEY") or None,
        request_timeout=_env_float("BREATHROUTE_REQUEST_TIMEOUT", defaults.request_timeout),
        request_interval=_env_float("BREATHROUTE_REQUEST_INTERVAL", defaults.request_interval),
        max_sample_points=_env_int("BREATHROUTE_MAX_SAMPLE_POINTS", defaults.max_sample_points),
        max_workers=_env_int("BREATHROUTE_MAX_WORKERS", defaults.max_workers),
        fallback_seed=_env_int("BREATHROUTE_FALLBACK_SEED", None),
        log_dir=Path(os.getenv("BREATHROUTE_LOG_DIR", str(defaults.log_dir))),
    )

    is_valid, error = settings.validate()
    if is_valid:
        return settings

    logger.warning("Invalid settings from environment (%s)", error)
    for name, in_range in RANGE_CHECKS:
        value = getattr(settings, name)
        if not in_range(value):
            logger.warning("Ignoring out-of-range %s=%r, using %s", name, value, getattr(defaults, name))
            settings = replace(settings, **{name: getattr(defaults, name)})
    return settings

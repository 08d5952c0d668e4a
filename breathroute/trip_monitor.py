"""
Trip monitor module for the Breathable Routes engine.

During navigation new readings arrive as the rider moves. The TripMonitor
keeps the trip's reading history, replaces the breathability score wholesale
whenever new readings arrive, and raises alerts for the new stretch of road.

Updates are throttled: repeated calls within `min_update_interval` seconds
carrying the same readings return the last result without recomputing, so a
polling client cannot flood the scorer.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Optional, Sequence

from .alerts import Alert, ProactiveAlertGenerator
from .aqi_sample import AQISample
from .breathability import BreathabilityScore, BreathabilityScorer
from .health_profile import HealthProfile


@dataclass(frozen=True)
class TripUpdate:
    """
    Result of one mid-trip update.

    Attributes:
        breathability_score: Score over the full reading history
        alerts: Alerts for the readings of this update only
        sample_count: Number of readings in the history
        updated_at: When the update was computed
        reused: True if this result was returned from the throttle cache
    """

    breathability_score: BreathabilityScore
    alerts: list[Alert] = field(default_factory=list)
    sample_count: int = 0
    updated_at: Optional[datetime] = None
    reused: bool = False

    def to_dict(self) -> dict[str, object]:
        return {
            "breathabilityScore": self.breathability_score.to_dict(),
            "alerts": [alert.to_dict() for alert in self.alerts],
            "sampleCount": self.sample_count,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
            "reused": self.reused,
        }


class TripMonitor:
    """
    Tracks air quality along a trip in progress.
    """

    MIN_UPDATE_INTERVAL_SECONDS = 30

    def __init__(
        self,
        profile: Optional[HealthProfile] = None,
        initial_samples: Sequence[AQISample] = (),
        scorer: Optional[BreathabilityScorer] = None,
        alert_generator: Optional[ProactiveAlertGenerator] = None,
        min_update_interval: float = MIN_UPDATE_INTERVAL_SECONDS,
        clock: Callable[[], datetime] = datetime.now
    ) -> None:
        self.profile = profile or HealthProfile()
        self.scorer = scorer or BreathabilityScorer()
        self.alert_generator = alert_generator or ProactiveAlertGenerator()
        self.min_update_interval = min_update_interval
        self.clock = clock

        self._samples: list[AQISample] = list(initial_samples)
        self._last_update_time: Optional[datetime] = None
        self._last_result: Optional[TripUpdate] = None
        self._last_samples_key: Optional[tuple] = None

    @property
    def samples(self) -> list[AQISample]:
        """A copy of the reading history."""
        return list(self._samples)

    @property
    def breathability_score(self) -> BreathabilityScore:
        return self.scorer.score(self._samples)

    def clear_cache(self) -> None:
        """Clear the throttling cache to force the next computation."""
        self._last_update_time = None
        self._last_result = None
        self._last_samples_key = None

    def update(self, new_samples: Sequence[AQISample]) -> TripUpdate:
        """
        Adds readings to the trip and recomputes its score.

        Args:
            new_samples: Readings collected since the previous update, in
                         route order

        Returns:
            TripUpdate with the score over the whole history and the alerts
            for `new_samples`; a cached result (reused=True) if the same
            readings were submitted within the update interval
        """
        samples_key = tuple((s.location.lat, s.location.lng, s.aqi, s.timestamp) for s in new_samples)
        now = self.clock()

        if (self._last_update_time is not None and
                self._last_result is not None and
                self._last_samples_key == samples_key and
                (now - self._last_update_time).total_seconds() < self.min_update_interval):
            cached = self._last_result
            return TripUpdate(
                breathability_score=cached.breathability_score,
                alerts=cached.alerts,
                sample_count=cached.sample_count,
                updated_at=cached.updated_at,
                reused=True,
            )

        self._samples.extend(new_samples)

        result = TripUpdate(
            breathability_score=self.scorer.score(self._samples),
            alerts=self.alert_generator.generate_alerts(list(new_samples), self.profile, generated_at=now),
            sample_count=len(self._samples),
            updated_at=now,
        )

        self._last_update_time = now
        self._last_result = result
        self._last_samples_key = samples_key
        return result

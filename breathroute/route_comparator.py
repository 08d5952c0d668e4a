"""
Route comparator module for the Breathable Routes engine.

This module contains the RouteComparator class, the core orchestrator of the
route analysis process. For every candidate route it samples coordinates,
fetches air-quality readings through the injected air-quality collaborator,
runs the breathability scorer, health impact calculator, alert generator and
time-of-day recommender, and combines their results into a preference-weighted
overall score used to rank the routes.
"""

import logging
import math
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Optional, Sequence, Union

from .aqi_sample import AQISample, Coordinate
from .alerts import ProactiveAlertGenerator
from .breathability import BreathabilityScore, BreathabilityScorer
from .config import Settings, load_settings
from .errors import AirQualityUnavailableError, NoRoutesFoundError, RouteAnalysisError
from .health_impact import HealthImpact, HealthImpactCalculator
from .health_profile import COMMUTE_PREFERENCES, HealthProfile
from .route_analysis import RouteAnalysis, RouteComparison, RouteRecommendation
from .route_geometry import RouteGeometry
from .time_recommender import TimeOfDayRecommender

logger = logging.getLogger(__name__)

RouteInput = Union[RouteGeometry, dict]


class RouteComparator:
    """
    Core orchestrator for route air-quality analysis and ranking.

    Collaborators are injected at construction: the air-quality service
    (anything with `get_route_air_quality(coords)`), an optional route
    provider (anything with `get_directions(origin, destination, **options)`)
    and the scoring components, which default to fresh instances.

    Routes are analysed concurrently in a thread pool; each analysis builds
    its own records and shares no mutable state with the others.
    """

    # Ranking score range
    MIN_SCORE = 0
    MAX_SCORE = 100

    # Preference weights
    HEALTHIEST_BREATHABILITY_WEIGHT = 0.8
    HEALTHIEST_HEALTH_WEIGHT = 0.2
    FASTEST_BREATHABILITY_WEIGHT = 0.6
    FASTEST_TIME_WEIGHT = 0.4
    MIN_TIME_FACTOR = 0.5

    # Score difference thresholds between best and worst route
    STRONG_PREFERENCE_GAP = 20
    MODERATE_PREFERENCE_GAP = 10

    def __init__(
        self,
        air_quality_service: Any,
        route_provider: Any = None,
        scorer: Optional[BreathabilityScorer] = None,
        health_calculator: Optional[HealthImpactCalculator] = None,
        alert_generator: Optional[ProactiveAlertGenerator] = None,
        time_recommender: Optional[TimeOfDayRecommender] = None,
        settings: Optional[Settings] = None,
        clock: Callable[[], datetime] = datetime.now
    ) -> None:
        self.air_quality_service = air_quality_service
        self.route_provider = route_provider
        self.scorer = scorer or BreathabilityScorer()
        self.health_calculator = health_calculator or HealthImpactCalculator()
        self.alert_generator = alert_generator or ProactiveAlertGenerator()
        self.time_recommender = time_recommender or TimeOfDayRecommender()
        self.settings = settings or load_settings()
        self.clock = clock

        self.log_file = Path(self.settings.log_dir) / "route_log.log"

    # ==================== Analysis ====================

    def analyze_route(
        self,
        route: RouteInput,
        profile: Optional[HealthProfile] = None,
        preference: Optional[str] = None,
        current_hour: Optional[int] = None
    ) -> RouteAnalysis:
        """
        Analyses a single route.

        Args:
            route: RouteGeometry or a directions-provider route dict
            profile: Rider profile (anonymous default if None)
            preference: "healthiest", "fastest" or "balanced"; defaults to
                        the profile's preferred commute
            current_hour: Hour for departure advice (defaults to the clock)

        Returns:
            The RouteAnalysis for the route

        Raises:
            InputDataError: If the route geometry cannot be sampled
            AirQualityUnavailableError: If no readings could be obtained
        """
        profile = profile or HealthProfile()
        preference = self._resolve_preference(preference, profile)
        if current_hour is None:
            current_hour = self.clock().hour

        geometry = self._as_geometry(route)
        coordinates = geometry.sample_coordinates(self.settings.max_sample_points)
        samples = self._fetch_samples(coordinates)

        breathability = self.scorer.score(samples)
        health_impact = self.health_calculator.assess(samples, profile)
        alerts = self.alert_generator.generate_alerts(samples, profile)

        avg_aqi = sum(sample.aqi for sample in samples) / len(samples)
        time_recommendations = self.time_recommender.recommend(avg_aqi, current_hour)

        return RouteAnalysis(
            route_id=geometry.identity,
            route=geometry,
            air_quality_data=samples,
            breathability_score=breathability,
            health_impact=health_impact,
            alerts=alerts,
            time_recommendations=time_recommendations,
            overall_score=self.calculate_overall_score(breathability, health_impact, geometry, preference),
            preference=preference,
            analysis_timestamp=self.clock(),
        )

    def compare_routes(
        self,
        routes: Sequence[RouteInput],
        profile: Optional[HealthProfile] = None,
        preference: Optional[str] = None,
        current_hour: Optional[int] = None,
        enable_persistent_logging: bool = False
    ) -> RouteComparison:
        """
        Analyses and ranks candidate routes between the same two points.

        Routes are ranked by overall score, highest first; routes with equal
        scores keep their input order.

        Args:
            routes: Candidate routes (RouteGeometry or provider dicts)
            profile: Rider profile (anonymous default if None)
            preference: Route preference; defaults to the profile's
            current_hour: Hour for departure advice (defaults to the clock)
            enable_persistent_logging: Append a line to the comparison journal

        Returns:
            RouteComparison with the ranked analyses and a recommendation

        Raises:
            NoRoutesFoundError: If `routes` is empty
            InputDataError: If a route's geometry cannot be sampled
            AirQualityUnavailableError: If readings could not be obtained
        """
        if not routes:
            raise NoRoutesFoundError("No routes found between these locations")

        profile = profile or HealthProfile()
        preference = self._resolve_preference(preference, profile)
        if current_hour is None:
            current_hour = self.clock().hour

        workers = max(1, min(self.settings.max_workers, len(routes)))
        try:
            with ThreadPoolExecutor(max_workers=workers) as executor:
                analyses = list(executor.map(
                    lambda route: self.analyze_route(route, profile, preference, current_hour),
                    routes,
                ))
        except RouteAnalysisError as e:
            logger.error("Route comparison error: %s", e)
            raise

        # sorted() is stable with reverse=True, so ties keep input order
        ranked = sorted(analyses, key=lambda analysis: analysis.overall_score, reverse=True)

        comparison = RouteComparison(
            ranked_routes=ranked,
            recommendation=self.generate_recommendation(ranked),
            comparison_timestamp=self.clock(),
        )

        if enable_persistent_logging:
            self._log_comparison(comparison)

        return comparison

    def plan_routes(
        self,
        origin: Coordinate,
        destination: Coordinate,
        profile: Optional[HealthProfile] = None,
        preference: Optional[str] = None,
        current_hour: Optional[int] = None,
        enable_persistent_logging: bool = False,
        **options: Any
    ) -> RouteComparison:
        """
        Gets candidate routes from the route provider and compares them.

        Extra keyword options (e.g. `alternatives`) are passed through to the
        provider.

        Raises:
            NoRoutesFoundError: If there is no provider, it fails, or it
                                returns no routes
        """
        if self.route_provider is None:
            raise NoRoutesFoundError("No route provider configured")

        try:
            routes = self.route_provider.get_directions(origin, destination, **options)
        except RouteAnalysisError:
            raise
        except Exception as e:
            logger.error("Directions error: %s", e)
            raise NoRoutesFoundError(f"Failed to get directions: {e}") from e

        if not routes:
            raise NoRoutesFoundError("No routes found between these locations")

        return self.compare_routes(routes, profile, preference, current_hour, enable_persistent_logging)

    # ==================== Scoring ====================

    def calculate_overall_score(
        self,
        breathability: BreathabilityScore,
        health_impact: HealthImpact,
        route: RouteGeometry,
        preference: str
    ) -> float:
        """
        Computes the preference-weighted overall score.

        - healthiest: breathability x 0.8 + health score x 0.2
        - fastest: breathability x 0.6 + time factor x 100 x 0.4, where the
          time factor loses 0.1 per hour of travel, floored at 0.5
        - balanced: breathability score unchanged

        Returns:
            Overall score clamped to [0, 100]
        """
        score: float = breathability.score

        if preference == "healthiest":
            score = (score * self.HEALTHIEST_BREATHABILITY_WEIGHT
                     + health_impact.health_score * self.HEALTHIEST_HEALTH_WEIGHT)
        elif preference == "fastest":
            time_factor = max(self.MIN_TIME_FACTOR, 1 - (route.duration_s / 3600) * 0.1)
            score = (score * self.FASTEST_BREATHABILITY_WEIGHT
                     + (time_factor * 100) * self.FASTEST_TIME_WEIGHT)

        return min(self.MAX_SCORE, max(self.MIN_SCORE, score))

    def generate_recommendation(self, ranked: Sequence[RouteAnalysis]) -> RouteRecommendation:
        """
        Builds the verdict by comparing the best and worst ranked routes.

        Raises:
            NoRoutesFoundError: If `ranked` is empty
        """
        if not ranked:
            raise NoRoutesFoundError("No routes available for comparison")

        best = ranked[0]
        worst = ranked[-1]

        if len(ranked) == 1:
            return RouteRecommendation(
                type="single",
                message=f"Route has {best.breathability_score.grade} air quality rating",
                score=best.overall_score,
            )

        score_difference = best.overall_score - worst.overall_score
        benefit = f"{math.floor(worst.health_impact.avg_aqi - best.health_impact.avg_aqi)} AQI points less exposure"

        if score_difference > self.STRONG_PREFERENCE_GAP:
            return RouteRecommendation(
                type="strong-preference",
                message=f"Healthiest route is significantly better ({score_difference:.0f} points higher)",
                recommended_route=0,
                benefit=benefit,
            )
        if score_difference > self.MODERATE_PREFERENCE_GAP:
            return RouteRecommendation(
                type="moderate-preference",
                message="Healthiest route offers moderate improvement",
                recommended_route=0,
                benefit=benefit,
            )
        return RouteRecommendation(
            type="similar",
            message="Routes have similar air quality impact",
            note="Choose based on time preference",
        )

    # ==================== Helpers ====================

    def _resolve_preference(self, preference: Optional[str], profile: HealthProfile) -> str:
        preference = preference or profile.preferred_commute
        if preference not in COMMUTE_PREFERENCES:
            raise ValueError(f"Unknown route preference: {preference}")
        return preference

    @staticmethod
    def _as_geometry(route: RouteInput) -> RouteGeometry:
        if isinstance(route, RouteGeometry):
            return route
        return RouteGeometry.from_dict(route)

    def _fetch_samples(self, coordinates: list[Coordinate]) -> list[AQISample]:
        try:
            samples = self.air_quality_service.get_route_air_quality(coordinates)
        except RouteAnalysisError:
            raise
        except Exception as e:
            logger.error("Route air quality error: %s", e)
            raise AirQualityUnavailableError(f"Air-quality collaborator failed: {e}") from e

        if not samples or len(samples) != len(coordinates):
            raise AirQualityUnavailableError(
                f"Expected {len(coordinates)} readings, got {len(samples) if samples else 0}"
            )
        return list(samples)

    def _log_comparison(self, comparison: RouteComparison) -> None:
        """
        Appends a human-readable line for a comparison to the journal file.

        Format: [TIMESTAMP] ROUTES | BEST | PREF | RECOMMENDATION | DATA
        """
        best = comparison.best
        data_source = "FALLBACK" if any(a.uses_fallback_data for a in comparison.ranked_routes) else "LIVE"

        try:
            self.log_file.parent.mkdir(parents=True, exist_ok=True)
            is_new = not self.log_file.exists()
            with open(self.log_file, 'a', encoding='utf-8') as f:
                if is_new:
                    f.write("# Breathable Routes Comparison Log\n")
                    f.write("# Format: [TIMESTAMP] ROUTES | BEST (GRADE, SCORE) | PREF | RECOMMENDATION | DATA\n")
                    f.write("# " + "=" * 80 + "\n\n")
                timestamp_str = comparison.comparison_timestamp.strftime("%Y-%m-%d %H:%M:%S")
                f.write(
                    f"[{timestamp_str}] {len(comparison.ranked_routes):2d} routes | "
                    f"Best: {best.route.summary or best.route_id} "
                    f"({best.breathability_score.grade}, {best.overall_score:.1f}) | "
                    f"{best.preference:10s} | "
                    f"{comparison.recommendation.type:19s} | "
                    f"[{data_source}]\n"
                )
        except OSError as e:
            # The journal is informational; a write failure must not fail the comparison
            logger.warning("Could not write comparison log %s: %s", self.log_file, e)

"""
Web UI module for the Breathable Routes engine.

This module provides a Streamlit-based web interface for the route analysis
engine. Supports three modes: Manual input (type AQI readings and inspect the
scoring), Route comparison (mock directions between two points, ranked by
air quality), and Live navigation (periodic readings fed into a TripMonitor).
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional

# Add project root to Python path to enable imports
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

import streamlit as st
from streamlit_autorefresh import st_autorefresh
import pandas as pd
import numpy as np

from breathroute.aqi_classifier import AQIClassifier
from breathroute.aqi_sample import AQISample, Coordinate
from breathroute.air_quality_service import AirQualityService
from breathroute.breathability import BreathabilityScorer
from breathroute.config import load_settings
from breathroute.errors import RouteAnalysisError
from breathroute.formatting import format_distance, format_duration
from breathroute.health_impact import HealthImpactCalculator
from breathroute.health_profile import COMMUTE_PREFERENCES, SENSITIVITY_LEVELS, HealthProfile
from breathroute.alerts import Alert, ProactiveAlertGenerator
from breathroute.route_comparator import RouteComparator
from breathroute.route_geometry import MockRouteProvider
from breathroute.time_recommender import TimeOfDayRecommender, TimeRecommendations
from breathroute.trip_monitor import TripMonitor


logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

# Preset city pairs for route comparison
PRESET_TRIPS = {
    "Delhi: Connaught Place -> Gurugram": (Coordinate(28.6315, 77.2167), Coordinate(28.4595, 77.0266)),
    "Mumbai: Bandra -> Powai": (Coordinate(19.0596, 72.8295), Coordinate(19.1176, 72.9060)),
    "Bangalore: MG Road -> Whitefield": (Coordinate(12.9756, 77.6050), Coordinate(12.9698, 77.7500)),
}

# Initialize session state for live navigation
if "trip_log" not in st.session_state:
    st.session_state.trip_log = []

if "air_quality_service" not in st.session_state:
    st.session_state.air_quality_service = AirQualityService()


def sidebar_profile() -> HealthProfile:
    """
    Renders the health-profile controls in the sidebar.

    Returns:
        HealthProfile built from the sidebar inputs
    """
    st.sidebar.header("Health profile")
    respiratory = st.sidebar.checkbox("Respiratory conditions (asthma, COPD)")
    heart = st.sidebar.checkbox("Heart conditions")
    pregnant = st.sidebar.checkbox("Pregnant")
    age = st.sidebar.number_input("Age", min_value=1, max_value=110, value=30)
    sensitivity = st.sidebar.selectbox("Sensitivity", SENSITIVITY_LEVELS)
    preference = st.sidebar.selectbox(
        "Route preference",
        COMMUTE_PREFERENCES,
        index=COMMUTE_PREFERENCES.index("balanced"),
        help="healthiest: weight the health score; fastest: weight travel time; balanced: air quality only"
    )

    return HealthProfile(
        has_respiratory_conditions=respiratory,
        has_heart_conditions=heart,
        is_pregnant=pregnant,
        age=int(age),
        sensitivity_level=sensitivity,
        preferred_commute=preference,
    )


def show_alerts(alerts: List[Alert]) -> None:
    if not alerts:
        st.caption("No alerts along this route.")
        return

    for alert in alerts:
        text = f"**{alert.distance}** ({alert.aqi_level}, AQI {alert.aqi}): {alert.message}  \n_Action: {alert.action}_"
        if alert.severity == "high":
            st.error(text)
        elif alert.severity == "moderate":
            st.warning(text)
        else:
            st.info(text)


def show_time_recommendations(time_recs: TimeRecommendations) -> None:
    """Shows the 24-hour projection chart and the best departure windows."""
    st.caption(f"Now ({time_recs.current_hour}:00): {time_recs.current_recommendation}")

    chart_df = pd.DataFrame(
        {"Predicted AQI": [p.aqi for p in time_recs.hourly_predictions]},
        index=pd.Index([p.hour for p in time_recs.hourly_predictions], name="Hour"),
    )
    st.line_chart(chart_df)

    if time_recs.optimal_times:
        st.success(time_recs.message)
        st.table(pd.DataFrame([t.to_dict() for t in time_recs.optimal_times])[["time", "aqi", "improvement"]])


def random_walk_samples(
    start: Coordinate,
    count: int,
    rng: np.random.Generator,
    service: AirQualityService
) -> List[AQISample]:
    """
    Moves a simulated rider a few hundred meters per reading and reads air
    quality at each new position.
    """
    samples = []
    position = start
    for _ in range(count):
        d_lat, d_lng = rng.normal(0.0, 0.003, size=2)
        position = Coordinate(position.lat + float(d_lat), position.lng + float(d_lng))
        samples.append(service.get_air_quality(position))
    return samples


def main() -> None:
    """
    Main function that runs the Streamlit web interface.

    Sets up the page layout, handles the three modes, runs the engine and
    displays results with the controls appropriate to each mode.
    """
    st.set_page_config(page_title="Breathable Routes", layout="wide")
    st.title("Breathable Routes")

    mode = st.sidebar.selectbox(
        "Mode",
        ["Manual input", "Route comparison", "Live navigation"],
        help="Manual input (type readings), Route comparison (rank mock routes) or Live navigation (trip monitor)"
    )
    profile = sidebar_profile()

    settings = load_settings()
    service = st.session_state.air_quality_service
    st.sidebar.caption(f"Air quality source: {service.mode}")

    if mode == "Live navigation":
        st_autorefresh(interval=30000, limit=None, key="trip_refresh")  # 30 seconds = 30000 ms
        st.sidebar.info("🔄 Live navigation active: Updates every 30 seconds")

    classifier = AQIClassifier()
    left_col, right_col = st.columns(2)

    if mode == "Manual input":
        with left_col:
            st.header("Readings along the route")
            raw = st.text_input(
                "AQI readings (comma-separated, in route order)",
                value="145, 165, 125, 95",
                help="One AQI value per sampled point"
            )
            current_hour = st.slider("Departure hour", min_value=0, max_value=23, value=datetime.now().hour)

            try:
                values = [int(v) for v in raw.replace(" ", "").split(",") if v]
            except ValueError:
                st.error("Readings must be whole numbers")
                return

            samples = [
                AQISample(location=Coordinate(28.6 + i * 0.01, 77.2), aqi=v, source="Manual")
                for i, v in enumerate(values)
            ]
            for i, sample in enumerate(samples):
                level = classifier.classify(sample.aqi)
                st.write(f"Point {i + 1}: AQI {sample.aqi} ({level.level}, {level.grade})")

        with right_col:
            st.header("Route assessment")
            breathability = BreathabilityScorer().score(samples)
            impact = HealthImpactCalculator().assess(samples, profile)

            st.metric("🌬️ Breathability", f"{breathability.score} ({breathability.grade})")
            st.caption(breathability.analysis)
            st.metric("❤️ Health score", impact.health_score, help=f"Risk level: {impact.risk_level}")
            st.caption(f"Risk multiplier {impact.risk_multiplier} · Recovery: {impact.recovery_time}")

            with st.expander("Recommendations", expanded=True):
                for recommendation in impact.recommendations:
                    st.write(f"- {recommendation}")

            st.subheader("Alerts")
            show_alerts(ProactiveAlertGenerator().generate_alerts(samples, profile))

            if samples:
                st.subheader("Best time to travel")
                show_time_recommendations(TimeOfDayRecommender().recommend(impact.avg_aqi, current_hour))

    elif mode == "Route comparison":
        with left_col:
            st.header("Trip")
            trip = st.selectbox("Preset trip", list(PRESET_TRIPS.keys()))
            origin, destination = PRESET_TRIPS[trip]
            alternatives = st.checkbox("Include alternative routes", value=True)
            compare = st.button("Compare routes")

        if not compare:
            with right_col:
                st.info("Choose a trip and press 'Compare routes'.")
            return

        comparator = RouteComparator(service, route_provider=MockRouteProvider(), settings=settings)
        try:
            comparison = comparator.plan_routes(origin, destination, profile, alternatives=alternatives)
        except RouteAnalysisError as e:
            st.error(f"Route comparison failed: {e}")
            return

        with left_col:
            st.subheader("Ranking")
            st.dataframe(comparison.to_frame(), use_container_width=True)
            recommendation = comparison.recommendation
            st.success(recommendation.message)
            if recommendation.benefit:
                st.caption(f"Benefit: {recommendation.benefit}")
            if recommendation.note:
                st.caption(recommendation.note)

        with right_col:
            best = comparison.best
            st.header(best.route.summary or best.route_id)
            st.caption(f"{format_distance(best.route.distance_m)} · {format_duration(best.route.duration_s)}")
            if best.uses_fallback_data:
                st.warning("Some readings on this route are synthetic estimates.")

            st.metric("🌬️ Breathability", f"{best.breathability_score.score} ({best.breathability_score.grade})")
            st.metric("❤️ Health score", best.health_impact.health_score)
            st.subheader("Alerts")
            show_alerts(best.alerts)
            st.subheader("Best time to travel")
            show_time_recommendations(best.time_recommendations)

            st.subheader("Destination forecast")
            forecast = service.forecast(destination, hours=12)
            forecast_df = pd.DataFrame([point.to_dict() for point in forecast]).set_index("timestamp")
            st.line_chart(forecast_df[["aqi"]])
            st.caption(f"Confidence {forecast[0].confidence}% now, {forecast[-1].confidence}% by the last hour.")

            with st.expander("View full analysis"):
                st.json(comparison.to_dict())

    else:  # Live navigation
        trip = st.sidebar.selectbox("Trip region", list(PRESET_TRIPS.keys()), key="live_trip")
        origin, _ = PRESET_TRIPS[trip]

        # Recreate the monitor when the trip or profile changes
        monitor: Optional[TripMonitor] = st.session_state.get("trip_monitor")
        if monitor is None or st.session_state.get("trip_key") != (trip, profile):
            monitor = TripMonitor(profile)
            st.session_state.trip_monitor = monitor
            st.session_state.trip_key = (trip, profile)
            st.session_state.trip_rng = np.random.default_rng()
            st.session_state.trip_log = []
            st.session_state.trip_last_read = None

            # Rank the candidate routes once at departure and journal the result
            comparator = RouteComparator(service, route_provider=MockRouteProvider(), settings=settings)
            try:
                st.session_state.trip_comparison = comparator.plan_routes(
                    origin, PRESET_TRIPS[trip][1], profile, enable_persistent_logging=True
                )
            except RouteAnalysisError as e:
                st.session_state.trip_comparison = None
                st.warning(f"Could not rank routes at departure: {e}")

        if st.sidebar.button("Clear Cache", help="Force the next update to recompute"):
            monitor.clear_cache()
            st.session_state.trip_last_read = None
            st.sidebar.success("Cache cleared")

        # Only take new readings on an auto-refresh cycle; other reruns resubmit
        # the same readings and get the throttled result back
        last_read = st.session_state.get("trip_last_read")
        if last_read is None or (datetime.now() - last_read).total_seconds() >= 29.0:
            last_position = monitor.samples[-1].location if monitor.samples else origin
            st.session_state.trip_pending = random_walk_samples(last_position, 3, st.session_state.trip_rng, service)
            st.session_state.trip_last_read = datetime.now()
        update = monitor.update(st.session_state.trip_pending)

        if not update.reused:
            st.session_state.trip_log.append({
                "Time": update.updated_at.strftime("%H:%M:%S"),
                "Readings": update.sample_count,
                "Score": update.breathability_score.score,
                "Grade": update.breathability_score.grade,
                "Alerts": len(update.alerts),
            })
            st.session_state.trip_log = st.session_state.trip_log[-20:]

        with left_col:
            st.header("Trip so far")
            comparison = st.session_state.get("trip_comparison")
            if comparison is not None:
                st.caption(f"Departed on: {comparison.best.route.summary} ({comparison.recommendation.message})")

            score = update.breathability_score
            st.metric("🌬️ Breathability", f"{score.score} ({score.grade})")
            st.caption(score.analysis)
            st.caption(f"{update.sample_count} readings · avg AQI {score.avg_aqi} · max AQI {score.max_aqi}")

            history = pd.DataFrame([s.to_dict() for s in monitor.samples])
            if not history.empty:
                st.line_chart(history["aqi"])

        with right_col:
            st.header("Alerts for the latest stretch")
            show_alerts(update.alerts)

            if st.session_state.trip_log:
                st.divider()
                st.subheader("Recent updates")
                st.dataframe(list(reversed(st.session_state.trip_log[-10:])), use_container_width=True, height=300)
                st.caption("Updates respect 30-second throttling.")


if __name__ == "__main__":
    main()

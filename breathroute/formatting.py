"""
Formatting and geodesic helpers shared by the engine and the web UI.
"""

import math


EARTH_RADIUS_KM = 6371


def format_duration(seconds: float) -> str:
    """Formats a duration in seconds as "1h 5m" or "12m"."""
    hours = int(seconds // 3600)
    minutes = int((seconds % 3600) // 60)

    if hours > 0:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"


def format_distance(meters: float) -> str:
    """Formats a distance in meters as "2.5 km" or "850 m"."""
    if meters >= 1000:
        return f"{meters / 1000:.1f} km"
    return f"{math.floor(meters)} m"


def haversine_distance(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """
    Great-circle distance between two points using the haversine formula.

    Returns:
        Distance in meters
    """
    d_lat = math.radians(lat2 - lat1)
    d_lng = math.radians(lng2 - lng1)

    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lng / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_KM * c * 1000

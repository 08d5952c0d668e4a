"""
AQI classifier module for the Breathable Routes engine.

This module contains the AQIClassifier class which is a pure classifier for
air quality index values. It maps a numeric AQI to a severity tier with a
display label, a display color and a letter grade, following the US EPA
category boundaries.
"""

import math
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class AQILevel:
    """
    A discrete AQI severity tier.

    Attributes:
        level: Human-readable category name (e.g. "Moderate")
        color: Display color as a hex string
        grade: Letter grade, one of A+, A, B, C, D, F
    """

    level: str
    color: str
    grade: str

    def to_dict(self) -> dict[str, str]:
        return {"level": self.level, "color": self.color, "grade": self.grade}


class AQIClassifier:
    """
    Pure classifier mapping AQI values to severity tiers.

    Tiers are listed with their inclusive upper bound; the last tier has no
    upper bound so that readings above 500 still classify as Hazardous.
    """

    TIERS = [
        (50, AQILevel("Good", "#00E400", "A+")),
        (100, AQILevel("Moderate", "#FFFF00", "A")),
        (150, AQILevel("Unhealthy for Sensitive Groups", "#FF7E00", "B")),
        (200, AQILevel("Unhealthy", "#FF0000", "C")),
        (300, AQILevel("Very Unhealthy", "#8F3F97", "D")),
    ]
    HAZARDOUS = AQILevel("Hazardous", "#7E0023", "F")

    def classify(self, aqi: Optional[float]) -> AQILevel:
        """
        Classifies an AQI value into its severity tier.

        Never raises. Missing, NaN and negative values resolve to the lowest
        tier (Good); anything above 300 is Hazardous.

        Args:
            aqi: Air Quality Index value

        Returns:
            The matching AQILevel
        """
        # Floor undefined input at the lowest tier
        if aqi is None or (isinstance(aqi, float) and math.isnan(aqi)):
            return self.TIERS[0][1]

        for upper_bound, level in self.TIERS:
            if aqi <= upper_bound:
                return level

        return self.HAZARDOUS

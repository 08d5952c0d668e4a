"""
Health profile module for the Breathable Routes engine.

Defines the HealthProfile dataclass: the rider's health risk factors and
route preference. Profiles are owned by the account layer and are read-only
to the engine; every field has a defined default so an anonymous rider is
simply `HealthProfile()`.
"""

from dataclasses import dataclass
from typing import Any, Optional


SENSITIVITY_LEVELS = ("normal", "sensitive", "very-sensitive")
COMMUTE_PREFERENCES = ("healthiest", "fastest", "balanced")


@dataclass(frozen=True)
class HealthProfile:
    """
    Represents a rider's health profile.

    Attributes:
        has_respiratory_conditions: Asthma, COPD or similar
        has_heart_conditions: Cardiovascular conditions
        is_pregnant: Pregnancy flag
        age: Age in years, or None if unknown
        sensitivity_level: One of "normal", "sensitive", "very-sensitive"
        preferred_commute: Route preference, one of "healthiest", "fastest",
                           "balanced"
    """

    has_respiratory_conditions: bool = False
    has_heart_conditions: bool = False
    is_pregnant: bool = False
    age: Optional[int] = None
    sensitivity_level: str = "normal"
    preferred_commute: str = "balanced"

    def is_age_at_risk(self) -> bool:
        """Returns True for riders older than 65 or younger than 12."""
        if self.age is None:
            return False
        return self.age > 65 or self.age < 12

    def to_dict(self) -> dict[str, object]:
        return {
            "hasRespiratoryConditions": self.has_respiratory_conditions,
            "hasHeartConditions": self.has_heart_conditions,
            "isPregnant": self.is_pregnant,
            "age": self.age,
            "sensitivityLevel": self.sensitivity_level,
            "preferredCommute": self.preferred_commute,
        }

    @classmethod
    def from_dict(cls, data: Optional[dict[str, Any]]) -> "HealthProfile":
        """
        Builds a profile from a loosely-shaped mapping.

        Accepts camelCase (as stored by the account layer) or snake_case keys.
        Missing or unrecognized values fall back to the field defaults, so
        `None` and `{}` both yield the anonymous default profile.
        """
        if not data:
            return cls()

        def pick(camel: str, snake: str, default: Any = None) -> Any:
            if camel in data:
                return data[camel]
            return data.get(snake, default)

        age = pick("age", "age")
        try:
            age = int(age) if age is not None else None
        except (TypeError, ValueError):
            age = None

        sensitivity = pick("sensitivityLevel", "sensitivity_level", "normal")
        if sensitivity not in SENSITIVITY_LEVELS:
            sensitivity = "normal"

        commute = pick("preferredCommute", "preferred_commute", "balanced")
        if commute not in COMMUTE_PREFERENCES:
            commute = "balanced"

        return cls(
            has_respiratory_conditions=bool(pick("hasRespiratoryConditions", "has_respiratory_conditions", False)),
            has_heart_conditions=bool(pick("hasHeartConditions", "has_heart_conditions", False)),
            is_pregnant=bool(pick("isPregnant", "is_pregnant", False)),
            age=age,
            sensitivity_level=sensitivity,
            preferred_commute=commute,
        )

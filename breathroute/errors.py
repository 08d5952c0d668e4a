"""
Error types for the Breathable Routes engine.

The scoring components themselves never raise on degenerate input (an empty
sample list produces a neutral result). These exceptions cover the cases the
caller has to react to: unusable route geometry, no candidate routes at all,
and an air-quality collaborator that cannot produce any reading.
"""


class RouteAnalysisError(Exception):
    """Base class for all domain errors raised by the engine."""


class InputDataError(RouteAnalysisError, ValueError):
    """Route geometry is malformed or missing legs/steps; nothing can be sampled."""


class NoRoutesFoundError(RouteAnalysisError):
    """The route-geometry collaborator returned no routes or failed outright."""


class AirQualityUnavailableError(RouteAnalysisError):
    """No air-quality reading could be obtained, not even a synthetic fallback."""


class AirQualityProviderError(RouteAnalysisError):
    """
    A single air-quality provider call failed.

    Always recovered inside AirQualityService by trying the next provider or
    the synthetic fallback generator; callers of the service never see it.
    """

"""
Exception hierarchy for BusTracker.

Every exception carries a message that is safe to show to the end user.
"""


class BusTrackerError(Exception):
    """Base class for all BusTracker errors"""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class MapServiceError(BusTrackerError):
    """The map provider could not be reached or rejected the request"""


class RouteNormalizationError(BusTrackerError):
    """A directions response could not be turned into routes"""


class NoRouteFoundError(RouteNormalizationError):
    """The provider returned zero candidate routes"""


class MalformedResponseError(RouteNormalizationError):
    """A candidate route is missing data the normalizer depends on"""


class PolylineDecodeError(BusTrackerError, ValueError):
    """An encoded polyline is truncated or contains invalid characters"""


class LocationResolutionError(BusTrackerError):
    """An origin or destination could not be resolved to coordinates"""

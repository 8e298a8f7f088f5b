# Route service package
from .directions_service import DirectionsService
from .normalizer import (
    TransferPolicy,
    normalize_route,
    normalize_routes,
    normalize_walking_route,
)

__all__ = [
    "DirectionsService",
    "TransferPolicy",
    "normalize_route",
    "normalize_routes",
    "normalize_walking_route",
]

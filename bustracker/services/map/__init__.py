from .api_counter import APICounter, api_counter
from .google_map_service import GoogleMapService
from .map_service import MapService

__all__ = ["APICounter", "api_counter", "GoogleMapService", "MapService"]

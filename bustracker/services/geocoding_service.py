"""
Geocoding and place lookup facade

Provider failures are turned into unsuccessful results with a message that
can be shown to the user directly.
"""
from typing import Dict, Optional

import structlog

from bustracker.config import settings
from bustracker.errors import MapServiceError
from bustracker.models.request import Coordinate
from bustracker.models.response import (
    GeocodeResult,
    PlaceAutocompleteResult,
    PlacePrediction,
)
from bustracker.services.geo.distance import distance_meters
from bustracker.services.map.google_map_service import GoogleMapService
from bustracker.services.map.map_service import MapService

logger = structlog.get_logger(__name__)


class GeocodingService:
    """Geocode, reverse geocode and place search biased towards one city"""

    def __init__(self, map_service: Optional[MapService] = None):
        self.map_service = map_service or GoogleMapService()
        self.city_center = Coordinate(
            lat=settings.city_center_lat, lng=settings.city_center_lng
        )

    async def geocode_address(self, address: str) -> GeocodeResult:
        try:
            data = await self.map_service.geocode(address)
        except MapServiceError as e:
            logger.error("geocode_failed", address=address, error=e.message)
            return GeocodeResult.failure(e.message or "Failed to geocode address")

        results = data.get("results") or []
        if not results:
            return GeocodeResult.failure("Address not found")

        result = results[0]
        coordinates = self._location(result)
        if coordinates is None:
            return GeocodeResult.failure("Address not found")

        self._warn_if_far_from_city(address, coordinates)
        return GeocodeResult.ok(result.get("formatted_address", ""), coordinates)

    async def reverse_geocode(self, lat: float, lng: float) -> GeocodeResult:
        coordinates = Coordinate(lat=lat, lng=lng)
        try:
            data = await self.map_service.reverse_geocode(lat, lng)
        except MapServiceError as e:
            logger.error("reverse_geocode_failed", lat=lat, lng=lng, error=e.message)
            return GeocodeResult.failure(e.message or "Failed to reverse geocode location")

        results = data.get("results") or []
        if not results:
            return GeocodeResult.failure("Location not found")

        return GeocodeResult.ok(results[0].get("formatted_address", ""), coordinates)

    async def get_place_autocomplete(self, text: str) -> PlaceAutocompleteResult:
        try:
            data = await self.map_service.place_autocomplete(text)
        except MapServiceError as e:
            logger.error("place_autocomplete_failed", input=text, error=e.message)
            return PlaceAutocompleteResult(
                success=False,
                error=e.message or "Failed to get place suggestions",
            )

        predictions = []
        for prediction in data.get("predictions") or []:
            formatting = prediction.get("structured_formatting") or {}
            predictions.append(
                PlacePrediction(
                    description=prediction.get("description", ""),
                    place_id=prediction.get("place_id", ""),
                    main_text=formatting.get("main_text", ""),
                    secondary_text=formatting.get("secondary_text", ""),
                )
            )

        return PlaceAutocompleteResult(success=True, predictions=predictions)

    async def get_place_details(self, place_id: str) -> GeocodeResult:
        try:
            data = await self.map_service.place_details(place_id)
        except MapServiceError as e:
            logger.error("place_details_failed", place_id=place_id, error=e.message)
            return GeocodeResult.failure(e.message or "Failed to get place details")

        result = data.get("result") or {}
        coordinates = self._location(result)
        if coordinates is None:
            return GeocodeResult.failure("Place has no location")

        return GeocodeResult.ok(result.get("formatted_address", ""), coordinates)

    @staticmethod
    def _location(result: Dict) -> Optional[Coordinate]:
        location = (result.get("geometry") or {}).get("location")
        if not location or "lat" not in location or "lng" not in location:
            return None
        return Coordinate(lat=location["lat"], lng=location["lng"])

    def _warn_if_far_from_city(self, address: str, coordinates: Coordinate) -> None:
        distance = distance_meters(self.city_center, coordinates)
        if distance > settings.relevance_warning_distance_m:
            logger.warning(
                "geocode_far_from_city",
                address=address,
                city=settings.city_name,
                distance_km=round(distance / 1000, 1),
            )

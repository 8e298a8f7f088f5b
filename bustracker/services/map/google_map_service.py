from typing import Dict, Optional

import httpx
import structlog

from bustracker.config import settings
from bustracker.errors import MapServiceError
from bustracker.models.request import DirectionsRequest
from bustracker.services.map.api_counter import APICounter, api_counter
from bustracker.services.map.map_service import MapService

logger = structlog.get_logger(__name__)

# Provider statuses that carry a usable (possibly empty) payload
_OK_STATUSES = {"OK", "ZERO_RESULTS"}


class GoogleMapService(MapService):
    """Google Maps web services implementation (Geocoding, Places, Directions)"""

    def __init__(
        self,
        api_key: Optional[str] = None,
        *,
        base_url: str = "https://maps.googleapis.com/maps/api",
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
        counter: Optional[APICounter] = None,
    ):
        self.api_key = settings.google_maps_api_key if api_key is None else api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = settings.request_timeout_s if timeout is None else timeout
        self._client = client
        self._counter = counter or api_counter

        self.geocode_url = f"{self.base_url}/geocode/json"
        self.autocomplete_url = f"{self.base_url}/place/autocomplete/json"
        self.details_url = f"{self.base_url}/place/details/json"
        self.directions_url = f"{self.base_url}/directions/json"

    async def geocode(self, address: str) -> Dict:
        """Geocode an address, biased towards the configured country"""
        return await self._get(
            self.geocode_url,
            {
                "address": address,
                "components": f"country:{settings.country_code.upper()}",
                "region": settings.region,
            },
            api_name="Geocoding",
        )

    async def reverse_geocode(self, lat: float, lng: float) -> Dict:
        return await self._get(
            self.geocode_url, {"latlng": f"{lat},{lng}"}, api_name="Geocoding"
        )

    async def place_autocomplete(self, text: str) -> Dict:
        """Place suggestions biased towards the configured city"""
        return await self._get(
            self.autocomplete_url,
            {
                "input": text,
                "location": f"{settings.city_center_lat},{settings.city_center_lng}",
                "radius": str(settings.city_radius_m),
                "components": f"country:{settings.country_code}",
            },
            api_name="Places",
        )

    async def place_details(self, place_id: str) -> Dict:
        return await self._get(
            self.details_url,
            {"place_id": place_id, "fields": "formatted_address,geometry"},
            api_name="Places",
        )

    async def get_directions(self, request: DirectionsRequest) -> Dict:
        """Get candidate routes using the Google Directions API"""
        logger.debug(
            "directions_request",
            mode=request.mode.value,
            origin=request.origin.as_param(),
            destination=request.destination.as_param(),
        )
        return await self._get(
            self.directions_url, request.to_params(), api_name="Directions"
        )

    async def _get(self, url: str, params: Dict, *, api_name: str) -> Dict:
        # Check API call limit
        if not self._counter.can_make_call():
            raise MapServiceError(
                f"API call limit exceeded. Max calls per day: {self._counter.max_calls_per_day}"
            )

        query = dict(params, key=self.api_key)

        try:
            if self._client is not None:
                response = await self._client.get(url, params=query, timeout=self.timeout)
            else:
                async with httpx.AsyncClient() as client:
                    response = await client.get(url, params=query, timeout=self.timeout)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise self._status_error(e.response, api_name) from e
        except httpx.HTTPError as e:
            logger.error("map_request_failed", api=api_name, error=str(e))
            raise MapServiceError("Failed to communicate with Google Maps API") from e

        # Record API call
        self._counter.record_call()

        try:
            data = response.json()
        except ValueError as e:
            raise MapServiceError(f"{api_name} API returned invalid JSON") from e

        status = data.get("status", "OK")
        if status not in _OK_STATUSES:
            message = data.get("error_message") or f"Google Maps API error: {status}"
            logger.error("map_api_error", api=api_name, status=status, message=message)
            raise MapServiceError(message)

        return data

    @staticmethod
    def _status_error(response: httpx.Response, api_name: str) -> MapServiceError:
        error_detail = ""
        try:
            error_data = response.json()
            message = error_data.get("error_message") or (
                error_data.get("error") or {}
            ).get("message", "")
            if message:
                error_detail = f" - {message}"
        except (ValueError, AttributeError):
            pass

        logger.error(
            "map_http_error", api=api_name, status_code=response.status_code
        )
        if response.status_code == 429:
            return MapServiceError("API quota exceeded")
        elif response.status_code == 403:
            return MapServiceError(f"API key invalid or {api_name} API not enabled")
        elif response.status_code == 400:
            return MapServiceError(
                f"Bad request (400): Invalid request parameters{error_detail}"
            )
        else:
            return MapServiceError(
                f"{api_name} API error: {response.status_code}{error_detail}"
            )

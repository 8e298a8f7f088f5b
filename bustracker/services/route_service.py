"""
Main route service
Resolves both ends of a request and delegates to the directions service
"""
from typing import Optional, Union

import structlog

from bustracker.errors import LocationResolutionError
from bustracker.models.request import Coordinate, RouteRequest
from bustracker.models.response import Address, RouteResponse
from bustracker.services.geocoding_service import GeocodingService
from bustracker.services.route.directions_service import DirectionsService

logger = structlog.get_logger(__name__)


class RouteService:
    """
    Main route service - location resolution → directions → response

    Domain errors (LocationResolutionError, NoRouteFoundError,
    MapServiceError) propagate to the caller.
    """

    def __init__(
        self,
        geocoding_service: Optional[GeocodingService] = None,
        directions_service: Optional[DirectionsService] = None,
    ):
        self.geocoding_service = geocoding_service or GeocodingService()
        self.directions_service = directions_service or DirectionsService()

    async def resolve_location(self, location: Union[Coordinate, str]) -> Address:
        """Turn an address string or coordinate into a labelled Address"""
        if isinstance(location, Coordinate):
            return Address(
                formatted=f"{location.lat:.6f}, {location.lng:.6f}",
                coordinates=location,
            )

        result = await self.geocoding_service.geocode_address(location)
        if not result.success or result.address is None:
            raise LocationResolutionError(f"Failed to geocode address: {location}")
        return result.address

    async def get_route(self, request: RouteRequest) -> RouteResponse:
        origin = await self.resolve_location(request.origin)
        destination = await self.resolve_location(request.destination)

        if request.mode == "walking":
            route = await self.directions_service.get_walking_directions(
                origin.coordinates, destination.coordinates
            )
            routes = [route]
        else:
            routes = await self.directions_service.get_transit_directions(
                origin.coordinates,
                destination.coordinates,
                request.departure_time,
            )

        logger.info(
            "route_resolved",
            mode=request.mode,
            origin=origin.formatted,
            destination=destination.formatted,
            routes=len(routes),
        )
        return RouteResponse(
            success=True, routes=routes, origin=origin, destination=destination
        )

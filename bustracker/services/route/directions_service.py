from datetime import datetime
from typing import List, Optional

import structlog

from bustracker.config import settings
from bustracker.models.request import Coordinate, DirectionsRequest
from bustracker.models.response import Route
from bustracker.services.map.google_map_service import GoogleMapService
from bustracker.services.map.map_service import MapService
from bustracker.services.route.normalizer import (
    TransferPolicy,
    normalize_routes,
    normalize_walking_route,
)

logger = structlog.get_logger(__name__)


class DirectionsService:
    """
    Directions service - asks the map provider for routes and normalizes them
    """

    def __init__(
        self,
        map_service: Optional[MapService] = None,
        policy: TransferPolicy = TransferPolicy.PERSIST_ACROSS_WALKS,
    ):
        if map_service:
            self.map_service = map_service
        else:
            self.map_service = GoogleMapService()
        self.policy = policy

    async def get_transit_directions(
        self,
        origin: Coordinate,
        destination: Coordinate,
        departure_time: Optional[datetime] = None,
    ) -> List[Route]:
        """Get transit routes between two points, fastest first

        Raises:
            NoRouteFoundError: If the provider has no transit route
            MapServiceError: If the provider call fails
        """
        request = DirectionsRequest(
            origin=origin,
            destination=destination,
            region=settings.region,
            language=settings.language,
            departure_time=departure_time,
        )
        raw_response = await self.map_service.get_directions(request)
        routes = normalize_routes(raw_response, self.policy)

        logger.info(
            "transit_routes_found",
            count=len(routes),
            fastest_seconds=routes[0].duration_seconds,
        )
        return routes

    async def get_walking_directions(
        self, origin: Coordinate, destination: Coordinate
    ) -> Route:
        """Get the walking route between two points"""
        request = DirectionsRequest.walking(
            origin, destination, region=settings.region, language=settings.language
        )
        raw_response = await self.map_service.get_directions(request)
        return normalize_walking_route(raw_response)

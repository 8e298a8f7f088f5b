from abc import ABC, abstractmethod
from typing import Dict

from bustracker.models.request import DirectionsRequest


class MapService(ABC):
    """Map service abstract interface

    Implementations return the provider's raw JSON payloads; shaping them
    into models is left to the geocoding facade and the route normalizer.
    """

    @abstractmethod
    async def geocode(self, address: str) -> Dict:
        """Forward geocode an address"""
        pass

    @abstractmethod
    async def reverse_geocode(self, lat: float, lng: float) -> Dict:
        """Reverse geocode a coordinate"""
        pass

    @abstractmethod
    async def place_autocomplete(self, text: str) -> Dict:
        """Suggest places for partially typed input"""
        pass

    @abstractmethod
    async def place_details(self, place_id: str) -> Dict:
        """Look up the address and geometry of a place"""
        pass

    @abstractmethod
    async def get_directions(self, request: DirectionsRequest) -> Dict:
        """Get candidate routes

        Args:
            request: Fully specified directions request
        """
        pass

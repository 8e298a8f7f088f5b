"""
Request models for the routing API
Includes the explicit directions request builder sent to the map provider
"""
from datetime import datetime
from enum import Enum
from typing import Dict, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field


class Coordinate(BaseModel):
    """Latitude/longitude pair, validated at construction"""

    model_config = ConfigDict(frozen=True)

    lat: float = Field(ge=-90, le=90)
    lng: float = Field(ge=-180, le=180)

    def as_param(self) -> str:
        return f"{self.lat},{self.lng}"


class TravelMode(str, Enum):
    TRANSIT = "transit"
    WALKING = "walking"


class TransitMode(str, Enum):
    BUS = "bus"
    RAIL = "rail"
    SUBWAY = "subway"
    TRAIN = "train"
    TRAM = "tram"


DEFAULT_TRANSIT_MODES: Tuple[TransitMode, ...] = (
    TransitMode.BUS,
    TransitMode.RAIL,
    TransitMode.SUBWAY,
)


class RouteRequest(BaseModel):
    """Route request between two locations (address or coordinates)"""

    model_config = ConfigDict(populate_by_name=True)

    origin: Union[Coordinate, str] = Field(alias="from")
    destination: Union[Coordinate, str] = Field(alias="to")
    departure_time: Optional[datetime] = Field(default=None, alias="departureTime")
    mode: Literal["transit", "walking"] = "transit"


class DirectionsRequest(BaseModel):
    """Every option the directions endpoint is called with"""

    model_config = ConfigDict(frozen=True)

    origin: Coordinate
    destination: Coordinate
    mode: TravelMode = TravelMode.TRANSIT
    alternatives: bool = True
    region: str = "in"
    language: str = "en"
    transit_modes: Tuple[TransitMode, ...] = DEFAULT_TRANSIT_MODES
    departure_time: Optional[datetime] = None

    @classmethod
    def walking(
        cls, origin: Coordinate, destination: Coordinate, **overrides
    ) -> "DirectionsRequest":
        return cls(
            origin=origin,
            destination=destination,
            mode=TravelMode.WALKING,
            alternatives=False,
            transit_modes=(),
            **overrides,
        )

    def to_params(self) -> Dict[str, str]:
        """Render the provider query parameters (API key excluded)"""
        params = {
            "origin": self.origin.as_param(),
            "destination": self.destination.as_param(),
            "mode": self.mode.value,
            "region": self.region,
            "language": self.language,
        }
        if self.alternatives:
            params["alternatives"] = "true"

        if self.mode == TravelMode.TRANSIT:
            if self.transit_modes:
                params["transit_mode"] = "|".join(m.value for m in self.transit_modes)
            if self.departure_time is not None:
                params["departure_time"] = str(int(self.departure_time.timestamp()))
            else:
                params["departure_time"] = "now"

        return params

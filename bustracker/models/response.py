"""
Response models for the routing API
Routes are built once by the normalizer and never mutated afterwards
"""
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, model_validator

from bustracker.models.request import Coordinate
from bustracker.services.geo.polyline import decode_polyline


class StepType(str, Enum):
    WALK = "walk"
    BUS = "bus"
    METRO = "metro"

    @property
    def is_transit(self) -> bool:
        return self is not StepType.WALK


TRANSIT_FIELDS = (
    "line_label",
    "line_name",
    "departure_stop",
    "arrival_stop",
    "departure_time",
    "arrival_time",
    "num_stops",
)


class RouteStep(BaseModel):
    """One walk segment or one transit ride"""

    model_config = ConfigDict(frozen=True)

    type: StepType
    instruction: str
    distance: str
    duration: str
    distance_meters: float
    duration_seconds: int
    polyline: str = ""

    # Transit only
    line_label: Optional[str] = None  # Short name, falls back to the long name
    line_name: Optional[str] = None
    departure_stop: Optional[str] = None
    arrival_stop: Optional[str] = None
    departure_time: Optional[str] = None
    arrival_time: Optional[str] = None
    num_stops: Optional[int] = None

    @model_validator(mode="after")
    def _check_transit_fields(self) -> "RouteStep":
        present = [name for name in TRANSIT_FIELDS if getattr(self, name) is not None]
        if self.type.is_transit and len(present) != len(TRANSIT_FIELDS):
            missing = sorted(set(TRANSIT_FIELDS) - set(present))
            raise ValueError(f"{self.type.value} step is missing transit fields: {missing}")
        if not self.type.is_transit and present:
            raise ValueError(f"walk step must not carry transit fields: {present}")
        return self

    def path(self) -> List[Coordinate]:
        return decode_polyline(self.polyline)


class Route(BaseModel):
    """A complete origin-to-destination option"""

    model_config = ConfigDict(frozen=True)

    summary: str
    duration: str
    duration_seconds: int
    distance: str
    distance_meters: float
    steps: List[RouteStep]
    overview_polyline: str = ""
    departure_time: Optional[str] = None
    arrival_time: Optional[str] = None
    transfer_count: int = 0
    walking_distance: str = "0m"

    def path(self) -> List[Coordinate]:
        """Decode the overview geometry for map rendering"""
        return decode_polyline(self.overview_polyline)


class Address(BaseModel):
    formatted: str
    coordinates: Coordinate


class GeocodeResult(BaseModel):
    success: bool
    address: Optional[Address] = None
    error: Optional[str] = None

    @model_validator(mode="after")
    def _check_consistency(self) -> "GeocodeResult":
        if self.success != (self.address is not None):
            raise ValueError("address must be set exactly when success is true")
        if self.address is not None and self.error is not None:
            raise ValueError("a result cannot carry both an address and an error")
        return self

    @classmethod
    def ok(cls, formatted: str, coordinates: Coordinate) -> "GeocodeResult":
        return cls(
            success=True, address=Address(formatted=formatted, coordinates=coordinates)
        )

    @classmethod
    def failure(cls, error: str) -> "GeocodeResult":
        return cls(success=False, error=error)


class PlacePrediction(BaseModel):
    description: str
    place_id: str
    main_text: str
    secondary_text: str = ""


class PlaceAutocompleteResult(BaseModel):
    success: bool
    predictions: List[PlacePrediction] = []
    error: Optional[str] = None


class RouteResponse(BaseModel):
    """Route response model"""

    success: bool = True
    routes: List[Route] = []
    origin: Optional[Address] = None
    destination: Optional[Address] = None
    error: Optional[str] = None

from datetime import datetime, timezone

import structlog
from fastapi import FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from bustracker.config import configure_logging, is_api_key_configured, settings
from bustracker.errors import (
    BusTrackerError,
    LocationResolutionError,
    MapServiceError,
    NoRouteFoundError,
)
from bustracker.models.request import RouteRequest
from bustracker.models.response import (
    GeocodeResult,
    PlaceAutocompleteResult,
    RouteResponse,
)
from bustracker.services.geocoding_service import GeocodingService
from bustracker.services.route.directions_service import DirectionsService
from bustracker.services.route_service import RouteService

SERVICE_NAME = "BusTracker API"

configure_logging("bustracker-api")
logger = structlog.get_logger(__name__)

app = FastAPI(
    title=SERVICE_NAME,
    description=f"Address-to-address bus routing for {settings.city_name}",
    version=settings.api_version,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[origin.strip() for origin in settings.cors_origin.split(",")],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

geocoding_service = GeocodingService()
route_service = RouteService(
    geocoding_service=geocoding_service, directions_service=DirectionsService()
)

_ERROR_STATUS = {
    LocationResolutionError: 400,
    NoRouteFoundError: 404,
    MapServiceError: 502,
}


def _failure(status_code: int, error: str, **extra) -> JSONResponse:
    return JSONResponse(
        status_code=status_code, content={"success": False, "error": error, **extra}
    )


def _missing_api_key(**extra) -> JSONResponse:
    return _failure(500, "Google Maps API key is not configured", **extra)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    logger.info("request", method=request.method, path=request.url.path)
    return await call_next(request)


@app.get("/")
async def root():
    return {
        "name": SERVICE_NAME,
        "version": settings.api_version,
        "description": f"Address-to-address bus routing for {settings.city_name}",
        "endpoints": {
            "route": "POST /api/route",
            "geocode": "GET /api/geocode?address=...",
            "reverseGeocode": "GET /api/reverse-geocode?lat=...&lng=...",
            "placeAutocomplete": "GET /api/places/autocomplete?input=...",
            "placeDetails": "GET /api/places/details?placeId=...",
            "health": "GET /api/health",
        },
    }


# main api
@app.post("/api/route", response_model=RouteResponse)
async def get_route(request: RouteRequest):
    """Get transit (default) or walking routes between two locations"""
    if not is_api_key_configured():
        return _missing_api_key(routes=[])

    try:
        return await route_service.get_route(request)
    except BusTrackerError as e:
        status_code = next(
            (code for cls, code in _ERROR_STATUS.items() if isinstance(e, cls)), 500
        )
        logger.warning("route_failed", error=e.message, status_code=status_code)
        return _failure(status_code, e.message, routes=[])
    except Exception as e:
        logger.exception("route_crashed")
        return _failure(500, str(e) or "Failed to get route", routes=[])


@app.get("/api/geocode", response_model=GeocodeResult)
async def geocode(address: str = Query(..., min_length=1)):
    if not is_api_key_configured():
        return _missing_api_key()
    return await geocoding_service.geocode_address(address)


@app.get("/api/reverse-geocode", response_model=GeocodeResult)
async def reverse_geocode(
    lat: float = Query(..., ge=-90, le=90), lng: float = Query(..., ge=-180, le=180)
):
    if not is_api_key_configured():
        return _missing_api_key()
    return await geocoding_service.reverse_geocode(lat, lng)


@app.get("/api/places/autocomplete", response_model=PlaceAutocompleteResult)
async def place_autocomplete(input: str = Query(..., min_length=1)):
    if not is_api_key_configured():
        return _missing_api_key(predictions=[])
    return await geocoding_service.get_place_autocomplete(input)


@app.get("/api/places/details", response_model=GeocodeResult)
async def place_details(place_id: str = Query(..., alias="placeId", min_length=1)):
    if not is_api_key_configured():
        return _missing_api_key()
    return await geocoding_service.get_place_details(place_id)


@app.get("/api/health")
async def health_check():
    """Health check"""
    return {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "service": SERVICE_NAME,
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Google Maps API configuration
    google_maps_api_key: str = ""

    # API configuration
    api_version: str = "1.0.0"
    cors_origin: str = "*"

    # City used to bias geocoding and place search
    city_name: str = "Hyderabad"
    city_center_lat: float = 17.3850
    city_center_lng: float = 78.4867
    city_radius_m: int = 50000

    # Geocode results farther than this from the city center are logged
    relevance_warning_distance_m: float = 100000

    # Provider request defaults
    region: str = "in"
    language: str = "en"
    country_code: str = "in"
    request_timeout_s: float = 10.0

    # API call limits
    max_api_calls_per_day: int = 1000

    # Logging
    log_level: str = "INFO"
    log_format: str = "console"  # json or console

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


def is_api_key_configured(api_key: str | None = None) -> bool:
    """Check if a usable Google Maps API key is configured"""
    key = settings.google_maps_api_key if api_key is None else api_key
    return bool(key) and key != "your_api_key_here"


settings = Settings()

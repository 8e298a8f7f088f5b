from .config import Settings, is_api_key_configured, settings
from .logging_config import configure_logging, get_logger

__all__ = [
    "Settings",
    "settings",
    "is_api_key_configured",
    "configure_logging",
    "get_logger",
]

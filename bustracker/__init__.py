"""BusTracker - address-to-address transit routing backed by Google Maps."""

__version__ = "1.0.0"

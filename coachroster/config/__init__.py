"""Environment-driven settings for the roster API."""

from .settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]

"""Settings package — exposes the cached ``get_settings`` accessor."""

from uiscout.settings.config import Settings, get_settings, parse_hints

__all__ = ["Settings", "get_settings", "parse_hints"]

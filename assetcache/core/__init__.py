"""Core: config, constants, and service composition.

Single place for settings and shared constants.
"""

from assetcache.core.config import Settings, get_settings

__all__ = ["Settings", "get_settings"]

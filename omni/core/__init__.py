"""Core: config, constants, lifespan and exception handlers.

Single place for settings, shared constants and process wiring.
"""

from omni.core.config import Settings, get_settings

__all__ = ["Settings", "get_settings"]

"""Application services."""

from omni.application.services.cache_aside_service import CacheAsideService, CacheOptions

__all__ = ["CacheAsideService", "CacheOptions"]

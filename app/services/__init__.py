"""
Services package for TV Guide Service

This package contains all business logic and service layer components.
"""
from app.services.guide_service import GuideService
from app.services.listings_client import ListingsClient
from app.services.metadata_cache import MetadataCache
from app.services.metadata_service import MetadataService
from app.services.rate_limiter import RateLimiter
from app.services.schedule_service import ScheduleService
from app.services.tmdb_client import TMDbClient

__all__ = [
    'GuideService',
    'ListingsClient',
    'MetadataCache',
    'MetadataService',
    'RateLimiter',
    'ScheduleService',
    'TMDbClient',
]

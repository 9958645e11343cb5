"""
Dependency Injection Configuration

Builds the process-wide service graph (cache, rate limiter, clients and
services) once at startup and exposes it to route handlers through FastAPI
dependencies. Shared state lives on explicit instances, so tests can build
an isolated graph with mock transports and reset it at will.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Annotated

import httpx
from fastapi import Depends, Request

from app.config import CustomSettings
from app.services.guide_service import GuideService
from app.services.listings_client import ListingsClient
from app.services.metadata_cache import MetadataCache
from app.services.metadata_service import MetadataService
from app.services.rate_limiter import RateLimiter
from app.services.schedule_service import ScheduleService
from app.services.tmdb_client import TMDbClient


logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ServiceContainer:
    """All long-lived collaborators of one application instance"""
    settings: CustomSettings
    cache: MetadataCache
    rate_limiter: RateLimiter
    listings: ListingsClient
    tmdb: TMDbClient
    metadata: MetadataService
    schedules: ScheduleService
    guide: GuideService

    async def aclose(self) -> None:
        """Close HTTP clients"""
        await self.listings.aclose()
        await self.tmdb.aclose()
        logger.debug("Service container closed")

    def reset(self) -> None:
        """Drop cached metadata and rate limiter history (mainly for testing)."""
        self.cache.clear()
        self.rate_limiter.reset()
        logger.debug("Service container reset")


def build_services(
    settings: CustomSettings,
    *,
    listings_transport: httpx.AsyncBaseTransport | None = None,
    tmdb_transport: httpx.AsyncBaseTransport | None = None,
) -> ServiceContainer:
    """
    Create the service graph from settings

    Args:
        settings: Application settings
        listings_transport: Optional transport for the listings client (tests)
        tmdb_transport: Optional transport for the TMDb client (tests)

    Returns:
        Fully wired ServiceContainer
    """
    cache = MetadataCache(
        max_entries=settings.tmdb_cache_max_entries,
        ttl_seconds=settings.tmdb_cache_ttl_sec,
    )
    rate_limiter = RateLimiter(settings.tmdb_min_interval_ms / 1000)

    listings = ListingsClient(
        settings.fs42_api_url,
        timeout=settings.http_timeout_sec,
        transport=listings_transport,
    )
    tmdb = TMDbClient(
        settings.tmdb_key,
        rate_limiter,
        base_url=settings.tmdb_api_url,
        timeout=settings.http_timeout_sec,
        transport=tmdb_transport,
    )

    metadata = MetadataService(
        tmdb,
        cache,
        certification_region=settings.tmdb_certification_region,
    )
    schedules = ScheduleService(
        listings,
        metadata,
        max_concurrency=settings.enrichment_concurrency,
        tz_name=settings.guide_timezone,
    )
    guide = GuideService(
        listings,
        schedules,
        metadata,
        ignore_channels=settings.ignored_channels,
        image_base_url=settings.tmdb_image_base_url,
        tz_name=settings.guide_timezone,
    )

    return ServiceContainer(
        settings=settings,
        cache=cache,
        rate_limiter=rate_limiter,
        listings=listings,
        tmdb=tmdb,
        metadata=metadata,
        schedules=schedules,
        guide=guide,
    )


def get_services(request: Request) -> ServiceContainer:
    """FastAPI dependency returning the application's service container"""
    services = getattr(request.app.state, "services", None)
    if services is None:
        raise RuntimeError("Services not initialized. They are created during application startup.")
    return services


Services = Annotated[ServiceContainer, Depends(get_services)]

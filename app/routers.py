from typing import Annotated, Literal
from fastapi import APIRouter, HTTPException, Query, Response
from fastapi.responses import JSONResponse
import logging

from app.dependencies import Services
from app.schemas import GuideResponse
from app.utils.http_operations import UpstreamUnavailable
from app.utils.timezone import DateFormatError, parse_date, parse_local


logger = logging.getLogger(__name__)

main_router = APIRouter()
api_router = APIRouter(prefix="/api")


@main_router.get("/")
async def root() -> dict:
    """Root endpoint with service information"""
    return {
        "service": "TV Guide Service",
        "version": "0.1.0",
        "endpoints": {
            "stations": "/api/stations - Channel identifiers",
            "schedules": "/api/schedules/{net}?start=&end= - Enriched schedule for one channel",
            "summary": "/api/summary - Station summary with channel numbers",
            "tmdb-summary": "/api/tmdb-summary?title= - Metadata for one title",
            "player": "/api/player/channels/{number} - Tune the player",
            "guide": "/api/guide?date=&mode= - Grid layout for one broadcast day",
            "health": "/health - Health check"
        }
    }


@main_router.get("/health")
async def health_check(services: Services) -> dict:
    """Health check endpoint"""
    return {
        "status": "ok",
        "metadata_cache_entries": len(services.cache),
        "metadata_cache_capacity": services.cache.max_entries,
    }


@api_router.get("/stations", response_model=None)
async def get_stations(services: Services) -> list[str] | JSONResponse:
    """Channel identifiers published by the listings backend"""
    try:
        return await services.listings.get_stations()
    except UpstreamUnavailable as e:
        logger.error(f"Stations fetch error: {e}")
        return JSONResponse(status_code=502, content=[])


@api_router.get("/schedules/{net}", response_model=None)
async def get_schedule(
    net: str,
    start: Annotated[str, Query(description="Local datetime, e.g. 2025-10-09T06:00:00")],
    end: Annotated[str, Query(description="Local datetime, e.g. 2025-10-10T07:00:00")],
    services: Services
) -> list[dict] | JSONResponse:
    """
    Schedule blocks for one channel with TMDb identifiers attached

    Off-air blocks that touch are merged before enrichment.
    """
    try:
        window_start = parse_local(start, services.settings.guide_timezone)
        window_end = parse_local(end, services.settings.guide_timezone)
    except DateFormatError as e:
        raise HTTPException(status_code=422, detail=str(e))

    try:
        blocks = await services.schedules.fetch_schedule(net, window_start, window_end)
    except UpstreamUnavailable as e:
        logger.error(f"Schedule fetch error for {net}: {e}")
        return JSONResponse(status_code=502, content=[])

    return [block.to_dict() for block in blocks]


@api_router.get("/summary", response_model=None)
async def get_summary(services: Services) -> dict | JSONResponse:
    """Station summary passthrough"""
    try:
        return await services.listings.get_summary()
    except UpstreamUnavailable as e:
        logger.error(f"Summary fetch error: {e}")
        return JSONResponse(status_code=502, content={"summary_data": []})


@api_router.get("/tmdb-summary")
async def get_tmdb_summary(
    services: Services,
    title: Annotated[str, Query(description="Program title")] = ""
) -> dict:
    """Overview, certification and identifiers for one title"""
    title = title.strip()
    if not title:
        return {"overview": "", "certification": "", "image": ""}

    record = await services.metadata.enrich(title)
    return record.to_dict()


@api_router.get("/player/channels/{number}")
async def zap_to_channel(number: str, services: Services) -> Response:
    """Forward a channel change to the player; only the status code is relayed"""
    try:
        status_code = await services.listings.zap_to_channel(number)
    except UpstreamUnavailable as e:
        logger.error(f"Channel-zap proxy error for {number}: {e}")
        return Response(status_code=502)
    return Response(status_code=status_code)


@api_router.get("/guide", response_model=GuideResponse)
async def get_guide(
    services: Services,
    date: Annotated[str | None, Query(description="Broadcast date YYYY-MM-DD (default: today's broadcast day)")] = None,
    mode: Annotated[Literal["normal", "compact"], Query(description="Display mode")] = "normal"
) -> GuideResponse | JSONResponse:
    """
    Grid layout for one broadcast day (06:00 through 07:00 the next day)

    Args:
        date: Broadcast date; before 06:00 the active day is yesterday
        mode: 'compact' shows on-the-hour labels only
    """
    try:
        day = parse_date(date) if date else None
    except DateFormatError as e:
        raise HTTPException(status_code=422, detail=str(e))

    try:
        return await services.guide.build_guide(day, compact=mode == "compact")
    except UpstreamUnavailable as e:
        logger.error(f"Guide build error: {e}")
        return JSONResponse(status_code=502, content={})

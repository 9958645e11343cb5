"""
TMDb Client

Async access to the metadata service endpoints used by enrichment.
Every request waits on the shared RateLimiter before it is sent.
"""
import logging
from typing import Any

import httpx

from app.services.rate_limiter import RateLimiter
from app.utils.http_operations import UpstreamUnavailable, get_json, redact_params


logger = logging.getLogger(__name__)


class TMDbClient:
    """Rate-limited JSON client for the TMDb v3 API"""

    def __init__(
        self,
        api_key: str,
        rate_limiter: RateLimiter,
        *,
        base_url: str = "https://api.themoviedb.org/3",
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = api_key
        self._rate_limiter = rate_limiter
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _get(self, path: str, **params: Any) -> dict:
        query = {"api_key": self._api_key, **params}
        await self._rate_limiter.acquire()
        logger.debug("TMDb GET %s %s", path, redact_params(query))
        payload = await get_json(self._client, path, query)
        if not isinstance(payload, dict):
            raise UpstreamUnavailable(f"Unexpected payload type from {path}: {type(payload).__name__}")
        return payload

    async def search_tv(self, query: str) -> list[dict]:
        """Search TV series by name"""
        payload = await self._get("/search/tv", query=query)
        return _results(payload)

    async def search_movie(self, query: str, year: int | None = None) -> list[dict]:
        """Search movies by name and optional release year"""
        params: dict[str, Any] = {"query": query}
        if year is not None:
            params["year"] = year
        payload = await self._get("/search/movie", **params)
        return _results(payload)

    async def movie_details(self, movie_id: int) -> dict:
        return await self._get(f"/movie/{movie_id}")

    async def movie_release_dates(self, movie_id: int) -> list[dict]:
        payload = await self._get(f"/movie/{movie_id}/release_dates")
        return _results(payload)

    async def movie_credits(self, movie_id: int) -> dict:
        return await self._get(f"/movie/{movie_id}/credits")


def _results(payload: dict) -> list[dict]:
    results = payload.get("results")
    if not isinstance(results, list):
        return []
    return [entry for entry in results if isinstance(entry, dict)]

from __future__ import annotations

import asyncio
import json
import re

import httpx
import pytest

from app.config import CustomSettings
from app.services.listings_client import ListingsClient
from app.services.metadata_cache import MetadataCache
from app.services.metadata_service import MetadataService
from app.services.rate_limiter import RateLimiter
from app.services.tmdb_client import TMDbClient


LISTINGS_URL = "http://fs42.test"
TMDB_URL = "https://tmdb.test/3"


class FakeClock:
    """Monotonic clock that only moves when something sleeps on it."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds

    async def sleep(self, seconds: float) -> None:
        self.now += seconds
        await asyncio.sleep(0)


class FakeTMDb:
    """In-memory stand-in for the TMDb v3 endpoints used by enrichment."""

    def __init__(self) -> None:
        self.tv: dict[str, list[dict]] = {}
        self.movies: dict[tuple[str, str | None], list[dict]] = {}
        self.details: dict[int, dict] = {}
        self.release_dates: dict[int, list[dict]] = {}
        self.credits: dict[int, dict] = {}
        self.failing: set[str] = set()
        self.calls: list[str] = []
        self.api_keys: list[str | None] = []

    def add_matrix(self) -> None:
        self.movies[("The Matrix", "1999")] = [
            {
                "id": 603,
                "overview": "A hacker   learns the   truth about reality.",
                "backdrop_path": "/matrix-backdrop.jpg",
                "poster_path": "/matrix-poster.jpg",
            }
        ]
        self.details[603] = {"id": 603, "runtime": 136, "vote_average": 8.2}
        self.release_dates[603] = [
            {"iso_3166_1": "GB", "release_dates": [{"certification": "15"}]},
            {"iso_3166_1": "US", "release_dates": [{"certification": ""}, {"certification": "R"}]},
        ]
        self.credits[603] = {
            "crew": [
                {"job": "Producer", "name": "Joel Silver"},
                {"job": "Director", "name": "Lana Wachowski"},
                {"job": "Director", "name": "Lilly Wachowski"},
            ]
        }

    def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path.removeprefix("/3")
        self.calls.append(path)
        self.api_keys.append(request.url.params.get("api_key"))

        if any(path.startswith(prefix) for prefix in self.failing):
            return httpx.Response(500, json={"status_message": "boom"})

        params = request.url.params
        if path == "/search/tv":
            return httpx.Response(200, json={"results": self.tv.get(params.get("query"), [])})
        if path == "/search/movie":
            key = (params.get("query"), params.get("year"))
            return httpx.Response(200, json={"results": self.movies.get(key, [])})

        match = re.fullmatch(r"/movie/(\d+)(/release_dates|/credits)?", path)
        if match:
            movie_id = int(match.group(1))
            if match.group(2) == "/release_dates":
                return httpx.Response(200, json={"results": self.release_dates.get(movie_id, [])})
            if match.group(2) == "/credits":
                return httpx.Response(200, json=self.credits.get(movie_id, {"crew": []}))
            if movie_id in self.details:
                return httpx.Response(200, json=self.details[movie_id])

        return httpx.Response(404, json={"status_message": "not found"})


class FakeListings:
    """In-memory stand-in for the FieldStation42 listings API."""

    def __init__(self) -> None:
        self.stations: list[str] = []
        self.summary: dict = {"summary_data": []}
        self.schedules: dict[str, list[dict]] = {}
        self.zap_status = 200
        self.failing: set[str] = set()
        self.requests: list[httpx.Request] = []
        self.unreachable = False

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if self.unreachable:
            raise httpx.ConnectError("connection refused", request=request)

        if any(path.startswith(prefix) for prefix in self.failing):
            return httpx.Response(503, text="unavailable")

        if path == "/summary/stations":
            return httpx.Response(200, json={"network_names": self.stations})
        if path == "/summary":
            return httpx.Response(200, json=self.summary)
        if path.startswith("/schedules/"):
            net = path.removeprefix("/schedules/")
            return httpx.Response(200, json={"schedule_blocks": self.schedules.get(net, [])})
        if path.startswith("/player/channels/"):
            return httpx.Response(self.zap_status)
        return httpx.Response(404, content=json.dumps({"error": "not found"}))


def block(title: str, start: str, end: str, **extra) -> dict:
    """Raw listings block as published by the backend."""
    return {"title": title, "start_time": start, "end_time": end, **extra}


@pytest.fixture
def test_settings() -> CustomSettings:
    return CustomSettings(
        _env_file=None,
        fs42_api_url=LISTINGS_URL,
        tmdb_key="test-key",
        tmdb_api_url=TMDB_URL,
        tmdb_min_interval_ms=0,
        ignore_chans="weather",
    )


@pytest.fixture
def fake_tmdb() -> FakeTMDb:
    tmdb = FakeTMDb()
    tmdb.tv["Cool Show"] = [{"id": 42, "name": "Cool Show"}, {"id": 99, "name": "Cool Show (UK)"}]
    tmdb.add_matrix()
    return tmdb


@pytest.fixture
def fake_listings() -> FakeListings:
    return FakeListings()


@pytest.fixture
def tmdb_client(fake_tmdb: FakeTMDb) -> TMDbClient:
    return TMDbClient(
        "test-key",
        RateLimiter(0),
        base_url=TMDB_URL,
        transport=httpx.MockTransport(fake_tmdb.handler),
    )


@pytest.fixture
def metadata_service(tmdb_client: TMDbClient) -> MetadataService:
    return MetadataService(tmdb_client, MetadataCache())


@pytest.fixture
def listings_client(fake_listings: FakeListings) -> ListingsClient:
    return ListingsClient(LISTINGS_URL, transport=httpx.MockTransport(fake_listings.handler))

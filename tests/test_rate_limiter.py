from __future__ import annotations

import asyncio

import httpx
import pytest

from app.services.metadata_cache import MetadataCache
from app.services.metadata_service import MetadataService
from app.services.rate_limiter import RateLimiter
from app.services.tmdb_client import TMDbClient
from conftest import TMDB_URL, FakeClock, FakeTMDb


@pytest.mark.asyncio
async def test_first_call_is_granted_immediately():
    clock = FakeClock(start=0.0)
    limiter = RateLimiter(0.25, clock=clock, sleep=clock.sleep)

    assert await limiter.acquire() == 0.0
    assert clock.now == 0.0


@pytest.mark.asyncio
async def test_concurrent_callers_are_spaced_by_min_interval():
    clock = FakeClock(start=0.0)
    limiter = RateLimiter(0.25, clock=clock, sleep=clock.sleep)

    grants = sorted(await asyncio.gather(*(limiter.acquire() for _ in range(6))))

    assert grants == [0.0, 0.25, 0.5, 0.75, 1.0, 1.25]


@pytest.mark.asyncio
async def test_no_wait_once_interval_has_elapsed():
    clock = FakeClock(start=0.0)
    sleeps: list[float] = []

    async def recording_sleep(seconds: float) -> None:
        sleeps.append(seconds)
        await clock.sleep(seconds)

    limiter = RateLimiter(0.25, clock=clock, sleep=recording_sleep)
    await limiter.acquire()
    clock.advance(1.0)
    await limiter.acquire()
    assert sleeps == []

    clock.advance(0.125)
    await limiter.acquire()
    assert sleeps == [0.125]


@pytest.mark.asyncio
async def test_reset_forgets_previous_grant():
    clock = FakeClock(start=0.0)
    limiter = RateLimiter(0.25, clock=clock, sleep=clock.sleep)
    await limiter.acquire()
    limiter.reset()

    assert await limiter.acquire() == 0.0


def test_negative_interval_rejected():
    with pytest.raises(ValueError):
        RateLimiter(-1)


class RecordingLimiter(RateLimiter):
    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.grants: list[float] = []

    async def acquire(self) -> float:
        granted = await super().acquire()
        self.grants.append(granted)
        return granted


@pytest.mark.asyncio
async def test_upstream_calls_never_start_closer_than_interval():
    clock = FakeClock(start=0.0)
    fake = FakeTMDb()
    titles = []
    for index in range(5):
        name = f"Feature {index}"
        fake.movies[(name, "2001")] = [{"id": 100 + index, "overview": name}]
        fake.details[100 + index] = {"runtime": 90, "vote_average": 6.0}
        titles.append(f"{name} (2001)")
    fake.tv["Serial"] = [{"id": 7}]
    titles.append("Serial - S01E01")

    limiter = RecordingLimiter(0.25, clock=clock, sleep=clock.sleep)
    client = TMDbClient("key", limiter, base_url=TMDB_URL, transport=httpx.MockTransport(fake.handler))
    service = MetadataService(client, MetadataCache())

    await asyncio.gather(*(service.enrich(title) for title in titles))
    await client.aclose()

    assert len(fake.calls) == 5 * 4 + 1
    assert len(limiter.grants) == len(fake.calls)
    gaps = [b - a for a, b in zip(limiter.grants, limiter.grants[1:])]
    assert all(gap >= 0.25 for gap in gaps)

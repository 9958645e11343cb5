"""
Schedule Fetching Service

Retrieves one channel's blocks from the listings backend, merges off-air
spans and enriches every block with bounded concurrency.
"""
from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from time import perf_counter
from typing import Any

from app.models import MetadataRecord, Movie, ProgramBlock
from app.services.listings_client import ListingsClient
from app.services.metadata_service import MetadataService
from app.utils.block_merging import merge_off_air_blocks
from app.utils.logging_helpers import log_enrichment_summary
from app.utils.timezone import DateFormatError, parse_local
from app.utils.titles import classify_title, lookup_title


logger = logging.getLogger(__name__)


class ScheduleService:
    """Coordinates fetch, merge and enrichment stages for one channel schedule."""

    def __init__(
        self,
        listings: ListingsClient,
        metadata: MetadataService,
        *,
        max_concurrency: int = 4,
        tz_name: str | None = None,
    ) -> None:
        self.listings = listings
        self.metadata = metadata
        self._concurrency = max(1, max_concurrency)
        self._tz_name = tz_name

    async def fetch_schedule(
        self,
        net: str,
        window_start: datetime | str,
        window_end: datetime | str,
    ) -> list[ProgramBlock]:
        """
        Fetch and enrich one channel's schedule

        Args:
            net: Channel identifier
            window_start: Start of the query window
            window_end: End of the query window

        Returns:
            Merged blocks ordered by start time, with enrichment fields attached

        Raises:
            UpstreamUnavailable: If the listings backend cannot be reached
        """
        started = perf_counter()
        raw_blocks = await self.listings.get_schedule_blocks(net, window_start, window_end)
        blocks = merge_off_air_blocks(self._parse_blocks(net, raw_blocks))

        # Semaphore is per batch; the rate limiter inside the client is process-wide
        semaphore = asyncio.Semaphore(self._concurrency)
        tasks = [
            asyncio.create_task(self._enrich_block(net, block, semaphore))
            for block in blocks
        ]
        enriched = await asyncio.gather(*tasks)

        log_enrichment_summary(logger, net, len(raw_blocks), enriched, perf_counter() - started)
        return list(enriched)

    def _parse_blocks(self, net: str, raw_blocks: list[dict[str, Any]]) -> list[ProgramBlock]:
        blocks = []
        for raw in raw_blocks:
            try:
                blocks.append(parse_block(raw, self._tz_name))
            except (KeyError, DateFormatError) as e:
                logger.warning(f"Skipping malformed block on {net}: {e} ({raw!r:.200})")
        return blocks

    async def _enrich_block(
        self,
        net: str,
        block: ProgramBlock,
        semaphore: asyncio.Semaphore,
    ) -> ProgramBlock:
        title = block.title
        async with semaphore:
            try:
                title = lookup_title(block.title, block.content_title)
                record = await self.metadata.enrich(title)
            except Exception as exc:
                logger.error(
                    "[%s] Enrichment failed for '%s': %s",
                    net,
                    title,
                    exc,
                    exc_info=True,
                )
                record = MetadataRecord()

        return apply_metadata(block, title, record)


def parse_block(raw: dict[str, Any], tz_name: str | None = None) -> ProgramBlock:
    """
    Build a ProgramBlock from a raw listings dictionary

    Raises:
        KeyError: If title or timestamps are missing
        DateFormatError: If a timestamp cannot be parsed
    """
    content = raw.get("content")
    content_title = content.get("title") if isinstance(content, dict) else None
    if not isinstance(content_title, str):
        content_title = None
    extra = {key: value for key, value in raw.items() if key not in ("title", "start_time", "end_time")}

    return ProgramBlock(
        title=str(raw["title"]),
        start_time=parse_local(str(raw["start_time"]), tz_name),
        end_time=parse_local(str(raw["end_time"]), tz_name),
        content_title=content_title or None,
        extra=extra,
    )


def apply_metadata(block: ProgramBlock, title: str, record: MetadataRecord) -> ProgramBlock:
    """Attach identifiers (and, for movies, the rating) to a block"""
    block.tmdb_id = record.tmdb_id
    block.series_id = record.series_id
    if isinstance(classify_title(title), Movie) and record.tmdb_id is not None:
        block.star_rating = record.star_rating
    else:
        block.star_rating = None
    return block

"""
Guide Service

Builds the complete grid document for one broadcast day: channel headers,
time labels and every program block placed on the grid together with its
display fields (title, link, stars, summary, image).
"""
from __future__ import annotations

import asyncio
import logging
import math
from collections.abc import Iterable
from datetime import date, datetime

from app.schemas import GuideChannel, GuideLabel, GuideProgram, GuideResponse, StarRating
from app.models import Channel, Episode, MetadataRecord, Movie, ProgramBlock
from app.services.listings_client import ListingsClient
from app.services.metadata_service import MetadataService
from app.services.schedule_service import ScheduleService
from app.utils.grid_layout import (
    GuideWindow,
    current_label_index,
    is_currently_airing,
    label_visible,
    place_block,
    round_half_up,
    time_labels,
)
from app.utils.http_operations import UpstreamUnavailable
from app.utils.timezone import broadcast_date, format_local, local_now
from app.utils.titles import classify_title, display_title, is_off_air, lookup_title, slugify


logger = logging.getLogger(__name__)

TMDB_WEB_URL = "https://www.themoviedb.org"
MIN_IMAGE_RUNTIME = 100
# Characters of overview per (row span * window minutes)
SUMMARY_CHARS_DIVISOR = 70


class GuideService:
    """Composes listings, enrichment and grid layout into a guide document"""

    def __init__(
        self,
        listings: ListingsClient,
        schedules: ScheduleService,
        metadata: MetadataService,
        *,
        ignore_channels: Iterable[str] = (),
        image_base_url: str = "https://image.tmdb.org/t/p/w185",
        tz_name: str | None = None,
    ) -> None:
        self.listings = listings
        self.schedules = schedules
        self.metadata = metadata
        self.ignore_channels = frozenset(ignore_channels)
        self.image_base_url = image_base_url.rstrip("/")
        self._tz_name = tz_name

    async def build_guide(
        self,
        day: date | None = None,
        *,
        compact: bool = False,
        now: datetime | None = None,
    ) -> GuideResponse:
        """
        Build the guide for one broadcast day

        Args:
            day: Broadcast date (defaults to the active broadcast day)
            compact: Compact display mode (on-the-hour labels only)
            now: Current local time (defaults to wall clock)

        Returns:
            GuideResponse with channels, labels and placed programs

        Raises:
            UpstreamUnavailable: If the station list cannot be retrieved
        """
        now = now or local_now(self._tz_name)
        day = day or broadcast_date(now)
        window = GuideWindow.for_day(day)
        logger.info(
            "Building guide for %s (%s -> %s, mode=%s)",
            day.isoformat(),
            format_local(window.start),
            format_local(window.end),
            "compact" if compact else "normal",
        )

        channels = await self._load_channels(window)

        labels = time_labels(window)
        current_idx = current_label_index(now, window, labels, compact=compact)
        guide_labels = [
            GuideLabel(
                index=label.index,
                text=label.text,
                row=label.row,
                visible=label_visible(label, compact=compact),
                current=label.index == current_idx and label_visible(label, compact=compact),
            )
            for label in labels
        ]

        shown_images: set[str] = set()
        programs: list[GuideProgram] = []
        for index, channel in enumerate(channels):
            for block in channel.blocks:
                program = await self._place_program(channel, index, block, window, now, shown_images)
                if program is not None:
                    programs.append(program)

        return GuideResponse(
            date=day.isoformat(),
            day_name=day.strftime("%A"),
            date_label=f"{day.strftime('%B')} {day.day}".upper(),
            mode="compact" if compact else "normal",
            window_start=format_local(window.start),
            window_end=format_local(window.end),
            slot_minutes=window.slot_minutes,
            total_rows=window.label_slots,
            now=format_local(now),
            current_label_index=current_idx,
            channels=[
                GuideChannel(net=c.net, header=c.net.upper(), number=c.number, column=i + 2)
                for i, c in enumerate(channels)
            ],
            labels=guide_labels,
            programs=programs,
        )

    async def _load_channels(self, window: GuideWindow) -> list[Channel]:
        try:
            numbers = await self.listings.get_channel_numbers()
        except UpstreamUnavailable as e:
            logger.warning(f"Channel numbers unavailable, continuing without them: {e}")
            numbers = {}

        stations = await self.listings.get_stations()
        nets = [net for net in stations if net not in self.ignore_channels]
        if len(nets) != len(stations):
            logger.debug("Ignoring %s channel(s)", len(stations) - len(nets))

        schedules = await asyncio.gather(
            *(self._load_schedule(net, window) for net in nets)
        )
        return [
            Channel(net=net, blocks=blocks, number=numbers.get(net))
            for net, blocks in zip(nets, schedules)
        ]

    async def _load_schedule(self, net: str, window: GuideWindow) -> list[ProgramBlock]:
        try:
            return await self.schedules.fetch_schedule(net, window.start, window.end)
        except UpstreamUnavailable as e:
            logger.error(f"Schedule fetch error for {net}: {e}")
            return []

    async def _place_program(
        self,
        channel: Channel,
        channel_index: int,
        block: ProgramBlock,
        window: GuideWindow,
        now: datetime,
        shown_images: set[str],
    ) -> GuideProgram | None:
        cell = place_block(block.start_time, block.end_time, window, channel_index)
        if cell is None:
            return None

        raw = (block.content_title or block.title or "").strip()
        off_air = is_off_air(block.title) or is_off_air(raw)
        title_key = lookup_title(block.title, block.content_title)
        classified = classify_title(title_key)
        is_movie = isinstance(classified, Movie)

        program = GuideProgram(
            net=channel.net,
            column=cell.column,
            row=cell.row,
            row_span=cell.row_span,
            start_time=format_local(block.start_time),
            end_time=format_local(block.end_time),
            title=raw,
            display_title=("MOVIE: " if is_movie else "") + display_title(title_key),
            is_movie=is_movie,
            is_off_air=off_air,
            current=is_currently_airing(block.start_time, block.end_time, now, window),
            tmdb_id=block.tmdb_id,
            series_id=block.series_id,
            star_rating=block.star_rating,
        )
        if off_air:
            return program

        if isinstance(classified, Episode):
            program.season = classified.season
            program.episode = classified.episode
            if block.series_id:
                program.href = (
                    f"{TMDB_WEB_URL}/tv/{block.series_id}-{slugify(classified.series)}"
                    f"/season/{classified.season}/episode/{classified.episode}"
                )
        elif is_movie:
            program.year = classified.year
            if block.tmdb_id:
                program.href = f"{TMDB_WEB_URL}/movie/{block.tmdb_id}"
            if block.star_rating is not None:
                program.stars = star_rating(block.star_rating)

        if isinstance(classified, (Episode, Movie)):
            record = await self.metadata.enrich(title_key)
            self._apply_record(program, record, cell.row_span, window, title_key, shown_images)

        return program

    def _apply_record(
        self,
        program: GuideProgram,
        record: MetadataRecord,
        row_span: int,
        window: GuideWindow,
        title_key: str,
        shown_images: set[str],
    ) -> None:
        overview = " ".join(record.overview.split())
        program.overview = overview
        program.summary = truncate_summary(overview, summary_limit(row_span, window)) or None
        program.director = record.director or None
        program.certification = record.certification.strip() or None

        if (
            program.is_movie
            and (record.runtime or 0) >= MIN_IMAGE_RUNTIME
            and record.image.strip()
            and title_key not in shown_images
        ):
            program.image_url = f"{self.image_base_url}{record.image}"
            shown_images.add(title_key)


def summary_limit(row_span: int, window: GuideWindow) -> int:
    """Number of overview characters that fit a cell of the given height"""
    return math.floor(row_span * window.total_minutes / SUMMARY_CHARS_DIVISOR)


def truncate_summary(text: str, limit: int) -> str:
    if len(text) > limit:
        return text[:limit] + "…"
    return text


def star_rating(vote_average: float) -> StarRating:
    """Convert a 0-10 vote average to filled/empty stars out of five"""
    filled = min(5, max(0, round_half_up(vote_average / 2)))
    return StarRating(filled=filled, empty=5 - filled)

"""
In-memory models for program blocks, classified titles and metadata records.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass(slots=True, frozen=True)
class Episode:
    """Title of a TV episode, e.g. ``Show - S02E05``."""
    series: str
    season: int
    episode: int


@dataclass(slots=True, frozen=True)
class Movie:
    """Title of a movie, e.g. ``Movie Title (2021)``."""
    name: str
    year: int


@dataclass(slots=True, frozen=True)
class OffAir:
    """Placeholder block with no programming."""


@dataclass(slots=True, frozen=True)
class Unknown:
    """Title that matches no known pattern; never enriched."""


ClassifiedTitle = Episode | Movie | OffAir | Unknown


@dataclass(slots=True)
class MetadataRecord:
    """Normalized metadata for one title string (empty on miss or failure)."""
    overview: str = ""
    certification: str = ""
    image: str = ""
    director: str | None = None
    tmdb_id: int | None = None
    series_id: int | None = None
    runtime: int | None = None
    star_rating: float | None = None

    def to_dict(self) -> dict:
        payload: dict[str, Any] = {
            "overview": self.overview,
            "certification": self.certification,
            "image": self.image,
            "tmdb_id": self.tmdb_id,
            "series_id": self.series_id,
        }
        if self.director is not None:
            payload["director"] = self.director
        if self.runtime is not None:
            payload["runtime"] = self.runtime
        return payload


@dataclass(slots=True)
class ProgramBlock:
    """In-memory representation of one scheduled block on one channel."""
    title: str
    start_time: datetime
    end_time: datetime
    content_title: str | None = None
    tmdb_id: int | None = None
    series_id: int | None = None
    star_rating: float | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        payload = dict(self.extra)
        payload.update(
            title=self.title,
            start_time=self.start_time.isoformat(),
            end_time=self.end_time.isoformat(),
            tmdb_id=self.tmdb_id,
            series_id=self.series_id,
            star_rating=self.star_rating,
        )
        return payload


@dataclass(slots=True)
class Channel:
    """One channel column of the guide."""
    net: str
    blocks: list[ProgramBlock] = field(default_factory=list)
    number: int | None = None


__all__ = [
    "Episode",
    "Movie",
    "OffAir",
    "Unknown",
    "ClassifiedTitle",
    "MetadataRecord",
    "ProgramBlock",
    "Channel",
]

"""
Program title classification

Single source of truth for the title patterns used by enrichment and by the
guide layout: episode markers, movie years and the off-air sentinel.
"""
import re

from app.models import ClassifiedTitle, Episode, Movie, OffAir, Unknown


OFF_AIR_TOKENS = frozenset({"offair"})

# "<series> - S<season>E<episode>" with an optional "-E<n>" range suffix
_EPISODE_RX = re.compile(r"^(.*?)\s[-–]\s*S(\d+?)E(\d+?)(?:[-–]E\d+)?$", re.IGNORECASE)
_MOVIE_RX = re.compile(r"^(.*?)\s*\((\d{4})\)\s*$")
# Everything after the first full SxxExx marker is descriptive text
_EPISODE_CUT_RX = re.compile(r"^(.*S\d{2}E\d{2})", re.IGNORECASE)


def is_off_air(title: str | None) -> bool:
    """Check whether a title is the off-air sentinel (whole string, any case)."""
    return (title or "").strip().lower() in OFF_AIR_TOKENS


def classify_title(title: str | None) -> ClassifiedTitle:
    """
    Classify a raw program title

    Args:
        title: Raw title string as published by the listings backend

    Returns:
        Episode, Movie, OffAir or Unknown
    """
    text = (title or "").strip()
    if not text:
        return Unknown()

    if is_off_air(text):
        return OffAir()

    match = _EPISODE_RX.match(text)
    if match:
        return Episode(
            series=match.group(1).strip(),
            season=int(match.group(2)),
            episode=int(match.group(3)),
        )

    match = _MOVIE_RX.match(text)
    if match:
        return Movie(name=match.group(1).strip(), year=int(match.group(2)))

    return Unknown()


def lookup_title(title: str | None, content_title: str | None = None) -> str:
    """
    Derive the cache/lookup key for a block

    Prefers the content title over the block title and drops any descriptive
    text that follows an SxxExx marker.
    """
    raw = (content_title or title or "").strip()
    match = _EPISODE_CUT_RX.match(raw)
    if match:
        raw = match.group(1)
    return raw


def display_title(title: str | None) -> str:
    """Title without episode marker or year suffix."""
    classified = classify_title(title)
    if isinstance(classified, Episode):
        return classified.series
    if isinstance(classified, Movie):
        return classified.name
    return (title or "").strip()


def slugify(name: str) -> str:
    """URL slug used by TMDb web links."""
    return re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")

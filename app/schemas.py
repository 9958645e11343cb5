from typing import Literal

from pydantic import BaseModel, Field


class StarRating(BaseModel):
    """Five-star rendering of a 0-10 vote average"""
    filled: int = Field(..., ge=0, le=5)
    empty: int = Field(..., ge=0, le=5)


class GuideLabel(BaseModel):
    """Time label in the first grid column"""
    index: int = Field(..., description="Slot index from window start")
    text: str = Field(..., description="HH:MM")
    row: int
    visible: bool
    current: bool


class GuideChannel(BaseModel):
    """Channel header"""
    net: str
    header: str = Field(..., description="Upper-cased channel identifier")
    number: int | None = Field(None, description="Channel number from the station summary")
    column: int


class GuideProgram(BaseModel):
    """One program block placed on the grid"""
    net: str
    column: int
    row: int
    row_span: int
    start_time: str
    end_time: str
    title: str = Field(..., description="Raw title (content title preferred)")
    display_title: str
    is_movie: bool
    is_off_air: bool
    current: bool = Field(..., description="Block is airing now")
    href: str | None = None
    season: int | None = None
    episode: int | None = None
    year: int | None = None
    summary: str | None = Field(None, description="Overview truncated to the cell size")
    overview: str = ""
    director: str | None = None
    certification: str | None = None
    tmdb_id: int | None = None
    series_id: int | None = None
    star_rating: float | None = None
    stars: StarRating | None = None
    image_url: str | None = None


class GuideResponse(BaseModel):
    """Complete grid document for one broadcast day"""
    date: str
    day_name: str
    date_label: str
    mode: Literal["normal", "compact"]
    window_start: str
    window_end: str
    slot_minutes: int
    total_rows: int
    now: str
    current_label_index: int | None
    channels: list[GuideChannel]
    labels: list[GuideLabel]
    programs: list[GuideProgram]

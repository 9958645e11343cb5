"""
Grid layout utilities

Maps timestamped program blocks onto the fixed-resolution guide grid:
one row per time slot (row 1 is reserved for channel headers), one column
per channel (column 1 is reserved for time labels).
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime, timedelta

from app.utils.timezone import broadcast_window


SLOT_MINUTES = 5
LABEL_INTERVAL_MINUTES = 30
FIRST_ROW = 2
FIRST_COLUMN = 2


def round_half_up(value: float) -> int:
    """Round to nearest integer with .5 going up (not banker's rounding)"""
    return math.floor(value + 0.5)


@dataclass(slots=True, frozen=True)
class GuideWindow:
    """Broadcast-day window divided into fixed slots"""
    start: datetime
    end: datetime
    slot_minutes: int = SLOT_MINUTES

    @classmethod
    def for_day(cls, day: date, slot_minutes: int = SLOT_MINUTES) -> GuideWindow:
        start, end = broadcast_window(day)
        return cls(start=start, end=end, slot_minutes=slot_minutes)

    @property
    def total_minutes(self) -> float:
        return (self.end - self.start).total_seconds() / 60

    @property
    def label_slots(self) -> int:
        """Slots carrying time labels: the first 24 hours of the window"""
        return int((self.total_minutes - 60) // self.slot_minutes)

    def minutes_since_start(self, moment: datetime) -> float:
        return (moment - self.start).total_seconds() / 60

    def slot_time(self, index: int) -> datetime:
        return self.start + timedelta(minutes=index * self.slot_minutes)


@dataclass(slots=True, frozen=True)
class GridCell:
    """Placement of one block on the grid"""
    row: int
    row_span: int
    column: int


@dataclass(slots=True, frozen=True)
class TimeLabel:
    index: int
    text: str
    row: int
    on_the_hour: bool


def place_block(
    start: datetime,
    end: datetime,
    window: GuideWindow,
    channel_index: int = 0,
) -> GridCell | None:
    """
    Compute the grid cell of a block

    Blocks starting at or after the window end, or ending at or before the
    window start, are not placed. A block starting before the window is
    clipped to the window start; one running past the window end is
    truncated at the end.

    Args:
        start: Block start (naive local time)
        end: Block end (naive local time, exclusive)
        window: Active broadcast-day window
        channel_index: Zero-based channel position

    Returns:
        GridCell, or None when the block is outside the window
    """
    if start >= window.end or end <= window.start:
        return None

    effective_start = max(start, window.start)
    effective_end = min(end, window.end)

    offset_minutes = window.minutes_since_start(effective_start)
    duration_minutes = (effective_end - effective_start).total_seconds() / 60

    return GridCell(
        row=round_half_up(offset_minutes / window.slot_minutes) + FIRST_ROW,
        row_span=max(1, round_half_up(duration_minutes / window.slot_minutes)),
        column=channel_index + FIRST_COLUMN,
    )


def time_labels(window: GuideWindow) -> list[TimeLabel]:
    """Half-hour labels for every slot whose minute-of-hour is a multiple of 30"""
    labels = []
    for index in range(window.label_slots):
        moment = window.slot_time(index)
        if moment.minute % LABEL_INTERVAL_MINUTES == 0:
            labels.append(
                TimeLabel(
                    index=index,
                    text=moment.strftime("%H:%M"),
                    row=index + FIRST_ROW,
                    on_the_hour=moment.minute == 0,
                )
            )
    return labels


def current_label_index(
    now: datetime,
    window: GuideWindow,
    labels: list[TimeLabel],
    *,
    compact: bool = False,
) -> int | None:
    """
    Index of the label to highlight for the current time

    Compact mode highlights the on-the-hour label for the current hour (None
    when no such label exists); normal mode highlights the half-hour label at
    or before now.
    """
    if compact:
        hour_text = f"{now.hour:02d}:00"
        for label in labels:
            if label.text == hour_text:
                return label.index
        return None

    half_hours = math.floor(window.minutes_since_start(now) / LABEL_INTERVAL_MINUTES)
    return half_hours * (LABEL_INTERVAL_MINUTES // window.slot_minutes)


def label_visible(label: TimeLabel, *, compact: bool = False) -> bool:
    """Compact mode only shows on-the-hour labels"""
    return not compact or label.on_the_hour


def is_currently_airing(
    start: datetime,
    end: datetime,
    now: datetime,
    window: GuideWindow,
) -> bool:
    """True while now lies inside both the block and the window"""
    return window.start <= now < min(end, window.end) and now >= start

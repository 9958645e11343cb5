"""
Block merging utilities

This module coalesces back-to-back off-air blocks of one channel.
"""
import logging
from collections.abc import Sequence
from dataclasses import replace

from app.models import ProgramBlock
from app.utils.titles import is_off_air

logger = logging.getLogger(__name__)


def merge_off_air_blocks(blocks: Sequence[ProgramBlock]) -> list[ProgramBlock]:
    """
    Merge exactly adjacent off-air blocks into single spans.

    Blocks are sorted by start time. An off-air block whose start equals the
    end of the previous output block, itself off-air, extends that block.
    Overlapping blocks and programs pass through unchanged. Input blocks are
    never mutated.

    Args:
        blocks: Blocks of one channel, in any order

    Returns:
        New list of blocks ordered by start time
    """
    merged: list[ProgramBlock] = []

    for block in sorted(blocks, key=lambda b: b.start_time):
        if merged and is_off_air(block.title):
            last = merged[-1]
            if is_off_air(last.title) and block.start_time == last.end_time:
                last.end_time = block.end_time
                continue
        merged.append(replace(block, extra=dict(block.extra)))

    if len(merged) != len(blocks):
        logger.debug("Merged %s blocks into %s", len(blocks), len(merged))

    return merged

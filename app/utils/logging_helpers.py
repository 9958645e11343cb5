"""
Structured logging helpers for consistent log formatting.

Provides utilities for structured, clean logging of startup and batch work.
"""
import logging
from collections.abc import Sequence

from app.models import ProgramBlock


def log_section_start(logger: logging.Logger, section_name: str) -> None:
    """
    Log the start of a processing section.

    Args:
        logger: Logger instance
        section_name: Name of the section being started
    """
    logger.info(f"Starting: {section_name}")


def log_section_end(logger: logging.Logger, section_name: str) -> None:
    """
    Log the end of a processing section.

    Args:
        logger: Logger instance
        section_name: Name of the section being ended
    """
    logger.info(f"Completed: {section_name}")


def log_enrichment_summary(
    logger: logging.Logger,
    net: str,
    raw_count: int,
    blocks: Sequence[ProgramBlock],
    elapsed_seconds: float,
) -> None:
    """
    Log schedule enrichment summary.

    Args:
        logger: Logger instance
        net: Channel identifier
        raw_count: Blocks received from the listings backend
        blocks: Blocks after merge and enrichment
        elapsed_seconds: Wall time of the whole fetch cycle
    """
    matched = sum(1 for block in blocks if block.tmdb_id is not None or block.series_id is not None)
    logger.info(
        "[%s] Schedule ready: %s raw blocks, %s after merge, %s matched (%.2fs)",
        net,
        raw_count,
        len(blocks),
        matched,
        elapsed_seconds,
    )

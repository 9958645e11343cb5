from __future__ import annotations

from datetime import datetime

from app.models import ProgramBlock
from app.utils.block_merging import merge_off_air_blocks


def at(hour: int, minute: int = 0) -> datetime:
    return datetime(2025, 3, 5, hour, minute)


def make(title: str, start: datetime, end: datetime, **extra) -> ProgramBlock:
    return ProgramBlock(title=title, start_time=start, end_time=end, extra=extra)


def spans(blocks: list[ProgramBlock]) -> list[tuple[str, datetime, datetime]]:
    return [(b.title, b.start_time, b.end_time) for b in blocks]


def test_adjacent_off_air_blocks_are_merged():
    blocks = [
        make("offair", at(1), at(2)),
        make("offair", at(2), at(3)),
        make("Show - S01E01", at(3), at(4)),
    ]

    assert spans(merge_off_air_blocks(blocks)) == [
        ("offair", at(1), at(3)),
        ("Show - S01E01", at(3), at(4)),
    ]


def test_chain_of_off_air_blocks_collapses_to_one():
    blocks = [make("offair", at(h), at(h + 1)) for h in range(1, 5)]

    assert spans(merge_off_air_blocks(blocks)) == [("offair", at(1), at(5))]


def test_gap_prevents_merge():
    blocks = [make("offair", at(1), at(2)), make("offair", at(2, 5), at(3))]

    assert len(merge_off_air_blocks(blocks)) == 2


def test_programs_are_never_merged():
    blocks = [make("Show - S01E01", at(1), at(2)), make("Show - S01E01", at(2), at(3))]

    assert spans(merge_off_air_blocks(blocks)) == spans(blocks)


def test_off_air_after_program_starts_new_span():
    blocks = [
        make("Show - S01E01", at(1), at(2)),
        make("offair", at(2), at(3)),
        make("OFFAIR", at(3), at(4)),
    ]

    assert spans(merge_off_air_blocks(blocks)) == [
        ("Show - S01E01", at(1), at(2)),
        ("offair", at(2), at(4)),
    ]


def test_output_is_sorted_by_start():
    blocks = [
        make("Show - S01E02", at(3), at(4)),
        make("offair", at(2), at(3)),
        make("offair", at(1), at(2)),
    ]

    assert spans(merge_off_air_blocks(blocks)) == [
        ("offair", at(1), at(3)),
        ("Show - S01E02", at(3), at(4)),
    ]


def test_overlapping_off_air_blocks_pass_through():
    blocks = [make("offair", at(1), at(3)), make("offair", at(2), at(4))]

    assert spans(merge_off_air_blocks(blocks)) == spans(blocks)


def test_input_blocks_are_not_mutated():
    first = make("offair", at(1), at(2), channel="abc")
    second = make("offair", at(2), at(3))

    merged = merge_off_air_blocks([first, second])
    merged[0].extra["touched"] = True

    assert first.end_time == at(2)
    assert first.extra == {"channel": "abc"}
    assert merged[0] is not first


def test_empty_input():
    assert merge_off_air_blocks([]) == []

from __future__ import annotations

import itertools
import logging
import random

import pytest

from xlmerge.core.merger import RegionLookup, RegionMerger
from xlmerge.core.ranges import Rectangle
from xlmerge.core.sinks import ListSink
from xlmerge.errors import InvalidArgumentError, OutOfRangeError
from xlmerge.models import CellAddress


def _addr(row: int, col: int) -> CellAddress:
    return CellAddress(row=row, col=col)


def _assert_no_overlap(merger: RegionMerger) -> None:
    for a, b in itertools.combinations(merger.regions, 2):
        assert not a.intersects(b), f"{a} overlaps {b}"


def test_merge_left_registers_new_region(merger: RegionMerger) -> None:
    merger.merge_left(_addr(1, 2))
    assert merger.regions == (Rectangle(0, 0, 0, 1),)


def test_merge_left_grows_intersecting_region(merger: RegionMerger) -> None:
    merger.merge_left(_addr(1, 2))
    merger.merge_left(_addr(1, 3))
    assert merger.regions == (Rectangle(0, 0, 0, 2),)


def test_merge_up_chain_grows_vertically(merger: RegionMerger) -> None:
    for row in (2, 3, 4):
        merger.merge_up(_addr(row, 2))
    assert merger.regions == (Rectangle(0, 3, 1, 1),)


def test_merge_up_first_row_raises(merger: RegionMerger) -> None:
    with pytest.raises(OutOfRangeError, match="A1"):
        merger.merge_up(_addr(1, 1))
    assert len(merger) == 0


@pytest.mark.parametrize("col", [1, 2, 7, 300])
def test_merge_up_first_row_always_out_of_range(
    merger: RegionMerger, col: int
) -> None:
    with pytest.raises(OutOfRangeError):
        merger.merge_up(_addr(1, col))


@pytest.mark.parametrize("row", [1, 2, 7, 300])
def test_merge_left_first_column_always_out_of_range(
    merger: RegionMerger, row: int
) -> None:
    with pytest.raises(OutOfRangeError, match="left merge"):
        merger.merge_left(_addr(row, 1))


def test_out_of_range_is_an_index_error(merger: RegionMerger) -> None:
    with pytest.raises(IndexError):
        merger.merge_left(_addr(4, 1))


def test_non_intersecting_regions_stay_separate(merger: RegionMerger) -> None:
    merger.add_merged_region(Rectangle(0, 1, 0, 0))
    merger.add_merged_region(Rectangle(0, 0, 1, 1))
    assert merger.regions == (Rectangle(0, 1, 0, 0), Rectangle(0, 0, 1, 1))
    _assert_no_overlap(merger)


def test_invalid_union_discards_candidate(
    merger: RegionMerger, caplog: pytest.LogCaptureFixture
) -> None:
    merger.add_merged_region(Rectangle(0, 1, 0, 1))
    with caplog.at_level(logging.DEBUG, logger="xlmerge.core.merger"):
        merger.merge_left(_addr(2, 3))
    assert merger.regions == (Rectangle(0, 1, 0, 1),)
    assert any("[invalid_union]" in record.message for record in caplog.records)


def test_remerge_same_candidate_is_idempotent(merger: RegionMerger) -> None:
    merger.merge_left(_addr(1, 2))
    merger.merge_left(_addr(1, 3))
    once = merger.regions
    merger.merge_left(_addr(1, 3))
    assert merger.regions == once


def test_contained_candidate_does_not_shrink_region(merger: RegionMerger) -> None:
    for row in (2, 3, 4):
        merger.merge_up(_addr(row, 1))
    merger.merge_up(_addr(3, 1))
    assert merger.regions == (Rectangle(0, 3, 0, 0),)


def test_growth_folds_in_collinear_neighbour(merger: RegionMerger) -> None:
    merger.add_merged_region(Rectangle(0, 0, 0, 1))
    merger.add_merged_region(Rectangle(0, 0, 3, 4))
    merger.add_merged_region(Rectangle(0, 0, 1, 3))
    assert merger.regions == (Rectangle(0, 0, 0, 4),)


def test_growth_into_incompatible_neighbour_is_discarded(
    merger: RegionMerger,
) -> None:
    merger.add_merged_region(Rectangle(0, 0, 0, 1))
    merger.add_merged_region(Rectangle(0, 1, 3, 3))
    merger.add_merged_region(Rectangle(0, 0, 1, 3))
    assert merger.regions == (Rectangle(0, 0, 0, 1), Rectangle(0, 1, 3, 3))


def test_find_intersected_range_returns_tracked_region(merger: RegionMerger) -> None:
    merger.merge_left(_addr(1, 2))
    merger.merge_left(_addr(1, 3))
    assert merger.find_intersected_range(Rectangle(0, 0, 1, 1)) == Rectangle(
        0, 0, 0, 2
    )


def test_find_intersected_range_returns_query_when_unmatched(
    merger: RegionMerger,
) -> None:
    merger.merge_left(_addr(1, 2))
    query = Rectangle(4, 4, 4, 4)
    assert merger.find_intersected_range(query) is query


@pytest.mark.parametrize(
    "query", [Rectangle(-1, 0, 0, 0), Rectangle(0, 0, -1, 0)]
)
def test_find_intersected_range_rejects_negative(
    merger: RegionMerger, query: Rectangle
) -> None:
    with pytest.raises(InvalidArgumentError):
        merger.find_intersected_range(query)


def test_lookup_reports_found_flag(merger: RegionMerger) -> None:
    merger.add_merged_region(Rectangle(2, 3, 2, 2))
    assert merger.lookup(Rectangle(3, 3, 2, 2)) == RegionLookup(
        rect=Rectangle(2, 3, 2, 2), found=True
    )
    assert merger.lookup(Rectangle(0, 0, 0, 0)) == RegionLookup(
        rect=Rectangle(0, 0, 0, 0), found=False
    )


def test_queries_do_not_mutate(merger: RegionMerger) -> None:
    merger.merge_up(_addr(2, 1))
    merger.merge_left(_addr(5, 5))
    before = merger.regions
    for _ in range(3):
        merger.find_intersected_range(Rectangle(0, 0, 0, 0))
        merger.find_intersected_range(Rectangle(4, 4, 3, 4))
        merger.lookup(Rectangle(7, 7, 7, 7))
    assert merger.regions == before


def test_apply_hands_regions_in_order_then_clears(merger: RegionMerger) -> None:
    merger.add_merged_region(Rectangle(0, 1, 0, 0))
    merger.add_merged_region(Rectangle(0, 0, 1, 1))
    merger.merge_left(_addr(4, 3))
    sink = ListSink()
    merger.apply(sink)
    assert sink.regions == [
        Rectangle(0, 1, 0, 0),
        Rectangle(0, 0, 1, 1),
        Rectangle(3, 3, 1, 2),
    ]
    assert len(merger) == 0
    merger.apply(None)
    assert len(merger) == 0


def test_apply_without_sink_keeps_state(merger: RegionMerger) -> None:
    merger.merge_left(_addr(1, 2))
    merger.apply(None)
    assert merger.regions == (Rectangle(0, 0, 0, 1),)
    assert merger


def test_mergers_are_independent() -> None:
    first = RegionMerger()
    second = RegionMerger()
    first.merge_left(_addr(1, 2))
    assert len(second) == 0


@pytest.mark.parametrize("seed", range(5))
def test_random_sequences_keep_regions_disjoint_and_growing(seed: int) -> None:
    rng = random.Random(seed)
    merger = RegionMerger()
    for _ in range(200):
        before = merger.regions
        op = rng.choice(["up", "left", "range"])
        row, col = rng.randint(1, 8), rng.randint(1, 8)
        try:
            if op == "up":
                merger.merge_up(_addr(row, col))
            elif op == "left":
                merger.merge_left(_addr(row, col))
            else:
                merger.add_merged_region(
                    Rectangle(
                        row - 1,
                        row - 1 + rng.randint(0, 2),
                        col - 1,
                        col - 1 + rng.randint(0, 2),
                    )
                )
        except OutOfRangeError:
            assert row == 1 or col == 1
        _assert_no_overlap(merger)
        for old in before:
            assert any(region.contains(old) for region in merger.regions)


def test_candidate_reaching_past_origin_grows_to_bounding_box(
    merger: RegionMerger,
) -> None:
    merger.add_merged_region(Rectangle(0, 0, 1, 2))
    merger.merge_left(_addr(1, 2))
    assert merger.regions == (Rectangle(0, 0, 0, 2),)


def test_fold_removes_neighbour_and_keeps_order(merger: RegionMerger) -> None:
    merger.add_merged_region(Rectangle(5, 6, 5, 5))
    merger.add_merged_region(Rectangle(0, 0, 0, 1))
    merger.add_merged_region(Rectangle(0, 0, 3, 4))
    merger.add_merged_region(Rectangle(9, 9, 0, 2))
    merger.add_merged_region(Rectangle(0, 0, 1, 3))
    assert merger.regions == (
        Rectangle(5, 6, 5, 5),
        Rectangle(0, 0, 0, 4),
        Rectangle(9, 9, 0, 2),
    )


def test_collision_discard_is_logged(
    merger: RegionMerger, caplog: pytest.LogCaptureFixture
) -> None:
    merger.add_merged_region(Rectangle(0, 0, 0, 1))
    merger.add_merged_region(Rectangle(0, 1, 3, 3))
    with caplog.at_level(logging.DEBUG, logger="xlmerge.core.merger"):
        merger.add_merged_region(Rectangle(0, 0, 1, 3))
    assert any(
        "[invalid_union]" in record.message and "would overlap" in record.message
        for record in caplog.records
    )


def test_clear_drops_regions_without_sink(merger: RegionMerger) -> None:
    merger.merge_left(_addr(2, 2))
    merger.clear()
    assert merger.regions == ()
    assert not merger

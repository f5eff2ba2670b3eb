"""Openpyxl worksheet sink for merged regions."""

from __future__ import annotations

from dataclasses import dataclass
import logging

from openpyxl.worksheet.worksheet import Worksheet

from ...errors import SkipReason
from ..logging_utils import log_skip
from ..ranges import Rectangle

logger = logging.getLogger(__name__)


def read_merged_regions(worksheet: Worksheet) -> list[Rectangle]:
    """Return the worksheet's existing merged ranges as zero-based rectangles.

    Args:
        worksheet: openpyxl worksheet to inspect.

    Returns:
        Rectangles sorted by position (top-to-bottom, then left-to-right).
    """
    regions = [
        Rectangle(
            first_row=rng.min_row - 1,
            last_row=rng.max_row - 1,
            first_col=rng.min_col - 1,
            last_col=rng.max_col - 1,
        )
        for rng in worksheet.merged_cells.ranges
    ]
    regions.sort(key=lambda r: (r.first_row, r.first_col))
    return regions


@dataclass(frozen=True)
class OpenpyxlSheetSink:
    """Merge cells on an openpyxl worksheet.

    Attributes:
        worksheet: Target worksheet, modified in place.
        replace_overlapping: Unmerge existing sheet ranges that overlap an
            incoming region before merging it. When False, overlapping
            regions are skipped instead.
    """

    worksheet: Worksheet
    replace_overlapping: bool = True

    def add_merged_region(self, rect: Rectangle) -> None:
        """Merge ``rect`` on the worksheet.

        Args:
            rect: Zero-based region to merge.
        """
        if rect.is_single_cell():
            log_skip(
                logger,
                SkipReason.SINGLE_CELL,
                f"{rect} covers a single cell; nothing to merge.",
                level=logging.DEBUG,
            )
            return
        overlapping: list[str] = []
        for existing in read_merged_regions(self.worksheet):
            if existing == rect:
                log_skip(
                    logger,
                    SkipReason.ALREADY_MERGED,
                    f"{rect} is already merged on '{self.worksheet.title}'.",
                    level=logging.DEBUG,
                )
                return
            if existing.intersects(rect):
                overlapping.append(existing.format_as_string())
        if overlapping and not self.replace_overlapping:
            log_skip(
                logger,
                SkipReason.OVERLAPPING_MERGE,
                f"{rect} overlaps merged range(s) {', '.join(overlapping)} "
                f"on '{self.worksheet.title}'; skipped.",
            )
            return
        for ref in overlapping:
            log_skip(
                logger,
                SkipReason.OVERLAPPING_MERGE,
                f"Unmerging {ref} on '{self.worksheet.title}' to make room for {rect}.",
            )
            self.worksheet.unmerge_cells(ref)
        self.worksheet.merge_cells(
            start_row=rect.first_row + 1,
            start_column=rect.first_col + 1,
            end_row=rect.last_row + 1,
            end_column=rect.last_col + 1,
        )

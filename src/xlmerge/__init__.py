from __future__ import annotations

from pathlib import Path

from .core.merger import RegionLookup, RegionMerger
from .core.ranges import Rectangle
from .core.sinks import ListSink, MergeSink, OpenpyxlSheetSink, read_merged_regions
from .engine import MergeEngine, MergeOptions, OutputOptions, run_plan
from .errors import (
    ConfigError,
    InvalidArgumentError,
    MissingDependencyError,
    OutOfRangeError,
    OutputError,
    PlanError,
    SerializationError,
    SkipReason,
    XlmergeError,
)
from .io import load_merge_plan, parse_merge_plan, serialize_regions
from .models import CellAddress, MergedRegion, MergePlan, RegionsReport

__all__ = [
    "merge_workbook",
    "RegionMerger",
    "RegionLookup",
    "Rectangle",
    "CellAddress",
    "MergeSink",
    "ListSink",
    "OpenpyxlSheetSink",
    "read_merged_regions",
    "MergeEngine",
    "MergeOptions",
    "OutputOptions",
    "run_plan",
    "MergePlan",
    "MergedRegion",
    "RegionsReport",
    "load_merge_plan",
    "parse_merge_plan",
    "serialize_regions",
    "XlmergeError",
    "OutOfRangeError",
    "InvalidArgumentError",
    "ConfigError",
    "PlanError",
    "SerializationError",
    "MissingDependencyError",
    "OutputError",
    "SkipReason",
]


def merge_workbook(
    file_path: str | Path,
    plan_path: str | Path,
    output_path: str | Path | None = None,
    *,
    sheet: str | None = None,
    skip_out_of_range: bool = False,
) -> list[Rectangle]:
    """
    Apply a merge plan file to a workbook and save it.

    Args:
        file_path: Path to .xlsx/.xlsm.
        plan_path: Path to a JSON/YAML merge plan.
        output_path: Destination workbook; None overwrites ``file_path``.
        sheet: Target sheet; overrides the plan's sheet.
        skip_out_of_range: Skip up/left merges on the first row/column.

    Returns:
        Regions merged on the sheet, in tracking order.

    Raises:
        OutOfRangeError: If a boundary merge is requested and not skipped.
        PlanError: If the plan is invalid.
        ConfigError: If the workbook or sheet cannot be found.

    Examples:
        >>> from xlmerge import merge_workbook
        >>> regions = merge_workbook("report.xlsx", "plan.json", "merged.xlsx")  # doctest: +SKIP
        >>> [r.format_as_string() for r in regions]  # doctest: +SKIP
        ['A1:C1', 'A2:A4']
    """
    engine = MergeEngine(
        options=MergeOptions(sheet=sheet, skip_out_of_range=skip_out_of_range)
    )
    return engine.process(file_path, plan_path, output_path)

from __future__ import annotations

from dataclasses import dataclass
import logging
from pathlib import Path
from typing import Literal
from zipfile import BadZipFile

from openpyxl.utils.exceptions import InvalidFileException
from openpyxl.worksheet.worksheet import Worksheet
from pydantic import BaseModel, ConfigDict, Field

from .core.logging_utils import log_skip
from .core.merger import RegionMerger
from .core.ranges import Rectangle
from .core.sinks import ListSink, OpenpyxlSheetSink
from .core.workbook import openpyxl_workbook, resolve_worksheet
from .errors import (
    ConfigError,
    InvalidArgumentError,
    OutOfRangeError,
    PlanError,
    SkipReason,
    XlmergeError,
)
from .io import (
    build_regions_report,
    load_merge_plan,
    save_regions,
    save_workbook,
    serialize_regions,
)
from .models import (
    CellAddress,
    MergeLeftRequest,
    MergePlan,
    MergeRangeRequest,
    MergeRequest,
    MergeUpRequest,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MergeOptions:
    """
    Merge-time options for MergeEngine.

    Attributes:
        sheet: Target sheet name. Overrides the plan's sheet; None falls back
               to the plan's sheet, then the active sheet.
        skip_out_of_range: Skip up/left requests on the first row/column
               (logged) instead of raising OutOfRangeError.
        replace_overlapping: Unmerge sheet ranges that overlap a new region
               before merging it; when False such regions are skipped.
    """

    sheet: str | None = None
    skip_out_of_range: bool = False
    replace_overlapping: bool = True


class OutputOptions(BaseModel):
    """Output-time options for MergeEngine."""

    model_config = ConfigDict(extra="forbid")

    fmt: Literal["json", "yaml", "yml"] = Field(
        default="json", description="Regions report format."
    )
    pretty: bool = Field(default=False, description="Pretty-print JSON output.")
    indent: int | None = Field(
        default=None,
        description="Indent width for JSON (defaults to 2 when pretty is True).",
    )
    report_path: Path | None = Field(
        default=None, description="Optional path to write the regions report."
    )


def run_plan(
    merger: RegionMerger,
    plan: MergePlan,
    *,
    skip_out_of_range: bool = False,
) -> None:
    """Feed every request of ``plan`` to ``merger`` in order.

    Args:
        merger: Merger for the current generation pass.
        plan: Validated merge plan.
        skip_out_of_range: Log and skip boundary requests instead of raising.

    Raises:
        OutOfRangeError: On a boundary request when not skipping.
        PlanError: If a cell or range reference cannot be parsed.
    """
    for request in plan.requests:
        try:
            _dispatch(merger, request)
        except OutOfRangeError as exc:
            if not skip_out_of_range:
                raise
            log_skip(logger, SkipReason.OUT_OF_RANGE, str(exc))


def _parse_reference(request: MergeRequest) -> CellAddress | Rectangle:
    try:
        if isinstance(request, MergeRangeRequest):
            return Rectangle.from_a1(request.range)
        return CellAddress.from_a1(request.cell)
    except InvalidArgumentError as e:
        raise PlanError(f"Invalid reference in merge plan: {e}") from e


def _dispatch(merger: RegionMerger, request: MergeRequest) -> None:
    target = _parse_reference(request)
    match request, target:
        case MergeUpRequest(), CellAddress():
            merger.merge_up(target)
        case MergeLeftRequest(), CellAddress():
            merger.merge_left(target)
        case MergeRangeRequest(), Rectangle():
            merger.add_merged_region(target)


class MergeEngine:
    """
    Applies merge plans to worksheets.

    Every call runs its own generation pass with a fresh RegionMerger, so
    engines can be shared freely.

    Main methods:
        plan_regions(plan) -> list[Rectangle]
            - Dry run; no workbook involved
        merge_sheet(worksheet, plan) -> list[Rectangle]
            - Merges regions on an already opened openpyxl worksheet
        process(input_path, plan_path, output_path=None) -> list[Rectangle]
            - One-shot load -> merge -> save (CLI equivalent)
    """

    def __init__(
        self,
        options: MergeOptions | None = None,
        output: OutputOptions | None = None,
    ) -> None:
        self.options = options or MergeOptions()
        self.output = output or OutputOptions()

    def _resolve_sheet(self, plan: MergePlan) -> str | None:
        return self.options.sheet if self.options.sheet is not None else plan.sheet

    def plan_regions(self, plan: MergePlan) -> list[Rectangle]:
        """Resolve a plan into merged regions without touching a workbook."""
        merger = RegionMerger()
        run_plan(merger, plan, skip_out_of_range=self.options.skip_out_of_range)
        sink = ListSink()
        merger.apply(sink)
        return sink.regions

    def merge_sheet(self, worksheet: Worksheet, plan: MergePlan) -> list[Rectangle]:
        """Apply ``plan`` to ``worksheet`` in place.

        Returns:
            Regions handed to the worksheet, in tracking order.
        """
        merger = RegionMerger()
        run_plan(merger, plan, skip_out_of_range=self.options.skip_out_of_range)
        regions = list(merger.regions)
        merger.apply(
            OpenpyxlSheetSink(
                worksheet, replace_overlapping=self.options.replace_overlapping
            )
        )
        logger.info(
            "Merged %d region(s) on sheet '%s'.", len(regions), worksheet.title
        )
        return regions

    def serialize(self, regions: list[Rectangle], *, sheet: str | None = None) -> str:
        report = build_regions_report(regions, sheet=sheet)
        return serialize_regions(
            report,
            fmt=self.output.fmt,
            pretty=self.output.pretty,
            indent=self.output.indent,
        )

    def process(
        self,
        input_path: str | Path,
        plan_path: str | Path,
        output_path: str | Path | None = None,
    ) -> list[Rectangle]:
        """Load a workbook, apply a plan file to it, and save the result.

        Args:
            input_path: Source workbook (.xlsx/.xlsm).
            plan_path: Merge plan (.json/.yaml/.yml).
            output_path: Destination workbook; None overwrites ``input_path``.

        Returns:
            Regions merged on the target sheet.

        Raises:
            ConfigError: If the input workbook is missing or the sheet is unknown.
            OutputError: If saving the workbook or the report fails.
        """
        source = Path(input_path)
        if not source.exists():
            raise ConfigError(f"File not found: {source}")
        plan = load_merge_plan(Path(plan_path))
        destination = Path(output_path) if output_path is not None else source
        try:
            with openpyxl_workbook(source) as wb:
                worksheet = resolve_worksheet(wb, self._resolve_sheet(plan))
                regions = self.merge_sheet(worksheet, plan)
                sheet_title = worksheet.title
                save_workbook(wb, destination)
        except XlmergeError:
            raise
        except (OSError, KeyError, ValueError, BadZipFile, InvalidFileException) as exc:
            raise ConfigError(f"Failed to process workbook '{source}': {exc}") from exc
        if self.output.report_path is not None:
            save_regions(
                build_regions_report(regions, sheet=sheet_title),
                self.output.report_path,
                fmt=self.output.fmt,
                pretty=self.output.pretty,
                indent=self.output.indent,
            )
        return regions

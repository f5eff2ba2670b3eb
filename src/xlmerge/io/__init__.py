from __future__ import annotations

from collections.abc import Iterable
import logging
from pathlib import Path
from typing import Literal

from openpyxl.workbook.workbook import Workbook
from pydantic import ValidationError

from ..core.ranges import Rectangle
from ..errors import OutputError, PlanError, SerializationError
from ..models import MergedRegion, MergePlan, RegionsReport
from ..models.types import JsonStructure
from .serialize import (
    _FORMAT_HINTS,
    _ensure_format_hint,
    _parse_text_from_hint,
    _serialize_payload_from_hint,
)

logger = logging.getLogger(__name__)

RegionsFormat = Literal["json", "yaml", "yml"]


def parse_merge_plan(data: JsonStructure) -> MergePlan:
    """Validate a parsed document as a MergePlan.

    A bare list is accepted as the request list of an unnamed-sheet plan.

    Raises:
        PlanError: If validation fails.
    """
    if isinstance(data, list):
        data = {"requests": data}
    try:
        return MergePlan.model_validate(data)
    except ValidationError as e:
        raise PlanError(f"Invalid merge plan: {e}") from e


def load_merge_plan(path: Path, fmt: str | None = None) -> MergePlan:
    """Read a merge plan from a JSON or YAML file.

    Args:
        path: Plan file path; its extension picks the format unless ``fmt`` is given.
        fmt: Optional explicit format (json/yaml/yml).

    Returns:
        Validated MergePlan.

    Raises:
        SerializationError: If the format is unsupported or the text is malformed.
        PlanError: If the document is not a valid plan or cannot be read.
    """
    format_hint = _ensure_format_hint(
        fmt or path.suffix or "json",
        allowed=_FORMAT_HINTS,
        error_type=SerializationError,
        error_message="Unsupported plan format '{fmt}'. Allowed: json, yaml, yml.",
    )
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise PlanError(f"Failed to read merge plan '{path}': {e}") from e
    return parse_merge_plan(_parse_text_from_hint(text, format_hint))


def build_regions_report(
    regions: Iterable[Rectangle], *, sheet: str | None = None
) -> RegionsReport:
    return RegionsReport(
        sheet=sheet,
        regions=[MergedRegion.from_rectangle(rect) for rect in regions],
    )


def serialize_regions(
    report: RegionsReport,
    *,
    fmt: RegionsFormat = "json",
    pretty: bool = False,
    indent: int | None = None,
) -> str:
    """Serialize a regions report to JSON or YAML text.

    Raises:
        SerializationError: If the format is unsupported.
    """
    format_hint = _ensure_format_hint(
        fmt,
        allowed=_FORMAT_HINTS,
        error_type=SerializationError,
        error_message="Unsupported export format '{fmt}'. Allowed: json, yaml, yml.",
    )
    payload = report.model_dump(exclude_none=True)
    return _serialize_payload_from_hint(
        payload, format_hint, pretty=pretty, indent=indent
    )


def save_regions(
    report: RegionsReport,
    path: Path,
    *,
    fmt: RegionsFormat | None = None,
    pretty: bool = False,
    indent: int | None = None,
) -> None:
    """Write a regions report; the format defaults to the file extension."""
    format_hint = fmt or path.suffix.lstrip(".") or "json"
    text = serialize_regions(
        report,
        fmt=format_hint,  # type: ignore[arg-type]
        pretty=pretty,
        indent=indent,
    )
    try:
        path.write_text(text, encoding="utf-8")
    except OSError as e:
        raise OutputError(f"Failed to write regions report '{path}': {e}") from e


def save_workbook(workbook: Workbook, path: Path) -> None:
    """Save a workbook, surfacing IO failures as OutputError."""
    try:
        workbook.save(path)
    except OSError as e:
        raise OutputError(f"Failed to save workbook '{path}': {e}") from e
    logger.debug("Saved workbook to %s.", path)


__all__ = [
    "RegionsFormat",
    "build_regions_report",
    "load_merge_plan",
    "parse_merge_plan",
    "save_regions",
    "save_workbook",
    "serialize_regions",
]

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
import logging
from pathlib import Path
import warnings

from openpyxl import load_workbook
from openpyxl.workbook.workbook import Workbook
from openpyxl.worksheet.worksheet import Worksheet

from ..errors import ConfigError

logger = logging.getLogger(__name__)

__all__ = ["openpyxl_workbook", "resolve_worksheet"]


@contextmanager
def openpyxl_workbook(file_path: Path) -> Iterator[Workbook]:
    """
    Open an openpyxl Workbook for editing and ensure it is closed on exit.

    Parameters:
        file_path (Path): Path to the workbook file.

    Yields:
        openpyxl.workbook.workbook.Workbook: The opened workbook instance.
    """
    with warnings.catch_warnings():
        warnings.filterwarnings(
            "ignore",
            message="Unknown extension is not supported and will be removed",
            category=UserWarning,
            module="openpyxl",
        )
        warnings.filterwarnings(
            "ignore",
            message="Conditional Formatting extension is not supported and will be removed",
            category=UserWarning,
            module="openpyxl",
        )
        wb = load_workbook(
            file_path,
            keep_vba=file_path.suffix.lower() == ".xlsm",
        )
    try:
        yield wb
    finally:
        try:
            wb.close()
        except Exception as exc:
            logger.debug("Failed to close openpyxl workbook. (%r)", exc)


def resolve_worksheet(workbook: Workbook, sheet: str | None) -> Worksheet:
    """Pick the target worksheet by name, or the active sheet when unnamed.

    Raises:
        ConfigError: If the named sheet does not exist.
    """
    if sheet is None:
        active = workbook.active
        if not isinstance(active, Worksheet):
            raise ConfigError("Workbook has no active worksheet.")
        return active
    if sheet not in workbook.sheetnames:
        raise ConfigError(
            f"Sheet '{sheet}' not found. Available: {', '.join(workbook.sheetnames)}"
        )
    target = workbook[sheet]
    if not isinstance(target, Worksheet):
        raise ConfigError(f"Sheet '{sheet}' is not a worksheet.")
    return target

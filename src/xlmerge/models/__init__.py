from __future__ import annotations

from typing import Annotated, Literal

from openpyxl.utils import get_column_letter
from openpyxl.utils.cell import column_index_from_string, coordinate_from_string
from openpyxl.utils.exceptions import CellCoordinatesException
from pydantic import BaseModel, ConfigDict, Field

from ..core.ranges import Rectangle
from ..errors import InvalidArgumentError


class CellAddress(BaseModel):
    """A single cell address as seen by callers walking the grid."""

    model_config = ConfigDict(frozen=True)

    row: int = Field(ge=1, description="Row index (1-based).")
    col: int = Field(ge=1, description="Column index (1-based).")

    @classmethod
    def from_a1(cls, ref: str) -> CellAddress:
        """Parse an A1-style cell reference (e.g. "B3" or "$B$3").

        Raises:
            InvalidArgumentError: If the reference is not a single cell.
        """
        try:
            letters, row = coordinate_from_string(ref.strip().replace("$", ""))
            col = column_index_from_string(letters)
        except (CellCoordinatesException, TypeError, ValueError) as exc:
            raise InvalidArgumentError(f"Invalid cell reference: {ref!r}") from exc
        return cls(row=row, col=col)

    @property
    def address(self) -> str:
        """A1-style reference of this cell."""
        return f"{get_column_letter(self.col)}{self.row}"

    def __str__(self) -> str:
        return self.address


class MergeUpRequest(BaseModel):
    """Merge a cell with the cell directly above it."""

    model_config = ConfigDict(extra="forbid")

    op: Literal["up"] = "up"
    cell: str = Field(description="A1 reference of the lower cell.")


class MergeLeftRequest(BaseModel):
    """Merge a cell with the cell directly to its left."""

    model_config = ConfigDict(extra="forbid")

    op: Literal["left"] = "left"
    cell: str = Field(description="A1 reference of the right-hand cell.")


class MergeRangeRequest(BaseModel):
    """Merge an explicit rectangular range."""

    model_config = ConfigDict(extra="forbid")

    op: Literal["range"] = "range"
    range: str = Field(description="A1 range reference, e.g. 'A1:C1'.")


MergeRequest = Annotated[
    MergeUpRequest | MergeLeftRequest | MergeRangeRequest,
    Field(discriminator="op"),
]


class MergePlan(BaseModel):
    """Ordered merge requests for one generation pass over a sheet."""

    model_config = ConfigDict(extra="forbid")

    sheet: str | None = Field(
        default=None, description="Target sheet name; None uses the active sheet."
    )
    requests: list[MergeRequest] = Field(
        default_factory=list, description="Merge requests, applied in order."
    )


class MergedRegion(BaseModel):
    """Serializable view of a merged region (1-based rows and columns)."""

    ref: str = Field(description="A1 range reference.")
    r1: int = Field(description="Start row (1-based).")
    c1: int = Field(description="Start column (1-based).")
    r2: int = Field(description="End row (1-based, inclusive).")
    c2: int = Field(description="End column (1-based, inclusive).")

    @classmethod
    def from_rectangle(cls, rect: Rectangle) -> MergedRegion:
        return cls(
            ref=rect.format_as_string(),
            r1=rect.first_row + 1,
            c1=rect.first_col + 1,
            r2=rect.last_row + 1,
            c2=rect.last_col + 1,
        )


class RegionsReport(BaseModel):
    """Regions produced by a generation pass."""

    sheet: str | None = Field(default=None, description="Sheet the regions target.")
    regions: list[MergedRegion] = Field(
        default_factory=list, description="Merged regions in tracking order."
    )


__all__ = [
    "CellAddress",
    "MergeUpRequest",
    "MergeLeftRequest",
    "MergeRangeRequest",
    "MergeRequest",
    "MergePlan",
    "MergedRegion",
    "RegionsReport",
]

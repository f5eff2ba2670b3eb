from __future__ import annotations

from dataclasses import dataclass

from openpyxl.utils import get_column_letter, range_boundaries

from ..errors import InvalidArgumentError


@dataclass(frozen=True)
class Rectangle:
    """Inclusive, axis-aligned cell rectangle.

    Attributes:
        first_row: Top row (zero-based).
        last_row: Bottom row (zero-based, inclusive).
        first_col: Left column (zero-based).
        last_col: Right column (zero-based, inclusive).
    """

    first_row: int
    last_row: int
    first_col: int
    last_col: int

    def __post_init__(self) -> None:
        if self.first_row > self.last_row or self.first_col > self.last_col:
            raise InvalidArgumentError(
                "Rectangle bounds are inverted: "
                f"rows {self.first_row}..{self.last_row}, "
                f"cols {self.first_col}..{self.last_col}"
            )

    @classmethod
    def from_a1(cls, range_str: str) -> Rectangle:
        """Parse an Excel range string into a zero-based rectangle.

        Args:
            range_str: Excel range string (e.g., "Sheet1!A1:B2" or "C3").

        Returns:
            Rectangle in zero-based coordinates.

        Raises:
            InvalidArgumentError: If the string is empty or not a bounded range.
        """
        cleaned = range_str.strip()
        if "!" in cleaned:
            cleaned = cleaned.split("!", 1)[1]
        cleaned = cleaned.replace("$", "")
        if not cleaned:
            raise InvalidArgumentError(f"Empty range reference: {range_str!r}")
        try:
            min_col, min_row, max_col, max_row = range_boundaries(cleaned)
        except (TypeError, ValueError) as exc:
            raise InvalidArgumentError(
                f"Invalid range reference: {range_str!r}"
            ) from exc
        if None in (min_col, min_row, max_col, max_row):
            raise InvalidArgumentError(
                f"Whole-row or whole-column ranges are not supported: {range_str!r}"
            )
        return cls(
            first_row=min_row - 1,
            last_row=max_row - 1,
            first_col=min_col - 1,
            last_col=max_col - 1,
        )

    @property
    def height(self) -> int:
        return self.last_row - self.first_row + 1

    @property
    def width(self) -> int:
        return self.last_col - self.first_col + 1

    @property
    def area(self) -> int:
        return self.height * self.width

    def is_single_cell(self) -> bool:
        return self.area == 1

    def intersects(self, other: Rectangle) -> bool:
        """Return True when both the row ranges and the column ranges overlap."""
        return (
            self.first_row <= other.last_row
            and other.first_row <= self.last_row
            and self.first_col <= other.last_col
            and other.first_col <= self.last_col
        )

    def contains(self, other: Rectangle) -> bool:
        return (
            self.first_row <= other.first_row
            and other.last_row <= self.last_row
            and self.first_col <= other.first_col
            and other.last_col <= self.last_col
        )

    def is_valid_union(self, candidate: Rectangle) -> bool:
        """Check whether ``candidate`` can extend this rectangle as a straight strip.

        Args:
            candidate: Rectangle that would be concatenated onto this one.

        Returns:
            True if both share exactly the same row range or exactly the same
            column range; otherwise False.
        """
        same_rows = (
            candidate.first_row == self.first_row
            and candidate.last_row == self.last_row
        )
        same_cols = (
            candidate.first_col == self.first_col
            and candidate.last_col == self.last_col
        )
        return same_rows or same_cols

    def grown_by(self, candidate: Rectangle) -> Rectangle:
        """Return the bounding rectangle of this rectangle and ``candidate``.

        For a candidate adjacent to or overlapping the far edge this keeps the
        origin and takes the far corner from the candidate. A candidate that is
        already contained leaves the bounds unchanged.
        """
        return Rectangle(
            first_row=min(self.first_row, candidate.first_row),
            last_row=max(self.last_row, candidate.last_row),
            first_col=min(self.first_col, candidate.first_col),
            last_col=max(self.last_col, candidate.last_col),
        )

    def format_as_string(self) -> str:
        """Format as an A1 reference ("A1:B3", or "C4" for a single cell).

        Raises:
            InvalidArgumentError: If the rectangle has negative coordinates.
        """
        if self.first_row < 0 or self.first_col < 0:
            raise InvalidArgumentError(
                f"Cannot format negative coordinates as A1: {self!r}"
            )
        start = f"{get_column_letter(self.first_col + 1)}{self.first_row + 1}"
        if self.is_single_cell():
            return start
        end = f"{get_column_letter(self.last_col + 1)}{self.last_row + 1}"
        return f"{start}:{end}"

    def __str__(self) -> str:
        if self.first_row < 0 or self.first_col < 0:
            return (
                f"R{self.first_row}C{self.first_col}:R{self.last_row}C{self.last_col}"
            )
        return self.format_as_string()

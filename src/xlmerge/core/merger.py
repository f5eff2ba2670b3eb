"""Incremental tracking of merged cell regions for one generation pass."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
import logging

from ..errors import InvalidArgumentError, OutOfRangeError, SkipReason
from ..models import CellAddress
from .logging_utils import log_skip
from .ranges import Rectangle
from .sinks.base import MergeSink

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RegionLookup:
    """Result of resolving which tracked region a rectangle belongs to.

    Attributes:
        rect: Intersecting tracked rectangle, or the queried rectangle itself.
        found: True when ``rect`` is a tracked region.
    """

    rect: Rectangle
    found: bool


class RegionMerger:
    """Container for merged regions collected while a sheet is generated.

    Cells are merged one request at a time (with the cell above, with the cell
    to the left, or as an explicit range). A request that touches a tracked
    region grows that region when the result is still a straight strip;
    otherwise it starts a new region. Tracked regions never overlap.

    One instance covers one generation pass: ``apply`` hands the regions to a
    sink and resets the container.
    """

    def __init__(self) -> None:
        self._regions: list[Rectangle] = []

    def __len__(self) -> int:
        return len(self._regions)

    def __iter__(self) -> Iterator[Rectangle]:
        return iter(tuple(self._regions))

    def __bool__(self) -> bool:
        return bool(self._regions)

    @property
    def regions(self) -> tuple[Rectangle, ...]:
        """Snapshot of tracked regions in tracking order."""
        return tuple(self._regions)

    def merge_up(self, address: CellAddress) -> None:
        """Merge a cell with the cell directly above it.

        Args:
            address: Address of the current (lower) cell.

        Raises:
            OutOfRangeError: If the cell is on the first row.
        """
        if address.row == 1:
            raise OutOfRangeError(
                f"Cannot merge cell with address {address.address}. "
                "It is out of range for up merge"
            )
        res = Rectangle(
            first_row=address.row - 2,
            last_row=address.row - 1,
            first_col=address.col - 1,
            last_col=address.col - 1,
        )
        self._merge_or_register(res)

    def merge_left(self, address: CellAddress) -> None:
        """Merge a cell with the cell directly to its left.

        Args:
            address: Address of the current (right-hand) cell.

        Raises:
            OutOfRangeError: If the cell is in the first column.
        """
        if address.col == 1:
            raise OutOfRangeError(
                f"Cannot merge cell with address {address.address}. "
                "It is out of range for left merge"
            )
        res = Rectangle(
            first_row=address.row - 1,
            last_row=address.row - 1,
            first_col=address.col - 2,
            last_col=address.col - 1,
        )
        self._merge_or_register(res)

    def add_merged_region(self, res: Rectangle) -> None:
        """Add an explicit merged region (static or iteration merge)."""
        self._merge_or_register(res)

    def find_intersected_range(self, res: Rectangle) -> Rectangle:
        """Find the tracked region a rectangle belongs to.

        Args:
            res: Range of the current merge candidate.

        Returns:
            The intersecting tracked region if any; otherwise ``res`` unchanged.

        Raises:
            InvalidArgumentError: If ``res`` starts at a negative row or column.
        """
        return self.lookup(res).rect

    def lookup(self, res: Rectangle) -> RegionLookup:
        """Like ``find_intersected_range`` but also reports whether a match exists."""
        if res.first_col < 0 or res.first_row < 0:
            raise InvalidArgumentError(
                "Cannot merge first row with upper cell or first column "
                f"with left cell: {res}"
            )
        index = self._find_intersected_index(res)
        if index is None:
            return RegionLookup(rect=res, found=False)
        return RegionLookup(rect=self._regions[index], found=True)

    def apply(self, sink: MergeSink | None) -> None:
        """Hand every tracked region to ``sink`` in order, then reset.

        A ``None`` sink is a no-op and leaves the tracked regions in place.
        """
        if sink is None:
            return
        logger.debug("Applying %d merged region(s).", len(self._regions))
        for region in self._regions:
            sink.add_merged_region(region)
        self.clear()

    def clear(self) -> None:
        """Drop all tracked regions."""
        self._regions.clear()

    def _merge_or_register(self, res: Rectangle) -> None:
        index = self._find_intersected_index(res)
        if index is None:
            logger.debug("Registering merged region %s.", res)
            self._regions.append(res)
            return
        self._merge_intersected(index, res)

    def _merge_intersected(self, index: int, res: Rectangle) -> None:
        existing = self._regions[index]
        if not existing.is_valid_union(res):
            # Overlapping but not a straight strip: the tracked region wins.
            log_skip(
                logger,
                SkipReason.INVALID_UNION,
                f"Candidate {res} intersects {existing} but does not extend it "
                "as a single row or column strip; candidate discarded.",
                level=logging.DEBUG,
            )
            return
        grown = existing.grown_by(res)
        absorbed: set[int] = set()
        changed = True
        while changed:
            changed = False
            for other_index, other in enumerate(self._regions):
                if other_index == index or other_index in absorbed:
                    continue
                if not other.intersects(grown):
                    continue
                if not grown.is_valid_union(other):
                    log_skip(
                        logger,
                        SkipReason.INVALID_UNION,
                        f"Growing {existing} by {res} would overlap {other}; "
                        "candidate discarded.",
                        level=logging.DEBUG,
                    )
                    return
                # Same strip: the tracked neighbour is folded into this region.
                grown = grown.grown_by(other)
                absorbed.add(other_index)
                changed = True
        logger.debug("Growing merged region %s to %s.", existing, grown)
        self._regions[index] = grown
        for other_index in sorted(absorbed, reverse=True):
            del self._regions[other_index]

    def _find_intersected_index(self, res: Rectangle) -> int | None:
        for index, region in enumerate(self._regions):
            if region.intersects(res):
                return index
        return None

from __future__ import annotations

from typing import Protocol

from ..ranges import Rectangle


class MergeSink(Protocol):
    """Protocol for output surfaces that accept merged regions."""

    def add_merged_region(self, rect: Rectangle) -> None:
        """Merge the cells covered by ``rect`` on the output surface."""


class ListSink:
    """Sink that records merged regions in the order they are applied."""

    def __init__(self) -> None:
        self.regions: list[Rectangle] = []

    def add_merged_region(self, rect: Rectangle) -> None:
        self.regions.append(rect)

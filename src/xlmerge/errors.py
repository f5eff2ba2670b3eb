from __future__ import annotations

"""Project-specific exception hierarchy for xlmerge."""

from enum import Enum


class XlmergeError(Exception):
    """Base exception for xlmerge."""


class OutOfRangeError(XlmergeError, IndexError):
    """Raised when a neighbour merge is requested on the first row or column."""


class InvalidArgumentError(XlmergeError, ValueError):
    """Raised when a rectangle or cell reference is malformed or negative."""


class ConfigError(XlmergeError):
    """Raised when user-provided configuration or parameters are invalid."""


class PlanError(XlmergeError, ValueError):
    """Raised when a merge plan cannot be parsed or validated."""


class SerializationError(XlmergeError):
    """Raised when serialization fails or an unsupported format is requested."""


class MissingDependencyError(XlmergeError):
    """Raised when an optional dependency required for the requested operation is missing."""


class OutputError(XlmergeError):
    """Raised when writing outputs to disk or streams fails."""


class SkipReason(str, Enum):
    """Reason codes attached to skipped or discarded merge work."""

    INVALID_UNION = "invalid_union"
    OUT_OF_RANGE = "out_of_range"
    ALREADY_MERGED = "already_merged"
    OVERLAPPING_MERGE = "overlapping_merge"
    SINGLE_CELL = "single_cell"

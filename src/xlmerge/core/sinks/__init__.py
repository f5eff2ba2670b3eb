from __future__ import annotations

from .base import ListSink, MergeSink
from .openpyxl_sink import OpenpyxlSheetSink, read_merged_regions

__all__ = ["ListSink", "MergeSink", "OpenpyxlSheetSink", "read_merged_regions"]

from __future__ import annotations

import pytest

from xlmerge.core.merger import RegionMerger


@pytest.fixture
def merger() -> RegionMerger:
    """Fresh merger for one generation pass."""
    return RegionMerger()

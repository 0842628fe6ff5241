"""
Deterministic rules-engine test helpers.

Provides utilities to test gameplay without depending on the wall clock
or on where a particular seed happens to put its mines.
"""

from tests.helpers.engine_helpers import (
    FakeClock,
    find_coord,
    find_hint_tile,
    find_zero_hint_tile,
    mined_neighbors,
)

__all__ = [
    "FakeClock",
    "find_coord",
    "find_hint_tile",
    "find_zero_hint_tile",
    "mined_neighbors",
]

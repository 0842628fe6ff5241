"""
Pytest configuration for timesweeper tests.
"""

import sys
from pathlib import Path

import pytest

# Add the project root to the Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from world.timesweeper.config import reset_config
from world.timesweeper.core import WorldConfig
from world.timesweeper.rules import RulesEngine
from world.timesweeper.storage import TileStore
from tests.helpers import FakeClock


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture(autouse=True)
def _default_config():
    """Every test starts and ends on the default configuration."""
    reset_config()
    yield
    reset_config()


@pytest.fixture
def world():
    return WorldConfig(
        seed="test123",
        chunk_size=16,
        mines_per_chunk=10,
        name="Test World",
        format_version="1.0",
    )


@pytest.fixture
def storage():
    return TileStore()


@pytest.fixture
def fixed_clock():
    """Controllable clock, starting at 1_700_000_000.0."""
    return FakeClock()


@pytest.fixture
def engine(world, storage, fixed_clock):
    return RulesEngine(world, storage, clock=fixed_clock)

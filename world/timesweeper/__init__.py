"""
Timesweeper - deterministic core of an infinite minesweeper world.

Chunks of mines are generated on demand from a world seed; only tiles a
player has touched are stored.
"""

from world.timesweeper.core import (
    Coord,
    ChunkCoord,
    TileFlag,
    TileState,
    TileEvent,
    TileEventType,
    WorldConfig,
)
from world.timesweeper.rng import (
    SeededRng,
    combine_seed,
    generate_chunk_bitmap,
    pack_bitmap,
    unpack_bitmap,
)
from world.timesweeper.generator import generate_chunk
from world.timesweeper.storage import TileStore
from world.timesweeper.rules import RulesEngine, OpenResult
from world.timesweeper.validation import (
    TimesweeperError,
    InvalidArgumentError,
    MissingFieldError,
    ParseError,
    ConfigError,
)

__all__ = [
    # Core data structures
    "Coord",
    "ChunkCoord",
    "TileFlag",
    "TileState",
    "TileEvent",
    "TileEventType",
    "WorldConfig",
    # Sampler
    "SeededRng",
    "combine_seed",
    "generate_chunk_bitmap",
    "pack_bitmap",
    "unpack_bitmap",
    # Generation, storage, rules
    "generate_chunk",
    "TileStore",
    "RulesEngine",
    "OpenResult",
    # Errors
    "TimesweeperError",
    "InvalidArgumentError",
    "MissingFieldError",
    "ParseError",
    "ConfigError",
]

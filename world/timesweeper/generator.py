"""
Chunk generation: mines and hint numbers for one chunk.

Hints near a chunk edge count mines in the adjacent chunks, so the field
has no visible seams. Each neighbor bitmap is regenerated from its own
coordinates; nothing is shared between chunks and nothing is cached here.
"""

import logging
from typing import Dict, Tuple

from world.timesweeper.core import Coord, WorldConfig
from world.timesweeper.rng import generate_chunk_bitmap, stable_string_hash
from world.timesweeper.validation import validate_world

logger = logging.getLogger(__name__)

ChunkData = Dict[Coord, int]

MINE = -1


def world_seed_for(world: WorldConfig) -> int:
    """Numeric seed for a world's seed string."""
    return stable_string_hash(world.seed)


def chunk_origin(world: WorldConfig, chunk_x: int, chunk_y: int) -> Coord:
    """Absolute coordinate of a chunk's top-left tile."""
    return Coord(chunk_x * world.chunk_size, chunk_y * world.chunk_size)


def _neighborhood_bitmaps(
    world: WorldConfig,
    chunk_x: int,
    chunk_y: int
) -> Dict[Tuple[int, int], bytearray]:
    """Bitmaps for the chunk and its 8 neighbors, keyed by (dx, dy)."""
    seed = world_seed_for(world)
    return {
        (dx, dy): generate_chunk_bitmap(
            world_seed=seed,
            chunk_x=chunk_x + dx,
            chunk_y=chunk_y + dy,
            chunk_size=world.chunk_size,
            mines_per_chunk=world.mines_per_chunk,
        )
        for dy in (-1, 0, 1)
        for dx in (-1, 0, 1)
    }


def generate_chunk(world: WorldConfig, chunk_x: int, chunk_y: int) -> ChunkData:
    """
    Generate mines and hints for every tile in a chunk.

    Args:
        world: World the chunk belongs to
        chunk_x: Chunk column
        chunk_y: Chunk row

    Returns:
        Dict of absolute Coord -> -1 for a mine, else adjacent mine count
    """
    validate_world(world)
    size = world.chunk_size
    bitmaps = _neighborhood_bitmaps(world, chunk_x, chunk_y)
    center = bitmaps[(0, 0)]

    def is_mine_at(lx: int, ly: int) -> bool:
        # Local offsets may spill one tile into a neighbor chunk
        dx, wrapped_x = divmod(lx, size)
        dy, wrapped_y = divmod(ly, size)
        return bitmaps[(dx, dy)][wrapped_y * size + wrapped_x] == 1

    origin = chunk_origin(world, chunk_x, chunk_y)
    result: ChunkData = {}
    for ly in range(size):
        for lx in range(size):
            coord = Coord(origin.x + lx, origin.y + ly)
            if center[ly * size + lx] == 1:
                result[coord] = MINE
                continue
            count = 0
            for ny in (ly - 1, ly, ly + 1):
                for nx in (lx - 1, lx, lx + 1):
                    if (nx != lx or ny != ly) and is_mine_at(nx, ny):
                        count += 1
            result[coord] = count

    logger.debug(
        "Generated chunk (%d, %d) for world %r: %d mines",
        chunk_x, chunk_y, world.name, count_mines(result),
    )
    return result


def count_mines(chunk_data: ChunkData) -> int:
    """Number of mine tiles in generated chunk data."""
    return sum(1 for value in chunk_data.values() if value == MINE)

"""
Sparse tile store.

Only tiles that differ from the default (closed, not exploded, never
opened) are kept; every other coordinate reads as default.
"""

from pathlib import Path
from typing import Dict, Iterator, Optional, Tuple, Union

from world.timesweeper.core import (
    DEFAULT_TILE_STATE,
    Coord,
    TileEvent,
    TileState,
    WorldConfig,
)
from world.timesweeper.events import apply_tile_event
from world.timesweeper.persistence import load_store_state, save_store_state
from world.timesweeper.validation import require_positive


class TileStore:
    """
    Mutable map from Coord to TileState.

    Shared with the presentation layer for reads; all mutations go through
    the rules engine, which calls apply_event().
    """

    def __init__(self):
        self._tiles: Dict[Coord, TileState] = {}
        self._world: Optional[WorldConfig] = None

    def get(self, coord: Coord) -> TileState:
        """Tile state at coord; default when never modified."""
        return self._tiles.get(coord, DEFAULT_TILE_STATE)

    def apply_event(self, event: TileEvent) -> TileState:
        """
        Apply an event to its tile and store the result.

        A tile that ends up back at default (flag then unflag) is dropped
        from the map.

        Returns:
            The tile's new state
        """
        new_state = apply_tile_event(self.get(event.coord), event)
        if new_state.is_default:
            self._tiles.pop(event.coord, None)
        else:
            self._tiles[event.coord] = new_state
        return new_state

    def snapshot(self) -> Dict[Coord, TileState]:
        """Copy of every stored tile. TileState is frozen, so a shallow copy suffices."""
        return dict(self._tiles)

    def items(self) -> Iterator[Tuple[Coord, TileState]]:
        return iter(list(self._tiles.items()))

    def iter_chunk(
        self,
        chunk_size: int,
        chunk_x: int,
        chunk_y: int
    ) -> Iterator[Tuple[Coord, TileState]]:
        """
        Yield stored tiles inside one chunk.

        Walks whichever is smaller: the chunk's tiles or the stored map.
        """
        require_positive(chunk_size, "chunk_size")
        if len(self._tiles) <= chunk_size * chunk_size:
            for coord, state in self._tiles.items():
                cc = coord.to_chunk(chunk_size)
                if cc.chunk_x == chunk_x and cc.chunk_y == chunk_y:
                    yield coord, state
            return
        start_x = chunk_x * chunk_size
        start_y = chunk_y * chunk_size
        for ly in range(chunk_size):
            for lx in range(chunk_size):
                coord = Coord(start_x + lx, start_y + ly)
                state = self._tiles.get(coord)
                if state is not None:
                    yield coord, state

    def clear(self) -> None:
        """Remove every tile and forget the loaded world."""
        self._tiles.clear()
        self._world = None

    @property
    def count(self) -> int:
        """Number of non-default tiles."""
        return len(self._tiles)

    @property
    def world(self) -> Optional[WorldConfig]:
        """World read by the most recent load(), if any."""
        return self._world

    def __len__(self) -> int:
        return len(self._tiles)

    def __contains__(self, coord: Coord) -> bool:
        return coord in self._tiles

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    def save(self, path: Union[str, Path], world: Optional[WorldConfig] = None) -> None:
        """Write a point-in-time snapshot of the store to path."""
        save_store_state(path, self.snapshot(), world)

    def load(self, path: Union[str, Path]) -> Optional[WorldConfig]:
        """
        Replace the store's contents with a save file.

        A missing file is a fresh world: the store is emptied and None is
        returned. On a parse error the store is left as it was.

        Returns:
            The world embedded in the file, or None

        Raises:
            ParseError: If the file is corrupt
            MissingFieldError: If the embedded world lacks a field
        """
        loaded = load_store_state(path)
        self.clear()
        if loaded is None:
            return None
        world, tiles = loaded
        self._tiles.update(tiles)
        self._world = world
        return world

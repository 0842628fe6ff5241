"""
Rules engine: opening, flagging, chording and explosion lockout.

Per-tile state machine (flag state + exploded):
    closed  --flag-->  flagged      flagged --flag--> closed
    closed  --open-->  open (safe)  or open + exploded (mine)
    open    --open-->  chord
    flagged --open-->  no-op
    open    --flag-->  no-op

No gameplay operation raises: the grid is unbounded, so every coordinate
is valid, and illegal actions are silently ignored.
"""

import logging
import time
from collections import deque
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional, Set, Tuple, Union

from world.timesweeper.chunk_cache import ChunkCache
from world.timesweeper.config import RulesConfig, get_config
from world.timesweeper.core import Coord, TileEvent, TileEventType, TileFlag, WorldConfig
from world.timesweeper.generator import MINE, ChunkData, generate_chunk
from world.timesweeper.storage import TileStore
from world.timesweeper.validation import validate_world

logger = logging.getLogger(__name__)

Clock = Callable[[], float]
ExplosionCallback = Callable[[Coord, float], None]


@dataclass
class OpenResult:
    """What a single open_tile call changed."""
    opened: List[Coord] = field(default_factory=list)
    exploded: List[Coord] = field(default_factory=list)
    chorded: bool = False
    capped: bool = False

    @property
    def changed(self) -> bool:
        return bool(self.opened or self.exploded)


class RulesEngine:
    """
    Gameplay operations over a shared TileStore.

    Owns the chunk cache. Time comes from the injected clock (POSIX
    seconds), so lockout can be tested without waiting.
    """

    def __init__(
        self,
        world: WorldConfig,
        storage: TileStore,
        clock: Clock = time.time,
        on_explosion: Optional[ExplosionCallback] = None,
        config: Optional[RulesConfig] = None,
    ):
        validate_world(world)
        self.world = world
        self.storage = storage
        self.clock = clock
        self.on_explosion = on_explosion
        self.config = config if config is not None else get_config().rules
        self._chunk_cache: ChunkCache[ChunkData] = ChunkCache(self.config.chunk_cache_capacity)

    @property
    def chunk_cache(self) -> ChunkCache:
        return self._chunk_cache

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def _chunk_data(self, chunk_x: int, chunk_y: int) -> ChunkData:
        return self._chunk_cache.get_or_create(
            (chunk_x, chunk_y),
            lambda: generate_chunk(self.world, chunk_x, chunk_y),
        )

    def get_hint(self, coord: Coord) -> int:
        """-1 for a mine, otherwise the number of adjacent mines."""
        cc = coord.to_chunk(self.world.chunk_size)
        return self._chunk_data(cc.chunk_x, cc.chunk_y).get(coord, 0)

    def is_mine(self, coord: Coord) -> bool:
        return self.get_hint(coord) == MINE

    def count_flagged_neighbors(self, coord: Coord) -> int:
        return sum(
            1 for n in coord.neighbors()
            if self.storage.get(n).flag == TileFlag.FLAGGED
        )

    # -------------------------------------------------------------------------
    # Lockout
    # -------------------------------------------------------------------------

    def _latest_explosion(self, chunk_x: int, chunk_y: int) -> Optional[float]:
        latest = None
        for _, state in self.storage.iter_chunk(self.world.chunk_size, chunk_x, chunk_y):
            if state.exploded and state.opened_at is not None:
                if latest is None or state.opened_at > latest:
                    latest = state.opened_at
        return latest

    def lockout_remaining(self, chunk_x: int, chunk_y: int, now: Optional[float] = None) -> float:
        """Seconds until the chunk unlocks; 0.0 when it is not locked."""
        if now is None:
            now = self.clock()
        latest = self._latest_explosion(chunk_x, chunk_y)
        if latest is None:
            return 0.0
        return max(0.0, latest + self.config.lockout_seconds - now)

    def is_chunk_locked(self, chunk_x: int, chunk_y: int, now: Optional[float] = None) -> bool:
        """
        True if a tile in the chunk exploded within the lockout window.

        Args:
            chunk_x: Chunk column
            chunk_y: Chunk row
            now: Evaluation time. If None, uses the engine clock.
        """
        if now is None:
            now = self.clock()
        latest = self._latest_explosion(chunk_x, chunk_y)
        return latest is not None and latest > now - self.config.lockout_seconds

    def is_locked(self, coord: Coord, now: Optional[float] = None) -> bool:
        """True if coord's chunk is locked."""
        cc = coord.to_chunk(self.world.chunk_size)
        return self.is_chunk_locked(cc.chunk_x, cc.chunk_y, now)

    # -------------------------------------------------------------------------
    # Opening
    # -------------------------------------------------------------------------

    def _flood_fill(
        self,
        start: Coord,
        timestamp: float,
        result: OpenResult,
        locks: Dict[Tuple[int, int], bool],
    ) -> None:
        """
        Open start and cascade through zero-hint tiles, breadth first.

        locks memoizes per-chunk lock state for the current call; time is
        fixed for the call, so it only changes when something explodes.
        """
        chunk_size = self.world.chunk_size
        queue = deque([start])
        visited: Set[Coord] = set()

        while queue:
            if len(result.opened) + len(result.exploded) >= self.config.max_flood_tiles:
                result.capped = True
                logger.warning(
                    "Flood fill from %s stopped at %d tiles",
                    start, self.config.max_flood_tiles,
                )
                return

            coord = queue.popleft()
            if coord in visited:
                continue
            if self.storage.get(coord).flag != TileFlag.CLOSED:
                continue

            cc = coord.to_chunk(chunk_size)
            key = (cc.chunk_x, cc.chunk_y)
            if key not in locks:
                locks[key] = self.is_chunk_locked(cc.chunk_x, cc.chunk_y, timestamp)
            if locks[key]:
                continue
            visited.add(coord)

            hint = self.get_hint(coord)
            if hint == MINE:
                self.storage.apply_event(TileEvent(coord, TileEventType.EXPLODE, timestamp))
                result.exploded.append(coord)
                locks[key] = True
                logger.info("Mine exploded at %s, chunk %s locked", coord, key)
                if self.on_explosion is not None:
                    self.on_explosion(coord, timestamp)
                continue

            self.storage.apply_event(TileEvent(coord, TileEventType.OPEN, timestamp))
            result.opened.append(coord)
            if hint == 0:
                queue.extend(n for n in coord.neighbors() if n not in visited)

    def open_tile(self, coord: Coord) -> OpenResult:
        """
        Open a tile.

        - flagged: nothing happens
        - closed: flood fill from coord (blocked tiles in locked chunks
          are skipped)
        - open: chord. If the number of flagged neighbors equals the hint,
          each closed neighbor is flood filled on its own.

        Returns:
            OpenResult describing what changed
        """
        timestamp = self.clock()
        result = OpenResult()
        locks: Dict[Tuple[int, int], bool] = {}
        state = self.storage.get(coord)

        if state.flag == TileFlag.FLAGGED:
            return result

        if state.flag == TileFlag.CLOSED:
            self._flood_fill(coord, timestamp, result, locks)
            return result

        hint = self.get_hint(coord)
        if hint <= 0 or self.count_flagged_neighbors(coord) != hint:
            return result

        result.chorded = True
        for neighbor in coord.neighbors():
            if result.capped:
                break
            if self.storage.get(neighbor).flag == TileFlag.CLOSED:
                self._flood_fill(neighbor, timestamp, result, locks)
        return result

    # -------------------------------------------------------------------------
    # Flagging
    # -------------------------------------------------------------------------

    def flag_tile(self, coord: Coord) -> bool:
        """
        Toggle a flag on a closed or flagged tile.

        Returns:
            True if the tile changed, False for an open tile
        """
        state = self.storage.get(coord)
        if state.flag == TileFlag.OPEN:
            return False

        if state.flag == TileFlag.FLAGGED:
            event_type = TileEventType.UNFLAG
        else:
            event_type = TileEventType.FLAG
        self.storage.apply_event(TileEvent(coord, event_type, self.clock()))
        return True

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    def save(self, path: Union[str, Path]) -> None:
        """Save the shared store together with this engine's world."""
        self.storage.save(path, world=self.world)

    def load(self, path: Union[str, Path]) -> Optional[WorldConfig]:
        """
        Load a save file into the shared store.

        If the file carries a different world, the engine switches to it
        and drops every cached chunk.

        A file that fails to load leaves both the store and the world as
        they were.

        Returns:
            The world from the file, or None for a missing file

        Raises:
            ParseError: If the file is corrupt or its world is unplayable
            MissingFieldError: If the embedded world lacks a field
        """
        loaded_world = self.storage.load(path)
        if loaded_world is not None and loaded_world != self.world:
            logger.info("Switching to world %r from %s", loaded_world.name, path)
            self.world = loaded_world
            self._chunk_cache.clear()
        return loaded_world

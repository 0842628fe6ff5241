"""
Admin commands for timesweeper debugging.

These are not console commands themselves, but the logic a debug console
or test would call to inspect a world.
"""

from dataclasses import dataclass
from typing import List, Optional

from world.timesweeper.core import Coord, TileFlag
from world.timesweeper.generator import MINE, chunk_origin
from world.timesweeper.rules import RulesEngine


@dataclass
class ChunkReport:
    """Summary of one chunk's generated and played state."""
    chunk_x: int
    chunk_y: int
    mines: int
    opened: int
    flagged: int
    exploded: int
    locked: bool
    lockout_remaining: float


def render_region(
    engine: RulesEngine,
    x0: int,
    y0: int,
    width: int,
    height: int,
    reveal: bool = False
) -> str:
    """
    ASCII view of a rectangle of the world.

    Legend:
        #  closed        F  flagged      *  exploded
        .  open, hint 0  1-8 open hint   m  closed mine (reveal only)

    Args:
        engine: Engine to read from
        x0, y0: Top-left absolute coordinate
        width, height: Size of the rectangle in tiles
        reveal: Show mines under closed tiles

    Returns:
        One line per row, cells separated by spaces
    """
    rows = []
    for y in range(y0, y0 + height):
        row = []
        for x in range(x0, x0 + width):
            coord = Coord(x, y)
            state = engine.storage.get(coord)
            if state.exploded:
                row.append("*")
            elif state.flag == TileFlag.FLAGGED:
                row.append("F")
            elif state.flag == TileFlag.CLOSED:
                row.append("m" if reveal and engine.is_mine(coord) else "#")
            else:
                hint = engine.get_hint(coord)
                row.append("." if hint == 0 else str(hint))
        rows.append(" ".join(row))
    return "\n".join(rows)


def chunk_report(
    engine: RulesEngine,
    chunk_x: int,
    chunk_y: int,
    now: Optional[float] = None
) -> ChunkReport:
    """
    Count mines and tile states in a chunk.

    Args:
        engine: Engine to read from
        chunk_x: Chunk column
        chunk_y: Chunk row
        now: Evaluation time for lockout. If None, uses the engine clock.
    """
    if now is None:
        now = engine.clock()

    size = engine.world.chunk_size
    origin = chunk_origin(engine.world, chunk_x, chunk_y)
    mines = sum(
        1
        for ly in range(size)
        for lx in range(size)
        if engine.get_hint(Coord(origin.x + lx, origin.y + ly)) == MINE
    )

    opened = flagged = exploded = 0
    for _, state in engine.storage.iter_chunk(size, chunk_x, chunk_y):
        if state.exploded:
            exploded += 1
        elif state.flag == TileFlag.OPEN:
            opened += 1
        elif state.flag == TileFlag.FLAGGED:
            flagged += 1

    return ChunkReport(
        chunk_x=chunk_x,
        chunk_y=chunk_y,
        mines=mines,
        opened=opened,
        flagged=flagged,
        exploded=exploded,
        locked=engine.is_chunk_locked(chunk_x, chunk_y, now),
        lockout_remaining=engine.lockout_remaining(chunk_x, chunk_y, now),
    )


def format_chunk_report(report: ChunkReport) -> str:
    """Human-readable chunk report."""
    lines: List[str] = [
        f"=== Chunk ({report.chunk_x}, {report.chunk_y}) ===",
        f"Mines: {report.mines}",
        f"Opened: {report.opened}  Flagged: {report.flagged}  Exploded: {report.exploded}",
    ]
    if report.locked:
        lines.append(f"LOCKED ({report.lockout_remaining:.0f}s remaining)")
    else:
        lines.append("Unlocked")
    return "\n".join(lines)

#!/usr/bin/env python3
"""Autoplay sim: a simple bot wandering an infinite timesweeper world.

Demonstrates, without any UI:
- loading / creating a world from a save file
- open / flag / chord through the rules engine
- explosion lockout on a simulated clock
- periodic saves from a point-in-time snapshot

Run:
  source .venv/bin/activate
  python scripts/autoplay_sim.py --moves 200 --save data/worlds/sim.json
"""

from __future__ import annotations

import argparse
import logging
import random
import sys
from pathlib import Path
from typing import List, Optional

# Ensure repo root is on sys.path when running as a script
project_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_root))

from world.timesweeper.admin_commands import chunk_report, format_chunk_report, render_region
from world.timesweeper.config import default_world, get_config, load_config_from_yaml, reset_config, set_config
from world.timesweeper.core import Coord, TileFlag
from world.timesweeper.rules import RulesEngine
from world.timesweeper.storage import TileStore

logger = logging.getLogger("autoplay_sim")


class SimClock:
    """Simulated wall clock; advances a fixed step per move."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def find_deduction(engine: RulesEngine, window: List[Coord]) -> Optional[tuple]:
    """
    One step of trivial single-tile deduction.

    Returns ("flag", coord) when an open hint's closed neighbors must all be
    mines, ("chord", coord) when its flags already satisfy it, else None.
    """
    for coord in window:
        state = engine.storage.get(coord)
        if state.flag != TileFlag.OPEN or state.exploded:
            continue
        hint = engine.get_hint(coord)
        if hint <= 0:
            continue
        closed = [n for n in coord.neighbors() if engine.storage.get(n).flag == TileFlag.CLOSED]
        if not closed:
            continue
        flagged = engine.count_flagged_neighbors(coord)
        if flagged == hint:
            return ("chord", coord)
        if flagged + len(closed) == hint:
            return ("flag", closed[0])
    return None


def autosave_due(now: float, last_saved: float, interval: float) -> bool:
    """True once at least `interval` simulated seconds passed since the last save."""
    return now - last_saved >= interval


def simulate(moves: int, seed: int, save_path: Optional[Path], view: int) -> int:
    rng = random.Random(seed)

    config_file = project_root / "config" / "timesweeper_defaults.yaml"
    if config_file.exists():
        set_config(load_config_from_yaml(config_file))
    config = get_config()

    clock = SimClock()
    storage = TileStore()
    engine = RulesEngine(default_world(config), storage, clock=clock)
    if save_path is not None:
        if engine.load(save_path) is None:
            logger.info("Fresh world %r", engine.world.name)

    half = view // 2
    window = [Coord(x, y) for y in range(-half, half) for x in range(-half, half)]

    print("=" * 72)
    print(f"AUTOPLAY SIM - world={engine.world.name!r} seed={seed} moves={moves}")
    print("=" * 72)

    explosions = 0
    last_saved = clock.now
    for _ in range(moves):
        clock.advance(5.0)
        step = find_deduction(engine, window)
        if step is not None and step[0] == "flag":
            engine.flag_tile(step[1])
        elif step is not None:
            result = engine.open_tile(step[1])
            explosions += len(result.exploded)
        else:
            target = rng.choice(window)
            result = engine.open_tile(target)
            explosions += len(result.exploded)

        if save_path is not None and autosave_due(clock.now, last_saved, config.autosave_interval):
            engine.save(save_path)
            last_saved = clock.now

    print(render_region(engine, -half, -half, view, view))
    print()
    print(format_chunk_report(chunk_report(engine, 0, 0)))
    print()
    print(f"tiles touched={storage.count}  explosions={explosions}  "
          f"cache={len(engine.chunk_cache)} (hits={engine.chunk_cache.hits}, "
          f"misses={engine.chunk_cache.misses})")

    if save_path is not None:
        engine.save(save_path)

    reset_config()
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(description="Bot plays an infinite timesweeper world")
    parser.add_argument("--moves", type=int, default=200)
    parser.add_argument("--seed", type=int, default=42, help="Bot RNG seed (not the world seed)")
    parser.add_argument("--save", type=str, default="", help="Save file to load from and write to")
    parser.add_argument("--view", type=int, default=32, help="Edge of the square the bot plays in")
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)
    save_path = Path(args.save) if args.save else None
    return simulate(args.moves, args.seed, save_path, args.view)


if __name__ == "__main__":
    raise SystemExit(main())

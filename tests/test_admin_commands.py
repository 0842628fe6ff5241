"""
Tests for admin commands.

See world/timesweeper/admin_commands.py for implementation.
"""

from world.timesweeper.admin_commands import chunk_report, format_chunk_report, render_region
from world.timesweeper.core import Coord, TileEvent, TileEventType, WorldConfig
from world.timesweeper.rules import RulesEngine
from world.timesweeper.storage import TileStore
from tests.helpers import FakeClock, find_coord


def test_render_region_legend(engine, storage, fixed_clock):
    mine = find_coord(engine, engine.is_mine, x0=0, y0=0, size=16)
    safe = find_coord(engine, lambda c: engine.get_hint(c) > 0, x0=0, y0=0, size=16)
    engine.flag_tile(mine)
    engine.open_tile(safe)

    text = render_region(engine, safe.x, safe.y, 1, 1)
    assert text == str(engine.get_hint(safe))

    text = render_region(engine, mine.x, mine.y, 1, 1)
    assert text == "F"


def test_render_region_reveal_shows_mines(engine):
    mine = find_coord(engine, engine.is_mine, x0=0, y0=0, size=16)

    assert render_region(engine, mine.x, mine.y, 1, 1) == "#"
    assert render_region(engine, mine.x, mine.y, 1, 1, reveal=True) == "m"


def test_render_region_shape(engine):
    text = render_region(engine, -2, -2, 4, 3)
    rows = text.split("\n")

    assert len(rows) == 3
    assert all(len(row.split(" ")) == 4 for row in rows)


def test_render_region_exploded(engine, storage, fixed_clock):
    storage.apply_event(TileEvent(Coord(0, 0), TileEventType.EXPLODE, fixed_clock.now))

    assert render_region(engine, 0, 0, 1, 1) == "*"


def test_chunk_report_counts():
    clock = FakeClock()
    world = WorldConfig("report", 8, 12, "Report", "1.0")
    storage = TileStore()
    engine = RulesEngine(world, storage, clock=clock)
    storage.apply_event(TileEvent(Coord(0, 0), TileEventType.EXPLODE, clock.now))
    storage.apply_event(TileEvent(Coord(1, 0), TileEventType.OPEN, clock.now))
    storage.apply_event(TileEvent(Coord(2, 0), TileEventType.FLAG, clock.now))
    storage.apply_event(TileEvent(Coord(8, 0), TileEventType.OPEN, clock.now))

    report = chunk_report(engine, 0, 0)

    assert report.mines == 12
    assert (report.opened, report.flagged, report.exploded) == (1, 1, 1)
    assert report.locked
    assert report.lockout_remaining == 300.0
    assert "LOCKED" in format_chunk_report(report)


def test_chunk_report_unlocked_after_lockout():
    clock = FakeClock()
    engine = RulesEngine(WorldConfig("report", 8, 12, "Report", "1.0"), TileStore(), clock=clock)
    engine.storage.apply_event(TileEvent(Coord(0, 0), TileEventType.EXPLODE, clock.now))
    clock.advance(301)

    report = chunk_report(engine, 0, 0)

    assert not report.locked
    assert report.lockout_remaining == 0.0
    assert "Unlocked" in format_chunk_report(report)

"""
Core data structures for the timesweeper core.

Coordinates, tile state, tile events and the immutable world record.
Timestamps are POSIX seconds in memory and ISO-8601 strings on the wire.
"""

import json
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, Iterator, Optional

from world.timesweeper.validation import (
    InvalidArgumentError,
    MissingFieldError,
    ParseError,
)


# =============================================================================
# TIMESTAMP ENCODING
# =============================================================================

TIMESTAMP_DIGITS = 6  # ISO-8601 carries microseconds, no finer


def round_timestamp(timestamp: float) -> float:
    """Round POSIX seconds to the precision a save file keeps."""
    return round(timestamp, TIMESTAMP_DIGITS)


def timestamp_to_iso(timestamp: Optional[float]) -> Optional[str]:
    """Encode POSIX seconds as an ISO-8601 UTC string (None passes through)."""
    if timestamp is None:
        return None
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).isoformat()


def iso_to_timestamp(value: Optional[str]) -> Optional[float]:
    """
    Decode an ISO-8601 string back to POSIX seconds.

    Strings without an offset are read as UTC.

    Raises:
        ParseError: If the value is not a valid ISO-8601 string
    """
    if value is None:
        return None
    try:
        parsed = datetime.fromisoformat(value)
    except (TypeError, ValueError) as e:
        raise ParseError(f"Invalid timestamp: {value!r}") from e
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.timestamp()


# =============================================================================
# COORDINATES
# =============================================================================

@dataclass(frozen=True)
class ChunkCoord:
    """A coordinate split into its owning chunk and the offset inside it."""
    chunk_x: int
    chunk_y: int
    local_x: int
    local_y: int


@dataclass(frozen=True)
class Coord:
    """
    Absolute tile coordinate on the unbounded grid.

    Hashable value type; used directly as a dict key everywhere in memory.
    """
    x: int
    y: int

    def to_chunk(self, chunk_size: int) -> ChunkCoord:
        """
        Split into chunk and local offsets using floor division.

        divmod floors toward negative infinity, so (-1) lands in chunk -1
        at local offset chunk_size - 1.

        Raises:
            InvalidArgumentError: If chunk_size is not positive
        """
        if chunk_size <= 0:
            raise InvalidArgumentError(f"chunk_size must be > 0, got {chunk_size}")
        chunk_x, local_x = divmod(self.x, chunk_size)
        chunk_y, local_y = divmod(self.y, chunk_size)
        return ChunkCoord(chunk_x, chunk_y, local_x, local_y)

    def neighbors(self) -> Iterator["Coord"]:
        """Yield the 8 surrounding coordinates, row by row."""
        for dy in (-1, 0, 1):
            for dx in (-1, 0, 1):
                if dx == 0 and dy == 0:
                    continue
                yield Coord(self.x + dx, self.y + dy)

    def to_key(self) -> str:
        """Wire key used by the persisted tile map: "x,y"."""
        return f"{self.x},{self.y}"

    @classmethod
    def from_key(cls, key: str) -> "Coord":
        """
        Parse a "x,y" wire key.

        Raises:
            ParseError: If the key is not two comma-separated integers
        """
        parts = key.split(",")
        if len(parts) != 2:
            raise ParseError(f"Invalid coordinate key: {key!r}")
        try:
            return cls(int(parts[0]), int(parts[1]))
        except ValueError as e:
            raise ParseError(f"Invalid coordinate key: {key!r}") from e

    def to_dict(self) -> Dict[str, int]:
        return {"x": self.x, "y": self.y}

    @classmethod
    def from_dict(cls, data: dict) -> "Coord":
        try:
            return cls(int(data["x"]), int(data["y"]))
        except (KeyError, TypeError, ValueError) as e:
            raise ParseError(f"Invalid coordinate: {data!r}") from e

    def __str__(self) -> str:
        return self.to_key()


# =============================================================================
# TILE STATE
# =============================================================================

class TileFlag(str, Enum):
    """Visible state of a tile."""
    CLOSED = "closed"
    OPEN = "open"
    FLAGGED = "flagged"


class TileEventType(str, Enum):
    """Discrete commands that change a tile."""
    OPEN = "open"
    FLAG = "flag"
    UNFLAG = "unflag"
    EXPLODE = "explode"


@dataclass(frozen=True)
class TileState:
    """
    Current state of a single tile.

    opened_at is set once the tile has been opened or exploded and is never
    cleared by the core.
    """
    flag: TileFlag = TileFlag.CLOSED
    exploded: bool = False
    opened_at: Optional[float] = None

    @property
    def is_default(self) -> bool:
        return self == DEFAULT_TILE_STATE

    def evolve(self, **changes) -> "TileState":
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)

    def to_dict(self) -> dict:
        return {
            "flag": self.flag.value,
            "exploded": self.exploded,
            "openedAt": timestamp_to_iso(self.opened_at),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "TileState":
        """
        Reconstruct a TileState from its wire dict.

        Raises:
            ParseError: If the flag is unknown, exploded is not a bool, an
                open or exploded tile has no openedAt, or the payload is
                not a dict
        """
        if not isinstance(data, dict):
            raise ParseError(f"Tile state must be an object, got {type(data).__name__}")
        try:
            flag = TileFlag(data.get("flag"))
        except ValueError as e:
            raise ParseError(f"Unknown tile flag: {data.get('flag')!r}") from e
        exploded = data.get("exploded", False)
        if not isinstance(exploded, bool):
            raise ParseError(f"exploded must be a bool, got {exploded!r}")
        opened_at = iso_to_timestamp(data.get("openedAt"))
        # A tile keeps openedAt once opened, even if flagged afterwards
        if opened_at is None and (flag == TileFlag.OPEN or exploded):
            raise ParseError(f"Opened tile has no openedAt: {data!r}")
        return cls(flag=flag, exploded=exploded, opened_at=opened_at)


DEFAULT_TILE_STATE = TileState()


@dataclass(frozen=True)
class TileEvent:
    """
    Timestamped command against one tile.

    Events are applied to the store, not kept; only the resulting
    TileState is retained.
    """
    coord: Coord
    event_type: TileEventType
    timestamp: float

    def to_dict(self) -> dict:
        return {
            "coord": self.coord.to_dict(),
            "type": self.event_type.value,
            "timestamp": timestamp_to_iso(self.timestamp),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "TileEvent":
        try:
            event_type = TileEventType(data["type"])
        except (KeyError, ValueError) as e:
            raise ParseError(f"Invalid tile event type in {data!r}") from e
        timestamp = iso_to_timestamp(data.get("timestamp"))
        if timestamp is None:
            raise ParseError(f"Tile event has no timestamp: {data!r}")
        return cls(
            coord=Coord.from_dict(data.get("coord", {})),
            event_type=event_type,
            timestamp=timestamp,
        )


# =============================================================================
# WORLD
# =============================================================================

# Wire name -> attribute name. Order is the serialization order.
WORLD_FIELDS = (
    ("seed", "seed"),
    ("chunkSize", "chunk_size"),
    ("minesPerChunk", "mines_per_chunk"),
    ("name", "name"),
    ("formatVersion", "format_version"),
)


@dataclass(frozen=True)
class WorldConfig:
    """
    Immutable description of one world.

    Everything generated for the world derives from these five fields.
    """
    seed: str
    chunk_size: int
    mines_per_chunk: int
    name: str
    format_version: str

    @property
    def total_cells(self) -> int:
        """Tiles per chunk."""
        return self.chunk_size * self.chunk_size

    def to_dict(self) -> dict:
        return {wire: getattr(self, attr) for wire, attr in WORLD_FIELDS}

    def to_json(self) -> str:
        """Compact JSON object string, keys in declaration order."""
        return json.dumps(self.to_dict(), separators=(",", ":"))

    @classmethod
    def from_dict(cls, data: dict) -> "WorldConfig":
        """
        Build a WorldConfig from a wire dict.

        Raises:
            MissingFieldError: If any of the five fields is absent or null
            ParseError: If the payload is not a dict
        """
        if not isinstance(data, dict):
            raise ParseError(f"World must be an object, got {type(data).__name__}")
        for wire, _ in WORLD_FIELDS:
            if data.get(wire) is None:
                raise MissingFieldError(f"Missing required field: {wire}")
        try:
            return cls(
                seed=str(data["seed"]),
                chunk_size=int(data["chunkSize"]),
                mines_per_chunk=int(data["minesPerChunk"]),
                name=str(data["name"]),
                format_version=str(data["formatVersion"]),
            )
        except (TypeError, ValueError) as e:
            raise ParseError(f"Invalid world field: {e}") from e

    @classmethod
    def from_json(cls, json_string: str) -> "WorldConfig":
        """
        Parse the JSON produced by to_json().

        Raises:
            ParseError: If the string is not valid JSON
            MissingFieldError: If a required field is missing
        """
        try:
            data = json.loads(json_string)
        except (TypeError, json.JSONDecodeError) as e:
            raise ParseError(f"Invalid world JSON: {e}") from e
        return cls.from_dict(data)

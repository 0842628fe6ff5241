"""
Persistence layer for tile store state.

One JSON file per world:
- "world": the WorldConfig, stored as a nested JSON-encoded string
- "tiles": "x,y" -> tile state, only for tiles that differ from default
- "saved_at": metadata for debugging, ignored on load
"""

import json
import logging
import time
from pathlib import Path
from typing import Dict, Optional, Tuple, Union

from world.timesweeper.core import Coord, TileState, WorldConfig
from world.timesweeper.validation import InvalidArgumentError, ParseError, require_mapping, validate_world

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


# =============================================================================
# JSON ENCODING - Handle coordinate keys and the nested world string
# =============================================================================

def _encode_tiles(tiles: Dict[Coord, TileState]) -> Dict[str, dict]:
    """
    Encode a Coord-keyed tile map to JSON.

    Coord keys are not JSON-serializable; convert Coord(x, y) to "x,y".
    Default tiles are dropped.
    """
    return {
        coord.to_key(): state.to_dict()
        for coord, state in tiles.items()
        if not state.is_default
    }


def _decode_tiles(data: Dict[str, dict]) -> Dict[Coord, TileState]:
    """Decode "x,y"-keyed JSON back to a Coord-keyed tile map."""
    require_mapping(data, "tiles")
    result = {}
    for key_str, state_data in data.items():
        state = TileState.from_dict(state_data)
        if not state.is_default:
            result[Coord.from_key(key_str)] = state
    return result


def _decode_world(raw) -> Optional[WorldConfig]:
    """
    Decode the "world" entry.

    Normally a JSON string; an inline object is accepted as well. A world
    that cannot be generated is rejected here, before any store is touched.
    """
    if raw is None:
        return None
    if isinstance(raw, str):
        world = WorldConfig.from_json(raw)
    else:
        world = WorldConfig.from_dict(require_mapping(raw, "world"))
    try:
        validate_world(world)
    except InvalidArgumentError as e:
        raise ParseError(f"Unplayable world in save file: {e}") from e
    return world


# =============================================================================
# STORE STATE SERIALIZATION
# =============================================================================

def serialize_store_state(
    tiles: Dict[Coord, TileState],
    world: Optional[WorldConfig] = None
) -> dict:
    """
    Serialize tile state to a JSON-compatible dict.

    Args:
        tiles: Snapshot of the store's tile map
        world: World to embed, if any

    Returns:
        JSON-serializable dict
    """
    return {
        "world": world.to_json() if world is not None else None,
        "tiles": _encode_tiles(tiles),
        "saved_at": time.time(),  # Metadata for debugging
    }


def deserialize_store_state(
    state_data: dict
) -> Tuple[Optional[WorldConfig], Dict[Coord, TileState]]:
    """
    Decode a dict produced by serialize_store_state().

    Args:
        state_data: Decoded JSON root object

    Returns:
        (world or None, tile map)

    Raises:
        ParseError: If the structure or a tile entry is malformed
        MissingFieldError: If the embedded world lacks a field
    """
    require_mapping(state_data, "Save file root")
    if "tiles" not in state_data:
        raise ParseError("Save file has no 'tiles' entry")
    world = _decode_world(state_data.get("world"))
    tiles = _decode_tiles(state_data["tiles"])
    return world, tiles


# =============================================================================
# FILE I/O
# =============================================================================

def save_store_state(
    path: PathLike,
    tiles: Dict[Coord, TileState],
    world: Optional[WorldConfig] = None
) -> None:
    """
    Save tile state to a JSON file.

    Creates the parent directory if needed and writes atomically
    (temp file, then rename).

    Args:
        path: Target file
        tiles: Point-in-time snapshot of the store
        world: World to embed, if any
    """
    state_file = Path(path)
    state_file.parent.mkdir(parents=True, exist_ok=True)
    state_data = serialize_store_state(tiles, world)

    temp_file = state_file.with_name(state_file.name + ".tmp")
    with open(temp_file, "w", encoding="utf-8") as f:
        json.dump(state_data, f, indent=2)

    temp_file.replace(state_file)
    logger.info("Saved %d tiles to %s", len(state_data["tiles"]), state_file)


def load_store_state(
    path: PathLike
) -> Optional[Tuple[Optional[WorldConfig], Dict[Coord, TileState]]]:
    """
    Load tile state from a JSON file if it exists.

    Args:
        path: Save file

    Returns:
        (world or None, tile map), or None if the file does not exist

    Raises:
        ParseError: If the file is not valid UTF-8 JSON, is structurally
            wrong, or embeds a world with a non-positive chunk size
        MissingFieldError: If the embedded world lacks a field
    """
    state_file = Path(path)
    if not state_file.exists():
        logger.info("No save file at %s, starting fresh", state_file)
        return None

    with open(state_file, "r", encoding="utf-8") as f:
        try:
            state_data = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ParseError(f"Corrupt save file {state_file}: {e}") from e

    world, tiles = deserialize_store_state(state_data)
    logger.info("Loaded %d tiles from %s", len(tiles), state_file)
    return world, tiles

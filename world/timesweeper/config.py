"""
Configuration for the timesweeper core.

All tunable parameters live here, not in code. Defaults match
config/timesweeper_defaults.yaml.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Union

import yaml

from world.timesweeper.core import WorldConfig
from world.timesweeper.validation import ConfigError


@dataclass
class RulesConfig:
    """Rules engine tunables."""
    lockout_seconds: float       # chunk lockout after an explosion
    max_flood_tiles: int         # tiles opened per open_tile call, at most
    chunk_cache_capacity: int    # generated chunks kept in memory


@dataclass
class DefaultWorldConfig:
    """World used when no save file exists."""
    seed: str
    chunk_size: int
    mines_per_chunk: int
    name: str
    format_version: str


@dataclass
class TimesweeperConfig:
    """Complete timesweeper configuration."""
    rules: RulesConfig
    default_world: DefaultWorldConfig
    autosave_interval: int  # seconds


_DEFAULT_CONFIG = TimesweeperConfig(
    rules=RulesConfig(
        lockout_seconds=300.0,  # 5 minutes
        max_flood_tiles=10000,
        chunk_cache_capacity=200,
    ),
    default_world=DefaultWorldConfig(
        seed="default",
        chunk_size=16,
        mines_per_chunk=40,
        name="Default World",
        format_version="1.0",
    ),
    autosave_interval=30,
)

# Active configuration (can be replaced at runtime)
_active_config: TimesweeperConfig = _DEFAULT_CONFIG


def get_config() -> TimesweeperConfig:
    """Get the active timesweeper configuration."""
    return _active_config


def set_config(config: TimesweeperConfig) -> None:
    """Set the active timesweeper configuration."""
    global _active_config
    _active_config = config


def reset_config() -> None:
    """Reset to default configuration."""
    global _active_config
    _active_config = _DEFAULT_CONFIG


def default_world(config: TimesweeperConfig = None) -> WorldConfig:
    """Build the fresh-start world from configuration."""
    if config is None:
        config = get_config()
    dw = config.default_world
    return WorldConfig(
        seed=dw.seed,
        chunk_size=dw.chunk_size,
        mines_per_chunk=dw.mines_per_chunk,
        name=dw.name,
        format_version=dw.format_version,
    )


# =============================================================================
# YAML LOADING
# =============================================================================

def _require(data: Dict[str, Any], key: str, path: str) -> Any:
    if not isinstance(data, dict) or key not in data:
        raise ConfigError(f"Missing required field: {path}{key}")
    return data[key]


def load_config_from_yaml(path: Union[str, Path]) -> TimesweeperConfig:
    """
    Load a TimesweeperConfig from a YAML file.

    Args:
        path: YAML file

    Returns:
        Parsed configuration (not activated; call set_config())

    Raises:
        FileNotFoundError: If the file does not exist
        ConfigError: If the YAML is malformed or a field is missing
    """
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Failed to parse YAML {config_path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError("YAML root must be a dictionary")

    rules = _require(data, "rules", "")
    world = _require(data, "default_world", "")

    try:
        return TimesweeperConfig(
            rules=RulesConfig(
                lockout_seconds=float(_require(rules, "lockout_seconds", "rules.")),
                max_flood_tiles=int(_require(rules, "max_flood_tiles", "rules.")),
                chunk_cache_capacity=int(_require(rules, "chunk_cache_capacity", "rules.")),
            ),
            default_world=DefaultWorldConfig(
                seed=str(_require(world, "seed", "default_world.")),
                chunk_size=int(_require(world, "chunk_size", "default_world.")),
                mines_per_chunk=int(_require(world, "mines_per_chunk", "default_world.")),
                name=str(_require(world, "name", "default_world.")),
                format_version=str(_require(world, "format_version", "default_world.")),
            ),
            autosave_interval=int(_require(data, "autosave_interval", "")),
        )
    except ConfigError:
        raise
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid value in {config_path}: {e}") from e

"""
Errors and validation for the timesweeper core.

Only two places are allowed to fail hard:
1. The sampler, when asked for an integer in an empty range
2. Loading persisted data or configuration

Gameplay operations on the rules engine never raise.
"""

from typing import Any


# =============================================================================
# ERRORS
# =============================================================================

class TimesweeperError(Exception):
    """Base class for every error raised by the timesweeper core."""
    pass


class InvalidArgumentError(TimesweeperError, ValueError):
    """Raised when an argument is outside the range an operation accepts."""
    pass


class MissingFieldError(TimesweeperError, ValueError):
    """Raised when a world record lacks one of its mandatory fields."""
    pass


class ParseError(TimesweeperError, ValueError):
    """Raised when persisted data cannot be decoded."""
    pass


class ConfigError(TimesweeperError, ValueError):
    """Raised when a YAML configuration file is malformed or incomplete."""
    pass


# =============================================================================
# VALIDATION FUNCTIONS
# =============================================================================

def require_positive(value: int, name: str) -> int:
    """
    Validate that an integer argument is strictly positive.

    Args:
        value: The value to check
        name: Argument name (for error messages)

    Returns:
        The value, unchanged

    Raises:
        InvalidArgumentError: If value <= 0
    """
    if value <= 0:
        raise InvalidArgumentError(f"{name} must be > 0, got {value}")
    return value


def require_mapping(value: Any, what: str) -> dict:
    """
    Validate that decoded JSON is an object.

    Raises:
        ParseError: If value is not a dict
    """
    if not isinstance(value, dict):
        raise ParseError(f"{what} must be an object, got {type(value).__name__}")
    return value


def validate_world(world) -> None:
    """
    Check that a world can actually be generated.

    A chunk needs at least one tile; mine counts outside [0, chunk_size²]
    are legal and get clamped by the sampler.

    Args:
        world: WorldConfig to check

    Raises:
        InvalidArgumentError: If chunk_size is not positive
    """
    require_positive(world.chunk_size, "chunk_size")

"""
Deterministic sampler for chunk generation.

Every chunk's minefield is derived from (world seed, chunk_x, chunk_y) alone,
so any chunk can be regenerated on any machine without shared state.

Not cryptographically secure; fine for game generation.
"""

from typing import Optional, Sequence

from world.timesweeper.validation import InvalidArgumentError, require_positive

MASK64 = 0xFFFFFFFFFFFFFFFF

# splitmix64 constants
_GOLDEN_GAMMA = 0x9E3779B97F4A7C15
_MIX_MUL_1 = 0xBF58476D1CE4E5B9
_MIX_MUL_2 = 0x94D049BB133111EB

# Second coordinate multiplier (distinct large odd constant)
_CHUNK_Y_MUL = 0xC2B2AE3D27D4EB4F

_FNV_OFFSET = 0xCBF29CE484222325
_FNV_PRIME = 0x100000001B3


# =============================================================================
# SEEDS
# =============================================================================

def stable_string_hash(text: str) -> int:
    """
    64-bit FNV-1a hash of the UTF-8 bytes of text.

    Never use the built-in hash() here: it is randomized per process.
    """
    h = _FNV_OFFSET
    for byte in text.encode("utf-8"):
        h ^= byte
        h = (h * _FNV_PRIME) & MASK64
    return h


def combine_seed(world_seed: int, chunk_x: int, chunk_y: int, generator_salt: int = 0) -> int:
    """
    Combine a world seed and chunk coordinates into one 64-bit seed.

    Negative coordinates are taken as 64-bit two's complement. A salt of 0
    is the same as no salt. No caller passes a salt yet; the parameter is
    kept so alternate generators can get their own streams.

    Args:
        world_seed: Seed derived from the world's seed string
        chunk_x: Chunk column
        chunk_y: Chunk row
        generator_salt: Optional stream selector, xor'd into high bits

    Returns:
        Seed in [0, 2**64)
    """
    a = (world_seed & MASK64) ^ (((chunk_x & MASK64) * _GOLDEN_GAMMA) & MASK64)
    b = (a ^ (((chunk_y & MASK64) * _CHUNK_Y_MUL) & MASK64)) & MASK64
    if generator_salt != 0:
        b = (b ^ (((generator_salt & MASK64) << 17) & MASK64)) & MASK64
    return b


# =============================================================================
# BIT GENERATOR
# =============================================================================

class SeededRng:
    """64-bit splitmix generator. Same seed, same sequence."""

    def __init__(self, seed: int):
        self._state = seed & MASK64

    def next_u64(self) -> int:
        self._state = (self._state + _GOLDEN_GAMMA) & MASK64
        z = self._state
        z = ((z ^ (z >> 30)) * _MIX_MUL_1) & MASK64
        z = ((z ^ (z >> 27)) * _MIX_MUL_2) & MASK64
        return z ^ (z >> 31)

    def next_double(self) -> float:
        """Float in [0, 1) built from the top 53 bits of one output."""
        return (self.next_u64() >> 11) / float(1 << 53)

    def next_int(self, bound: int) -> int:
        """
        Integer in [0, bound).

        Scales a double rather than rejection sampling; the bias is far
        below anything visible at game scale.

        Raises:
            InvalidArgumentError: If bound <= 0
        """
        if bound <= 0:
            raise InvalidArgumentError(f"bound must be > 0, got {bound}")
        return int(self.next_double() * bound)


# =============================================================================
# CHUNK BITMAPS
# =============================================================================

def generate_chunk_bitmap(
    world_seed: int,
    chunk_x: int,
    chunk_y: int,
    chunk_size: int,
    mines_per_chunk: int,
    generator_salt: int = 0,
) -> bytearray:
    """
    Generate a chunk's mine bitmap with an exact mine count.

    Layout is row-major: index = y * chunk_size + x, values 0/1.
    The mine count is clamped to [0, chunk_size**2]. Uses a partial
    Fisher-Yates shuffle: only the first k positions are shuffled, and
    each one drawn becomes a mine.

    Args:
        world_seed: Seed derived from the world's seed string
        chunk_x: Chunk column
        chunk_y: Chunk row
        chunk_size: Chunk edge length
        mines_per_chunk: Target mine count
        generator_salt: Optional stream selector (see combine_seed)

    Returns:
        bytearray of length chunk_size**2
    """
    require_positive(chunk_size, "chunk_size")
    n = chunk_size * chunk_size
    k = max(0, min(mines_per_chunk, n))
    result = bytearray(n)

    if k == 0:
        return result
    if k == n:
        return bytearray(b"\x01" * n)

    rng = SeededRng(combine_seed(world_seed, chunk_x, chunk_y, generator_salt))
    indices = list(range(n))
    for i in range(k):
        j = i + rng.next_int(n - i)
        indices[i], indices[j] = indices[j], indices[i]
        result[indices[i]] = 1

    return result


def pack_bitmap(bitmap: Sequence[int]) -> bytes:
    """Pack 0/1 cells into bytes, 8 per byte, lowest bit first."""
    out = bytearray((len(bitmap) + 7) >> 3)
    for i, bit in enumerate(bitmap):
        if bit:
            out[i >> 3] |= 1 << (i & 7)
    return bytes(out)


def unpack_bitmap(packed: bytes, n_cells: int) -> bytearray:
    """
    Inverse of pack_bitmap.

    Raises:
        InvalidArgumentError: If packed holds fewer than n_cells bits
    """
    if n_cells < 0 or (n_cells + 7) >> 3 > len(packed):
        raise InvalidArgumentError(
            f"cannot unpack {n_cells} cells from {len(packed)} bytes"
        )
    out = bytearray(n_cells)
    for i in range(n_cells):
        if packed[i >> 3] & (1 << (i & 7)):
            out[i] = 1
    return out


def bitmap_to_bit_string(bitmap: Sequence[int], chunk_size: Optional[int] = None) -> str:
    """
    Render a bitmap as '0'/'1' characters for debugging.

    With chunk_size, each row goes on its own line.
    """
    chars = "".join("1" if bit else "0" for bit in bitmap)
    if not chunk_size:
        return chars
    return "\n".join(chars[i:i + chunk_size] for i in range(0, len(chars), chunk_size))

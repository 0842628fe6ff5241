"""
Tests for the deterministic sampler.

See world/timesweeper/rng.py for implementation.
"""

import random

import pytest

from world.timesweeper.rng import (
    MASK64,
    SeededRng,
    bitmap_to_bit_string,
    combine_seed,
    generate_chunk_bitmap,
    pack_bitmap,
    stable_string_hash,
    unpack_bitmap,
)
from world.timesweeper.validation import InvalidArgumentError


# =============================================================================
# BIT GENERATOR
# =============================================================================

def test_same_seed_same_sequence():
    rng1 = SeededRng(12345)
    rng2 = SeededRng(12345)

    for _ in range(100):
        assert rng1.next_double() == rng2.next_double()
        assert rng1.next_int(1000) == rng2.next_int(1000)


def test_different_seeds_differ():
    rng1 = SeededRng(12345)
    rng2 = SeededRng(12346)

    assert [rng1.next_u64() for _ in range(10)] != [rng2.next_u64() for _ in range(10)]


def test_splitmix_reference_value():
    """First output for seed 0 matches the published splitmix64 sequence."""
    assert SeededRng(0).next_u64() == 0xE220A8397B1DCDAF


def test_outputs_fit_in_64_bits():
    rng = SeededRng(-1)
    for _ in range(100):
        assert 0 <= rng.next_u64() <= MASK64


def test_next_double_in_unit_interval():
    rng = SeededRng(12345)
    for _ in range(1000):
        value = rng.next_double()
        assert 0.0 <= value < 1.0


def test_next_int_in_range():
    rng = SeededRng(12345)
    values = {rng.next_int(10) for _ in range(1000)}

    assert values == set(range(10))


@pytest.mark.parametrize("bound", [0, -1, -100])
def test_next_int_rejects_non_positive_bound(bound):
    rng = SeededRng(12345)

    with pytest.raises(InvalidArgumentError, match="bound must be > 0"):
        rng.next_int(bound)


def test_invalid_argument_is_a_value_error():
    with pytest.raises(ValueError):
        SeededRng(1).next_int(0)


# =============================================================================
# SEEDS
# =============================================================================

def test_combine_seed_is_pure():
    assert combine_seed(42, 3, -7) == combine_seed(42, 3, -7)


def test_combine_seed_zero_salt_equals_no_salt():
    assert combine_seed(42, 3, -7, generator_salt=0) == combine_seed(42, 3, -7)


def test_combine_seed_sensitive_to_each_input():
    base = combine_seed(42, 3, -7)

    assert combine_seed(43, 3, -7) != base
    assert combine_seed(42, 4, -7) != base
    assert combine_seed(42, 3, -6) != base
    assert combine_seed(42, 3, -7, generator_salt=1) != base


def test_combine_seed_swapped_coords_differ():
    """Distinct multipliers keep (x, y) and (y, x) apart."""
    assert combine_seed(42, 1, 2) != combine_seed(42, 2, 1)


def test_stable_string_hash_known_values():
    """FNV-1a 64: stable across processes and machines."""
    assert stable_string_hash("") == 0xCBF29CE484222325
    assert stable_string_hash("a") == 0xAF63DC4C8601EC8C
    assert stable_string_hash("test") != stable_string_hash("test2")


# =============================================================================
# CHUNK BITMAPS
# =============================================================================

@pytest.mark.parametrize("chunk_size", [8, 16, 32])
def test_exact_mine_count(chunk_size):
    """Mine count is exact for 0, mid-range, max-1 and max."""
    n = chunk_size * chunk_size
    for mines in (0, n // 2, n - 1, n):
        bitmap = generate_chunk_bitmap(
            world_seed=99,
            chunk_x=2,
            chunk_y=-3,
            chunk_size=chunk_size,
            mines_per_chunk=mines,
        )
        assert len(bitmap) == n
        assert sum(bitmap) == mines


def test_mine_count_is_clamped():
    over = generate_chunk_bitmap(1, 0, 0, chunk_size=4, mines_per_chunk=100)
    under = generate_chunk_bitmap(1, 0, 0, chunk_size=4, mines_per_chunk=-5)

    assert sum(over) == 16
    assert sum(under) == 0


def test_bitmap_values_are_zero_or_one():
    bitmap = generate_chunk_bitmap(7, 1, 1, chunk_size=16, mines_per_chunk=40)

    assert set(bitmap) <= {0, 1}


def test_bitmap_deterministic():
    a = generate_chunk_bitmap(7, 5, -5, chunk_size=16, mines_per_chunk=40)
    b = generate_chunk_bitmap(7, 5, -5, chunk_size=16, mines_per_chunk=40)

    assert a == b


def test_bitmap_sensitive_to_inputs():
    base = generate_chunk_bitmap(7, 5, -5, chunk_size=16, mines_per_chunk=40)

    assert generate_chunk_bitmap(8, 5, -5, chunk_size=16, mines_per_chunk=40) != base
    assert generate_chunk_bitmap(7, 6, -5, chunk_size=16, mines_per_chunk=40) != base
    assert generate_chunk_bitmap(7, 5, -4, chunk_size=16, mines_per_chunk=40) != base
    assert generate_chunk_bitmap(7, 5, -5, chunk_size=16, mines_per_chunk=41) != base


def test_bitmap_salt_changes_layout():
    base = generate_chunk_bitmap(7, 0, 0, chunk_size=16, mines_per_chunk=40)
    salted = generate_chunk_bitmap(7, 0, 0, chunk_size=16, mines_per_chunk=40, generator_salt=3)

    assert salted != base
    assert sum(salted) == 40


# =============================================================================
# BIT PACKING
# =============================================================================

def test_pack_unpack_round_trip_all_lengths():
    rng = random.Random(1)
    for n in range(0, 70):
        bits = bytearray(rng.randint(0, 1) for _ in range(n))
        packed = pack_bitmap(bits)

        assert len(packed) == (n + 7) // 8
        assert unpack_bitmap(packed, n) == bits


def test_pack_is_little_bit_first():
    assert pack_bitmap([1, 0, 0, 0, 0, 0, 0, 0, 0, 1]) == bytes([0b00000001, 0b00000010])


def test_unpack_too_short_raises():
    with pytest.raises(InvalidArgumentError):
        unpack_bitmap(b"\x00", 9)


def test_bitmap_to_bit_string_rows():
    assert bitmap_to_bit_string([1, 0, 0, 1]) == "1001"
    assert bitmap_to_bit_string([1, 0, 0, 1], chunk_size=2) == "10\n01"

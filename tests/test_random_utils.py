import math

import pytest

from bookshelf.random_utils import SeededDraws, base_seed, normalize_seed, pseudo_random


def test_pseudo_random_known_values():
    assert pseudo_random(0) == 0.0
    assert pseudo_random(1) == pytest.approx(0.709848078965, abs=1e-9)


@pytest.mark.parametrize("seed", [-(2**40), -12345, -1, 2, 448, 859, 2**31 - 1, 2**31, 2**63 + 7])
def test_pseudo_random_stays_in_unit_interval(seed):
    v = pseudo_random(seed)
    assert 0.0 <= v < 1.0


def test_pseudo_random_matches_sine_formula():
    for seed in range(-50, 50):
        x = math.sin(seed) * 10000
        expected = x - math.floor(x)
        assert pseudo_random(seed) == (expected if expected < 1.0 else 0.0)


def test_normalize_seed_wraps_to_signed_32_bit():
    assert normalize_seed(5) == 5
    assert normalize_seed(-(2**31)) == -(2**31)
    assert normalize_seed(2**31) == -(2**31)
    assert normalize_seed(2**32 + 5) == 5
    assert normalize_seed(-(2**32) - 1) == -1


def test_base_seed_sums_character_codes():
    assert base_seed("") == 0
    assert base_seed("test") == 116 + 101 + 115 + 116
    assert base_seed("ab") == base_seed("ba")


def test_seeded_draws_offsets_are_independent_scalars():
    rng = SeededDraws.for_record("test", 1)
    assert rng.seed == base_seed("test") + 1
    assert rng.draw(3) == pseudo_random(rng.seed + 3)
    assert rng.draw(0) != rng.draw(1)


def test_pick_indexes_by_scaled_draw():
    rng = SeededDraws(42)
    options = ("a", "b", "c")
    assert rng.pick(options, 2) == options[math.floor(pseudo_random(44) * 3)]

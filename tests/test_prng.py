import string

import pytest

from testbed.prng import DeterministicPRNG, int_to_hex_seed


def test_hex_seed_format():
    assert int_to_hex_seed(255) == "00000000000000ff"
    assert DeterministicPRNG.from_int(255).seed == "00000000000000ff"


def test_negative_seed_is_rejected():
    with pytest.raises(ValueError):
        int_to_hex_seed(-1)


def test_identical_seeds_give_identical_streams():
    a = DeterministicPRNG.from_int(42)
    b = DeterministicPRNG.from_int(42)

    assert [a.getrandbits(10) for _ in range(20)] == [b.getrandbits(10) for _ in range(20)]
    assert a.randint(0, 99) == b.randint(0, 99)


def test_child_seeds_are_stable_and_independent():
    root = DeterministicPRNG.from_int(7)

    child = root.for_path("Determinism", "3")
    again = DeterministicPRNG.from_int(7).for_path("Determinism", "3")
    sibling = root.for_path("Determinism", "4")

    assert child.seed == again.seed
    assert child.seed != sibling.seed
    assert len(child.seed) == 16
    assert all(ch in string.hexdigits for ch in child.seed)


def test_for_path_does_not_advance_parent():
    a = DeterministicPRNG.from_int(9)
    b = DeterministicPRNG.from_int(9)

    a.for_path("Bias", "1")

    assert a.randint(0, 1000) == b.randint(0, 1000)


def test_recorded_seed_replays_the_stream():
    child = DeterministicPRNG.from_int(5).for_path("Time", "2")
    expected = [child.randint(0, 9) for _ in range(10)]

    replay = DeterministicPRNG(child.seed)

    assert [replay.randint(0, 9) for _ in range(10)] == expected


import pytest

from testbed.pattern import DEFAULT_WIDTH, Pattern


def test_zeros_and_ones():
    assert Pattern.zeros().is_zero
    assert Pattern.zeros().count() == 0
    assert Pattern.ones().count() == DEFAULT_WIDTH
    assert len(Pattern.ones(4)) == 4


def test_string_form_lists_position_zero_first():
    pattern = Pattern.from_string("0110")

    assert pattern.bits == 0b0110
    assert str(pattern) == "0110"
    assert str(Pattern.spike(0, 4)) == "1000"
    assert Pattern.from_string(str(Pattern(0b1011001, 7))) == Pattern(0b1011001, 7)


def test_from_string_rejects_other_characters():
    with pytest.raises(ValueError):
        Pattern.from_string("01x0")


def test_indexing():
    pattern = Pattern.from_bits([True, False, True])

    assert pattern[0] and not pattern[1] and pattern[2]
    assert pattern[-1]
    assert list(pattern) == [True, False, True]
    with pytest.raises(IndexError):
        pattern[3]


def test_spike_bounds():
    assert Pattern.spike(9).count() == 1
    with pytest.raises(IndexError):
        Pattern.spike(10)
    with pytest.raises(IndexError):
        Pattern.spike(-1)


def test_bits_must_fit_width():
    with pytest.raises(ValueError):
        Pattern(0b10000, 4)
    with pytest.raises(ValueError):
        Pattern(0, 0)


def test_bitwise_algebra():
    a = Pattern.from_string("1100")
    b = Pattern.from_string("1010")

    assert str(~a) == "0011"
    assert str(a & b) == "1000"
    assert str(a | b) == "1110"
    assert str(a ^ b) == "0110"
    assert ~~a == a


def test_mixed_widths_are_rejected():
    with pytest.raises(ValueError, match="width mismatch"):
        Pattern.zeros(4) & Pattern.zeros(5)
    with pytest.raises(TypeError):
        Pattern.zeros(4) | 3


def test_matches_counts_agreeing_positions():
    a = Pattern.from_string("1100")
    b = Pattern.from_string("1010")

    assert a.matches(a) == 4
    assert a.matches(b) == 2
    assert a.matches(~a) == 0


def test_admissible_after_enforces_refractory_rule():
    spike = Pattern.spike(3)

    assert Pattern.zeros().admissible_after(spike)
    assert Pattern.spike(4).admissible_after(spike)
    assert not spike.admissible_after(spike)
    assert not Pattern.ones().admissible_after(spike)


def test_patterns_are_hashable_values():
    seen = {Pattern.spike(2), Pattern.spike(2), Pattern.zeros()}
    assert len(seen) == 2

import pytest

from ecanode.builtins import abs_int


@pytest.mark.parametrize("value", [-1, 0, 5, -42])
def test_abs_int_is_non_negative_and_preserves_magnitude(value):
    result = abs_int(value)
    assert result >= 0
    assert result in (value, -value)


def test_abs_int_of_minus_one():
    assert abs_int(-1) == 1


def test_abs_int_of_int64_minimum_is_unchanged():
    assert abs_int(-(2**63)) == -(2**63)


@pytest.mark.parametrize("value", [1.5, "3", True])
def test_abs_int_rejects_non_integers(value):
    with pytest.raises(TypeError):
        abs_int(value)
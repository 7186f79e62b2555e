"""Built-in functions usable in rules."""

from __future__ import annotations

_INT64_MIN = -(2**63)


def abs_int(arg: int) -> int:
    """Absolute value of a 64-bit integer; the minimum value maps to itself."""
    if isinstance(arg, bool) or not isinstance(arg, int):
        raise TypeError(f"abs_int expects an integer, got {type(arg).__name__}")
    if arg < 0 and arg != _INT64_MIN:
        return -arg
    return arg
"""
Extended precision arithmetic primitives.

This module contains the error-free transformations used by the compensated
accumulators, and an accurate evaluation of ``sqrt(2 * x * x)``.

The summation and splitting primitives only use ``+``, ``-`` and ``*`` so they
work unchanged on Python floats, numpy arrays and torch tensors.
"""

import math
from typing import Tuple

# 2^27 + 1, used to split a 53-bit significand into two 26-bit halves
MULTIPLIER = 134217729.0

# Thresholds and scale factors for sqrt2xx
BIG = 2.0 ** 500
SMALL = 2.0 ** -500
SCALE_UP = 2.0 ** 600
SCALE_DOWN = 2.0 ** -600


def two_sum(a, b) -> Tuple:
    """
    Compute the sum of two values and the round-off of the addition.

    The result satisfies ``a + b == s + e`` exactly, with ``s = fl(a + b)``.

    Args:
        a: First value
        b: Second value

    Returns:
        Tuple of (sum, round-off)
    """
    s = a + b
    return s, two_sum_low(a, b, s)


def fast_two_sum(a, b) -> Tuple:
    """
    Compute the sum of two values and the round-off, assuming ``|a| >= |b|``.

    Args:
        a: Value with the larger magnitude
        b: Value with the smaller magnitude

    Returns:
        Tuple of (sum, round-off)
    """
    s = a + b
    return s, b - (s - a)


def two_sum_low(a, b, s):
    """
    Compute the round-off of the sum ``s = fl(a + b)``.

    Args:
        a: First value
        b: Second value
        s: Rounded sum of ``a`` and ``b``

    Returns:
        The exact error ``(a + b) - s``
    """
    b_virtual = s - a
    a_virtual = s - b_virtual
    b_roundoff = b - b_virtual
    a_roundoff = a - a_virtual
    return a_roundoff + b_roundoff


def split(value) -> Tuple:
    """
    Split a value into a high part with at most 26 significant bits and the
    remaining low part, so that ``hi + lo == value``.

    The value must satisfy ``|value| < 2^995`` or the multiplication overflows.
    """
    c = MULTIPLIER * value
    hi = c - (c - value)
    return hi, value - hi


def product_low(hx, lx, hy, ly, xy):
    """
    Compute the round-off of the product ``xy = fl(x * y)``.

    Args:
        hx: High part of x
        lx: Low part of x
        hy: High part of y
        ly: Low part of y
        xy: Rounded product of x and y

    Returns:
        The exact error ``x * y - xy``
    """
    # Dekker's mul12: the partial products of the 26-bit halves are exact
    err1 = xy - hx * hy
    err2 = err1 - lx * hy
    err3 = err2 - hx * ly
    return lx * ly - err3


def two_product(a: float, b: float) -> Tuple[float, float]:
    """
    Compute the product of two values and the round-off of the multiplication.

    The result satisfies ``a * b == p + e`` exactly provided the product does
    not overflow or underflow.

    Args:
        a: First factor
        b: Second factor

    Returns:
        Tuple of (product, round-off)
    """
    p = a * b
    ha, la = split(a)
    hb, lb = split(b)
    return p, product_low(ha, la, hb, lb, p)


def sqrt2xx(x: float) -> float:
    """
    Compute ``sqrt(2 * x * x)`` to within the final rounding for results in
    the normal range.

    The intermediate ``2 * x * x`` is held as an unevaluated sum of two
    doubles, so it is neither rounded before the square root nor allowed to
    overflow or underflow; large and tiny arguments are rescaled by powers of
    two. A sub-normal result is rounded a second time when it is scaled back
    down and can be 1 ulp from the correctly rounded value.

    The argument is assumed to be non-negative. Large negative arguments
    break the extended precision computation and return NaN.

    Args:
        x: Value (assumed to be positive)

    Returns:
        ``sqrt(2 * x * x)``
    """
    if x > BIG:
        if x == math.inf:
            return x
        return _compute_sqrt2aa(x * SCALE_DOWN) * SCALE_UP
    if x < SMALL:
        if x == 0:
            return x
        return _compute_sqrt2aa(x * SCALE_UP) * SCALE_DOWN
    # Also handles NaN
    return _compute_sqrt2aa(x)


def _compute_sqrt2aa(a: float) -> float:
    """Compute ``sqrt(2 * a * a)`` for a value that cannot over/underflow."""
    ha, la = split(a)
    # 2a^2 = x + xx exactly; doubling the high and low parts is exact
    x = 2 * a * a
    xx = product_low(ha, la, 2 * ha, 2 * la, x)

    y = math.sqrt(x)
    hy, ly = split(y)
    yy = y * y
    yy_low = product_low(hy, ly, hy, ly, yy)

    # x - yy is exact as y*y is within one ulp of x
    r = (x - yy) - yy_low + xx
    return y + r / (2 * y)

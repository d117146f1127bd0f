# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Decimal time-series helpers.

Every stage of the pipeline exchanges plain tuples of `Decimal`, one entry
per period. These helpers keep that representation consistent: all of them
return tuples, never mutate their inputs and never fall back to binary
floating point.
"""

from __future__ import annotations

from decimal import Decimal
from itertools import accumulate
from typing import Iterable, List, Optional, Sequence, Tuple, Union

Series = Tuple[Decimal, ...]
Number = Union[Decimal, int, float, str]

ZERO = Decimal(0)
ONE = Decimal(1)
INFINITY = Decimal("Infinity")


def to_decimal(value: Number) -> Decimal:
    """Convert to Decimal; floats go through their shortest repr."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(repr(value))
    return Decimal(value)


def as_series(values: Iterable[Number]) -> Series:
    return tuple(to_decimal(v) for v in values)


def zeros(periods: int) -> Series:
    return (ZERO,) * periods


def constant(value: Decimal, periods: int) -> Series:
    return (value,) * periods


def add(*series: Sequence[Decimal]) -> Series:
    """Element-wise sum of equally long series."""
    if not series:
        raise ValueError("add() needs at least one series")
    return tuple(sum(values, ZERO) for values in zip(*series, strict=True))


def subtract(left: Sequence[Decimal], right: Sequence[Decimal]) -> Series:
    return tuple(a - b for a, b in zip(left, right, strict=True))


def negate(series: Sequence[Decimal]) -> Series:
    return tuple(-v for v in series)


def scale(series: Sequence[Decimal], factor: Decimal) -> Series:
    return tuple(v * factor for v in series)


def multiply(left: Sequence[Decimal], right: Sequence[Decimal]) -> Series:
    return tuple(a * b for a, b in zip(left, right, strict=True))


def cumsum(series: Sequence[Decimal]) -> Series:
    return tuple(accumulate(series))


def decumulate(cumulative: Sequence[Decimal]) -> Series:
    """Turn a cumulative series back into per-period increments."""
    previous = ZERO
    out: List[Decimal] = []
    for value in cumulative:
        out.append(value - previous)
        previous = value
    return tuple(out)


def total(series: Iterable[Decimal]) -> Decimal:
    return sum(series, ZERO)


def positive_part(series: Sequence[Decimal]) -> Series:
    return tuple(v if v > ZERO else ZERO for v in series)


def negative_part(series: Sequence[Decimal]) -> Series:
    """Magnitude of the negative entries (returned as non-negative values)."""
    return tuple(-v if v < ZERO else ZERO for v in series)


def clamp(value: Decimal, low: Decimal = ZERO, high: Decimal = ONE) -> Decimal:
    if value < low:
        return low
    if value > high:
        return high
    return value


def safe_divide(
    numerator: Decimal, denominator: Decimal, default: Decimal = ZERO
) -> Decimal:
    """Divide, returning `default` when the denominator is zero."""
    if denominator == ZERO:
        return default
    return numerator / denominator


def normalize(values: Sequence[Decimal]) -> Series:
    """
    Scale values so they sum to one.

    A curve that sums to zero (including an empty curve) maps to all zeros
    rather than raising.
    """
    curve_total = total(values)
    if curve_total == ZERO:
        return zeros(len(values))
    return tuple(v / curve_total for v in values)


def resample_linear(values: Sequence[Decimal], periods: int) -> Series:
    """
    Resample a curve to `periods` points by linear interpolation.

    Point t reads the source at position t*(n-1)/(T-1). A single-value curve
    is held constant and an empty curve yields zeros. When the source already
    has T points the curve is returned unchanged.
    """
    n = len(values)
    if n == 0 or periods <= 0:
        return zeros(max(periods, 0))
    if n == 1:
        return constant(values[0], periods)
    if n == periods:
        return tuple(values)
    if periods == 1:
        return (values[0],)

    span = periods - 1
    out: List[Decimal] = []
    for t in range(periods):
        position = t * (n - 1)
        lo, remainder = divmod(position, span)
        if remainder == 0:
            out.append(values[lo])
            continue
        hi = min(lo + 1, n - 1)
        weight = Decimal(remainder) / Decimal(span)
        out.append(values[lo] * (ONE - weight) + values[hi] * weight)
    return tuple(out)


def rolling_sum(
    series: Sequence[Decimal], window: int
) -> Tuple[Optional[Decimal], ...]:
    """Trailing window sums; None until the window has filled."""
    out: List[Optional[Decimal]] = []
    running = ZERO
    for t, value in enumerate(series):
        running += value
        if t >= window:
            running -= series[t - window]
        out.append(running if t >= window - 1 else None)
    return tuple(out)


def allocate_pro_rata(amount: Decimal, weights: Sequence[Decimal]) -> Series:
    """
    Split `amount` across weights.

    Zero total weight splits evenly; an empty weight list allocates nothing.
    """
    if not weights:
        return ()
    weight_total = total(weights)
    if weight_total == ZERO:
        share = amount / Decimal(len(weights))
        return constant(share, len(weights))
    return tuple(amount * w / weight_total for w in weights)

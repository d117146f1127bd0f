# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from decimal import Decimal

import pytest

from viability.utils.series import (
    add,
    allocate_pro_rata,
    cumsum,
    decumulate,
    negative_part,
    normalize,
    resample_linear,
    rolling_sum,
    to_decimal,
)

D = Decimal


class TestSeriesArithmetic:
    def test_add_requires_equal_lengths(self):
        with pytest.raises(ValueError):
            add((D(1), D(2)), (D(1),))

    def test_add_without_series_raises(self):
        with pytest.raises(ValueError, match="at least one"):
            add()

    def test_cumsum_and_decumulate_are_inverse(self):
        series = (D(3), D(-1), D(4))
        assert decumulate(cumsum(series)) == series

    def test_negative_part_is_magnitude(self):
        assert negative_part((D(-5), D(2), D(0))) == (D(5), D(0), D(0))

    def test_float_goes_through_repr(self):
        assert to_decimal(0.1) == D("0.1")


class TestCurves:
    def test_normalize_zero_curve_is_zeros(self):
        assert normalize((D(0), D(0))) == (D(0), D(0))

    def test_normalize(self):
        assert normalize((D(1), D(3))) == (D("0.25"), D("0.75"))

    def test_resample_keeps_endpoints(self):
        resampled = resample_linear((D(0), D(10)), 5)
        assert resampled == (D(0), D("2.5"), D(5), D("7.5"), D(10))

    def test_resample_same_length_unchanged(self):
        values = (D(1), D(2), D(3))
        assert resample_linear(values, 3) == values

    def test_resample_single_value_held_constant(self):
        assert resample_linear((D(7),), 3) == (D(7),) * 3

    def test_resample_empty_is_zeros(self):
        assert resample_linear((), 2) == (D(0), D(0))


class TestRollingAndAllocation:
    def test_rolling_sum_is_none_until_window_fills(self):
        sums = rolling_sum((D(1), D(2), D(3), D(4)), 3)
        assert sums == (None, None, D(6), D(9))

    def test_pro_rata(self):
        assert allocate_pro_rata(D(100), (D(1), D(3))) == (D(25), D(75))

    def test_pro_rata_zero_weights_split_evenly(self):
        assert allocate_pro_rata(D(10), (D(0), D(0))) == (D(5), D(5))

    def test_pro_rata_no_weights(self):
        assert allocate_pro_rata(D(10), ()) == ()

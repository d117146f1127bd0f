# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from datetime import date
from decimal import Decimal

import pandas as pd
import pytest
from pydantic import ValidationError

from viability.core.primitives import (
    CalculationSettings,
    EngineSettings,
    EscalationIndex,
    IndexBucket,
    SCurvePhasing,
    Timeline,
    UniformPhasing,
    escalation_series,
)

D = Decimal


class TestTimeline:
    """Monthly timeline normalization and indexing."""

    def test_start_date_normalized_to_month(self):
        timeline = Timeline(start_date=date(2025, 1, 15), duration_months=24)
        assert timeline.start_date == pd.Period("2025-01", freq="M")
        assert str(timeline.end_date) == "2026-12"

    def test_period_index_has_one_entry_per_period(self):
        timeline = Timeline(start_date="2025-03-01", duration_months=6)
        index = timeline.period_index
        assert len(index) == 6
        assert str(index[0]) == "2025-03"
        assert str(index[-1]) == "2025-08"

    def test_label_rejects_out_of_range(self):
        timeline = Timeline(start_date="2025-01-01", duration_months=3)
        assert timeline.label(2) == "2025-03"
        with pytest.raises(ValueError, match="outside the timeline"):
            timeline.label(3)

    def test_from_dates_is_inclusive(self):
        timeline = Timeline.from_dates(date(2025, 1, 1), date(2025, 12, 31))
        assert timeline.duration_months == 12

    def test_zero_periods_rejected(self):
        with pytest.raises(ValidationError):
            Timeline(start_date="2025-01-01", duration_months=0)

    def test_only_monthly_periodicity(self):
        with pytest.raises(ValidationError):
            Timeline(start_date="2025-01-01", duration_months=12, periodicity="quarterly")

    @pytest.mark.parametrize("value", ["not-a-date", ""])
    def test_unparseable_start_date_rejected(self, value):
        with pytest.raises(ValidationError, match="is not a valid date"):
            Timeline(start_date=value, duration_months=12)


class TestEscalation:
    """Index buckets compound rate/12 monthly, clamped by cap and floor."""

    def test_series_compounds_monthly(self):
        assert escalation_series(D("0.12"), 3) == (D(1), D("1.01"), D("1.0201"))

    def test_cap_clamps_rate(self):
        bucket = IndexBucket(key="b", rate_nominal_pa="0.10", cap_pa="0.06")
        assert bucket.effective_rate_pa == D("0.06")

    def test_floor_clamps_rate(self):
        bucket = IndexBucket(key="b", rate_nominal_pa="-0.02", floor_pa="0")
        assert bucket.effective_rate_pa == D(0)

    def test_floor_above_cap_rejected(self):
        with pytest.raises(ValidationError, match="exceeds cap_pa"):
            IndexBucket(key="b", cap_pa="0.02", floor_pa="0.05")

    def test_index_without_reference_is_flat(self):
        index = EscalationIndex.build([IndexBucket(key="b", rate_nominal_pa="0.12")], 4)
        assert index.series(None) == (D(1),) * 4
        assert index.series("b")[1] == D("1.01")


class TestPhasingSchedules:
    def test_uniform_window(self):
        weights = UniformPhasing(start_month=2, end_month=5).weights(8)
        assert weights[:2] == (D(0), D(0))
        assert weights[6:] == (D(0), D(0))
        assert all(w == D("0.25") for w in weights[2:6])

    def test_s_curve_sums_to_one_and_peaks_mid_window(self):
        weights = SCurvePhasing(start_month=0, end_month=11, sigma=2.0).weights(12)
        assert abs(sum(weights) - 1) < D("1e-20")
        assert max(weights) in (weights[5], weights[6])
        assert weights[0] < weights[5]

    def test_window_beyond_timeline_is_empty(self):
        assert UniformPhasing(start_month=12).weights(6) == (D(0),) * 6

    def test_end_before_start_rejected(self):
        with pytest.raises(ValidationError, match="must not precede"):
            UniformPhasing(start_month=5, end_month=2)


class TestSettings:
    def test_defaults(self):
        settings = EngineSettings()
        assert settings.calculation.decimal_precision == 34
        assert settings.calculation.tie_out_tolerance == D("0.01")
        assert settings.irr.max_iterations == 100
        assert settings.irr.tolerance == D("1e-6")

    def test_decimal_context_uses_precision(self):
        context = CalculationSettings(decimal_precision=40).decimal_context()
        assert context.prec == 40

    def test_settings_are_frozen(self):
        settings = EngineSettings()
        with pytest.raises(ValidationError):
            settings.irr = None

# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from datetime import date
from typing import Literal, Union

import pandas as pd
from pydantic import Field, field_validator

from .model import Model
from .types import PositiveIntGt0


def to_month_period(value: Union[date, str, pd.Timestamp, pd.Period]) -> pd.Period:
    """
    Coerce a date-like value to a monthly pd.Period.

    Raises:
        ValueError: If the value cannot be read as a date
    """
    if isinstance(value, pd.Period):
        if value.freqstr != "M":
            return pd.Period(value.to_timestamp(), freq="M")
        return value
    try:
        stamp = pd.Timestamp(value)
    except (TypeError, ValueError) as e:
        raise ValueError(f"start_date '{value}' is not a valid date") from e
    if pd.isna(stamp):
        raise ValueError(f"start_date '{value}' is not a valid date")
    return pd.Period(stamp, freq="M")


class Timeline(Model):
    """
    Fixed monthly timeline of a feasibility run.

    Every output series of the engine has exactly `duration_months` entries,
    one per period t in [0, T). Period 0 is the month containing
    `start_date`.

    Attributes:
        start_date: First period of the run, normalized to a monthly Period.
        duration_months: Number of periods T.
        periodicity: Only monthly runs are supported.

    Examples:
        >>> timeline = Timeline(start_date=date(2025, 1, 15), duration_months=24)
        >>> str(timeline.end_date)
        '2026-12'
        >>> timeline.label(0)
        '2025-01'
    """

    start_date: pd.Period
    duration_months: PositiveIntGt0
    periodicity: Literal["monthly"] = Field(
        default="monthly", description="Period length. Monthly only."
    )

    @field_validator("start_date", mode="before")
    @classmethod
    def normalize_start_date(cls, v: Union[date, str, pd.Timestamp, pd.Period]) -> pd.Period:
        return to_month_period(v)

    @property
    def periods(self) -> int:
        return self.duration_months

    @property
    def end_date(self) -> pd.Period:
        return self.start_date + (self.duration_months - 1)

    @property
    def period_index(self) -> pd.PeriodIndex:
        """Monthly PeriodIndex used to label every result table."""
        return pd.period_range(
            start=self.start_date, periods=self.duration_months, freq="M"
        )

    def label(self, t: int) -> str:
        """Human-readable month label for period index t."""
        if not 0 <= t < self.duration_months:
            raise ValueError(
                f"Period {t} is outside the timeline (0..{self.duration_months - 1})"
            )
        return str(self.start_date + t)

    @classmethod
    def from_dates(
        cls,
        start_date: Union[date, pd.Period],
        end_date: Union[date, pd.Period],
    ) -> "Timeline":
        """Create a timeline covering start..end inclusive."""
        start_period = pd.Period(start_date, freq="M")
        end_period = pd.Period(end_date, freq="M")
        duration = len(pd.period_range(start=start_period, end=end_period, freq="M"))
        return cls(start_date=start_period, duration_months=duration)

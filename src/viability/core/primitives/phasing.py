# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Phasing schedules for distributing a cost item over the timeline.

A cost item either lists its phasing weights explicitly or names a schedule
that generates them. Schedules cover a window of months and produce a
length-T weight curve (zero outside the window) that sums to one.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Literal, Optional, Union

import numpy as np
from pydantic import Field, model_validator
from scipy.stats import norm
from typing_extensions import Annotated

from ...utils.series import Series, ZERO, normalize, to_decimal, zeros
from .model import Model
from .types import PositiveInt


class PhasingSchedule(Model, ABC):
    """
    Base class for generated phasing curves.

    Uses template method pattern - each subclass implements its own shape
    via _get_distribution_pattern(), while the base class places the shape
    inside the active window and converts it to decimal weights.
    """

    kind: str
    start_month: PositiveInt = Field(default=0, description="First active period")
    end_month: Optional[PositiveInt] = Field(
        default=None, description="Last active period (inclusive); defaults to T-1"
    )

    @model_validator(mode="after")
    def validate_window(self) -> "PhasingSchedule":
        if self.end_month is not None and self.end_month < self.start_month:
            raise ValueError(
                f"end_month ({self.end_month}) must not precede start_month ({self.start_month})"
            )
        return self

    def weights(self, periods: int) -> Series:
        """
        Length-`periods` weight curve summing to one.

        A window that starts beyond the timeline yields all zeros.
        """
        if self.start_month >= periods:
            return zeros(periods)
        end = periods - 1 if self.end_month is None else min(self.end_month, periods - 1)
        active = end - self.start_month + 1
        pattern = self._get_distribution_pattern(active)
        if len(pattern) != active:
            raise ValueError(
                f"Distribution pattern length ({len(pattern)}) does not match window ({active})"
            )
        window = normalize(tuple(to_decimal(float(v)) for v in pattern))
        return (
            (ZERO,) * self.start_month
            + window
            + (ZERO,) * (periods - end - 1)
        )

    @abstractmethod
    def _get_distribution_pattern(self, periods: int) -> np.ndarray:
        """Relative weights for each active period."""


class UniformPhasing(PhasingSchedule):
    """Even spend across the window."""

    kind: Literal["uniform"] = "uniform"

    def _get_distribution_pattern(self, periods: int) -> np.ndarray:
        return np.ones(periods) / periods


class SCurvePhasing(PhasingSchedule):
    """
    S-curve spend across the window.

    Slow start, peak in the middle and taper to completion, using the
    increments of a normal CDF centred on the window midpoint.

    Args:
        sigma: Standard deviation in months. Lower values give a steeper peak.
    """

    kind: Literal["s_curve"] = "s_curve"
    sigma: float = Field(default=1.0, gt=0, description="Curve spread in months")

    def _get_distribution_pattern(self, periods: int) -> np.ndarray:
        edges = np.arange(0, periods + 1)
        cdf_values = norm.cdf(edges, periods / 2, self.sigma)
        increments = np.diff(cdf_values)
        if increments.sum() <= 0:
            return np.ones(periods) / periods
        return increments / increments.sum()


AnyPhasingSchedule = Annotated[
    Union[UniformPhasing, SCurvePhasing],
    Field(discriminator="kind"),
]

# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Escalation indices.

An index bucket is a named nominal annual rate that prices, rents and cost
items reference by key. The engine compounds it monthly into a multiplier
series starting at 1.0.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

from pydantic import Field, model_validator

from ...utils.series import ONE, Series, constant
from .model import Model
from .types import Rate

logger = logging.getLogger(__name__)


class IndexBucket(Model):
    """
    Named escalation rate.

    Attributes:
        key: Reference used by unit types and cost items.
        rate_nominal_pa: Nominal annual rate, compounded monthly as rate/12.
        cap_pa: Optional ceiling applied to the annual rate.
        floor_pa: Optional floor applied to the annual rate.
    """

    key: str
    rate_nominal_pa: Rate = Field(default=Decimal(0))
    cap_pa: Optional[Rate] = None
    floor_pa: Optional[Rate] = None

    @model_validator(mode="after")
    def validate_bounds(self) -> "IndexBucket":
        if (
            self.cap_pa is not None
            and self.floor_pa is not None
            and self.floor_pa > self.cap_pa
        ):
            raise ValueError(
                f"Index bucket '{self.key}': floor_pa ({self.floor_pa}) exceeds cap_pa ({self.cap_pa})"
            )
        return self

    @property
    def effective_rate_pa(self) -> Decimal:
        rate = self.rate_nominal_pa
        if self.cap_pa is not None and rate > self.cap_pa:
            rate = self.cap_pa
        if self.floor_pa is not None and rate < self.floor_pa:
            rate = self.floor_pa
        return rate


def escalation_series(rate_nominal_pa: Decimal, periods: int) -> Series:
    """
    Monthly compounding multipliers for a nominal annual rate.

    Period 0 is 1.0 and each following period multiplies by (1 + rate/12).

    Example:
        >>> escalation_series(Decimal("0.12"), 3)
        (Decimal('1'), Decimal('1.01'), Decimal('1.0201'))
    """
    step = ONE + rate_nominal_pa / Decimal(12)
    out: List[Decimal] = []
    multiplier = ONE
    for _ in range(periods):
        out.append(multiplier)
        multiplier *= step
    return tuple(out)


@dataclass(frozen=True)
class EscalationIndex:
    """Resolved multiplier series for every index bucket of a run."""

    periods: int
    series_by_key: Dict[str, Series] = field(default_factory=dict)

    @classmethod
    def build(cls, buckets: Iterable[IndexBucket], periods: int) -> "EscalationIndex":
        resolved = {
            bucket.key: escalation_series(bucket.effective_rate_pa, periods)
            for bucket in buckets
        }
        logger.debug(f"Escalation index built for {len(resolved)} buckets over {periods} periods")
        return cls(periods=periods, series_by_key=resolved)

    def series(self, key: Optional[str]) -> Series:
        """Multiplier series for a bucket; no reference means no escalation."""
        if key is None:
            return constant(ONE, self.periods)
        return self.series_by_key[key]

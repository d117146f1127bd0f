# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import Field, model_validator

from ..core.primitives import (
    AnyPhasingSchedule,
    Model,
    NonNegativeDecimal,
    PositiveInt,
    PositiveIntGt0,
    ValidationMixin,
)


class DepreciationPolicy(Model):
    """Straight-line depreciation of a capex item."""

    method: Literal["straight_line"] = "straight_line"
    useful_life_months: PositiveIntGt0
    start_month: PositiveInt = 0
    salvage_value: NonNegativeDecimal = Decimal(0)


class CostItem(Model, ValidationMixin):
    """
    Budget line phased over the timeline.

    The phasing is either an explicit list of weights or a generated
    schedule, never both. Weights are normalized, so only their shape
    matters. `recoverable` opex lines feed CAM billing.
    """

    key: str
    base_amount: NonNegativeDecimal
    phasing: List[NonNegativeDecimal] = Field(default_factory=list)
    schedule: Optional[AnyPhasingSchedule] = None
    is_opex: bool = False
    index_bucket: Optional[str] = None
    vat_input_eligible: bool = False
    depreciation: Optional[DepreciationPolicy] = None
    plot_key: Optional[str] = None
    recoverable: bool = False

    @model_validator(mode="after")
    def validate_item(self) -> "CostItem":
        self.validate_mutually_exclusive(
            self.phasing,
            self.schedule,
            "phasing",
            "schedule",
            f"Cost item '{self.key}': provide either phasing or schedule, not both",
        )
        if self.depreciation is not None and self.is_opex:
            raise ValueError(f"Cost item '{self.key}': only capex items can be depreciated")
        if self.recoverable and not self.is_opex:
            raise ValueError(f"Cost item '{self.key}': only opex items can be recoverable")
        return self

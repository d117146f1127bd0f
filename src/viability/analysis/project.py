# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Project inputs: the complete, validated description of one feasibility run.

All cross-block references are checked here, once, so the pipeline stages can
resolve keys without guarding against unknown names.
"""

from __future__ import annotations

from datetime import date
from typing import List, Literal, Optional, Union

import pandas as pd
from pydantic import Field, field_validator, model_validator

from ..core.primitives import (
    IndexBucket,
    Model,
    PositiveIntGt0,
    Timeline,
    ValidationMixin,
    to_month_period,
)
from ..deal.partnership import EquityConfig
from ..debt.tranche import DebtTranche
from ..development.budget import CostItem
from ..development.cam import CamConfig
from ..development.escrow import EscrowConfig
from ..development.program import Plot, UnitType
from ..tax.config import TaxConfig


class ProjectBlock(Model):
    """
    Run horizon.

    Attributes:
        start_date: First month of the run.
        periods: Number of monthly periods T.
        periodicity: Only monthly runs are supported.
        name: Optional project name carried into results.
    """

    start_date: pd.Period = Field(default_factory=lambda: pd.Period("2025-01", freq="M"))
    periods: PositiveIntGt0 = 60
    periodicity: Literal["monthly"] = "monthly"
    name: Optional[str] = None

    @field_validator("start_date", mode="before")
    @classmethod
    def parse_start_date(cls, v: Union[date, str, pd.Period]) -> pd.Period:
        return to_month_period(v)

    @property
    def timeline(self) -> Timeline:
        return Timeline(start_date=self.start_date, duration_months=self.periods)


class ProjectInputs(Model, ValidationMixin):
    """
    Validated inputs of a feasibility run.

    Example:
        >>> inputs = ProjectInputs.model_validate({
        ...     "project": {"start_date": "2025-01-01", "periods": 24},
        ...     "unit_types": [{
        ...         "key": "apt", "category": "residential", "count": 10,
        ...         "sellable_area_sqm": 100, "initial_price_sqm_sale": 5000,
        ...         "curve": {"meaning": "sell_through", "values": [1, 1, 1]},
        ...     }],
        ...     "cost_items": [{"key": "build", "base_amount": 3_000_000,
        ...                     "phasing": [0.5, 0.5]}],
        ... })
    """

    project: ProjectBlock = Field(default_factory=ProjectBlock)
    index_buckets: List[IndexBucket] = Field(default_factory=list)
    unit_types: List[UnitType] = Field(default_factory=list)
    cost_items: List[CostItem] = Field(default_factory=list)
    debt: List[DebtTranche] = Field(default_factory=list)
    tax: TaxConfig = Field(default_factory=TaxConfig)
    escrow: EscrowConfig = Field(default_factory=EscrowConfig)
    cam: CamConfig = Field(default_factory=CamConfig)
    equity: EquityConfig = Field(default_factory=EquityConfig)
    plots: List[Plot] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_references(self) -> "ProjectInputs":
        buckets = self.validate_unique_keys(self.index_buckets, "index bucket")
        plots = self.validate_unique_keys(self.plots, "plot")
        self.validate_unique_keys(self.unit_types, "unit type")
        self.validate_unique_keys(self.cost_items, "cost item")
        self.validate_unique_keys(self.debt, "debt tranche")

        for unit in self.unit_types:
            owner = f"Unit type '{unit.key}'"
            self.validate_reference(unit.index_bucket_price, buckets, "index_bucket_price", owner)
            self.validate_reference(unit.index_bucket_rent, buckets, "index_bucket_rent", owner)
            self.validate_reference(unit.plot_key, plots, "plot_key", owner)
        for item in self.cost_items:
            owner = f"Cost item '{item.key}'"
            self.validate_reference(item.index_bucket, buckets, "index_bucket", owner)
            self.validate_reference(item.plot_key, plots, "plot_key", owner)
        return self

    @property
    def timeline(self) -> Timeline:
        return self.project.timeline
